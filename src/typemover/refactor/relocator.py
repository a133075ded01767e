from pathlib import Path
from typing import TYPE_CHECKING

from typemover.common.transaction import ByteRange, PendingEdit, TransactionError
from .errors import EditFailure

if TYPE_CHECKING:
    from .context import RefactorContext


def declaration_text(text: str, span: ByteRange) -> str:
    return text.encode("utf-8")[span.start : span.end].decode("utf-8")


class FileRelocator:
    def __init__(self, ctx: "RefactorContext"):
        self.ctx = ctx

    def _submit_edit(self, path: Path, edit: PendingEdit) -> None:
        try:
            self.ctx.transactions.edit(self.ctx.workspace.relative(path), [edit])
        except TransactionError as e:
            raise EditFailure(path, e.reason) from e

    def append_or_create(self, destination_path: Path, text: str) -> None:
        """
        Appends a declaration to the destination, separated by one blank line,
        or creates the destination holding only the declaration.
        """
        if not self.ctx.workspace.exists(destination_path):
            try:
                self.ctx.transactions.create(
                    self.ctx.workspace.relative(destination_path), text + "\n"
                )
            except TransactionError as e:
                raise EditFailure(destination_path, e.reason) from e
            return

        existing = self.ctx.workspace.read_text(destination_path)
        merged = existing.rstrip() + "\n\n" + text.lstrip() + "\n"
        whole = ByteRange(0, len(existing.encode("utf-8")))
        self._submit_edit(destination_path, PendingEdit(whole, merged))

    def remove_declaration(self, source_path: Path, span: ByteRange) -> None:
        self._submit_edit(source_path, PendingEdit.delete(span))
