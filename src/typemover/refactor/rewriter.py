from typing import TYPE_CHECKING, List, Optional, Tuple

from typemover.common.transaction import ByteRange, PendingEdit, TransactionError
from typemover.lang.typescript.imports import ImportDeclaration, iter_imports, render_import
from .errors import EditFailure
from .models import ChangeSet, ImportChange

if TYPE_CHECKING:
    from .context import RefactorContext


def _line_break(source: bytes) -> str:
    return "\r\n" if b"\r\n" in source else "\n"


def _whole_line_span(source: bytes, span: ByteRange) -> ByteRange:
    """Widens a statement span to its full line(s) when nothing else shares them."""
    line_start = source.rfind(b"\n", 0, span.start) + 1
    if source[line_start : span.start].strip():
        return span
    line_end = source.find(b"\n", span.end)
    tail_end = len(source) if line_end == -1 else line_end
    if source[span.end : tail_end].strip():
        return span
    return ByteRange(line_start, len(source) if line_end == -1 else line_end + 1)


def _sorted_bindings(entries: List[Tuple[str, str]]) -> List[str]:
    return [text for _, text in sorted(entries, key=lambda entry: entry[0])]


class ImportRewriter:
    """
    Computes and applies the import edits a moved type requires in each
    referencing file.
    """

    def __init__(self, ctx: "RefactorContext"):
        self.ctx = ctx

    def _removal_edit(
        self, source: bytes, decl: ImportDeclaration, type_name: str
    ) -> Optional[PendingEdit]:
        binding = decl.binding_for(type_name)
        if binding is None:
            return None
        remaining = [b for b in decl.bindings if b is not binding]
        if not remaining and not decl.default_binding:
            return PendingEdit.delete(_whole_line_span(source, decl.span))

        if remaining:
            statement = render_import(
                _sorted_bindings([(b.name, b.render(decl.is_type_only)) for b in remaining]),
                decl.specifier,
                type_only=decl.is_type_only,
                default_binding=decl.default_binding,
                quote=decl.quote,
                semicolon=decl.has_semicolon,
            )
        else:
            terminator = ";" if decl.has_semicolon else ""
            statement = (
                f"import {decl.default_binding} from "
                f"{decl.quote}{decl.specifier}{decl.quote}{terminator}"
            )
        return PendingEdit(decl.span, statement)

    def _merge_edit(self, decl: ImportDeclaration, change: ImportChange) -> PendingEdit:
        # `import type D, { ... }` is not valid TypeScript, so a statement with a
        # default binding stays regular and takes an inline `type` instead.
        inline_type = (
            change.is_type_only and not decl.is_type_only and bool(decl.default_binding)
        )
        type_only = decl.is_type_only or (change.is_type_only and not inline_type)
        entries = [(b.name, b.render(type_only)) for b in decl.bindings]
        entries.append(
            (change.type_name, f"type {change.binding}" if inline_type else change.binding)
        )
        statement = render_import(
            _sorted_bindings(entries),
            decl.specifier,
            type_only=type_only,
            default_binding=decl.default_binding,
            quote=decl.quote,
            semicolon=decl.has_semicolon,
        )
        return PendingEdit(decl.span, statement)

    def _new_statement(
        self, change: ImportChange, style: Optional[ImportDeclaration]
    ) -> str:
        return render_import(
            [change.binding],
            change.new_specifier,
            type_only=change.is_type_only,
            quote=style.quote if style else '"',
            semicolon=style.has_semicolon if style else True,
        )

    def _insertion_edit(
        self,
        source: bytes,
        change: ImportChange,
        last_import: Optional[ImportDeclaration],
    ) -> PendingEdit:
        newline = _line_break(source)
        statement = self._new_statement(change, last_import)
        if last_import is None:
            return PendingEdit.insert(0, statement + newline)

        line_end = source.find(b"\n", last_import.span.end)
        if line_end == -1:
            return PendingEdit.insert(len(source), newline + statement)
        return PendingEdit.insert(line_end + 1, statement + newline)

    def plan_edits(self, change: ImportChange, text: str) -> List[PendingEdit]:
        if not change.declares_type and change.old_specifier == change.new_specifier:
            return []

        tree = self.ctx.parser.parse(text, change.file_path)
        imports = list(iter_imports(tree))
        # Statements without a `{ ... }` list cannot be amended and are skipped.
        amendable = [d for d in imports if d.specifier is not None and d.has_named_bindings]

        edits: List[PendingEdit] = []
        # The last import, when it is deleted outright. The new statement can
        # take its place instead of being appended after it.
        vacated: Optional[ImportDeclaration] = None
        vacated_edit: Optional[PendingEdit] = None
        for decl in amendable:
            if decl.specifier != change.old_specifier:
                continue
            edit = self._removal_edit(tree.source, decl, change.type_name)
            if edit is None:
                continue
            if decl is imports[-1] and not edit.replacement_text:
                vacated, vacated_edit = decl, edit
            edits.append(edit)

        if change.declares_type:
            return edits

        targets = [d for d in amendable if d.specifier == change.new_specifier]
        if any(d.binding_for(change.type_name) for d in targets):
            return edits
        if targets:
            edits.append(self._merge_edit(targets[0], change))
        elif vacated is not None:
            edits.remove(vacated_edit)
            edits.append(PendingEdit(vacated.span, self._new_statement(change, vacated)))
        else:
            last_import = imports[-1] if imports else None
            edits.append(self._insertion_edit(tree.source, change, last_import))
        return edits

    def rewrite_file(self, change: ImportChange) -> bool:
        text = self.ctx.workspace.read_text(change.file_path)
        edits = self.plan_edits(change, text)
        if not edits:
            return False
        try:
            self.ctx.transactions.edit(self.ctx.workspace.relative(change.file_path), edits)
        except TransactionError as e:
            raise EditFailure(change.file_path, e.reason) from e
        return True

    def rewrite(self, change_set: ChangeSet) -> List[ImportChange]:
        """Applies the changes file by file; returns the ones that edited a file."""
        return [change for change in change_set.import_changes if self.rewrite_file(change)]
