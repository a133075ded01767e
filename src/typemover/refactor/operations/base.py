import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from typemover.lang.typescript.locator import TypeLocator
from typemover.refactor.context import RefactorContext
from typemover.refactor.errors import InputError
from typemover.refactor.models import TypeInfo


class TypeSelectionMixin:
    """Shared handling of "file plus offset, or file plus name" selections."""

    source_path: Path
    type_name: Optional[str]
    offset: Optional[int]

    def _absolute(self, ctx: RefactorContext, path: Union[str, Path]) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = ctx.root_path / path
        return Path(os.path.normpath(path))

    def _read_source(self, ctx: RefactorContext, source: Path) -> str:
        if not ctx.workspace.exists(source):
            raise InputError(f"Source file not found: {source}")
        try:
            return ctx.workspace.read_text(source)
        except (OSError, UnicodeDecodeError) as e:
            raise InputError(f"Cannot read source file {source}: {e}") from e

    def _select_type(self, ctx: RefactorContext) -> Tuple[Path, str, TypeInfo]:
        if self.type_name is None and self.offset is None:
            raise InputError("No type selected: give a type name or a position")

        source = self._absolute(ctx, self.source_path)
        text = self._read_source(ctx, source)
        locator = TypeLocator(ctx.parser)

        type_info = None
        if self.offset is not None:
            type_info = locator.find_at_position(text, self.offset, source)
        elif self.type_name:
            type_info = locator.find_by_name(text, self.type_name, source)

        if type_info is None:
            what = f"'{self.type_name}'" if self.offset is None else "at the cursor"
            raise InputError(f"No type alias, interface or enum {what} in {source}")
        return source, text, type_info


class AbstractOperation(ABC):
    @abstractmethod
    def analyze(self, ctx: RefactorContext) -> Any:
        pass
