import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from typemover.common.transaction import ByteRange, PendingEdit
from typemover.lang.typescript.parser import NodeKind

__all__ = [
    "AliasConfig",
    "ByteRange",
    "ChangeSet",
    "ExistingImport",
    "ImportChange",
    "Location",
    "MovePlan",
    "PendingEdit",
    "TypeInfo",
]


@dataclass(frozen=True)
class TypeInfo:
    name: str
    declaration_span: ByteRange
    kind: NodeKind
    name_span: ByteRange
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Location:
    path: Path
    span: ByteRange
    line: int
    character: int

    def describe(self) -> str:
        return f"{self.path}:{self.line + 1}:{self.character + 1}"


@dataclass(frozen=True)
class ExistingImport:
    specifier: str = ""
    is_type_only: bool = False
    # The binding as written, without an inline `type`, e.g. `Foo as Model`.
    binding_text: str = ""

    @property
    def found(self) -> bool:
        return self.specifier != ""


@dataclass(frozen=True)
class ImportChange:
    file_path: Path
    old_specifier: str
    new_specifier: str
    type_name: str
    is_type_only: bool
    # The file now declares the type itself: drop the old import, add none.
    declares_type: bool = False
    binding_text: str = ""

    @property
    def binding(self) -> str:
        return self.binding_text or self.type_name


@dataclass(frozen=True)
class ChangeSet:
    import_changes: Tuple[ImportChange, ...]
    moved_declaration_text: str


@dataclass(frozen=True)
class AliasConfig:
    base_dir: Path
    base_url: str = "."
    path_map: Dict[str, List[str]] = field(default_factory=dict)
    base_url_explicit: bool = False

    @property
    def absolute_base_url(self) -> Path:
        return Path(os.path.normpath(self.base_dir / self.base_url))


@dataclass(frozen=True)
class MovePlan:
    source_path: Path
    destination_path: Path
    type_info: TypeInfo
    change_set: ChangeSet
    references: Tuple[Location, ...]
    skipped_references: Tuple[Location, ...] = ()

    @property
    def referencing_files(self) -> List[Path]:
        return [change.file_path for change in self.change_set.import_changes]
