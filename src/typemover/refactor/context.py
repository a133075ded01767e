from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from typemover.common.transaction import (
    FileSystemAdapter,
    RealFileSystem,
    TransactionManager,
)
from typemover.config import TypeMoverConfig
from typemover.lang.typescript.parser import SyntaxParser, TreeSitterParser
from .aliases import AliasResolver
from .workspace import Workspace

if TYPE_CHECKING:
    from .references import ReferenceFinder


@dataclass
class RefactorContext:
    workspace: Workspace
    aliases: AliasResolver
    parser: SyntaxParser
    transactions: TransactionManager
    import_style: str = "regular"
    reference_finder: Optional["ReferenceFinder"] = None

    @property
    def root_path(self) -> Path:
        return self.workspace.root_path

    @property
    def fs(self) -> FileSystemAdapter:
        return self.workspace.fs

    @classmethod
    def create(
        cls,
        root_path: Path,
        config: Optional[TypeMoverConfig] = None,
        fs: Optional[FileSystemAdapter] = None,
        parser: Optional[SyntaxParser] = None,
        reference_finder: Optional["ReferenceFinder"] = None,
    ) -> "RefactorContext":
        from .references import WorkspaceReferenceFinder

        config = config or TypeMoverConfig()
        fs = fs or RealFileSystem()
        ctx = cls(
            workspace=Workspace(root_path, config.ignored_folders, fs=fs),
            aliases=AliasResolver.from_config(root_path, config, fs=fs),
            parser=parser or TreeSitterParser(),
            transactions=TransactionManager(root_path, fs=fs),
            import_style=config.import_style,
        )
        ctx.reference_finder = reference_finder or WorkspaceReferenceFinder(ctx)
        return ctx
