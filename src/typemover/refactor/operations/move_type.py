import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from typemover.lang.typescript.locator import TypeLocator
from typemover.refactor.context import RefactorContext
from typemover.refactor.errors import InputError
from typemover.refactor.models import (
    ChangeSet,
    ImportChange,
    Location,
    MovePlan,
    TypeInfo,
)
from typemover.refactor.references import ReferenceResolver
from typemover.refactor.relocator import FileRelocator, declaration_text
from typemover.refactor.rewriter import ImportRewriter
from .base import AbstractOperation, TypeSelectionMixin

log = logging.getLogger(__name__)

DESTINATION_SUFFIXES = (".ts", ".tsx")


class MoveTypeOperation(AbstractOperation, TypeSelectionMixin):
    """
    Moves a type alias, interface or enum to another file and rewrites the
    imports of every file that refers to it.

    `analyze` is side-effect free and returns a MovePlan; `apply` executes a
    plan through the context's transaction manager.
    """

    def __init__(
        self,
        source_path: Union[str, Path],
        destination_path: Union[str, Path],
        type_name: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        self.source_path = Path(source_path)
        self.destination_path = destination_path
        self.type_name = type_name
        self.offset = offset

    def _resolve_destination(self, ctx: RefactorContext, source: Path) -> Path:
        raw = str(self.destination_path).strip()
        if not raw:
            raise InputError("Destination file path is empty")
        destination = self._absolute(ctx, raw)
        if not destination.name.endswith(DESTINATION_SUFFIXES):
            raise InputError(
                f"Destination must be a .ts or .tsx file, got {destination.name}"
            )
        if destination == source:
            raise InputError("Destination is the same file as the source")
        return destination

    def _referencing_files(
        self,
        ctx: RefactorContext,
        references: List[Location],
        source: Path,
        type_info: TypeInfo,
    ) -> List[Path]:
        files: Dict[Path, None] = {}
        for location in references:
            path = self._absolute(ctx, location.path)
            if path == source:
                # Occurrences inside the declaration travel with it.
                inside = (
                    type_info.declaration_span.start <= location.span.start
                    and location.span.end <= type_info.declaration_span.end
                )
                if inside:
                    continue
            files.setdefault(path, None)
        return list(files)

    def _import_change(
        self,
        ctx: RefactorContext,
        resolver: ReferenceResolver,
        path: Path,
        destination: Path,
        type_name: str,
    ) -> Optional[ImportChange]:
        tree = ctx.parser.parse(ctx.workspace.read_text(path), path)
        existing = resolver.find_existing_import_path(tree, type_name)

        if path == destination:
            if not existing.found:
                return None
            return ImportChange(
                file_path=path,
                old_specifier=existing.specifier,
                new_specifier="",
                type_name=type_name,
                is_type_only=existing.is_type_only,
                declares_type=True,
            )

        # A prior import is the style signal; import_style only fills the gap.
        if existing.found:
            is_type_only = existing.is_type_only
        else:
            is_type_only = ctx.import_style == "type"

        return ImportChange(
            file_path=path,
            old_specifier=existing.specifier,
            new_specifier=ctx.aliases.resolve_import_path(path, destination),
            type_name=type_name,
            is_type_only=is_type_only,
            binding_text=existing.binding_text,
        )

    def analyze(self, ctx: RefactorContext) -> MovePlan:
        if self.type_name is None and self.offset is None:
            raise InputError("No type selected: give a type name or a position")
        source = self._absolute(ctx, self.source_path)
        destination = self._resolve_destination(ctx, source)
        source, source_text, type_info = self._select_type(ctx)

        if ctx.workspace.exists(destination):
            TypeLocator(ctx.parser).validate_destination_free(
                type_info.name,
                ctx.workspace.read_text(destination),
                ctx.workspace.relative(destination),
            )

        resolver = ReferenceResolver(ctx)
        found = resolver.find_all_references(source, type_info.name_span.start)
        references, skipped = resolver.validate_references(found)
        for location in skipped:
            log.debug(f"Skipping reference outside the workspace: {location.describe()}")

        changes: List[ImportChange] = []
        for path in self._referencing_files(ctx, references, source, type_info):
            change = self._import_change(ctx, resolver, path, destination, type_info.name)
            if change is not None:
                changes.append(change)

        return MovePlan(
            source_path=source,
            destination_path=destination,
            type_info=type_info,
            change_set=ChangeSet(
                import_changes=tuple(changes),
                moved_declaration_text=declaration_text(
                    source_text, type_info.declaration_span
                ),
            ),
            references=tuple(references),
            skipped_references=tuple(skipped),
        )

    def apply(self, ctx: RefactorContext, plan: MovePlan) -> List[ImportChange]:
        relocator = FileRelocator(ctx)
        relocator.remove_declaration(plan.source_path, plan.type_info.declaration_span)
        relocator.append_or_create(
            plan.destination_path, plan.change_set.moved_declaration_text
        )
        rewritten = ImportRewriter(ctx).rewrite(plan.change_set)
        log.debug(
            f"Moved '{plan.type_info.name}' and rewrote imports in {len(rewritten)} file(s)"
        )
        return rewritten

    def execute(self, ctx: RefactorContext) -> MovePlan:
        plan = self.analyze(ctx)
        self.apply(ctx, plan)
        return plan
