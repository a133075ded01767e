from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from typemover.refactor.context import RefactorContext
from typemover.refactor.models import Location, TypeInfo
from typemover.refactor.references import ReferenceResolver
from .base import AbstractOperation, TypeSelectionMixin


@dataclass(frozen=True)
class ReferencePreview:
    source_path: Path
    type_info: TypeInfo
    references: Tuple[Location, ...]
    import_sites: Dict[Path, Tuple[Location, ...]] = field(default_factory=dict)

    @property
    def files(self) -> List[Path]:
        return list(dict.fromkeys(location.path for location in self.references))


class PreviewReferencesOperation(AbstractOperation, TypeSelectionMixin):
    """Lists every reference to a type, without changing anything."""

    def __init__(
        self,
        source_path: Union[str, Path],
        type_name: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        self.source_path = Path(source_path)
        self.type_name = type_name
        self.offset = offset

    def analyze(self, ctx: RefactorContext) -> ReferencePreview:
        source, _, type_info = self._select_type(ctx)
        resolver = ReferenceResolver(ctx)
        references, _ = resolver.validate_references(
            resolver.find_all_references(source, type_info.name_span.start)
        )

        import_sites: Dict[Path, Tuple[Location, ...]] = {}
        for location in references:
            path = self._absolute(ctx, location.path)
            if path == source or path in import_sites:
                continue
            import_sites[path] = tuple(
                resolver.find_import_sites_in_file(path, type_info.name)
            )

        return ReferencePreview(
            source_path=source,
            type_info=type_info,
            references=tuple(references),
            import_sites=import_sites,
        )
