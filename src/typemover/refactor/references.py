import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol, Set, Tuple

from tree_sitter import Node

from typemover.lang.typescript.imports import iter_imports, parse_import
from typemover.lang.typescript.parser import NodeKind, SyntaxTree, classify
from .models import ExistingImport, Location

if TYPE_CHECKING:
    from .context import RefactorContext

log = logging.getLogger(__name__)

IDENTIFIER_TYPES = frozenset({"identifier", "type_identifier"})


class ReferenceFinder(Protocol):
    def find_references(self, path: Path, offset: int) -> Optional[List[Location]]: ...


def _normalize(path: Path) -> Path:
    return Path(os.path.normpath(os.path.abspath(path)))


def _location(path: Path, tree: SyntaxTree, node: Node) -> Location:
    line, character = tree.position_at(node.start_byte)
    return Location(path, tree.span(node), line, character)


def _identifier_nodes(
    tree: SyntaxTree, names: Set[str], skip_imports: bool = False
) -> Iterable[Node]:
    import_spans = (
        [tree.span(s) for s in tree.statements() if classify(s) is NodeKind.IMPORT_DECLARATION]
        if skip_imports
        else []
    )
    for node in tree.walk():
        if node.type not in IDENTIFIER_TYPES or tree.text(node) not in names:
            continue
        if any(span.start <= node.start_byte < span.end for span in import_spans):
            continue
        yield node


class WorkspaceReferenceFinder:
    """
    Project-wide reference search for a type name, built on the syntax tree.

    Results for the declaring file come first. Other files contribute the
    import bindings that resolve to the declaring file and the usages of the
    names those bindings introduce.
    """

    def __init__(self, ctx: "RefactorContext"):
        self.ctx = ctx

    def find_references(self, path: Path, offset: int) -> Optional[List[Location]]:
        target = _normalize(path)
        tree = self.ctx.parser.parse(self.ctx.workspace.read_text(path), path)
        node = tree.node_at(offset)
        if node is None or node.type not in IDENTIFIER_TYPES:
            return None
        name = tree.text(node)

        locations = [_location(path, tree, n) for n in _identifier_nodes(tree, {name})]
        for other in self.ctx.workspace.iter_source_files():
            if _normalize(other) == target:
                continue
            try:
                text = self.ctx.workspace.read_text(other)
            except (OSError, UnicodeDecodeError) as e:
                log.warning(f"Skipping unreadable file {other}: {e}")
                continue
            if name not in text:
                continue
            other_tree = self.ctx.parser.parse(text, other)
            if other_tree.has_errors:
                log.debug(f"Syntax errors in {other}, references may be incomplete")
            locations.extend(self._references_in(other, other_tree, target, name))
        return locations

    def _references_in(
        self, path: Path, tree: SyntaxTree, target: Path, name: str
    ) -> List[Location]:
        locations: List[Location] = []
        local_names: Set[str] = set()
        for decl in iter_imports(tree):
            binding = decl.binding_for(name)
            if binding is None or decl.specifier is None:
                continue
            resolved = self.ctx.aliases.resolve_module(path, decl.specifier)
            if resolved is None or _normalize(resolved) != target:
                continue
            line, character = tree.position_at(binding.name_span.start)
            locations.append(Location(path, binding.name_span, line, character))
            local_names.add(binding.local_name)

        if local_names:
            locations.extend(
                _location(path, tree, n)
                for n in _identifier_nodes(tree, local_names, skip_imports=True)
            )
        return locations


class ReferenceResolver:
    def __init__(self, ctx: "RefactorContext"):
        self.ctx = ctx

    def find_all_references(self, path: Path, offset: int) -> List[Location]:
        finder = self.ctx.reference_finder
        if finder is None:
            return []
        return list(finder.find_references(path, offset) or [])

    def find_import_sites_in_file(self, path: Path, type_name: str) -> List[Location]:
        tree = self.ctx.parser.parse(self.ctx.workspace.read_text(path), path)
        locations: List[Location] = []
        for node in tree.walk():
            if classify(node) is not NodeKind.IMPORT_DECLARATION:
                continue
            for binding in parse_import(tree, node).bindings or ():
                if binding.name == type_name:
                    line, character = tree.position_at(binding.span.start)
                    locations.append(Location(path, binding.span, line, character))
        return locations

    def find_existing_import_path(
        self, tree: SyntaxTree, type_name: str
    ) -> ExistingImport:
        # Last match in file order wins.
        result = ExistingImport()
        for decl in iter_imports(tree):
            binding = decl.binding_for(type_name)
            if binding is None or decl.specifier is None:
                continue
            result = ExistingImport(
                specifier=decl.specifier,
                is_type_only=decl.is_type_only or binding.is_type_only,
                binding_text=binding.render(inside_type_only_import=True),
            )
        return result

    def validate_references(
        self, locations: Iterable[Location]
    ) -> Tuple[List[Location], List[Location]]:
        kept: List[Location] = []
        skipped: List[Location] = []
        for location in locations:
            if self.ctx.workspace.is_ignored(location.path) or not self.ctx.workspace.exists(
                location.path
            ):
                skipped.append(location)
            else:
                kept.append(location)
        return kept, skipped
