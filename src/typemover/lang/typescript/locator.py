from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from tree_sitter import Node

from typemover.refactor.errors import NameConflictError
from typemover.refactor.models import TypeInfo
from .analyzer import DependencyAnalyzer
from .parser import SyntaxParser, SyntaxTree, classify, is_type_declaration


class TypeLocator:
    def __init__(
        self, parser: SyntaxParser, analyzer: Optional[DependencyAnalyzer] = None
    ):
        self.parser = parser
        self.analyzer = analyzer or DependencyAnalyzer()

    def _to_info(self, tree: SyntaxTree, node: Node) -> TypeInfo:
        name_node = node.child_by_field_name("name")
        return TypeInfo(
            name=tree.text(name_node),
            declaration_span=tree.declaration_span(node),
            kind=classify(node),
            name_span=tree.span(name_node),
            dependencies=self.analyzer.collect_referenced_type_names(tree, node),
        )

    def _declarations(self, tree: SyntaxTree) -> Iterator[Node]:
        for node in tree.walk():
            if is_type_declaration(node) and node.child_by_field_name("name") is not None:
                yield node

    def locate_at_position(
        self, text: str, offset: int, path: Optional[Path] = None
    ) -> Optional[Tuple[SyntaxTree, Node]]:
        tree = self.parser.parse(text, path)
        selected: Optional[Node] = None
        stack: List[Node] = [tree.root]
        while stack:
            node = stack.pop()
            if is_type_declaration(node) and node.child_by_field_name("name") is not None:
                if tree.declaration_span(node).contains(offset):
                    # Pre-order: a later match is nested inside an earlier one.
                    selected = node
            if node.start_byte <= offset <= node.end_byte:
                stack.extend(reversed(node.children))
        return (tree, selected) if selected is not None else None

    def find_at_position(
        self, text: str, offset: int, path: Optional[Path] = None
    ) -> Optional[TypeInfo]:
        located = self.locate_at_position(text, offset, path)
        return self._to_info(*located) if located else None

    def find_by_name(
        self, text: str, name: str, path: Optional[Path] = None
    ) -> Optional[TypeInfo]:
        tree = self.parser.parse(text, path)
        for node in self._declarations(tree):
            if tree.text(node.child_by_field_name("name")) == name:
                return self._to_info(tree, node)
        return None

    def validate_destination_free(
        self, type_name: str, destination_text: str, destination: Optional[Path] = None
    ) -> None:
        tree = self.parser.parse(destination_text, destination)
        for statement in tree.statements():
            node = tree.unwrap(statement)
            if not is_type_declaration(node):
                continue
            name_node = node.child_by_field_name("name")
            if name_node is not None and tree.text(name_node) == type_name:
                raise NameConflictError(type_name, str(destination or "<destination>"))
