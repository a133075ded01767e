from typing import Dict, List, Set, Tuple

from tree_sitter import Node

from .parser import SyntaxTree


class DependencyAnalyzer:
    """
    Collects the type names a declaration refers to.

    The result is informational: it tells the caller which other types the
    moved declaration depends on. Nothing is moved because of it.
    """

    def _declared_name_spans(self, declaration: Node) -> Set[Tuple[int, int]]:
        # Identifiers that declare a name rather than refer to one.
        spans: Set[Tuple[int, int]] = set()
        name = declaration.child_by_field_name("name")
        if name is not None:
            spans.add((name.start_byte, name.end_byte))
        params = declaration.child_by_field_name("type_parameters")
        for param in params.named_children if params is not None else ():
            param_name = param.child_by_field_name("name")
            if param_name is not None:
                spans.add((param_name.start_byte, param_name.end_byte))
        return spans

    def collect_referenced_type_names(
        self, tree: SyntaxTree, declaration: Node
    ) -> Tuple[str, ...]:
        declaration = tree.unwrap(declaration)
        declared = self._declared_name_spans(declaration)

        # dict keeps first-occurrence order
        found: Dict[str, None] = {}
        stack: List[Node] = [declaration]
        while stack:
            node = stack.pop()
            if node.type == "nested_type_identifier":
                found.setdefault(tree.text(node), None)
                continue
            if node.type == "type_identifier":
                if (node.start_byte, node.end_byte) not in declared:
                    found.setdefault(tree.text(node), None)
                continue
            stack.extend(reversed(node.children))
        return tuple(found)
