from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol, Tuple

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from typemover.common.transaction import ByteRange


class NodeKind(Enum):
    TYPE_ALIAS = "type_alias"
    INTERFACE = "interface"
    ENUM = "enum"
    IMPORT_DECLARATION = "import_declaration"
    OTHER = "other"


DECLARATION_KINDS = frozenset({NodeKind.TYPE_ALIAS, NodeKind.INTERFACE, NodeKind.ENUM})

_GRAMMAR_KINDS: Dict[str, NodeKind] = {
    "type_alias_declaration": NodeKind.TYPE_ALIAS,
    "interface_declaration": NodeKind.INTERFACE,
    "enum_declaration": NodeKind.ENUM,
    "import_statement": NodeKind.IMPORT_DECLARATION,
}

# Statements that only add modifiers (`export`, `export default`, `declare`)
# around a declaration. Their span is part of the declaration's span.
MODIFIER_WRAPPERS = frozenset({"export_statement", "ambient_declaration"})


def classify(node: Node) -> NodeKind:
    return _GRAMMAR_KINDS.get(node.type, NodeKind.OTHER)


def is_type_declaration(node: Node) -> bool:
    return classify(node) in DECLARATION_KINDS


class SyntaxTree:
    """A parsed document plus the byte-level helpers the engine needs."""

    def __init__(self, source: bytes, root: Node, path: Optional[Path] = None):
        self.source = source
        self.root = root
        self.path = path

    @property
    def has_errors(self) -> bool:
        return self.root.has_error

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    @staticmethod
    def span(node: Node) -> ByteRange:
        return ByteRange(node.start_byte, node.end_byte)

    def walk(self, node: Optional[Node] = None) -> Iterator[Node]:
        stack = [node or self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def statements(self) -> Iterator[Node]:
        for child in self.root.named_children:
            if child.type != "comment":
                yield child

    def unwrap(self, node: Node) -> Node:
        """Descends through modifier wrappers to the wrapped declaration."""
        while node.type in MODIFIER_WRAPPERS:
            inner = node.child_by_field_name("declaration")
            if inner is None:
                inner = next(
                    (
                        child
                        for child in node.named_children
                        if is_type_declaration(child) or child.type in MODIFIER_WRAPPERS
                    ),
                    None,
                )
            if inner is None:
                return node
            node = inner
        return node

    def declaration_span(self, node: Node) -> ByteRange:
        outer = node
        while outer.parent is not None and outer.parent.type in MODIFIER_WRAPPERS:
            outer = outer.parent
        return self.span(outer)

    def node_at(self, offset: int) -> Node:
        """The smallest node covering the byte at `offset`."""
        end = min(offset + 1, len(self.source))
        return self.root.descendant_for_byte_range(offset, end)

    def position_at(self, offset: int) -> Tuple[int, int]:
        return position_at(self.source, offset)


def position_at(source: bytes, offset: int) -> Tuple[int, int]:
    """Converts a byte offset into a 0-based (line, character) pair."""
    line = source.count(b"\n", 0, offset)
    line_start = source.rfind(b"\n", 0, offset) + 1
    character = len(source[line_start:offset].decode("utf-8", errors="replace"))
    return line, character


def offset_at(text: str, line: int, character: int) -> int:
    """Converts a 0-based (line, character) pair into a byte offset."""
    lines = text.splitlines(keepends=True)
    if line >= len(lines):
        return len(text.encode("utf-8"))
    prefix = "".join(lines[:line])
    current = lines[line].rstrip("\r\n")
    return len(prefix.encode("utf-8")) + len(current[:character].encode("utf-8"))


class SyntaxParser(Protocol):
    def parse(self, text: str, path: Optional[Path] = None) -> SyntaxTree: ...


class TreeSitterParser:
    """Parses TypeScript with tree-sitter; `.tsx` files use the TSX grammar."""

    def __init__(self):
        self._parsers: Dict[str, Parser] = {}

    def _parser_for(self, path: Optional[Path]) -> Parser:
        dialect = "tsx" if path is not None and path.suffix == ".tsx" else "typescript"
        if dialect not in self._parsers:
            if dialect == "tsx":
                language = Language(tstypescript.language_tsx())
            else:
                language = Language(tstypescript.language_typescript())
            self._parsers[dialect] = Parser(language)
        return self._parsers[dialect]

    def parse(self, text: str, path: Optional[Path] = None) -> SyntaxTree:
        source = text.encode("utf-8")
        tree = self._parser_for(path).parse(source)
        return SyntaxTree(source, tree.root_node, path)
