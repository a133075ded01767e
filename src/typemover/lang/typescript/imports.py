from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple

from tree_sitter import Node

from typemover.common.transaction import ByteRange
from .parser import NodeKind, SyntaxTree, classify


@dataclass(frozen=True)
class ImportBinding:
    """One element of a named import list, e.g. `type Foo as Bar`."""

    name: str
    local_name: str
    text: str
    is_type_only: bool
    span: ByteRange
    name_span: ByteRange

    def render(self, inside_type_only_import: bool) -> str:
        if inside_type_only_import and self.is_type_only:
            return self.text.split(None, 1)[1]
        return self.text


@dataclass(frozen=True)
class ImportDeclaration:
    span: ByteRange
    specifier: Optional[str]
    quote: str
    is_type_only: bool
    default_binding: Optional[str]
    # None when the statement has no `{ ... }` list (side-effect, default-only
    # or namespace imports). Such statements cannot be amended in place.
    bindings: Optional[Tuple[ImportBinding, ...]]
    has_semicolon: bool

    @property
    def has_named_bindings(self) -> bool:
        return self.bindings is not None

    def binding_for(self, name: str) -> Optional[ImportBinding]:
        for binding in self.bindings or ():
            if binding.name == name:
                return binding
        return None


def _parse_binding(tree: SyntaxTree, node: Node) -> Optional[ImportBinding]:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    alias_node = node.child_by_field_name("alias")
    name = tree.text(name_node).strip("'\"")
    first = node.children[0]
    return ImportBinding(
        name=name,
        local_name=tree.text(alias_node) if alias_node is not None else name,
        text=tree.text(node),
        is_type_only=not first.is_named and first.type == "type",
        span=tree.span(node),
        name_span=tree.span(name_node),
    )


def parse_import(tree: SyntaxTree, node: Node) -> ImportDeclaration:
    source = node.child_by_field_name("source")
    specifier: Optional[str] = None
    quote = '"'
    if source is not None:
        raw = tree.text(source)
        if len(raw) >= 2 and raw[0] in "'\"":
            quote = raw[0]
            specifier = raw[1:-1]

    is_type_only = False
    clause: Optional[Node] = None
    for child in node.children:
        if child.type == "import_clause":
            clause = child
            break
        if not child.is_named and child.type == "type":
            is_type_only = True

    default_binding: Optional[str] = None
    bindings: Optional[Tuple[ImportBinding, ...]] = None
    if clause is not None:
        for child in clause.named_children:
            if child.type == "identifier":
                default_binding = tree.text(child)
            elif child.type == "named_imports":
                parsed = [
                    _parse_binding(tree, spec)
                    for spec in child.named_children
                    if spec.type == "import_specifier"
                ]
                bindings = tuple(b for b in parsed if b is not None)

    return ImportDeclaration(
        span=tree.span(node),
        specifier=specifier,
        quote=quote,
        is_type_only=is_type_only,
        default_binding=default_binding,
        bindings=bindings,
        has_semicolon=tree.text(node).rstrip().endswith(";"),
    )


def iter_imports(tree: SyntaxTree) -> Iterator[ImportDeclaration]:
    """Yields the top-level import declarations in file order."""
    for statement in tree.statements():
        if classify(statement) is NodeKind.IMPORT_DECLARATION:
            yield parse_import(tree, statement)


def render_import(
    binding_texts: Sequence[str],
    specifier: str,
    type_only: bool = False,
    default_binding: Optional[str] = None,
    quote: str = '"',
    semicolon: bool = True,
) -> str:
    clause = "{ " + ", ".join(binding_texts) + " }"
    if default_binding:
        clause = f"{default_binding}, {clause}"
    keyword = "import type" if type_only else "import"
    terminator = ";" if semicolon else ""
    return f"{keyword} {clause} from {quote}{specifier}{quote}{terminator}"
