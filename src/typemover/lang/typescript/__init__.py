from .analyzer import DependencyAnalyzer
from .imports import ImportBinding, ImportDeclaration, iter_imports, render_import
from .parser import (
    DECLARATION_KINDS,
    NodeKind,
    SyntaxParser,
    SyntaxTree,
    TreeSitterParser,
    classify,
    offset_at,
    position_at,
)

__all__ = [
    "DECLARATION_KINDS",
    "DependencyAnalyzer",
    "ImportBinding",
    "ImportDeclaration",
    "NodeKind",
    "SyntaxParser",
    "SyntaxTree",
    "TreeSitterParser",
    "classify",
    "iter_imports",
    "offset_at",
    "position_at",
    "render_import",
]
