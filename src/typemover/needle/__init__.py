from .pointer import L, SemanticPointer
from .runtime import Needle, needle, load_catalog_directory

__all__ = ["L", "SemanticPointer", "Needle", "needle", "load_catalog_directory"]
