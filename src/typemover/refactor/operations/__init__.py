from .base import AbstractOperation
from .move_type import MoveTypeOperation
from .preview_references import PreviewReferencesOperation, ReferencePreview

__all__ = [
    "AbstractOperation",
    "MoveTypeOperation",
    "PreviewReferencesOperation",
    "ReferencePreview",
]
