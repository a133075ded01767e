from .errors import (
    ConfigError,
    EditFailure,
    InputError,
    NameConflictError,
    RefactorError,
    ValidationError,
)
from .models import ChangeSet, ImportChange, Location, MovePlan, TypeInfo

__all__ = [
    "ChangeSet",
    "ConfigError",
    "EditFailure",
    "ImportChange",
    "InputError",
    "Location",
    "MovePlan",
    "NameConflictError",
    "RefactorError",
    "TypeInfo",
    "ValidationError",
]
