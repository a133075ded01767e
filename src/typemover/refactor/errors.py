from pathlib import Path


class RefactorError(Exception):
    pass


class InputError(RefactorError):
    """The request cannot be acted on: no type selected, bad destination, ..."""


class ValidationError(RefactorError):
    pass


class NameConflictError(ValidationError):
    def __init__(self, type_name: str, destination: str):
        self.type_name = type_name
        self.destination = destination
        super().__init__(
            f"Type '{type_name}' already exists in destination file {destination}"
        )


class ConfigError(RefactorError):
    """Alias configuration could not be loaded. Never leaves the alias resolver."""


class EditFailure(RefactorError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to move type: could not update {path}: {reason}")
