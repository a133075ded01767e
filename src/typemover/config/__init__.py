from .loader import (
    CONFIG_FILE_NAME,
    IMPORT_STYLES,
    SettingsError,
    TypeMoverConfig,
    find_config_file,
    load_config_from_path,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "IMPORT_STYLES",
    "SettingsError",
    "TypeMoverConfig",
    "find_config_file",
    "load_config_from_path",
]
