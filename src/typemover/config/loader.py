import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib

CONFIG_FILE_NAME = "typemover.toml"
IMPORT_STYLES = ("regular", "type")


class SettingsError(Exception):
    pass


@dataclass(frozen=True)
class TypeMoverConfig:
    tsconfig: str = "./tsconfig.json"
    ignored_folders: List[str] = field(default_factory=lambda: ["node_modules", "dist"])
    path_aliases: Dict[str, List[str]] = field(default_factory=dict)
    import_style: str = "regular"

    def with_overrides(self, **overrides: Any) -> "TypeMoverConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        if "import_style" in values:
            _check_import_style(values["import_style"])
        return replace(self, **values)


def _check_import_style(style: str) -> None:
    if style not in IMPORT_STYLES:
        raise SettingsError(
            f"Invalid import_style '{style}', expected one of: {', '.join(IMPORT_STYLES)}"
        )


def _normalize_aliases(raw: Dict[str, Union[str, List[str]]]) -> Dict[str, List[str]]:
    if not isinstance(raw, dict):
        raise SettingsError("path_aliases must be a table of alias patterns")
    aliases: Dict[str, List[str]] = {}
    for pattern, targets in raw.items():
        if isinstance(targets, str):
            aliases[pattern] = [targets]
        elif isinstance(targets, list) and all(isinstance(t, str) for t in targets):
            aliases[pattern] = list(targets)
        else:
            raise SettingsError(f"path_aliases entry '{pattern}' must be a string or list of strings")
    return aliases


def find_config_file(search_path: Path) -> Optional[Path]:
    current_dir = search_path.resolve()
    while True:
        candidate = current_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        if current_dir.parent == current_dir:
            return None
        current_dir = current_dir.parent


def load_config_from_path(search_path: Path) -> TypeMoverConfig:
    config_path = find_config_file(search_path)
    if config_path is None:
        return TypeMoverConfig()

    try:
        with open(config_path, "rb") as f:
            data: Dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Could not parse {config_path}: {e}") from e

    defaults = TypeMoverConfig()
    import_style = data.get("import_style", defaults.import_style)
    _check_import_style(import_style)

    ignored = data.get("ignored_folders", defaults.ignored_folders)
    if not isinstance(ignored, list):
        raise SettingsError("ignored_folders must be a list of folder names")

    return TypeMoverConfig(
        tsconfig=data.get("tsconfig", defaults.tsconfig),
        ignored_folders=[str(folder) for folder in ignored],
        path_aliases=_normalize_aliases(data.get("path_aliases", {})),
        import_style=import_style,
    )
