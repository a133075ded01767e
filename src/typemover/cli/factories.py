import os
from pathlib import Path
from typing import Optional, Tuple

from typemover.common.transaction import FileSystemAdapter
from typemover.config import TypeMoverConfig, find_config_file, load_config_from_path
from typemover.lang.typescript.parser import offset_at
from typemover.refactor.context import RefactorContext
from typemover.refactor.errors import InputError


def get_project_root() -> Path:
    """The directory holding typemover.toml, or the working directory."""
    cwd = Path.cwd().resolve()
    config_file = find_config_file(cwd)
    return config_file.parent if config_file else cwd


def make_config(
    root_path: Path,
    tsconfig: Optional[str] = None,
    import_style: Optional[str] = None,
) -> TypeMoverConfig:
    return load_config_from_path(root_path).with_overrides(
        tsconfig=tsconfig, import_style=import_style
    )


def make_context(
    root_path: Path,
    config: TypeMoverConfig,
    fs: Optional[FileSystemAdapter] = None,
) -> RefactorContext:
    return RefactorContext.create(root_path, config=config, fs=fs)


def resolve_source(path: Path) -> Path:
    # Arguments are relative to where the command was invoked.
    return Path(os.path.normpath(Path.cwd() / path))


def resolve_selection(
    source: Path,
    name: Optional[str],
    line: Optional[int],
    column: Optional[int],
) -> Tuple[Optional[str], Optional[int]]:
    """Turns --name or --line/--column into a (type_name, byte offset) pair."""
    has_position = line is not None or column is not None
    if name and has_position:
        raise InputError("Use either --name or --line/--column, not both")
    if not name and not has_position:
        raise InputError("No type selected: pass --name or --line and --column")
    if name:
        return name, None
    if line is None or column is None:
        raise InputError("--line and --column must be given together")

    try:
        with source.open("r", encoding="utf-8", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Cannot read source file {source}: {e}") from e
    return None, offset_at(text, line - 1, column - 1)
