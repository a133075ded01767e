import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import json5

from typemover.common.transaction import FileSystemAdapter, RealFileSystem
from typemover.config import TypeMoverConfig
from .errors import ConfigError
from .models import AliasConfig

log = logging.getLogger(__name__)

TSCONFIG_NAME = "tsconfig.json"
ALIAS_STRIPPED_EXTENSIONS = (".tsx", ".ts", ".vue")
RELATIVE_STRIPPED_EXTENSIONS = (".tsx", ".ts")
PROBE_SUFFIXES = (".ts", ".tsx", ".d.ts")
INDEX_FILES = ("index.ts", "index.tsx")


def _normalize(path: Path) -> Path:
    return Path(os.path.normpath(os.path.abspath(path)))


def _strip_extension(specifier: str, extensions: Sequence[str]) -> str:
    for ext in extensions:
        if specifier.endswith(ext):
            return specifier[: -len(ext)]
    return specifier


def _strip_wildcard(value: str) -> str:
    return value[:-1] if value.endswith("*") else value


def _relative_within(path: Path, root: Path) -> Optional[str]:
    try:
        rel = path.relative_to(root)
    except ValueError:
        return None
    return "" if rel == Path(".") else rel.as_posix()


class AliasResolver:
    """
    Converts between file paths and import specifiers using the
    `compilerOptions.paths` table of a tsconfig file.

    Loading never fails: without a usable configuration the resolver knows no
    aliases and every specifier falls back to a relative path.
    """

    def __init__(
        self,
        workspace_root: Path,
        tsconfig: Optional[str] = "./tsconfig.json",
        extra_aliases: Optional[Dict[str, List[str]]] = None,
        fs: Optional[FileSystemAdapter] = None,
    ):
        self.fs = fs or RealFileSystem()
        self.config: Optional[AliasConfig] = None
        self.load(workspace_root, tsconfig, extra_aliases)

    @classmethod
    def from_config(
        cls,
        workspace_root: Path,
        config: TypeMoverConfig,
        fs: Optional[FileSystemAdapter] = None,
    ) -> "AliasResolver":
        return cls(workspace_root, config.tsconfig, config.path_aliases, fs=fs)

    # --- Loading ---

    def _locate_config_file(self, workspace_root: Path, tsconfig: Optional[str]) -> Path:
        if tsconfig:
            configured = _normalize(workspace_root / tsconfig)
            if self.fs.exists(configured):
                return configured
            log.debug(f"Configured tsconfig {configured} not found, searching upwards")

        current = _normalize(workspace_root)
        while True:
            candidate = current / TSCONFIG_NAME
            if self.fs.exists(candidate):
                return candidate
            if current.parent == current:
                raise ConfigError(f"No {TSCONFIG_NAME} found from {workspace_root}")
            current = current.parent

    def _read_config(self, config_path: Path) -> AliasConfig:
        try:
            data = json5.loads(self.fs.read_text(config_path))
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e
        except ValueError as e:
            raise ConfigError(f"Cannot parse {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} does not contain an object")
        options = data.get("compilerOptions") or {}
        if not isinstance(options, dict):
            raise ConfigError(f"compilerOptions in {config_path} is not an object")

        base_url = options.get("baseUrl")
        paths = options.get("paths") or {}
        if not isinstance(paths, dict):
            raise ConfigError(f"compilerOptions.paths in {config_path} is not an object")

        path_map: Dict[str, List[str]] = {}
        for pattern, targets in paths.items():
            if isinstance(targets, str):
                targets = [targets]
            if isinstance(targets, list) and targets:
                path_map[str(pattern)] = [str(t) for t in targets]

        return AliasConfig(
            base_dir=config_path.parent,
            base_url=base_url if isinstance(base_url, str) else ".",
            path_map=path_map,
            base_url_explicit=isinstance(base_url, str),
        )

    def load(
        self,
        workspace_root: Path,
        tsconfig: Optional[str] = None,
        extra_aliases: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        try:
            config = self._read_config(self._locate_config_file(workspace_root, tsconfig))
        except ConfigError as e:
            log.warning(f"Path aliases disabled: {e}")
            config = None

        if extra_aliases:
            if config is None:
                config = AliasConfig(base_dir=_normalize(workspace_root))
            merged = dict(config.path_map)
            merged.update({k: list(v) for k, v in extra_aliases.items()})
            config = AliasConfig(
                base_dir=config.base_dir,
                base_url=config.base_url,
                path_map=merged,
                base_url_explicit=config.base_url_explicit,
            )
        self.config = config

    # --- Path -> specifier ---

    def try_match_alias(self, absolute_file_path: Path) -> Optional[str]:
        if self.config is None or not self.config.path_map:
            return None

        base = self.config.absolute_base_url
        file_path = _normalize(absolute_file_path)
        for pattern, targets in self.config.path_map.items():
            alias_root = _normalize(base / _strip_wildcard(targets[0]))
            remainder = _relative_within(file_path, alias_root)
            if remainder is None:
                continue
            return _strip_extension(
                _strip_wildcard(pattern) + remainder, ALIAS_STRIPPED_EXTENSIONS
            )
        return None

    def resolve_import_path(self, from_path: Path, to_path: Path) -> str:
        alias = self.try_match_alias(to_path)
        if alias:
            return alias

        relative = os.path.relpath(_normalize(to_path), _normalize(from_path).parent)
        relative = _strip_extension(relative.replace(os.sep, "/"), RELATIVE_STRIPPED_EXTENSIONS)
        if not (relative.startswith("./") or relative.startswith("../")):
            relative = "./" + relative
        return relative

    def should_preserve_type_only(self, import_specifier: str) -> bool:
        if self.config is None:
            return False
        return any(
            import_specifier.startswith(pattern.replace("*", ""))
            for pattern in self.config.path_map
        )

    # --- Specifier -> path ---

    def _probe(self, candidate: Path) -> Optional[Path]:
        name = candidate.name
        if name.endswith((".js", ".jsx")):
            stem = candidate.with_suffix("")
            for suffix in (".ts", ".tsx"):
                if self.fs.exists(stem.with_name(stem.name + suffix)):
                    return stem.with_name(stem.name + suffix)
        if candidate.suffix in (".ts", ".tsx") and self.fs.exists(candidate):
            return candidate
        for suffix in PROBE_SUFFIXES:
            probe = candidate.with_name(name + suffix)
            if self.fs.exists(probe):
                return probe
        for index in INDEX_FILES:
            probe = candidate / index
            if self.fs.exists(probe):
                return probe
        return None

    def resolve_module(self, from_path: Path, specifier: str) -> Optional[Path]:
        candidates: List[Path] = []
        if specifier in (".", "..") or specifier.startswith(("./", "../")):
            candidates.append(_normalize(from_path).parent / specifier)
        elif self.config is not None:
            base = self.config.absolute_base_url
            for pattern, targets in self.config.path_map.items():
                if pattern.endswith("*"):
                    prefix = pattern[:-1]
                    if not specifier.startswith(prefix):
                        continue
                    rest = specifier[len(prefix) :]
                    candidates.extend(base / t.replace("*", rest) for t in targets)
                elif specifier == pattern:
                    candidates.extend(base / t for t in targets)
            if self.config.base_url_explicit:
                candidates.append(base / specifier)

        for candidate in candidates:
            found = self._probe(_normalize(candidate))
            if found is not None:
                return found
        return None
