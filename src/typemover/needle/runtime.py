import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from .pointer import SemanticPointer

log = logging.getLogger(__name__)

ASSETS_ROOT = Path(__file__).resolve().parent.parent / "assets"


def _flatten(data: Dict[str, object], prefix: str, out: Dict[str, str]) -> None:
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            _flatten(value, full_key, out)
        else:
            out[full_key] = str(value)


def load_catalog_directory(directory: Path) -> Dict[str, str]:
    """
    Merges every *.json file below `directory` into one flat key -> template map.

    Files may be flat ({"move.run.success": "..."}) or nested
    ({"move": {"run": {"success": "..."}}}). Files are read in sorted order so
    later files override earlier ones deterministically.
    """
    registry: Dict[str, str] = {}
    if not directory.is_dir():
        return registry

    for path in sorted(directory.rglob("*.json")):
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.warning(f"Ignoring unreadable message catalog {path}: {e}")
            continue
        if isinstance(data, dict):
            _flatten(data, "", registry)
    return registry


class Needle:
    """
    Resolves semantic pointers to message templates.

    Lookup order: requested language, then the default language, then the key
    itself. Later roots override earlier ones.
    """

    def __init__(self, roots: Optional[List[Path]] = None, default_lang: str = "en"):
        self.default_lang = default_lang
        self.roots: List[Path] = list(roots) if roots else [ASSETS_ROOT]
        self._registry: Dict[str, Dict[str, str]] = {}

    def add_root(self, path: Path) -> None:
        if path not in self.roots:
            self.roots.append(path)
            self._registry.clear()

    def _catalog(self, lang: str) -> Dict[str, str]:
        if lang not in self._registry:
            merged: Dict[str, str] = {}
            for root in self.roots:
                merged.update(load_catalog_directory(root / "needle" / lang))
                merged.update(
                    load_catalog_directory(root / ".typemover" / "needle" / lang)
                )
            self._registry[lang] = merged
        return self._registry[lang]

    def get(
        self, pointer: Union[SemanticPointer, str], lang: Optional[str] = None
    ) -> str:
        key = str(pointer)
        target_lang = lang or os.getenv("TYPEMOVER_LANG", self.default_lang)

        value = self._catalog(target_lang).get(key)
        if value is None and target_lang != self.default_lang:
            value = self._catalog(self.default_lang).get(key)
        return key if value is None else value


needle = Needle()
