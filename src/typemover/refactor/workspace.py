import logging
import os
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Set

from typemover.common.transaction import FileSystemAdapter, RealFileSystem

log = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".ts", ".tsx", ".mts", ".cts")


class Workspace:
    def __init__(
        self,
        root_path: Path,
        ignored_folders: Iterable[str] = ("node_modules", "dist"),
        fs: Optional[FileSystemAdapter] = None,
    ):
        self.root_path = root_path
        self.ignored_folders: Set[str] = set(ignored_folders)
        self.fs = fs or RealFileSystem()

    def is_ignored(self, path: Path) -> bool:
        try:
            parts = path.relative_to(self.root_path).parts
        except ValueError:
            parts = path.parts
        return any(part in self.ignored_folders for part in parts[:-1])

    def is_source_file(self, path: Path) -> bool:
        return path.name.endswith(SOURCE_SUFFIXES)

    def _discover_with_git(self) -> Optional[List[str]]:
        if not (self.root_path / ".git").exists():
            return None
        try:
            result = subprocess.run(
                ["git", "ls-files", "--cached", "--others", "--exclude-standard"],
                cwd=self.root_path,
                capture_output=True,
                text=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError):
            log.warning("Git discovery failed, falling back to OS walk.")
            return None
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def _discover_with_walk(self) -> List[str]:
        paths: List[str] = []
        for root, dirs, files in os.walk(self.root_path):
            dirs[:] = [
                d for d in dirs if not d.startswith(".") and d not in self.ignored_folders
            ]
            for file in files:
                rel_path = (Path(root) / file).relative_to(self.root_path)
                paths.append(rel_path.as_posix())
        return paths

    def iter_source_files(self) -> List[Path]:
        """TypeScript files of the workspace, ignored folders excluded, sorted."""
        discovered = self._discover_with_git()
        if discovered is None:
            discovered = self._discover_with_walk()

        files = []
        for rel in sorted(set(discovered)):
            path = self.root_path / rel
            if (
                self.is_source_file(path)
                and not self.is_ignored(path)
                and self.fs.exists(path)
            ):
                files.append(path)
        return files

    def read_text(self, path: Path) -> str:
        return self.fs.read_text(path)

    def exists(self, path: Path) -> bool:
        return self.fs.exists(path)

    def relative(self, path: Path) -> Path:
        try:
            return path.relative_to(self.root_path)
        except ValueError:
            return path
