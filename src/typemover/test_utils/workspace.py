import json
from pathlib import Path
from textwrap import dedent
from typing import Any, Dict, List, Optional

import tomli_w


class WorkspaceFactory:
    """Builds a throwaway TypeScript project on disk for a test."""

    def __init__(self, root_path: Path):
        self.root_path = root_path
        self._files_to_create: List[Dict[str, Any]] = []
        self._config_data: Dict[str, Any] = {}

    def with_config(self, typemover_config: Dict[str, Any]) -> "WorkspaceFactory":
        self._config_data.update(typemover_config)
        return self

    def with_source(self, path: str, content: str) -> "WorkspaceFactory":
        self._files_to_create.append(
            {"path": path, "content": dedent(content), "format": "raw"}
        )
        return self

    def with_tsconfig(
        self,
        paths: Optional[Dict[str, List[str]]] = None,
        base_url: Optional[str] = None,
        path: str = "tsconfig.json",
    ) -> "WorkspaceFactory":
        options: Dict[str, Any] = {}
        if base_url is not None:
            options["baseUrl"] = base_url
        if paths is not None:
            options["paths"] = paths
        self._files_to_create.append(
            {"path": path, "content": {"compilerOptions": options}, "format": "json"}
        )
        return self

    def build(self) -> Path:
        if self._config_data:
            self._files_to_create.append(
                {"path": "typemover.toml", "content": self._config_data, "format": "toml"}
            )

        for file_spec in self._files_to_create:
            output_path = self.root_path / file_spec["path"]
            output_path.parent.mkdir(parents=True, exist_ok=True)

            fmt = file_spec["format"]
            content = file_spec["content"]
            if fmt == "toml":
                with output_path.open("wb") as f:
                    tomli_w.dump(content, f)
            elif fmt == "json":
                output_path.write_text(json.dumps(content, indent=2), encoding="utf-8")
            else:
                output_path.write_text(content, encoding="utf-8")

        return self.root_path
