"""Filesystem implementations for infrastructure.

Usage example:
    from pathlib import Path

    from skinfit.infrastructure.filesystem import LocalFileSystem

    fs = LocalFileSystem()
    payload = fs.read_json(Path("data/catalog/products.json"))
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

import pandas as pd

from ..protocols import FileSystem


class LocalFileSystem(FileSystem):
    """Local filesystem implementation (UTF-8 throughout)."""

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_text(self, content: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def read_json(self, path: Path) -> object:
        return json.loads(self.read_text(path))

    def write_json(self, data: Mapping[str, object], path: Path) -> None:
        self.write_text(json.dumps(data, ensure_ascii=False, indent=2), path)

    def write_csv(self, df: pd.DataFrame, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False, encoding="utf-8")

    def exists(self, path: Path) -> bool:
        return path.exists()

    def mkdir(self, path: Path, parents: bool = True) -> None:
        path.mkdir(parents=parents, exist_ok=True)
