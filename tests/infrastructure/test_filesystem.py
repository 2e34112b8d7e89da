"""Tests for the local filesystem implementation."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from skinfit.infrastructure import LocalFileSystem


def test_json_round_trip_keeps_unicode(tmp_path: Path) -> None:
    fs = LocalFileSystem()
    path = tmp_path / "nested" / "result.json"

    fs.write_json({"name": "카밍 토너"}, path)

    assert fs.exists(path)
    assert "카밍 토너" in fs.read_text(path)
    assert fs.read_json(path) == {"name": "카밍 토너"}


def test_write_csv_creates_parent_directories(tmp_path: Path) -> None:
    fs = LocalFileSystem()
    path = tmp_path / "out" / "recommendations.csv"

    fs.write_csv(pd.DataFrame([{"rank": 1, "product_id": "p-1"}]), path)

    assert path.read_text(encoding="utf-8").splitlines() == ["rank,product_id", "1,p-1"]


def test_mkdir_is_idempotent(tmp_path: Path) -> None:
    fs = LocalFileSystem()
    path = tmp_path / "a" / "b"

    fs.mkdir(path)
    fs.mkdir(path)

    assert path.is_dir()
