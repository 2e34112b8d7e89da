"""Tests for config-file schema parsing and fail-fast validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from skinfit.config_file import load_recommender_config_file
from skinfit.domain.taxonomy import Locale
from skinfit.exceptions import (
    ConfigFileNotFoundError,
    ConfigFileParseError,
    ConfigFileValidationError,
)
from tests.fakes import InMemoryFileSystem
from tests.support.builders import REPO_ROOT

_PATH = Path("config/skinfit.toml")


def _fs_with(content: str) -> InMemoryFileSystem:
    fs = InMemoryFileSystem()
    fs.write_text(content.strip(), _PATH)
    return fs


def test_load_recommender_config_file_parses_valid_toml() -> None:
    fs = _fs_with(
        """
schema_version = 1

[recommender]
behavior_path = " quiz/behavior.json "
catalog_path = "catalog/products.json"
locale = "ko"
output_dir = "out"
result_limit = 5
"""
    )

    parsed = load_recommender_config_file(path=_PATH, fs=fs)

    assert parsed.behavior_path == "quiz/behavior.json"
    assert parsed.preference_path is None
    assert parsed.catalog_path == "catalog/products.json"
    assert parsed.locale is Locale.KO
    assert parsed.output_dir == "out"
    assert parsed.result_limit == 5


def test_shipped_example_config_is_valid() -> None:
    fs = InMemoryFileSystem()
    example = Path("config/skinfit.example.toml")
    fs.write_text((REPO_ROOT / example).read_text(encoding="utf-8"), example)

    parsed = load_recommender_config_file(path=example, fs=fs)

    assert parsed.result_limit == 3
    assert parsed.locale is Locale.EN


def test_missing_config_file_fails_fast() -> None:
    with pytest.raises(ConfigFileNotFoundError, match="Config file not found"):
        load_recommender_config_file(path=_PATH, fs=InMemoryFileSystem())


def test_invalid_toml_fails_fast() -> None:
    fs = _fs_with("schema_version = ")

    with pytest.raises(ConfigFileParseError, match="not valid TOML"):
        load_recommender_config_file(path=_PATH, fs=fs)


@pytest.mark.parametrize(
    ("content", "location"),
    [
        ("schema_version = 2\n[recommender]\n", "schema_version"),
        ("schema_version = 1\n[recommender]\nresult_limit = 0\n", "recommender.result_limit"),
        ("schema_version = 1\n[recommender]\nlocale = \"de\"\n", "recommender.locale"),
        ("schema_version = 1\n[recommender]\noutput_dir = \"  \"\n", "recommender.output_dir"),
        ("schema_version = 1\n[recommender]\nunknown = 1\n", "recommender.unknown"),
        ("schema_version = 1\n", "recommender"),
    ],
)
def test_invalid_values_fail_fast(content: str, location: str) -> None:
    fs = _fs_with(content)

    with pytest.raises(ConfigFileValidationError, match=location):
        load_recommender_config_file(path=_PATH, fs=fs)
