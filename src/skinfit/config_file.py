"""Typed parsing and validation for recommender config files."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .domain.taxonomy import Locale
from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError
from .io_validation import format_validation_error
from .protocols import FileSystem

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class RecommenderConfigFile:
    """Validated recommender config values loaded from a TOML file."""

    behavior_path: str | None = None
    preference_path: str | None = None
    catalog_path: str | None = None
    locale: Locale | None = None
    output_dir: str | None = None
    result_limit: int | None = None


class _RecommenderSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    behavior_path: str | None = None
    preference_path: str | None = None
    catalog_path: str | None = None
    locale: str | None = None
    output_dir: str | None = None
    result_limit: int | None = None

    @field_validator("behavior_path", "preference_path", "catalog_path", "output_dir")
    @classmethod
    def _validate_non_empty_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("locale")
    @classmethod
    def _validate_locale(cls, value: str | None) -> str | None:
        if value is None:
            return None
        code = value.strip().upper()
        if code not in Locale.__members__:
            raise ValueError
        return code

    @field_validator("result_limit")
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1:
            raise ValueError
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    recommender: _RecommenderSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def load_recommender_config_file(*, path: Path, fs: FileSystem) -> RecommenderConfigFile:
    """Load and validate a recommender TOML config file."""
    if not fs.exists(path):
        raise ConfigFileNotFoundError(str(path))

    raw_payload = fs.read_text(path)
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), format_validation_error(exc)) from exc

    section = model.recommender
    return RecommenderConfigFile(
        behavior_path=section.behavior_path,
        preference_path=section.preference_path,
        catalog_path=section.catalog_path,
        locale=None if section.locale is None else Locale(section.locale),
        output_dir=section.output_dir,
        result_limit=section.result_limit,
    )
