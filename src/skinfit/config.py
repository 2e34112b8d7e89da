"""Centralised, injectable configuration for the skinfit recommender."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from .config_file import RecommenderConfigFile
from .domain.taxonomy import DEFAULT_LOCALE, Locale, parse_locale

DEFAULT_BEHAVIOR_PATH = "data/quiz/questions.behavior.json"
DEFAULT_PREFERENCE_PATH = "data/quiz/questions.preference.json"
DEFAULT_CATALOG_PATH = "data/catalog/products.json"
DEFAULT_OUTPUT_DIR = "data/processed"


class PositiveIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


@dataclass(frozen=True)
class RecommenderConfig:
    """Immutable configuration for the quiz flow and CLI.

    Load from environment with `RecommenderConfig.from_env()` or construct directly for testing.
    """

    # Input documents
    behavior_path: str = DEFAULT_BEHAVIOR_PATH
    preference_path: str = DEFAULT_PREFERENCE_PATH
    catalog_path: str = DEFAULT_CATALOG_PATH

    # Presentation
    locale: Locale = DEFAULT_LOCALE
    output_dir: str = DEFAULT_OUTPUT_DIR

    # Overrides every policy's limit when set
    result_limit: int | None = None

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load configuration from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            RecommenderConfig instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            behavior_path=_text_or_default(
                os.getenv("QUIZ_BEHAVIOR_PATH", ""), DEFAULT_BEHAVIOR_PATH
            ),
            preference_path=_text_or_default(
                os.getenv("QUIZ_PREFERENCE_PATH", ""), DEFAULT_PREFERENCE_PATH
            ),
            catalog_path=_text_or_default(os.getenv("CATALOG_PATH", ""), DEFAULT_CATALOG_PATH),
            locale=parse_locale(os.getenv("QUIZ_LOCALE", "")),
            output_dir=_text_or_default(os.getenv("OUTPUT_DIR", ""), DEFAULT_OUTPUT_DIR),
            result_limit=_parse_optional_positive_int(
                os.getenv("RESULT_LIMIT", ""),
                env_name="RESULT_LIMIT",
            ),
        )

    def with_overrides(
        self,
        *,
        catalog_path: str | None = None,
        locale: Locale | None = None,
        output_dir: str | None = None,
        result_limit: int | None = None,
    ) -> Self:
        """Return a new config with specified overrides (for CLI options)."""
        return replace(
            self,
            catalog_path=self.catalog_path if catalog_path is None else catalog_path.strip(),
            locale=self.locale if locale is None else locale,
            output_dir=self.output_dir if output_dir is None else output_dir.strip(),
            result_limit=self.result_limit if result_limit is None else result_limit,
        )

    def with_file_overrides(self, file_config: RecommenderConfigFile) -> Self:
        """Return a new config with config-file values overriding env/default values."""
        return replace(
            self,
            behavior_path=self.behavior_path
            if file_config.behavior_path is None
            else file_config.behavior_path,
            preference_path=self.preference_path
            if file_config.preference_path is None
            else file_config.preference_path,
            catalog_path=self.catalog_path
            if file_config.catalog_path is None
            else file_config.catalog_path,
            locale=self.locale if file_config.locale is None else file_config.locale,
            output_dir=self.output_dir
            if file_config.output_dir is None
            else file_config.output_dir,
            result_limit=self.result_limit
            if file_config.result_limit is None
            else file_config.result_limit,
        )


def _text_or_default(value: str, default: str) -> str:
    return value.strip() or default


def _parse_optional_positive_int(value: str, *, env_name: str) -> int | None:
    """Parse an optional positive integer from an environment variable."""
    text = value.strip()
    if not text:
        return None
    try:
        parsed = int(text)
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed
