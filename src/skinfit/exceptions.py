"""Custom exceptions for the skinfit recommender.

Graceful-degradation cases (unknown answers, empty catalogue results) never raise;
everything here signals a configuration or input-document problem.
"""

from __future__ import annotations

from collections.abc import Iterable


class SkinfitError(Exception):
    """Base exception for all skinfit errors."""

    pass


class DependencyMissingError(SkinfitError):
    """Raised when a required injected dependency is missing."""

    def __init__(self, dependency: str, *, reason: str = "") -> None:
        message = f"{dependency} is required."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class QuestionnaireFileNotFoundError(SkinfitError):
    """Raised when a question-set document cannot be found."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Question set not found: {path}")


class QuestionnaireValidationError(SkinfitError):
    """Raised when a question-set document fails validation."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid question set {path}: {detail}")


class QuestionnaireConfigurationError(SkinfitError):
    """Raised when the merged question pool is inconsistent.

    Covers duplicate question codes and more than one tie-break question.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class DuplicateTieBreakerError(QuestionnaireConfigurationError):
    """Raised when more than one question carries the tie-break code."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(
            f"Expected at most one TIEBREAKER question, found {count}. "
            "Remove the extra tie-break questions from the question sets."
        )


class DuplicateQuestionCodeError(QuestionnaireConfigurationError):
    """Raised when two questions in the merged pool share a code."""

    def __init__(self, codes: Iterable[str]) -> None:
        self.codes = tuple(sorted(codes))
        super().__init__(f"Duplicate question codes: {', '.join(self.codes)}")


class AnswersFileNotFoundError(SkinfitError):
    """Raised when an answers document cannot be found."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Answers file not found: {path}")


class CatalogFileNotFoundError(SkinfitError):
    """Raised when a product catalogue document cannot be found."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Product catalogue not found: {path}")


class CatalogValidationError(SkinfitError):
    """Raised when a product catalogue document fails validation."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid product catalogue {path}: {detail}")


class PolicyNotConfiguredError(SkinfitError):
    """Raised when a policy table has no entry for an archetype.

    This is a programmer error: shipped tables are exhaustive.
    """

    def __init__(self, archetype: str) -> None:
        self.archetype = archetype
        super().__init__(f"No recommendation policy configured for archetype {archetype}.")


class PolicyTableIncompleteError(SkinfitError):
    """Raised at import time when the compiled-in policy table is not exhaustive."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Policy table is missing archetypes: {', '.join(self.missing)}")


class ConfigFileNotFoundError(SkinfitError):
    """Raised when a config file path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(SkinfitError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is not valid TOML: {detail}")


class ConfigFileValidationError(SkinfitError):
    """Raised when a config file has invalid values."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is invalid: {detail}")


class CatalogClosedError(SkinfitError):
    """Raised when a catalogue is queried after its connection pool was closed."""

    def __init__(self) -> None:
        super().__init__("Catalogue connection pool is closed.")
