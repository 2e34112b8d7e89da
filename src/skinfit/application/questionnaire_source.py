"""Loading and strict validation for questionnaire documents.

Usage example:
    >>> from pathlib import Path
    >>> from skinfit.application.questionnaire_source import load_questionnaire
    >>> fs = ...  # Injected FileSystem from the CLI/composition root
    >>> definition = load_questionnaire(
    ...     behavior_path=Path("data/quiz/questions.behavior.json"),
    ...     preference_path=Path("data/quiz/questions.preference.json"),
    ...     fs=fs,
    ... )
"""

from __future__ import annotations

import math
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..domain.questionnaire import (
    DEFAULT_QUESTION_WEIGHT,
    Choice,
    Question,
    QuestionnaireDefinition,
    QuestionSet,
)
from ..domain.taxonomy import Archetype
from ..exceptions import QuestionnaireFileNotFoundError, QuestionnaireValidationError
from ..io_validation import format_validation_error
from ..observability import get_logger
from ..protocols import FileSystem
from .localized_text import RawText, clean_localized_text, to_localized_text

_logger = get_logger("skinfit.questionnaire_source")


class _ChoiceModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    id: str
    text: dict[str, str]
    skin_type: Archetype | None = Field(default=None, alias="skinType")

    @field_validator("id")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("text", mode="before")
    @classmethod
    def _validate_text(cls, value: RawText) -> dict[str, str]:
        return clean_localized_text(value)

    @field_validator("skin_type", mode="before")
    @classmethod
    def _blank_skin_type_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class _QuestionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str
    order: int
    weight: float = DEFAULT_QUESTION_WEIGHT
    text: dict[str, str]
    options: tuple[_ChoiceModel, ...]

    @field_validator("code")
    @classmethod
    def _validate_code(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("weight")
    @classmethod
    def _validate_weight(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0.0:
            raise ValueError
        return value

    @field_validator("text", mode="before")
    @classmethod
    def _validate_text(cls, value: RawText) -> dict[str, str]:
        return clean_localized_text(value)

    @model_validator(mode="after")
    def _validate_options(self) -> _QuestionModel:
        if not self.options:
            raise ValueError
        ids = [option.id for option in self.options]
        if len(set(ids)) != len(ids):
            raise ValueError
        return self


class _QuestionSetModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    group: str
    version: int
    questions: tuple[_QuestionModel, ...]

    @field_validator("group")
    @classmethod
    def _validate_group(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text


def _to_domain_choice(model: _ChoiceModel) -> Choice:
    return Choice(id=model.id, text=to_localized_text(model.text), archetype=model.skin_type)


def _to_domain_question(model: _QuestionModel) -> Question:
    return Question(
        code=model.code,
        order=model.order,
        weight=model.weight,
        text=to_localized_text(model.text),
        choices=tuple(_to_domain_choice(option) for option in model.options),
    )


def _to_domain_question_set(model: _QuestionSetModel) -> QuestionSet:
    return QuestionSet(
        group=model.group,
        version=model.version,
        questions=tuple(_to_domain_question(question) for question in model.questions),
    )


def parse_question_set(payload: object, *, source: str = "<memory>") -> QuestionSet:
    """Validate an already-decoded question-set document."""
    try:
        model = _QuestionSetModel.model_validate(payload)
    except ValidationError as exc:
        raise QuestionnaireValidationError(source, format_validation_error(exc)) from exc
    return _to_domain_question_set(model)


def load_question_set(*, path: Path, fs: FileSystem) -> QuestionSet:
    """Load and validate one question-set document from JSON."""
    if not fs.exists(path):
        raise QuestionnaireFileNotFoundError(str(path))

    payload = fs.read_text(path)
    try:
        model = _QuestionSetModel.model_validate_json(payload)
    except ValidationError as exc:
        raise QuestionnaireValidationError(str(path), format_validation_error(exc)) from exc

    question_set = _to_domain_question_set(model)
    _logger.info(
        "Loaded question set %r v%s (%s questions) from %s",
        question_set.group,
        question_set.version,
        len(question_set.questions),
        path,
    )
    return question_set


def load_questionnaire(
    *,
    behavior_path: Path,
    preference_path: Path,
    fs: FileSystem,
) -> QuestionnaireDefinition:
    """Load both question sets and merge them into one definition.

    Raises:
        QuestionnaireFileNotFoundError: If either document is missing.
        QuestionnaireValidationError: If either document is malformed.
        QuestionnaireConfigurationError: If codes clash or several tie-break questions exist.
    """
    return QuestionnaireDefinition(
        behavior=load_question_set(path=behavior_path, fs=fs),
        preference=load_question_set(path=preference_path, fs=fs),
    )
