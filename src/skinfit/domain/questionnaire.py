"""Questionnaire model and weighted skin-type classification.

Usage example:
    from skinfit.domain.questionnaire import classify

    result = classify(definition, {"Q1": "Q1_A", "TIEBREAKER": "TIEBREAKER_D"})
    print(result.final_archetype, dict(result.scores))

Scoring rules:
- Each answered question adds its weight to the archetype targeted by the chosen choice.
- Unknown question codes, unanswered questions and unknown choice ids are skipped.
- Choices with no target archetype (style preferences) contribute nothing.
- The ``TIEBREAKER`` question never scores; its answer only resolves ties.
- Ties resolve to the tie-break answer if it is tied, else ``CC`` if tied, else the
  first tied archetype in ``DS, OB, HS, CC, SC`` order.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TypeAlias

from ..exceptions import DuplicateQuestionCodeError, DuplicateTieBreakerError
from ..observability import get_logger
from .taxonomy import ARCHETYPE_ORDER, DEFAULT_ARCHETYPE, DEFAULT_LOCALE, Archetype, Locale

TIEBREAKER_CODE = "TIEBREAKER"
DEFAULT_QUESTION_WEIGHT = 1.0

AnswersMap: TypeAlias = Mapping[str, str | None]

_logger = get_logger("skinfit.classifier")


class InvalidQuestionError(ValueError):
    """Raised when a question is constructed with values that break its invariants."""

    def __init__(self, code: str, reason: str) -> None:
        super().__init__(f"Invalid question {code}: {reason}")


@dataclass(frozen=True)
class LocalizedText:
    """Text pre-resolved per locale."""

    texts: MappingProxyType[Locale, str]

    @classmethod
    def single(cls, text: str) -> LocalizedText:
        """Use the same text for every locale."""
        return cls(texts=MappingProxyType({locale: text for locale in Locale}))

    def resolve(self, locale: Locale = DEFAULT_LOCALE) -> str:
        """Return text for ``locale``, falling back to English, then any locale."""
        if locale in self.texts:
            return self.texts[locale]
        if DEFAULT_LOCALE in self.texts:
            return self.texts[DEFAULT_LOCALE]
        for candidate in Locale:
            if candidate in self.texts:
                return self.texts[candidate]
        return ""


@dataclass(frozen=True)
class Choice:
    """One selectable answer; ``archetype`` is None for preference-only options."""

    id: str
    text: LocalizedText
    archetype: Archetype | None = None


@dataclass(frozen=True)
class Question:
    """A weighted questionnaire item."""

    code: str
    order: int
    text: LocalizedText
    choices: tuple[Choice, ...]
    weight: float = DEFAULT_QUESTION_WEIGHT

    def __post_init__(self) -> None:
        if not math.isfinite(self.weight) or self.weight < 0.0:
            raise InvalidQuestionError(self.code, "weight must be a finite, non-negative number")

    @property
    def is_tiebreaker(self) -> bool:
        return self.code == TIEBREAKER_CODE

    def find_choice(self, choice_id: str) -> Choice | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


@dataclass(frozen=True)
class QuestionSet:
    """One independently authored group of questions (behaviour or preference)."""

    group: str
    version: int
    questions: tuple[Question, ...]


@dataclass(frozen=True)
class LocalizedQuestion:
    """Display-ready question for one locale."""

    code: str
    order: int
    text: str
    choices: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class QuestionnaireDefinition:
    """Behaviour and preference question sets, merged into one scoring pool.

    Raises:
        DuplicateQuestionCodeError: If two questions share a code.
        DuplicateTieBreakerError: If more than one question is a tie-break question.
    """

    behavior: QuestionSet
    preference: QuestionSet

    def __post_init__(self) -> None:
        codes = Counter(question.code for question in self.questions())
        duplicates = [
            code for code, count in codes.items() if count > 1 and code != TIEBREAKER_CODE
        ]
        if duplicates:
            raise DuplicateQuestionCodeError(duplicates)
        if codes[TIEBREAKER_CODE] > 1:
            raise DuplicateTieBreakerError(codes[TIEBREAKER_CODE])

    def questions(self) -> Iterator[Question]:
        yield from self.behavior.questions
        yield from self.preference.questions

    def localized(self, locale: Locale = DEFAULT_LOCALE) -> list[LocalizedQuestion]:
        """Return the merged pool resolved for ``locale`` and sorted by display order."""
        ordered = sorted(self.questions(), key=lambda question: question.order)
        return [
            LocalizedQuestion(
                code=question.code,
                order=question.order,
                text=question.text.resolve(locale),
                choices=tuple(
                    (choice.id, choice.text.resolve(locale)) for choice in question.choices
                ),
            )
            for question in ordered
        ]


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of one questionnaire classification."""

    final_archetype: Archetype
    scores: MappingProxyType[Archetype, float]
    top_archetypes: tuple[Archetype, ...]
    tie_breaker_used: bool
    tie_breaker_answer: Archetype | None = None
    answered_codes: tuple[str, ...] = field(default_factory=tuple)


def _resolve_tie(top: tuple[Archetype, ...], tie_breaker: Archetype | None) -> Archetype:
    if tie_breaker is not None and tie_breaker in top:
        return tie_breaker
    if DEFAULT_ARCHETYPE in top:
        return DEFAULT_ARCHETYPE
    return top[0]


def classify_questions(
    questions: Iterable[Question],
    answers: AnswersMap,
) -> ClassificationResult:
    """Classify answers against an already merged question pool.

    If the pool holds several tie-break questions, the last answered one wins.
    """
    scores: dict[Archetype, float] = {archetype: 0.0 for archetype in ARCHETYPE_ORDER}
    tie_breaker: Archetype | None = None
    answered: list[str] = []

    for question in questions:
        picked_id = answers.get(question.code)
        if not picked_id:
            continue

        choice = question.find_choice(picked_id)
        if choice is None:
            _logger.debug("Ignoring unknown choice %r for question %s", picked_id, question.code)
            continue

        answered.append(question.code)
        if question.is_tiebreaker:
            tie_breaker = choice.archetype
            continue

        if choice.archetype is None:
            continue

        scores[choice.archetype] += question.weight

    best = max(scores.values())
    top = tuple(archetype for archetype in ARCHETYPE_ORDER if scores[archetype] == best)

    if len(top) == 1:
        final = top[0]
        tie_breaker_used = False
    else:
        final = _resolve_tie(top, tie_breaker)
        tie_breaker_used = True

    _logger.info(
        "Classified %s (tie=%s, tie_breaker=%s, answered=%s)",
        final,
        tie_breaker_used,
        tie_breaker,
        len(answered),
    )
    return ClassificationResult(
        final_archetype=final,
        scores=MappingProxyType(scores),
        top_archetypes=top,
        tie_breaker_used=tie_breaker_used,
        tie_breaker_answer=tie_breaker,
        answered_codes=tuple(answered),
    )


def classify(definition: QuestionnaireDefinition, answers: AnswersMap) -> ClassificationResult:
    """Classify a user's answers into one archetype.

    Never raises for incomplete or malformed answers; those questions are skipped.
    """
    return classify_questions(tuple(definition.questions()), answers)
