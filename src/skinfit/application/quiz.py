"""Quiz flow: classify answers, select the archetype policy and rank products.

Usage example:
    >>> from skinfit.application.quiz import run_quiz, write_outcome
    >>> outcome = run_quiz(definition=definition, answers=answers, catalog=catalog)
    >>> write_outcome(outcome, out_dir=Path("data/processed"), fs=fs)
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from ..domain.policies import POLICIES_BY_ARCHETYPE, Policy, policy_for, with_limit
from ..domain.questionnaire import (
    AnswersMap,
    ClassificationResult,
    QuestionnaireDefinition,
    classify,
)
from ..domain.recommendation import ScoredCandidate, recommend
from ..domain.taxonomy import ARCHETYPE_ORDER, DEFAULT_LOCALE, Archetype, Locale
from ..exceptions import DependencyMissingError
from ..observability import get_logger
from ..protocols import CatalogQuery, FileSystem

RECOMMENDATION_COLUMNS: tuple[str, ...] = (
    "rank",
    "product_id",
    "slug",
    "name",
    "brand",
    "category",
    "score",
    "tag_score",
    "safety_bonus",
    "matched_boost_tags",
    "safety_score",
)

_logger = get_logger("skinfit.quiz")


@dataclass(frozen=True)
class QuizOutcome:
    """Classification, the policy it selected, and the ranked shortlist."""

    classification: ClassificationResult
    policy: Policy
    recommendations: tuple[ScoredCandidate, ...]

    @property
    def archetype(self) -> Archetype:
        return self.classification.final_archetype


def run_quiz(
    *,
    definition: QuestionnaireDefinition,
    answers: AnswersMap,
    catalog: CatalogQuery | None,
    policies: Mapping[Archetype, Policy] = POLICIES_BY_ARCHETYPE,
    limit: int | None = None,
) -> QuizOutcome:
    """Classify ``answers`` and recommend products for the resulting archetype.

    Args:
        definition: Merged questionnaire.
        answers: Question code to chosen choice id.
        catalog: Catalogue collaborator (required; inject at entry point).
        policies: Archetype policy table.
        limit: Optional result-size override applied to the selected policy.
    """
    if catalog is None:
        raise DependencyMissingError("CatalogQuery", reason="Inject it at the entry point.")

    classification = classify(definition, answers)
    policy = policy_for(classification.final_archetype, policies)
    if limit is not None:
        policy = with_limit(policy, limit)

    ranked = recommend(classification.final_archetype, policy, catalog)
    _logger.info(
        "Quiz complete: %s with %s recommendations", classification.final_archetype, len(ranked)
    )
    return QuizOutcome(
        classification=classification,
        policy=policy,
        recommendations=tuple(ranked),
    )


def classification_to_dict(result: ClassificationResult) -> dict[str, object]:
    return {
        "final_archetype": result.final_archetype.value,
        "scores": {archetype.value: result.scores[archetype] for archetype in ARCHETYPE_ORDER},
        "top_archetypes": [archetype.value for archetype in result.top_archetypes],
        "tie_breaker_used": result.tie_breaker_used,
        "tie_breaker_answer": (
            result.tie_breaker_answer.value if result.tie_breaker_answer is not None else None
        ),
        "answered_codes": list(result.answered_codes),
    }


def policy_to_dict(policy: Policy) -> dict[str, object]:
    return {
        "preferred_categories": sorted(category.value for category in policy.preferred_categories),
        "required_tags_any": sorted(tag.value for tag in policy.required_tags_any),
        "excluded_tags": sorted(tag.value for tag in policy.excluded_tags),
        "boost_tags": {tag.value: weight for tag, weight in policy.boost_tags.items()},
        "limit": policy.limit,
    }


def candidate_to_dict(
    candidate: ScoredCandidate, locale: Locale = DEFAULT_LOCALE
) -> dict[str, object]:
    product = candidate.product
    breakdown = candidate.breakdown
    return {
        "product_id": product.id,
        "slug": product.slug,
        "name": product.display_name(locale),
        "brand": product.brand,
        "category": product.category.value,
        "score": candidate.score,
        "breakdown": {
            "tag_score": breakdown.tag_score,
            "safety_bonus": breakdown.safety_bonus,
            "matched_boost_tags": [
                {"code": match.code.value, "weight": match.weight}
                for match in breakdown.matched_boost_tags
            ],
            "safety_score": breakdown.safety_score,
        },
    }


def outcome_to_dict(outcome: QuizOutcome, locale: Locale = DEFAULT_LOCALE) -> dict[str, object]:
    return {
        "locale": locale.value,
        "classification": classification_to_dict(outcome.classification),
        "policy": policy_to_dict(outcome.policy),
        "recommendations": [
            candidate_to_dict(candidate, locale) for candidate in outcome.recommendations
        ],
    }


def recommendations_frame(
    recommendations: tuple[ScoredCandidate, ...] | list[ScoredCandidate],
    locale: Locale = DEFAULT_LOCALE,
) -> pd.DataFrame:
    """Tabulate ranked candidates for the explain CSV."""
    rows = [
        {
            "rank": rank,
            "product_id": candidate.product.id,
            "slug": candidate.product.slug,
            "name": candidate.product.display_name(locale),
            "brand": candidate.product.brand or "",
            "category": candidate.product.category.value,
            "score": round(candidate.score, 4),
            "tag_score": candidate.breakdown.tag_score,
            "safety_bonus": round(candidate.breakdown.safety_bonus, 4),
            "matched_boost_tags": ";".join(
                f"{match.code.value}:{match.weight:g}"
                for match in candidate.breakdown.matched_boost_tags
            ),
            "safety_score": (
                ""
                if candidate.breakdown.safety_score is None
                else str(candidate.breakdown.safety_score)
            ),
        }
        for rank, candidate in enumerate(recommendations, start=1)
    ]
    return pd.DataFrame(rows, columns=list(RECOMMENDATION_COLUMNS))


def write_outcome(
    outcome: QuizOutcome,
    *,
    out_dir: str | Path = "data/processed",
    fs: FileSystem | None = None,
    locale: Locale = DEFAULT_LOCALE,
) -> dict[str, Path]:
    """Write ``result.json`` and ``recommendations.csv`` explain artefacts.

    Returns:
        Dict with paths to the result and recommendations files.
    """
    if fs is None:
        raise DependencyMissingError("FileSystem", reason="Inject it at the entry point.")
    out_dir = Path(out_dir)
    fs.mkdir(out_dir, parents=True)

    result_path = out_dir / "result.json"
    fs.write_json(outcome_to_dict(outcome, locale), result_path)
    _logger.info("Result: %s (%s)", result_path, outcome.archetype)

    recommendations_path = out_dir / "recommendations.csv"
    fs.write_csv(recommendations_frame(outcome.recommendations, locale), recommendations_path)
    _logger.info(
        "Recommendations: %s (%s products)", recommendations_path, len(outcome.recommendations)
    )
    return {"result": result_path, "recommendations": recommendations_path}
