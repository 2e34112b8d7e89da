"""Policy-driven candidate scoring and ranking.

Usage example:
    from skinfit.domain.policies import policy_for
    from skinfit.domain.recommendation import recommend
    from skinfit.domain.taxonomy import Archetype

    shortlist = recommend(Archetype.HS, policy_for(Archetype.HS), catalog)
    for candidate in shortlist:
        print(candidate.product.slug, candidate.score, candidate.breakdown.matched_boost_tags)

Scoring:
- ``tag_score`` sums the policy boost weight of every tag the product carries.
- ``safety_bonus`` applies to the hyper-sensitive archetype only:
  ``(safety_score - 50) * 0.05``, with a missing safety score treated as 50. It stays
  within +/-2.5 so boost tags (weights 1-4) dominate the ranking.
- Candidates are ranked by score descending, then product id ascending.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..observability import get_logger
from .policies import CatalogFilter, Policy
from .questionnaire import LocalizedText
from .taxonomy import DEFAULT_LOCALE, Archetype, Locale, ProductCategory, TagCode

if TYPE_CHECKING:
    from ..protocols import CatalogQuery

SAFETY_NEUTRAL_SCORE = 50
SAFETY_BONUS_PER_POINT = 0.05
SAFETY_SCORE_MIN = 0
SAFETY_SCORE_MAX = 100

_logger = get_logger("skinfit.recommendation")


@dataclass(frozen=True)
class Product:
    """Read-only catalogue product as consumed by the recommender."""

    id: str
    slug: str
    category: ProductCategory
    archetypes: frozenset[Archetype]
    tags: tuple[TagCode, ...] = ()
    safety_score: int | None = None
    published: bool = True
    brand: str | None = None
    names: LocalizedText | None = None

    def display_name(self, locale: Locale = DEFAULT_LOCALE) -> str:
        if self.names is None:
            return self.slug
        return self.names.resolve(locale) or self.slug


@dataclass(frozen=True)
class MatchedBoostTag:
    """A product tag that contributed a boost weight."""

    code: TagCode
    weight: float


@dataclass(frozen=True)
class ScoreBreakdown:
    """Explainability record for one scored candidate."""

    tag_score: float
    safety_bonus: float
    matched_boost_tags: tuple[MatchedBoostTag, ...]
    safety_score: int | None


@dataclass(frozen=True)
class ScoredCandidate:
    """A product with its final ranking score and breakdown."""

    product: Product
    score: float
    breakdown: ScoreBreakdown


def safety_bonus(archetype: Archetype, safety_score: int | None) -> float:
    """Return the sensitive-skin safety adjustment for a product."""
    if archetype != Archetype.HS:
        return 0.0
    effective = SAFETY_NEUTRAL_SCORE if safety_score is None else safety_score
    return (effective - SAFETY_NEUTRAL_SCORE) * SAFETY_BONUS_PER_POINT


def score_candidate(archetype: Archetype, policy: Policy, product: Product) -> ScoredCandidate:
    """Score one candidate against ``policy``."""
    tag_score = 0.0
    matched: list[MatchedBoostTag] = []
    for tag in product.tags:
        weight = policy.boost_weight(tag)
        if weight:
            tag_score += weight
            matched.append(MatchedBoostTag(code=tag, weight=weight))

    bonus = safety_bonus(archetype, product.safety_score)
    return ScoredCandidate(
        product=product,
        score=tag_score + bonus,
        breakdown=ScoreBreakdown(
            tag_score=tag_score,
            safety_bonus=bonus,
            matched_boost_tags=tuple(matched),
            safety_score=product.safety_score,
        ),
    )


def rank_candidates(scored: Iterable[ScoredCandidate], limit: int) -> list[ScoredCandidate]:
    """Sort by score descending with product id as the tie-break, then truncate."""
    if limit <= 0:
        return []
    ordered = sorted(scored, key=lambda candidate: (-candidate.score, candidate.product.id))
    return ordered[:limit]


def recommend(
    archetype: Archetype,
    policy: Policy,
    catalog: CatalogQuery,
) -> list[ScoredCandidate]:
    """Return at most ``policy.limit`` ranked, explained candidates for ``archetype``.

    The catalogue is queried exactly once. An empty candidate set yields an empty list.
    """
    query = CatalogFilter.for_policy(archetype, policy)
    candidates: Sequence[Product] = catalog.find_candidates(query)
    scored = [score_candidate(archetype, policy, product) for product in candidates]
    ranked = rank_candidates(scored, policy.limit)
    _logger.info(
        "Recommended %s of %s candidates for %s (limit=%s)",
        len(ranked),
        len(scored),
        archetype,
        policy.limit,
    )
    return ranked
