"""Per-archetype recommendation policies.

Recommendation behaviour is tuned by editing ``POLICIES_BY_ARCHETYPE``; the ranking
algorithm in ``skinfit.domain.recommendation`` never branches on archetype except for
the sensitive-skin safety adjustment.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..exceptions import PolicyNotConfiguredError, PolicyTableIncompleteError
from .taxonomy import ARCHETYPE_ORDER, Archetype, ProductCategory, TagCode

if TYPE_CHECKING:
    from .recommendation import Product

DEFAULT_RESULT_LIMIT = 3


class InvalidPolicyError(ValueError):
    """Raised when a policy is constructed with values that break its invariants."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid recommendation policy: {reason}")


@dataclass(frozen=True)
class Policy:
    """Candidate filters, boost weights and result size for one archetype."""

    preferred_categories: frozenset[ProductCategory]
    required_tags_any: frozenset[TagCode] = frozenset()
    excluded_tags: frozenset[TagCode] = frozenset()
    boost_tags: MappingProxyType[TagCode, float] = field(
        default_factory=lambda: MappingProxyType({})
    )
    limit: int = DEFAULT_RESULT_LIMIT

    def __post_init__(self) -> None:
        if not self.preferred_categories:
            raise InvalidPolicyError("preferred_categories must not be empty")
        if self.limit < 0:
            raise InvalidPolicyError("limit must not be negative")
        if any(weight < 0 for weight in self.boost_tags.values()):
            raise InvalidPolicyError("boost tag weights must not be negative")

    def boost_weight(self, tag: TagCode) -> float:
        return self.boost_tags.get(tag, 0.0)


def make_policy(
    *,
    categories: Iterable[ProductCategory],
    required_any: Iterable[TagCode] = (),
    excluded: Iterable[TagCode] = (),
    boosts: Mapping[TagCode, float] | None = None,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> Policy:
    """Build a ``Policy`` from plain iterables and a boost mapping."""
    return Policy(
        preferred_categories=frozenset(categories),
        required_tags_any=frozenset(required_any),
        excluded_tags=frozenset(excluded),
        boost_tags=MappingProxyType(dict(boosts or {})),
        limit=limit,
    )


@dataclass(frozen=True)
class CatalogFilter:
    """Candidate retrieval contract handed to the catalogue collaborator.

    Matches published products compatible with ``archetype`` whose category is
    preferred, that carry at least one ``required_tags_any`` tag (when non-empty),
    and that carry none of ``excluded_tags`` (when non-empty).
    """

    archetype: Archetype
    categories: frozenset[ProductCategory]
    required_tags_any: frozenset[TagCode] = frozenset()
    excluded_tags: frozenset[TagCode] = frozenset()

    @classmethod
    def for_policy(cls, archetype: Archetype, policy: Policy) -> CatalogFilter:
        return cls(
            archetype=archetype,
            categories=policy.preferred_categories,
            required_tags_any=policy.required_tags_any,
            excluded_tags=policy.excluded_tags,
        )

    def matches(self, product: Product) -> bool:
        if not product.published:
            return False
        if self.archetype not in product.archetypes:
            return False
        if product.category not in self.categories:
            return False
        tags = frozenset(product.tags)
        if self.required_tags_any and not (tags & self.required_tags_any):
            return False
        if self.excluded_tags and tags & self.excluded_tags:
            return False
        return True


_C = ProductCategory
_T = TagCode

# Dewy Seeker: hydration and barrier first, soothing and mild formulas as extras.
_DS = make_policy(
    categories=(_C.TONER, _C.ESSENCE, _C.SERUM, _C.AMPOULE, _C.CREAM, _C.MIST),
    required_any=(_T.HYDRATING, _T.BARRIER_SUPPORT),
    boosts={
        _T.HYDRATING: 4,
        _T.BARRIER_SUPPORT: 3,
        _T.SOOTHING: 2,
        _T.ALCOHOL_FREE: 1,
        _T.GENTLE: 1,
    },
)

# Oil Balancer: oil control and light textures; pore-friendly and low-pH as extras.
_OB = make_policy(
    categories=(_C.TONER, _C.PAD, _C.ESSENCE, _C.SERUM, _C.MIST),
    required_any=(_T.OIL_CONTROL, _T.LIGHTWEIGHT, _T.LOW_PH),
    boosts={
        _T.OIL_CONTROL: 4,
        _T.LIGHTWEIGHT: 3,
        _T.NON_COMEDOGENIC: 2,
        _T.LOW_PH: 2,
        _T.GENTLE: 1,
    },
)

# Hyper Sensitive: gentle, soothing, barrier; strong preference for "free-from" tags.
_HS = make_policy(
    categories=(_C.TONER, _C.ESSENCE, _C.SERUM, _C.AMPOULE, _C.CREAM, _C.MIST),
    required_any=(_T.GENTLE, _T.SOOTHING, _T.BARRIER_SUPPORT),
    boosts={
        _T.GENTLE: 4,
        _T.SOOTHING: 3,
        _T.BARRIER_SUPPORT: 3,
        _T.FRAGRANCE_FREE: 2,
        _T.ESSENTIAL_OIL_FREE: 2,
        _T.ALCOHOL_FREE: 2,
    },
)

# Calm Combo: light textures first, baseline hydration and barrier care.
_CC = make_policy(
    categories=(_C.TONER, _C.ESSENCE, _C.SERUM, _C.CREAM, _C.MIST, _C.PAD),
    required_any=(_T.LIGHTWEIGHT, _T.HYDRATING, _T.BARRIER_SUPPORT),
    boosts={
        _T.LIGHTWEIGHT: 3,
        _T.HYDRATING: 2,
        _T.BARRIER_SUPPORT: 2,
        _T.SOOTHING: 1,
        _T.LOW_PH: 1,
    },
)

# Skin Clarity: acne care, low pH and non-comedogenic; mildness as a light extra.
_SC = make_policy(
    categories=(_C.TONER, _C.PAD, _C.SERUM, _C.ESSENCE),
    required_any=(_T.ACNE_CARE, _T.LOW_PH, _T.NON_COMEDOGENIC),
    boosts={
        _T.ACNE_CARE: 4,
        _T.LOW_PH: 3,
        _T.NON_COMEDOGENIC: 3,
        _T.GENTLE: 1,
        _T.ALCOHOL_FREE: 1,
    },
)


def check_policy_table(table: Mapping[Archetype, Policy]) -> None:
    """Raise ``PolicyTableIncompleteError`` unless every archetype has a policy."""
    missing = [archetype.value for archetype in ARCHETYPE_ORDER if archetype not in table]
    if missing:
        raise PolicyTableIncompleteError(missing)


POLICIES_BY_ARCHETYPE: MappingProxyType[Archetype, Policy] = MappingProxyType(
    {
        Archetype.DS: _DS,
        Archetype.OB: _OB,
        Archetype.HS: _HS,
        Archetype.CC: _CC,
        Archetype.SC: _SC,
    }
)

check_policy_table(POLICIES_BY_ARCHETYPE)


def policy_for(
    archetype: Archetype,
    table: Mapping[Archetype, Policy] = POLICIES_BY_ARCHETYPE,
) -> Policy:
    """Return the policy for ``archetype`` or fail loudly if none is configured."""
    try:
        return table[archetype]
    except KeyError as exc:
        raise PolicyNotConfiguredError(str(archetype)) from exc


def with_limit(policy: Policy, limit: int) -> Policy:
    """Return a copy of ``policy`` returning at most ``limit`` results."""
    return replace(policy, limit=limit)
