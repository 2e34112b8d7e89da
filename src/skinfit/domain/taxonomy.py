"""Closed code sets shared by the classifier and the recommender."""

from __future__ import annotations

from enum import StrEnum


class Archetype(StrEnum):
    """Skin-type archetypes, declared in their fixed tie-resolution order."""

    DS = "DS"  # Dewy Seeker: dry, needs hydration
    OB = "OB"  # Oil Balancer: oily, shine-prone
    HS = "HS"  # Hyper Sensitive
    CC = "CC"  # Calm Combo: combination / balanced
    SC = "SC"  # Skin Clarity: breakout-prone


ARCHETYPE_ORDER: tuple[Archetype, ...] = tuple(Archetype)

# Ambiguous profiles resolve to the balanced archetype.
DEFAULT_ARCHETYPE = Archetype.CC


class ProductCategory(StrEnum):
    """Catalogue product categories."""

    TONER = "TONER"
    PAD = "PAD"
    ESSENCE = "ESSENCE"
    SERUM = "SERUM"
    AMPOULE = "AMPOULE"
    CREAM = "CREAM"
    MIST = "MIST"
    OIL = "OIL"
    MASK_PACK = "MASK_PACK"


class TagCode(StrEnum):
    """Product attribute tags attached upstream by data enrichment."""

    FRAGRANCE_FREE = "FRAGRANCE_FREE"
    ESSENTIAL_OIL_FREE = "ESSENTIAL_OIL_FREE"
    ALCOHOL_FREE = "ALCOHOL_FREE"
    GENTLE = "GENTLE"
    BARRIER_SUPPORT = "BARRIER_SUPPORT"
    HYDRATING = "HYDRATING"
    SOOTHING = "SOOTHING"
    LIGHTWEIGHT = "LIGHTWEIGHT"
    OIL_CONTROL = "OIL_CONTROL"
    ACNE_CARE = "ACNE_CARE"
    LOW_PH = "LOW_PH"
    NON_COMEDOGENIC = "NON_COMEDOGENIC"


class Locale(StrEnum):
    """Locales that localized text can be resolved for."""

    KO = "KO"
    EN = "EN"
    FR = "FR"


DEFAULT_LOCALE = Locale.EN


def parse_archetype(value: str) -> Archetype:
    """Parse an archetype code case-insensitively.

    Raises:
        ValueError: If ``value`` is not one of the five archetype codes.
    """
    return Archetype(value.strip().upper())


def parse_locale(value: str | None) -> Locale:
    """Map a data or route locale code (``"KO"`` or ``"ko"``) to a ``Locale``.

    Unknown or empty values fall back to ``DEFAULT_LOCALE``.
    """
    text = (value or "").strip().upper()
    try:
        return Locale(text)
    except ValueError:
        return DEFAULT_LOCALE
