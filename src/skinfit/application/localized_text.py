"""Boundary normalisation for localized text fields."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TypeAlias

from ..domain.questionnaire import LocalizedText
from ..domain.taxonomy import Locale

RawText: TypeAlias = str | Mapping[str, str | None]


def clean_localized_text(value: RawText) -> dict[str, str]:
    """Normalise a plain string or a per-locale object to ``{locale_code: text}``.

    Blank texts and unknown locale keys are dropped.

    Raises:
        ValueError: If no usable text remains.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError
        return {locale.value: text for locale in Locale}

    if not isinstance(value, Mapping):
        raise ValueError

    cleaned: dict[str, str] = {}
    for key, text in value.items():
        if not isinstance(key, str):
            continue
        code = key.strip().upper()
        if code not in Locale.__members__:
            continue
        if not isinstance(text, str) or not text.strip():
            continue
        cleaned[code] = text.strip()
    if not cleaned:
        raise ValueError
    return cleaned


def to_localized_text(cleaned: Mapping[str, str]) -> LocalizedText:
    """Convert cleaned ``{locale_code: text}`` into a domain ``LocalizedText``."""
    ordered = {locale: cleaned[locale.value] for locale in Locale if locale.value in cleaned}
    return LocalizedText(texts=MappingProxyType(ordered))
