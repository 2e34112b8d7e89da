"""Tests for catalogue document loading and the in-memory catalogue."""

from __future__ import annotations

import pytest

from skinfit.application.catalog_source import InMemoryCatalog, load_catalog, parse_catalog
from skinfit.domain.policies import CatalogFilter, policy_for
from skinfit.domain.taxonomy import Archetype, Locale, ProductCategory, TagCode
from skinfit.exceptions import CatalogFileNotFoundError, CatalogValidationError
from tests.fakes import InMemoryFileSystem
from tests.support.builders import CATALOG_PATH, product, seed_shipped_data, write_json_text


def _product_doc(**overrides: object) -> dict[str, object]:
    doc: dict[str, object] = {
        "id": "p-1",
        "slug": "calm-toner",
        "brand": "Daon Lab",
        "category": "TONER",
        "skinTypes": ["HS", "CC"],
        "hsScore": 80,
        "tags": ["SOOTHING", {"code": "GENTLE", "priority": 1}],
        "translations": {"KO": {"name": "카밍 토너"}, "EN": {"name": "Calm Toner"}},
    }
    doc.update(overrides)
    return doc


def test_parse_catalog_builds_products() -> None:
    [item] = parse_catalog({"products": [_product_doc()]})

    assert item.id == "p-1"
    assert item.category is ProductCategory.TONER
    assert item.archetypes == frozenset({Archetype.HS, Archetype.CC})
    assert item.safety_score == 80
    assert item.published is True
    assert item.display_name(Locale.KO) == "카밍 토너"
    assert item.display_name(Locale.FR) == "Calm Toner"


def test_tags_are_ordered_by_priority_then_document_order() -> None:
    doc = _product_doc(
        tags=[
            "HYDRATING",
            {"code": "GENTLE", "priority": 1},
            {"code": "SOOTHING", "priority": 1},
            "HYDRATING",
        ]
    )

    [item] = parse_catalog({"products": [doc]})

    assert item.tags == (TagCode.GENTLE, TagCode.SOOTHING, TagCode.HYDRATING)


def test_id_defaults_to_slug() -> None:
    [item] = parse_catalog({"products": [_product_doc(id=None)]})

    assert item.id == "calm-toner"


def test_missing_translations_fall_back_to_slug() -> None:
    [item] = parse_catalog({"products": [_product_doc(translations={})]})

    assert item.names is None
    assert item.display_name() == "calm-toner"


@pytest.mark.parametrize(
    ("overrides", "location"),
    [
        ({"hsScore": 101}, "hsScore"),
        ({"hsScore": -1}, "hsScore"),
        ({"category": "LOTION"}, "category"),
        ({"tags": ["SPARKLY"]}, "tags"),
        ({"skinTypes": ["ZZ"]}, "skinTypes"),
        ({"translations": {"DE": {"name": "Toner"}}}, "translations"),
        ({"slug": " "}, "slug"),
    ],
)
def test_invalid_products_are_rejected(overrides: dict[str, object], location: str) -> None:
    with pytest.raises(CatalogValidationError) as exc_info:
        parse_catalog({"products": [_product_doc(**overrides)]}, source="products.json")

    assert location in exc_info.value.detail


def test_duplicate_product_ids_are_rejected() -> None:
    payload = {"products": [_product_doc(), _product_doc(slug="other")]}

    with pytest.raises(CatalogValidationError):
        parse_catalog(payload)


def test_missing_catalog_raises() -> None:
    with pytest.raises(CatalogFileNotFoundError, match="products.json"):
        load_catalog(path=CATALOG_PATH, fs=InMemoryFileSystem())


def test_load_catalog_reads_document() -> None:
    fs = InMemoryFileSystem()
    write_json_text(fs, CATALOG_PATH, {"products": [_product_doc()]})

    products = load_catalog(path=CATALOG_PATH, fs=fs)

    assert [item.slug for item in products] == ["calm-toner"]


def test_in_memory_catalog_applies_filter_in_catalog_order() -> None:
    catalog = InMemoryCatalog(
        [
            product("b", tags=(TagCode.SOOTHING,)),
            product("a", tags=(TagCode.HYDRATING,)),
            product("c", tags=(TagCode.GENTLE,)),
        ]
    )
    query = CatalogFilter.for_policy(Archetype.HS, policy_for(Archetype.HS))

    candidates = catalog.find_candidates(query)

    assert [item.id for item in candidates] == ["b", "c"]
    assert len(catalog) == 3


@pytest.mark.e2e
def test_shipped_catalog_excludes_unpublished_and_unpreferred_products() -> None:
    fs = InMemoryFileSystem()
    seed_shipped_data(fs)
    catalog = InMemoryCatalog(load_catalog(path=CATALOG_PATH, fs=fs))

    candidates = catalog.find_candidates(
        CatalogFilter.for_policy(Archetype.HS, policy_for(Archetype.HS))
    )

    ids = {item.id for item in candidates}
    assert "p-012" not in ids
    assert "p-011" not in ids
    assert {"p-001", "p-002", "p-006", "p-009"} <= ids
