"""Product catalogue loading and the in-memory catalogue collaborator.

Usage example:
    >>> from pathlib import Path
    >>> from skinfit.application.catalog_source import InMemoryCatalog, load_catalog
    >>> fs = ...  # Injected FileSystem from the CLI/composition root
    >>> catalog = InMemoryCatalog(load_catalog(path=Path("data/catalog/products.json"), fs=fs))

Catalogue documents follow the seed format: products carry ``skinTypes``, ``tags``
(codes, or ``{"code", "priority"}`` objects), an optional ``hsScore`` safety score and
per-locale ``translations``. Tags and safety scores are attached upstream; this module
only validates them.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..domain.policies import CatalogFilter
from ..domain.recommendation import SAFETY_SCORE_MAX, SAFETY_SCORE_MIN, Product
from ..domain.taxonomy import Archetype, Locale, ProductCategory, TagCode
from ..exceptions import CatalogFileNotFoundError, CatalogValidationError
from ..io_validation import format_validation_error
from ..observability import get_logger
from ..protocols import CatalogQuery, FileSystem
from .localized_text import clean_localized_text, to_localized_text

DEFAULT_TAG_PRIORITY = 100

_logger = get_logger("skinfit.catalog_source")


class _ProductTagModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    code: TagCode
    priority: int = DEFAULT_TAG_PRIORITY


class _ProductTranslationModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    description: str | None = None


class _ProductModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    id: str | None = None
    slug: str
    brand: str | None = None
    category: ProductCategory
    image_url: str | None = Field(default=None, alias="imageUrl")
    is_published: bool = Field(default=True, alias="isPublished")
    inci: str | None = None
    hs_score: int | None = Field(default=None, alias="hsScore")
    skin_types: tuple[Archetype, ...] = Field(default=(), alias="skinTypes")
    tags: tuple[TagCode | _ProductTagModel, ...] = ()
    translations: dict[str, _ProductTranslationModel] = Field(default_factory=dict)

    @field_validator("slug")
    @classmethod
    def _validate_slug(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError
        return text

    @field_validator("translations")
    @classmethod
    def _validate_translations(
        cls, value: dict[str, _ProductTranslationModel]
    ) -> dict[str, _ProductTranslationModel]:
        cleaned: dict[str, _ProductTranslationModel] = {}
        for key, translation in value.items():
            code = key.strip().upper()
            if code not in Locale.__members__:
                raise ValueError
            cleaned[code] = translation
        return cleaned

    @field_validator("hs_score")
    @classmethod
    def _validate_hs_score(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < SAFETY_SCORE_MIN or value > SAFETY_SCORE_MAX:
            raise ValueError
        return value

    @property
    def product_id(self) -> str:
        return (self.id or "").strip() or self.slug

    def ordered_tags(self) -> tuple[TagCode, ...]:
        entries = [
            (tag.priority, index, tag.code)
            if isinstance(tag, _ProductTagModel)
            else (DEFAULT_TAG_PRIORITY, index, tag)
            for index, tag in enumerate(self.tags)
        ]
        seen: set[TagCode] = set()
        ordered: list[TagCode] = []
        for _, _, code in sorted(entries, key=lambda entry: (entry[0], entry[1])):
            if code not in seen:
                seen.add(code)
                ordered.append(code)
        return tuple(ordered)


class _CatalogModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    products: tuple[_ProductModel, ...]

    @model_validator(mode="after")
    def _validate_unique_ids(self) -> _CatalogModel:
        ids = [product.product_id for product in self.products]
        if len(set(ids)) != len(ids):
            raise ValueError
        return self


def _to_domain_product(model: _ProductModel) -> Product:
    names = {
        locale: translation.name
        for locale, translation in model.translations.items()
        if translation.name.strip()
    }
    return Product(
        id=model.product_id,
        slug=model.slug,
        brand=model.brand,
        category=model.category,
        published=model.is_published,
        archetypes=frozenset(model.skin_types),
        tags=model.ordered_tags(),
        safety_score=model.hs_score,
        names=to_localized_text(clean_localized_text(names)) if names else None,
    )


def parse_catalog(payload: object, *, source: str = "<memory>") -> list[Product]:
    """Validate an already-decoded catalogue document."""
    try:
        model = _CatalogModel.model_validate(payload)
    except ValidationError as exc:
        raise CatalogValidationError(source, format_validation_error(exc)) from exc
    return [_to_domain_product(product) for product in model.products]


def load_catalog(*, path: Path, fs: FileSystem) -> list[Product]:
    """Load and validate a catalogue document from JSON."""
    if not fs.exists(path):
        raise CatalogFileNotFoundError(str(path))

    try:
        model = _CatalogModel.model_validate_json(fs.read_text(path))
    except ValidationError as exc:
        raise CatalogValidationError(str(path), format_validation_error(exc)) from exc

    products = [_to_domain_product(product) for product in model.products]
    _logger.info("Loaded %s products from %s", len(products), path)
    return products


class InMemoryCatalog(CatalogQuery):
    """Catalogue collaborator over an already-loaded product list."""

    def __init__(self, products: Iterable[Product]) -> None:
        self._products = tuple(products)

    def __len__(self) -> int:
        return len(self._products)

    def find_candidates(self, query: CatalogFilter) -> Sequence[Product]:
        return [product for product in self._products if query.matches(product)]
