"""Relational catalogue collaborator backed by an injected connection pool.

Usage example:
    from psycopg2.pool import ThreadedConnectionPool

    from skinfit.infrastructure.sql_catalog import SqlCatalog

    pool = ThreadedConnectionPool(1, 4, dsn=database_url)
    with SqlCatalog(pool=pool) as catalog:
        candidates = catalog.find_candidates(query)

The statement targets the ``Product`` / ``Tag`` / ``ProductTag`` / ``ProductTranslation``
tables and uses ``pyformat`` parameters. The pool is created once by the composition
root; one connection is borrowed per query and always returned.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from ..application.localized_text import clean_localized_text, to_localized_text
from ..domain.policies import CatalogFilter
from ..domain.questionnaire import LocalizedText
from ..domain.recommendation import Product
from ..domain.taxonomy import Archetype, ProductCategory, TagCode
from ..exceptions import CatalogClosedError
from ..observability import get_logger
from ..protocols import CatalogQuery, ConnectionPool

_logger = get_logger("skinfit.sql_catalog")

_SELECT = """
SELECT
    p."id"::text,
    p."slug",
    p."brand",
    p."category"::text,
    p."isPublished",
    p."hsScore",
    p."skinTypes"::text[],
    COALESCE(
        array_agg(t."code"::text ORDER BY pt."priority", t."code")
            FILTER (WHERE t."code" IS NOT NULL),
        '{}'
    ) AS tag_codes,
    (
        SELECT json_object_agg(tr."locale"::text, tr."name")
        FROM "ProductTranslation" tr
        WHERE tr."productId" = p."id"
    ) AS names
FROM "Product" p
LEFT JOIN "ProductTag" pt ON pt."productId" = p."id"
LEFT JOIN "Tag" t ON t."id" = pt."tagId"
WHERE p."isPublished" = TRUE
  AND %(archetype)s = ANY(p."skinTypes"::text[])
  AND p."category"::text = ANY(%(categories)s)"""

_REQUIRED_ANY = """
  AND EXISTS (
    SELECT 1 FROM "ProductTag" rpt
    JOIN "Tag" rt ON rt."id" = rpt."tagId"
    WHERE rpt."productId" = p."id" AND rt."code"::text = ANY(%(required_tags)s)
  )"""

_EXCLUDED = """
  AND NOT EXISTS (
    SELECT 1 FROM "ProductTag" ept
    JOIN "Tag" et ON et."id" = ept."tagId"
    WHERE ept."productId" = p."id" AND et."code"::text = ANY(%(excluded_tags)s)
  )"""

_GROUP_ORDER = """
GROUP BY p."id"
ORDER BY p."id"
"""


def build_candidate_query(query: CatalogFilter) -> tuple[str, dict[str, object]]:
    """Render the candidate retrieval contract as SQL plus named parameters.

    Optional tag clauses are only emitted when their tag sets are non-empty.
    """
    statement = _SELECT
    params: dict[str, object] = {
        "archetype": query.archetype.value,
        "categories": sorted(category.value for category in query.categories),
    }
    if query.required_tags_any:
        statement += _REQUIRED_ANY
        params["required_tags"] = sorted(tag.value for tag in query.required_tags_any)
    if query.excluded_tags:
        statement += _EXCLUDED
        params["excluded_tags"] = sorted(tag.value for tag in query.excluded_tags)
    return statement + _GROUP_ORDER, params


CodeT = TypeVar("CodeT", Archetype, TagCode)


def _known_codes(
    enum_type: type[CodeT], values: Sequence[str] | None, *, product_id: str
) -> list[CodeT]:
    codes: list[CodeT] = []
    for value in values or ():
        try:
            codes.append(enum_type(value))
        except ValueError:
            _logger.warning(
                "Ignoring unknown %s %r on product %s", enum_type.__name__, value, product_id
            )
    return codes


def _names_from(value: object) -> LocalizedText | None:
    if not isinstance(value, Mapping) or not value:
        return None
    try:
        return to_localized_text(clean_localized_text(value))
    except ValueError:
        return None


def row_to_product(row: Sequence[Any]) -> Product | None:
    """Map one result row to a ``Product``; rows with an unknown category are skipped."""
    product_id, slug, brand, category, published, hs_score, skin_types, tag_codes, names = row
    try:
        product_category = ProductCategory(category)
    except ValueError:
        _logger.warning("Skipping product %s with unknown category %r", product_id, category)
        return None
    return Product(
        id=str(product_id),
        slug=str(slug),
        brand=brand,
        category=product_category,
        published=bool(published),
        archetypes=frozenset(_known_codes(Archetype, skin_types, product_id=str(product_id))),
        tags=tuple(_known_codes(TagCode, tag_codes, product_id=str(product_id))),
        safety_score=None if hs_score is None else int(hs_score),
        names=_names_from(names),
    )


class SqlCatalog(CatalogQuery):
    """Catalogue collaborator that queries a relational store through a pool."""

    def __init__(self, *, pool: ConnectionPool) -> None:
        self._pool = pool
        self._closed = False

    def __enter__(self) -> SqlCatalog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def find_candidates(self, query: CatalogFilter) -> Sequence[Product]:
        if self._closed:
            raise CatalogClosedError()
        statement, params = build_candidate_query(query)
        conn = self._pool.getconn()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(statement, params)
                rows = cursor.fetchall()
            finally:
                cursor.close()
        finally:
            self._pool.putconn(conn)

        products = [product for row in rows if (product := row_to_product(row)) is not None]
        _logger.info("Fetched %s candidates for %s", len(products), query.archetype)
        return products

    def close(self) -> None:
        """Close every pooled connection; later queries raise ``CatalogClosedError``."""
        if self._closed:
            return
        self._closed = True
        self._pool.closeall()
