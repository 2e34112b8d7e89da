"""Catalogue fakes for tests."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing_extensions import override

from skinfit.domain.policies import CatalogFilter
from skinfit.domain.recommendation import Product
from skinfit.protocols import CatalogQuery


@dataclass
class RecordingCatalog(CatalogQuery):
    """Catalogue that returns fixed candidates and records every query."""

    candidates: Sequence[Product] = ()
    queries: list[CatalogFilter] = field(default_factory=list)

    @classmethod
    def returning(cls, products: Iterable[Product]) -> RecordingCatalog:
        return cls(candidates=tuple(products))

    @override
    def find_candidates(self, query: CatalogFilter) -> Sequence[Product]:
        self.queries.append(query)
        return list(self.candidates)
