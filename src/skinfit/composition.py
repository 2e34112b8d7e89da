"""Composition root for wiring CLI dependencies.

The shipped ``app`` reads the JSON catalogue. Deployments backed by a relational
store build their own app with ``create_app(sql_dependencies_builder(make_pool))``,
where ``make_pool`` returns a DB-API ``ConnectionPool`` for their driver.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

from .application import catalog_source
from .cli import CliDependencies, DependenciesBuilder, create_app
from .config import RecommenderConfig
from .infrastructure import LocalFileSystem, SqlCatalog
from .protocols import ConnectionPool

PoolFactory: TypeAlias = Callable[[], ConnectionPool]


def build_cli_dependencies(
    *,
    config: RecommenderConfig,
    load_catalog: bool,
    pool_factory: PoolFactory | None = None,
) -> CliDependencies:
    """Build concrete dependencies for CLI commands.

    Args:
        config: Recommender configuration (used for catalogue wiring).
        load_catalog: Whether to load the product catalogue for this command.
        pool_factory: Opens a connection pool for a SQL-backed catalogue. The
            pool is closed when the command finishes. When None, the JSON
            catalogue at ``config.catalog_path`` is used.
    """
    fs = LocalFileSystem()
    if not load_catalog:
        return CliDependencies(fs=fs, catalog=None)
    if pool_factory is not None:
        sql_catalog = SqlCatalog(pool=pool_factory())
        return CliDependencies(fs=fs, catalog=sql_catalog, on_close=sql_catalog.close)
    products = catalog_source.load_catalog(path=Path(config.catalog_path), fs=fs)
    return CliDependencies(fs=fs, catalog=catalog_source.InMemoryCatalog(products))


def sql_dependencies_builder(pool_factory: PoolFactory) -> DependenciesBuilder:
    """Return a dependencies builder that queries a SQL catalogue through ``pool_factory``."""

    def build(*, config: RecommenderConfig, load_catalog: bool) -> CliDependencies:
        return build_cli_dependencies(
            config=config,
            load_catalog=load_catalog,
            pool_factory=pool_factory,
        )

    return build


app = create_app(build_cli_dependencies)
