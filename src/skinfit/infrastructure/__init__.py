"""Concrete infrastructure implementations."""

from .filesystem import LocalFileSystem
from .sql_catalog import SqlCatalog, build_candidate_query

__all__ = ["LocalFileSystem", "SqlCatalog", "build_candidate_query"]
