"""Protocol definitions for dependency injection.

These protocols define the collaborators the classifier and recommender depend on,
enabling isolated unit testing with fake implementations.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import pandas as pd

    from .domain.policies import CatalogFilter
    from .domain.recommendation import Product


@runtime_checkable
class CatalogQuery(Protocol):
    """Catalogue collaborator that answers the candidate retrieval contract."""

    def find_candidates(self, query: CatalogFilter) -> Sequence[Product]:
        """Return every product matching ``query``, each with its full tag set.

        Args:
            query: Archetype, preferred categories, required-any and excluded tags.

        Returns:
            Matching products; an empty sequence when nothing qualifies.
        """
        ...


@runtime_checkable
class Cursor(Protocol):
    """Minimal DB-API cursor."""

    def execute(self, operation: str, parameters: Mapping[str, object] | None = None) -> Any:
        """Execute a parameterised statement."""
        ...

    def fetchall(self) -> list[tuple[Any, ...]]:
        """Fetch all remaining rows."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Minimal DB-API connection."""

    def cursor(self) -> Cursor:
        """Open a cursor."""
        ...


@runtime_checkable
class ConnectionPool(Protocol):
    """Process-wide connection pool owned by the composition root.

    Initialised once at process start, borrowed per query, closed on shutdown.
    """

    def getconn(self) -> Connection:
        """Borrow a connection."""
        ...

    def putconn(self, conn: Connection) -> None:
        """Return a borrowed connection."""
        ...

    def closeall(self) -> None:
        """Close every pooled connection."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Abstract filesystem for reading input documents and writing results."""

    def read_text(self, path: Path) -> str:
        """Read text file."""
        ...

    def write_text(self, content: str, path: Path) -> None:
        """Write text file."""
        ...

    def read_json(self, path: Path) -> object:
        """Read JSON file."""
        ...

    def write_json(self, data: Mapping[str, object], path: Path) -> None:
        """Write JSON file."""
        ...

    def write_csv(self, df: pd.DataFrame, path: Path) -> None:
        """Write DataFrame to CSV file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if path exists."""
        ...

    def mkdir(self, path: Path, parents: bool = True) -> None:
        """Create directory."""
        ...
