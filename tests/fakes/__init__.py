"""Exports for test fakes."""

from .catalog import RecordingCatalog
from .database import FakeConnection, FakeConnectionPool, FakeCursor
from .filesystem import InMemoryFileSystem

__all__ = [
    "FakeConnection",
    "FakeConnectionPool",
    "FakeCursor",
    "InMemoryFileSystem",
    "RecordingCatalog",
]
