"""Pytest fixtures shared across the suite.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket
from collections.abc import Iterator

import pytest

from tests.fakes import InMemoryFileSystem
from tests.support.errors import NetworkIsolationError

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    _ = (self, kwargs)
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Block all network access in tests.

    The recommender never needs the network: catalogue queries go through
    InMemoryCatalog or a FakeConnectionPool.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture
def in_memory_fs() -> InMemoryFileSystem:
    """Provide an in-memory filesystem for tests."""
    return InMemoryFileSystem()
