"""
Integration Test Fixtures.

Fixtures for integration tests - a file-backed LocalStore in tmp_path and a
RemoteStore mounted on the FakeNotesApi. Each call to make_coordinator builds
fresh store objects over the same data directory, the way a new client
session would.
"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import httpx
import pytest

from webnotes.core.resilience import RetryPolicy
from webnotes.storage.backends import FileKeyValueBackend
from webnotes.storage.hybrid import HybridCoordinator
from webnotes.storage.local import LocalStore
from webnotes.storage.remote import RemoteStore


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
async def make_coordinator(
    data_dir: Path,
    notes_api,
    no_sleep,
) -> AsyncGenerator[Callable[..., HybridCoordinator], None]:
    """
    Build coordinators over the shared data directory.

    Usage:
        async def test_session(make_coordinator):
            coordinator = make_coordinator(online=False)
            ...
    """
    created: list[HybridCoordinator] = []

    def make(online: bool = True, authenticated: bool = False, max_attempts: int = 1) -> HybridCoordinator:
        coordinator = HybridCoordinator(
            local=LocalStore(FileKeyValueBackend(data_dir)),
            remote=RemoteStore(
                "http://notes.test/api",
                transport=httpx.MockTransport(notes_api.handle),
            ),
            retry_policy=RetryPolicy(max_attempts=max_attempts, sleep=no_sleep),
            online=online,
            authenticated=authenticated,
        )
        created.append(coordinator)
        return coordinator

    yield make

    for coordinator in created:
        await coordinator.close()
