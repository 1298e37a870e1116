"""
Unit Test Fixtures.

Fixtures for unit tests - the remote service is always faked or mocked.
Unit tests should be fast and isolated, never touching the network.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from webnotes.storage.remote import RemoteStore


# =============================================================================
# Remote Store Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_remote() -> AsyncMock:
    """
    Mocked RemoteStore for routing tests.

    Every operation is an AsyncMock, so tests can assert it was never awaited.

    Usage:
        def test_routing(local_store, mock_remote):
            coordinator = HybridCoordinator(local_store, mock_remote)
            ...
            mock_remote.create_note.assert_not_awaited()
    """
    remote = AsyncMock(spec=RemoteStore)
    remote.is_authenticated.return_value = False
    return remote


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            store._logger = mock_logger
            # Test code that logs
            mock_logger.warning.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
