"""
Storage Composition Root.

Builds the local store, the remote store and the coordinator from
configuration. Nothing here runs at import time, so a missing config/.env
only fails when a store is actually requested.
"""

from webnotes.core.config import (
    AppConfig,
    Settings,
    get_app_config,
    get_remote_base_url,
    get_settings,
    resolve_project_path,
)
from webnotes.core.logging import get_logger
from webnotes.core.resilience import RetryPolicy
from webnotes.storage.backends import FileKeyValueBackend
from webnotes.storage.hybrid import HybridCoordinator
from webnotes.storage.local import LocalStore
from webnotes.storage.remote import RemoteStore

logger = get_logger(__name__)


def create_local_store(config: AppConfig | None = None) -> LocalStore:
    """Create a LocalStore over the configured data directory."""
    storage = (config or get_app_config()).storage
    data_dir = resolve_project_path(storage.data_dir)
    logger.debug("Local store created", extra={"data_dir": str(data_dir)})
    return LocalStore(FileKeyValueBackend(data_dir), keys=storage.keys)


def create_remote_store(
    config: AppConfig | None = None,
    settings: Settings | None = None,
) -> RemoteStore:
    """Create a RemoteStore carrying the configured session cookie, if any."""
    remote = (config or get_app_config()).remote
    settings = settings or get_settings()
    base_url, timeout = get_remote_base_url(remote)

    cookies = {}
    if settings.remote_session_token:
        cookies[settings.remote_session_cookie] = settings.remote_session_token

    logger.debug(
        "Remote store created",
        extra={"base_url": base_url, "has_session": bool(cookies)},
    )
    return RemoteStore(
        base_url=base_url,
        timeout=timeout,
        session_path=remote.session_path,
        cookies=cookies,
    )


async def _signed_out() -> bool:
    return False


def create_coordinator(
    config: AppConfig | None = None,
    settings: Settings | None = None,
    online: bool = True,
) -> HybridCoordinator:
    """
    Create the coordinator used by every consumer.

    The coordinator starts signed out. Call refresh_auth() to pick up the
    session. With remote.enabled false the session provider always reports
    signed out, so everything stays local.
    """
    config = config or get_app_config()
    remote_config = config.remote
    remote = create_remote_store(config, settings)

    return HybridCoordinator(
        local=create_local_store(config),
        remote=remote,
        retry_policy=RetryPolicy.from_schema(remote_config.retry),
        session_provider=None if remote_config.enabled else _signed_out,
        online=online,
        match_existing=config.storage.migration.match_existing,
    )
