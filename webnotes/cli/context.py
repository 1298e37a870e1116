"""
CLI Runtime Context.

Holds the per-invocation options and runs async command bodies against a
freshly built coordinator.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import click
from rich.console import Console

from webnotes.core.exceptions import ApplicationError, ValidationError
from webnotes.core.logging import get_logger
from webnotes.storage.hybrid import HybridCoordinator

logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)

T = TypeVar("T")


def _default_factory(online: bool) -> HybridCoordinator:
    from webnotes.storage.factory import create_coordinator

    return create_coordinator(online=online)


@dataclass
class CliContext:
    """Options shared by every command of one invocation."""

    offline: bool = False
    coordinator_factory: Callable[[bool], HybridCoordinator] = field(default=_default_factory)


async def _run(obj: CliContext, body: Callable[[HybridCoordinator], Awaitable[T]]) -> T:
    coordinator = obj.coordinator_factory(not obj.offline)
    try:
        if not obj.offline:
            await coordinator.refresh_auth()
        return await body(coordinator)
    finally:
        await coordinator.close()


def run_with_coordinator(ctx: click.Context, body: Callable[[HybridCoordinator], Awaitable[T]]) -> T:
    """
    Run an async command body and translate application errors into exit 1.

    Args:
        ctx: Click context carrying a CliContext
        body: Coroutine function receiving the coordinator
    """
    obj = ctx.ensure_object(CliContext)
    try:
        return asyncio.run(_run(obj, body))
    except ApplicationError as e:
        logger.debug("Command failed", extra={"code": e.code, "error": e.message})
        err_console.print(f"[red]Error: {_describe(e)}[/red]", highlight=False)
        ctx.exit(1)


def _describe(error: ApplicationError) -> str:
    if isinstance(error, ValidationError) and error.details.get("missing_fields"):
        return f"{error.message}: {', '.join(error.details['missing_fields'])}"
    return error.message


def short_time(value: Any) -> str:
    """Format a datetime for table output."""
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"
