"""
Resilience Infrastructure.

Retry policy for remote calls and the structured retry callback.

The coordinator never retries on its own. Failure handling for remote calls
is an explicit RetryPolicy object injected at construction time, so tests can
drive it with a fake sleep instead of real network timing.

Usage:
    from webnotes.core.resilience import RetryPolicy

    policy = RetryPolicy(max_attempts=3, backoff_multiplier=0.5, backoff_max=4)
    note = await policy.call(remote.get_note, note_id)
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from webnotes.core.config_schema import RetrySchema
from webnotes.core.exceptions import RemoteFailure
from webnotes.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def log_retry(retry_state: Any) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Args:
        retry_state: tenacity.RetryCallState instance
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    fn_name = getattr(retry_state.fn, "__name__", "unknown")

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "dependency": fn_name,
            "attempt": retry_state.attempt_number,
            "duration_ms": duration_ms,
            "error": error,
        },
    )


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, RemoteFailure) and exc.retryable


class RetryPolicy:
    """
    Retry policy for remote store calls.

    Only retryable RemoteFailures (transport errors, 429, 5xx) are retried.
    Anything else, including NotFoundError, is raised on the first attempt.
    The final failure is re-raised unchanged so the caller can fall back.

    The default of a single attempt means "no retry".
    """

    def __init__(
        self,
        max_attempts: int = 1,
        backoff_multiplier: float = 0.5,
        backoff_min: float = 0.0,
        backoff_max: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier
        self.backoff_min = backoff_min
        self.backoff_max = backoff_max
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_schema(cls, schema: RetrySchema) -> "RetryPolicy":
        """Build a policy from the retry block of remote.yaml."""
        return cls(
            max_attempts=schema.max_attempts,
            backoff_multiplier=schema.backoff_multiplier,
            backoff_min=schema.backoff_min,
            backoff_max=schema.backoff_max,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.backoff_multiplier,
                min=self.backoff_min,
                max=self.backoff_max,
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=log_retry,
            sleep=self._sleep,
            reraise=True,
        )

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await fn(*args, **kwargs) under this policy."""
        return await self._retrying()(fn, *args, **kwargs)

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(max_attempts={self.max_attempts}, "
            f"backoff_multiplier={self.backoff_multiplier}, "
            f"backoff_min={self.backoff_min}, backoff_max={self.backoff_max})"
        )
