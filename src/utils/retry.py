"""Exponential backoff for rate-limited upstream calls.

Only rate-limit failures are retried. Everything else propagates on the
first failure so a broken request never burns the retry budget.

Delays follow ``base_delay * 2**attempt`` with no jitter and no cap:
with the defaults (5 attempts, 1s) a call waits at most 1+2+4+8 = 15s.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import httpx
from loguru import logger

from src.sweeper.exceptions import UpstreamRateLimited

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 1.0  # seconds


def backoff_delay(attempt: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Delay before retrying after the failed attempt ``attempt`` (0-based)."""
    return base_delay * (2 ** attempt)


def backoff_schedule(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS, base_delay: float = DEFAULT_BASE_DELAY
) -> list[float]:
    """All sleeps a call can incur — one fewer than the attempt budget."""
    return [backoff_delay(i, base_delay) for i in range(max(max_attempts - 1, 0))]


def is_rate_limited(exc: BaseException) -> bool:
    if isinstance(exc, UpstreamRateLimited):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429
    return False


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    sleep: SleepFn = asyncio.sleep,
    label: str = "call",
) -> T:
    """Await ``operation()``, retrying rate-limit failures with backoff.

    The operation's own exception is re-raised unchanged when it is not a
    rate-limit signal or when ``max_attempts`` calls have been made.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as e:
            if not is_rate_limited(e) or attempt == max_attempts - 1:
                raise
            delay = backoff_delay(attempt, base_delay)
            logger.debug(
                f"[RETRY] {label} rate limited (attempt {attempt + 1}/{max_attempts}), "
                f"waiting {delay:.1f}s"
            )
            await sleep(delay)

    # unreachable: the last attempt either returns or raises
    raise RuntimeError(f"{label}: retry loop exited without result")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry parameters shared by every call site of one pipeline."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY
    sleep: SleepFn = field(default=asyncio.sleep, compare=False)

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "call") -> T:
        return await with_retry(
            operation,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            sleep=self.sleep,
            label=label,
        )
