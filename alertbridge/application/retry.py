"""
Transient Failure Retry

Retries store operations that fail with TransientStoreError using a fixed
delay schedule. Only safe for idempotent operations: every store call made by
the use cases is either a read, a conditional update, or a get-or-create.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from alertbridge.domain.errors import TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_DELAYS = (0.1, 0.5, 1.0)


async def retry_transient(
    operation: Callable[[], Awaitable[T]],
    *,
    retry_delays: tuple[float, ...] = DEFAULT_RETRY_DELAYS,
    description: str = "store operation",
) -> T:
    """Run *operation*, retrying once per entry in *retry_delays*.

    The final attempt's TransientStoreError propagates to the caller.
    """
    for attempt, delay in enumerate(retry_delays, start=1):
        try:
            return await operation()
        except TransientStoreError as exc:
            logger.warning(
                "%s failed (%s), retrying in %.1fs (attempt %d/%d)",
                description, exc, delay, attempt, len(retry_delays),
            )
            await asyncio.sleep(delay)
    return await operation()
