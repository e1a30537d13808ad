"""
Request throttling for adapter HTTP clients.

Two limits apply to every outbound call:
  - concurrency caps, one shared ``total`` cap plus one per bucket
    (``get`` for reads, ``deploy`` for writes);
  - a sliding one-minute window bounding requests per minute.
A limit of -1 disables it.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
import time
from collections import deque
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

from config_bridge.core.config import ClientRateLimitConfig

logger = logging.getLogger("config_bridge.rate_limit")

BUCKETS = ("get", "deploy")
WINDOW_SECONDS = 60.0

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def _semaphore(limit: int) -> asyncio.Semaphore | None:
    return asyncio.Semaphore(limit) if limit > 0 else None


class RateLimiter:
    def __init__(
        self,
        config: ClientRateLimitConfig,
        max_requests_per_minute: int = -1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._total = _semaphore(config.total)
        self._buckets = {
            "get": _semaphore(config.get),
            "deploy": _semaphore(config.deploy),
        }
        self._max_per_minute = max_requests_per_minute
        self._clock = clock
        self._sent: deque[float] = deque()
        self._window_lock = asyncio.Lock()

    async def _wait_for_window(self) -> None:
        if self._max_per_minute <= 0:
            return
        async with self._window_lock:
            while True:
                now = self._clock()
                while self._sent and now - self._sent[0] >= WINDOW_SECONDS:
                    self._sent.popleft()
                if len(self._sent) < self._max_per_minute:
                    self._sent.append(now)
                    return
                wait = WINDOW_SECONDS - (now - self._sent[0])
                logger.debug("Requests per minute limit reached, waiting %.2fs", wait)
                await asyncio.sleep(wait)

    @contextlib.asynccontextmanager
    async def acquire(self, bucket: str) -> AsyncIterator[None]:
        if bucket not in self._buckets:
            raise ValueError(f"Unknown rate limit bucket: {bucket!r}")
        await self._wait_for_window()
        async with contextlib.AsyncExitStack() as stack:
            # a request waiting on its bucket holds no total slot
            for sem in (self._buckets[bucket], self._total):
                if sem is not None:
                    await stack.enter_async_context(sem)
            yield


def throttle(bucket: str) -> Callable[[F], F]:
    """Run the decorated client method inside the client's rate limiter."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            async with self.rate_limiter.acquire(bucket):
                return await func(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
