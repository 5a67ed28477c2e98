"""
Single-flight TTL cache for the admin insight bundle.

The overview page is polled by every open dashboard, while computing the
insight bundle scans the whole platform. InsightCache keeps the last bundle
per key for a bounded time and makes sure that at most one computation per
key is running at any moment:

- a fresh entry is returned immediately
- a missing or expired entry starts exactly one compute task; concurrent
  callers either await that same task or, when a stale value exists, are
  served the stale value while the refresh runs
- a failed or timed-out computation never propagates: callers get the
  previous value when there is one, otherwise an empty bundle (which is not
  stored, so the next request retries)

Concurrency model:
    All bookkeeping runs on the event loop thread. The sequence "check
    expiry, look up in-flight task, start and register a task" contains no
    await, so it is atomic per key. Callers await the task through
    asyncio.shield(), so a cancelled request never cancels the shared
    computation.

Usage:
    cache = InsightCache(compute_timeout=20.0)

    bundle = await cache.get_or_compute(
        "admin:overview:insights", 300.0, compute_fn
    )
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from coachfit.core.exceptions import ComputeTimeout
from coachfit.models.schemas import InsightBundle

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    computed_at: float
    ttl_seconds: float


class InsightCache:
    """
    In-memory, per-process cache with single-flight recomputation.

    Args:
        compute_timeout: Upper bound in seconds for one computation; None
            disables the bound.
        clock: Monotonic time source, injectable for tests.
        empty_factory: Builds the value served when no computation has ever
            succeeded for a key.
    """

    def __init__(
        self,
        compute_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        empty_factory: Callable[[], Any] = InsightBundle.empty,
    ):
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, "asyncio.Task[Any]"] = {}
        self._compute_timeout = compute_timeout
        self._clock = clock
        self._empty_factory = empty_factory

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.computed_at > entry.ttl_seconds

    async def get_or_compute(
        self,
        key: str,
        ttl_seconds: float,
        compute_fn: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached value for key, computing it at most once at a time.

        Args:
            key: Cache key.
            ttl_seconds: Lifetime of a freshly computed value.
            compute_fn: Zero-argument coroutine function producing the value.

        Returns:
            The fresh value, a stale value while a refresh is running, or the
            fallback after a failed computation. Never raises for compute
            failures.
        """
        entry = self._entries.get(key)
        if entry is not None and not self._is_expired(entry):
            return entry.value

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(key, ttl_seconds, compute_fn, entry))
            self._inflight[key] = task
            logger.info(f"Cache miss for '{key}', computing")
            return await asyncio.shield(task)

        if entry is not None:
            logger.debug(f"Serving stale value for '{key}' while refresh runs")
            return entry.value

        return await asyncio.shield(task)

    async def _refresh(
        self,
        key: str,
        ttl_seconds: float,
        compute_fn: Callable[[], Awaitable[Any]],
        previous: Optional[CacheEntry],
    ) -> Any:
        started = self._clock()
        try:
            if self._compute_timeout is None:
                value = await compute_fn()
            else:
                value = await asyncio.wait_for(compute_fn(), timeout=self._compute_timeout)
        except asyncio.TimeoutError:
            logger.error(str(ComputeTimeout(key, self._compute_timeout)))
            return self._fallback(key, previous)
        except Exception as e:
            logger.error(f"Computation for '{key}' failed: {e}", exc_info=True)
            return self._fallback(key, previous)
        finally:
            self._inflight.pop(key, None)

        now = self._clock()
        self._entries[key] = CacheEntry(value=value, computed_at=now, ttl_seconds=ttl_seconds)
        logger.info(f"Computed '{key}' in {now - started:.2f}s")
        return value

    def _fallback(self, key: str, previous: Optional[CacheEntry]) -> Any:
        entry = self._entries.get(key) or previous
        if entry is not None:
            logger.warning(f"Serving previous value for '{key}' after failed refresh")
            return entry.value
        logger.warning(f"No previous value for '{key}', serving empty result")
        return self._empty_factory()

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def invalidate(self, key: str) -> None:
        """Drop the entry for key; the next read recomputes it."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def cleanup(self) -> int:
        """
        Drop every expired entry.

        Returns:
            Number of entries removed.
        """
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry)]
        for key in expired:
            del self._entries[key]
        return len(expired)


__all__ = ["CacheEntry", "InsightCache"]
