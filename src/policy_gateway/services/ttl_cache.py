"""TTL cache with single-flight de-duplication.

The cache keeps two pieces of shared state:

- settled entries, held by an EntryStore (in-memory or Redis)
- in-flight computations, one shared asyncio task per key

Both are owned by one event loop. Every check-then-register sequence
runs without an intervening ``await``, which is what makes "at most one
computation per key" hold under any number of concurrent callers.
"""

import asyncio
import logging
import time
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from policy_gateway.config import get_settings
from policy_gateway.entities import CacheEntryEntity
from policy_gateway.protocols import EntryStore
from policy_gateway.repositories import InMemoryEntryStore

logger = logging.getLogger(__name__)

Compute = Callable[[], Awaitable[Any]]


@dataclass
class _Flight:
    """A shared computation and the number of callers awaiting it."""

    task: "asyncio.Future[Any] | None" = None
    waiters: int = 0


class TTLCache:
    """Key -> JSON cache with expiry and single-flight computation.

    Example:
        ```python
        cache = TTLCache(ttl=1800)

        async def compute():
            return await expensive_call()

        value = await cache.get_or_compute("ibm:INS-2024-001", compute)
        ```
    """

    def __init__(
        self,
        ttl: float | None = None,
        store: EntryStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl: Default time-to-live in seconds. Defaults to settings.
            store: Where settled entries live. Defaults to an in-memory store.
            clock: Time source returning Unix seconds (injectable for tests).
        """
        self._ttl = float(ttl if ttl is not None else get_settings().cache_ttl)
        if self._ttl <= 0:
            raise ValueError("ttl must be positive")
        self._store: EntryStore = store if store is not None else InMemoryEntryStore()
        self._clock = clock
        self._in_flight: dict[str, _Flight] = {}
        self._sweeper: asyncio.Task | None = None

        self._hits = 0
        self._misses = 0
        self._coalesced = 0
        self._computations = 0
        self._failures = 0

    def get(self, key: str) -> CacheEntryEntity | None:
        """Return a fresh entry, or None.

        An expired entry is treated as absent and evicted.
        """
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._evict(key, entry)
            return None
        return entry

    def lookup(self, key: str) -> CacheEntryEntity | None:
        """Like get, but counts a hit in the statistics."""
        entry = self.get(key)
        if entry is not None:
            self._hits += 1
            logger.debug("Cache hit for %s", key)
        return entry

    def put(self, key: str, value: Any, ttl: float | None = None) -> CacheEntryEntity:
        """Store a value, replacing any previous entry wholesale."""
        entry = CacheEntryEntity(
            value=value,
            stored_at=self._clock(),
            ttl=float(ttl if ttl is not None else self._ttl),
        )
        self._store.put(key, entry)
        return entry

    async def get_or_compute(self, key: str, compute: Compute, ttl: float | None = None) -> Any:
        """Return the cached value or compute it once for all concurrent callers.

        Args:
            key: Cache key
            compute: Coroutine function producing the value; raises on failure
            ttl: Time-to-live for the stored value. Defaults to the cache TTL.

        Returns:
            The cached or freshly computed value

        Raises:
            Exception: Whatever compute raised. Failures are never cached;
                every caller waiting on the failed computation gets the error.
        """
        entry = self.lookup(key)
        if entry is not None:
            return entry.value

        flight = self._in_flight.get(key)
        if flight is None:
            self._misses += 1
            logger.debug("Cache miss for %s", key)
            flight = _Flight()
            flight.task = asyncio.ensure_future(self._run(key, flight, compute, ttl))
            self._in_flight[key] = flight
        else:
            self._coalesced += 1
            logger.debug("Joining in-flight computation for %s", key)

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                logger.info("Cancelling computation for %s: no callers left", key)
                self._release(key, flight)
                flight.task.cancel()

    async def _run(self, key: str, flight: _Flight, compute: Compute, ttl: float | None) -> Any:
        self._computations += 1
        try:
            value = await compute()
        except Exception:
            self._failures += 1
            raise
        else:
            self.put(key, value, ttl)
            return value
        finally:
            self._release(key, flight)

    def _release(self, key: str, flight: _Flight) -> None:
        if self._in_flight.get(key) is flight:
            del self._in_flight[key]

    def _evict(self, key: str, entry: CacheEntryEntity) -> bool:
        # Only remove the entry we judged expired, not a newer replacement
        current = self._store.get(key)
        if current is None or current.stored_at != entry.stored_at:
            return False
        return self._store.delete(key)

    def invalidate(self, key: str) -> bool:
        """Drop a settled entry. In-flight computations are unaffected."""
        return self._store.delete(key)

    def clear(self) -> int:
        """Drop every settled entry.

        Returns:
            Number of entries deleted
        """
        return self._store.clear()

    def sweep(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        removed = 0
        for key, entry in self._store.items():
            if entry.is_expired(now) and self._evict(key, entry):
                removed += 1
        if removed:
            logger.info("Swept %d expired cache entries", removed)
        return removed

    async def _sweep_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.sweep()
            except Exception:
                # Best effort; the next lookup still evicts lazily
                logger.exception("Cache sweep failed")

    def start_sweeper(self, interval: float | None = None) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        interval = interval if interval is not None else get_settings().cache_sweep_interval
        self._sweeper = asyncio.create_task(self._sweep_loop(interval))

    async def stop_sweeper(self) -> None:
        """Stop the periodic sweep if it is running."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        now = self._clock()
        entries = list(self._store.items())
        return {
            "entries": len(entries),
            "expired_entries": sum(1 for _, entry in entries if entry.is_expired(now)),
            "in_flight": len(self._in_flight),
            "ttl_seconds": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
            "coalesced": self._coalesced,
            "computations": self._computations,
            "failures": self._failures,
        }

    def is_healthy(self) -> bool:
        return self._store.health_check()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def store(self) -> EntryStore:
        """Get the underlying entry store (for testing)."""
        return self._store
