"""
In-memory TTL cache with stampede protection.

Sandi Metz Principles:
- Single Responsibility: Memoize values for a bounded time
- Memory-bounded: FIFO capacity plus proactive expiry timers
- Dependency Injection: Clock injected
"""

import asyncio
import functools
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from modelgate.cache.bounded_map import BoundedOrderedMap, EvictionPolicy
from modelgate.exceptions import PreloadError, ValidationError
from modelgate.utils.clock import Clock, system_clock
from modelgate.utils.logger import get_logger, log_cache_hit, log_cache_miss

logger = get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    """A cached value and its expiry bookkeeping."""

    key: str
    value: Any
    inserted_at: float
    ttl_ms: float
    timer: Optional[asyncio.TimerHandle] = None

    def is_expired(self, now: float) -> bool:
        return now - self.inserted_at > self.ttl_ms

    def remaining_ms(self, now: float) -> float:
        return self.ttl_ms - (now - self.inserted_at)

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


@dataclass
class PreloadTask:
    """One preload job."""

    key: str
    loader: Loader
    ttl_ms: Optional[float] = None


@dataclass
class CacheStats:
    """Statistics for the cache."""

    size: int = 0
    max_entries: int = 0
    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    evictions: int = 0
    expirations: int = 0
    in_flight: int = 0
    keys: List[str] = field(default_factory=list)

    @property
    def hit_rate(self) -> float:
        """Get hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class CacheManager:
    """
    Capacity-bounded TTL cache.

    Entries are evicted oldest-inserted first when full. Every entry has a
    proactive expiry timer, and every read re-checks freshness, so a late or
    cancelled timer can never produce a stale read.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        default_ttl_ms: float = 300_000,
        clock: Clock = system_clock,
        policy: EvictionPolicy = EvictionPolicy.FIFO,
    ):
        """
        Initialize cache.

        Args:
            max_entries: Maximum number of entries
            default_ttl_ms: TTL used when set() gets none
            clock: Epoch-millisecond clock
            policy: Eviction policy (FIFO unless LRU is asked for)
        """
        self._default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._entries: BoundedOrderedMap[str, CacheEntry] = BoundedOrderedMap(
            max_entries, policy=policy, on_evict=self._on_evict
        )
        self._inflight: Dict[str, "asyncio.Future[Any]"] = {}
        self._stats = CacheStats(max_entries=max_entries)

    def set(self, key: str, value: Any, ttl_ms: Optional[float] = None) -> None:
        """
        Store a value.

        Re-setting a key counts as a fresh insertion: its timer is cancelled
        and rescheduled and it moves to the back of the eviction order.

        Args:
            key: Non-empty cache key
            value: Value to cache
            ttl_ms: Time-to-live in ms (default TTL if None)

        Raises:
            ValidationError: If key is empty or ttl negative
        """
        self.validate_key(key)
        ttl = self._default_ttl_ms if ttl_ms is None else ttl_ms
        if ttl < 0:
            raise ValidationError("Cache TTL cannot be negative")

        previous = self._entries.pop(key)
        if previous is not None:
            previous.cancel_timer()

        entry = CacheEntry(key=key, value=value, inserted_at=self._clock(), ttl_ms=ttl)
        entry.timer = self._schedule_expiry(entry, ttl)
        self._entries.put(key, entry)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a fresh value.

        Args:
            key: Cache key
            default: Returned when absent or expired

        Returns:
            Cached value or default
        """
        entry = self._fresh_entry(key)
        if entry is None:
            self._stats.misses += 1
            return default
        self._stats.hits += 1
        return entry.value

    def has(self, key: str) -> bool:
        """Check if a fresh entry exists."""
        return self._fresh_entry(key) is not None

    def delete(self, key: str) -> bool:
        """
        Remove an entry.

        Args:
            key: Cache key

        Returns:
            True if an entry was removed
        """
        entry = self._entries.pop(key)
        if entry is None:
            return False
        entry.cancel_timer()
        return True

    def clear(self) -> None:
        """Remove every entry and cancel their timers."""
        for entry in self._entries.values():
            entry.cancel_timer()
        self._entries.clear()

    def is_pending(self, key: str) -> bool:
        """Check if a loader for key is running."""
        return key in self._inflight

    async def get_or_compute(
        self, key: str, loader: Loader, ttl_ms: Optional[float] = None
    ) -> Any:
        """
        Return cached value or compute it once.

        Concurrent callers for the same missing key share one loader run.
        Loader errors propagate to every waiting caller and nothing is cached.

        Args:
            key: Cache key
            loader: Async callable producing the value
            ttl_ms: TTL for the computed value

        Returns:
            Cached or freshly computed value
        """
        self.validate_key(key)

        entry = self._fresh_entry(key)
        if entry is not None:
            self._stats.hits += 1
            log_cache_hit(key)
            return entry.value

        task = self._inflight.get(key)
        if task is None:
            self._stats.misses += 1
            log_cache_miss(key)
            task = asyncio.ensure_future(loader())
            self._inflight[key] = task
            task.add_done_callback(functools.partial(self._on_load_done, key, ttl_ms))
        else:
            self._stats.coalesced += 1
            logger.debug("Joined in-flight load", key=key[:16])

        return await asyncio.shield(task)

    async def preload(self, tasks: Iterable[PreloadTask]) -> List[Any]:
        """
        Warm the cache with a batch of loads.

        Args:
            tasks: Preload jobs

        Returns:
            Values in task order

        Raises:
            PreloadError: If any task failed (after all have finished)
        """
        jobs = list(tasks)
        results = await asyncio.gather(
            *(self.get_or_compute(job.key, job.loader, job.ttl_ms) for job in jobs),
            return_exceptions=True,
        )

        failures = [
            (job.key, result)
            for job, result in zip(jobs, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            logger.warning("Preload failed", failed=len(failures), total=len(jobs))
            raise PreloadError(failures)
        return list(results)

    def stats(self) -> CacheStats:
        """Get cache statistics snapshot."""
        self._stats.size = len(self._entries)
        self._stats.in_flight = len(self._inflight)
        self._stats.keys = self._entries.keys()
        return CacheStats(**vars(self._stats))

    def __len__(self) -> int:
        return len(self._entries)

    def _fresh_entry(self, key: str) -> Optional[CacheEntry]:
        """Get entry if present and unexpired, dropping it if stale."""
        if not key:
            return None
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._drop_expired(entry)
            return None
        return entry

    def _schedule_expiry(
        self, entry: CacheEntry, delay_ms: float
    ) -> Optional[asyncio.TimerHandle]:
        """Schedule proactive removal; without a running loop reads do it lazily."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        return loop.call_later(max(delay_ms, 0) / 1000.0, self._on_timer, entry)

    def _on_timer(self, entry: CacheEntry) -> None:
        entry.timer = None
        if self._entries.peek(entry.key) is not entry:
            return
        remaining = entry.remaining_ms(self._clock())
        if remaining >= 0:
            entry.timer = self._schedule_expiry(entry, remaining + 1)
            return
        self._drop_expired(entry)

    def _drop_expired(self, entry: CacheEntry) -> None:
        if self._entries.peek(entry.key) is entry:
            self._entries.pop(entry.key)
            entry.cancel_timer()
            self._stats.expirations += 1

    def _on_evict(self, key: str, entry: CacheEntry) -> None:
        entry.cancel_timer()
        self._stats.evictions += 1
        logger.debug("Cache entry evicted", key=key[:16])

    def _on_load_done(
        self, key: str, ttl_ms: Optional[float], task: "asyncio.Future[Any]"
    ) -> None:
        """Cache a finished load; runs before waiting callers resume."""
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Cache loader failed", key=key[:16], error=str(error))
            return
        self.set(key, task.result(), ttl_ms)

    @staticmethod
    def validate_key(key: str) -> None:
        """
        Check a key is usable.

        Raises:
            ValidationError: If key is empty or not a string
        """
        if not isinstance(key, str) or not key:
            raise ValidationError("Cache key is required")
