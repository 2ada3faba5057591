"""
Tests for the TTL cache manager.
"""

import asyncio

import pytest

from modelgate.cache.cache_manager import CacheManager, PreloadTask
from modelgate.exceptions import PreloadError, ProviderError, ValidationError
from modelgate.utils.clock import ManualClock


class TestCacheBasics:
    """Test synchronous cache operations."""

    def test_set_then_get_within_ttl(self, cache: CacheManager, clock: ManualClock):
        """Test value readable until the TTL passes."""
        cache.set("k", "v", ttl_ms=1_000)

        clock.advance(1_000)
        assert cache.get("k") == "v"

        clock.advance(1)
        assert cache.get("k") is None
        assert cache.has("k") is False

    def test_get_default_for_missing(self, cache: CacheManager):
        """Test absent keys are not errors."""
        assert cache.get("missing", "fallback") == "fallback"
        assert cache.has("") is False

    def test_empty_key_rejected(self, cache: CacheManager):
        """Test empty key on write."""
        with pytest.raises(ValidationError):
            cache.set("", "v")

    def test_negative_ttl_rejected(self, cache: CacheManager):
        """Test TTL must not be negative."""
        with pytest.raises(ValidationError):
            cache.set("k", "v", ttl_ms=-1)

    def test_default_ttl(self, cache: CacheManager, clock: ManualClock):
        """Test default TTL used when none given."""
        cache.set("k", "v")

        clock.advance(60_000)
        assert cache.has("k")
        clock.advance(1)
        assert not cache.has("k")

    def test_fifo_eviction_capacity_two(self, clock: ManualClock):
        """Test third key evicts the first inserted."""
        cache = CacheManager(max_entries=2, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")

        cache.set("c", 3)

        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3
        assert cache.stats().evictions == 1

    def test_reset_key_is_fresh_insertion(self, clock: ManualClock):
        """Test rewriting a key renews its TTL and order."""
        cache = CacheManager(max_entries=2, default_ttl_ms=1_000, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        clock.advance(900)
        cache.set("a", 10)

        cache.set("c", 3)
        clock.advance(500)

        assert cache.get("a") == 10
        assert cache.get("b") is None

    def test_delete_and_clear(self, cache: CacheManager):
        """Test removal."""
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.delete("a") is True
        assert cache.delete("a") is False

        cache.clear()
        assert len(cache) == 0

    def test_stats(self, cache: CacheManager):
        """Test hit and miss counting."""
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")

        stats = cache.stats()
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.hit_rate == 0.5
        assert stats.keys == ["a"]


class TestExpiryTimers:
    """Test proactive expiry."""

    @pytest.mark.asyncio
    async def test_timer_removes_entry_without_reads(self):
        """Test expired entries leave memory without being read."""
        cache = CacheManager(max_entries=10)
        cache.set("k", "v", ttl_ms=20)

        await asyncio.sleep(0.1)

        assert len(cache) == 0
        assert cache.stats().expirations == 1

    @pytest.mark.asyncio
    async def test_overwrite_cancels_previous_timer(self):
        """Test old timer cannot remove the new value."""
        cache = CacheManager(max_entries=10)
        cache.set("k", "old", ttl_ms=30)
        cache.set("k", "new", ttl_ms=10_000)

        await asyncio.sleep(0.1)

        assert cache.get("k") == "new"

    @pytest.mark.asyncio
    async def test_read_revalidates_when_timer_is_late(self, clock: ManualClock):
        """Test freshness is checked on read even before the timer fires."""
        cache = CacheManager(max_entries=10, clock=clock)
        cache.set("k", "v", ttl_ms=10_000)

        clock.advance(10_001)

        assert cache.get("k") is None


class TestGetOrCompute:
    """Test memoized computation."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, cache: CacheManager):
        """Test loader runs once and the result is cached."""
        calls = 0

        async def loader():
            nonlocal calls
            calls += 1
            return "value"

        assert await cache.get_or_compute("k", loader) == "value"
        assert await cache.get_or_compute("k", loader) == "value"
        assert calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_load(self, cache: CacheManager):
        """Test stampede protection."""
        calls = 0
        release = asyncio.Event()

        async def loader():
            nonlocal calls
            calls += 1
            await release.wait()
            return "shared"

        first = asyncio.create_task(cache.get_or_compute("k", loader))
        second = asyncio.create_task(cache.get_or_compute("k", loader))
        await asyncio.sleep(0)
        assert cache.is_pending("k")

        release.set()
        results = await asyncio.gather(first, second)

        assert results == ["shared", "shared"]
        assert calls == 1
        assert cache.stats().coalesced == 1
        assert not cache.is_pending("k")

    @pytest.mark.asyncio
    async def test_errors_propagate_and_are_not_cached(self, cache: CacheManager):
        """Test failed loads leave nothing behind."""

        async def failing():
            raise ProviderError("boom")

        async def working():
            return "ok"

        with pytest.raises(ProviderError):
            await cache.get_or_compute("k", failing)

        assert cache.has("k") is False
        assert await cache.get_or_compute("k", working) == "ok"

    @pytest.mark.asyncio
    async def test_cancelling_one_waiter_keeps_shared_load(self, cache: CacheManager):
        """Test cancellation of a caller does not cancel the computation."""
        release = asyncio.Event()

        async def loader():
            await release.wait()
            return "done"

        first = asyncio.create_task(cache.get_or_compute("k", loader))
        second = asyncio.create_task(cache.get_or_compute("k", loader))
        await asyncio.sleep(0)

        first.cancel()
        release.set()

        assert await second == "done"
        assert cache.get("k") == "done"

    @pytest.mark.asyncio
    async def test_ttl_applies_to_computed_value(
        self, cache: CacheManager, clock: ManualClock
    ):
        """Test explicit TTL for computed values."""

        async def loader():
            return "v"

        await cache.get_or_compute("k", loader, ttl_ms=500)
        clock.advance(501)

        assert cache.has("k") is False


class TestPreload:
    """Test batch warm-up."""

    @pytest.mark.asyncio
    async def test_preload_all_success(self, cache: CacheManager):
        """Test values returned in order and cached."""

        def make(value):
            async def loader():
                return value

            return loader

        results = await cache.preload(
            [PreloadTask("a", make(1)), PreloadTask("b", make(2), ttl_ms=10)]
        )

        assert results == [1, 2]
        assert cache.get("a") == 1

    @pytest.mark.asyncio
    async def test_preload_aggregates_failures(self, cache: CacheManager):
        """Test every failure reported together after all tasks finish."""

        async def ok():
            return "fine"

        async def bad():
            raise ProviderError("nope")

        with pytest.raises(PreloadError) as exc_info:
            await cache.preload(
                [PreloadTask("x", bad), PreloadTask("y", ok), PreloadTask("z", bad)]
            )

        assert [key for key, _ in exc_info.value.failures] == ["x", "z"]
        assert all(isinstance(e, ProviderError) for e in exc_info.value.exceptions)
        assert cache.get("y") == "fine"
