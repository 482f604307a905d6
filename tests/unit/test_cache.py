"""Unit tests for the TTL caches."""

import pytest

from tcbot.services.cache import StatsCaches, TtlCache

pytestmark = pytest.mark.anyio


class TestTtlCache:
    """Tests for TtlCache."""

    async def test_missing_key_returns_none(self) -> None:
        cache = TtlCache("test", ttl=60)

        assert await cache.get("missing") is None

    async def test_put_then_get(self) -> None:
        cache = TtlCache("test", ttl=60)
        value = object()

        await cache.put(1, value)

        assert await cache.get(1) is value

    async def test_expired_entry_returns_none(self) -> None:
        cache = TtlCache("test", ttl=0)

        await cache.put(1, "value")

        assert await cache.get(1) is None

    async def test_invalidate(self) -> None:
        cache = TtlCache("test", ttl=60)
        await cache.put(1, "one")
        await cache.put(2, "two")

        await cache.invalidate(1)

        assert await cache.get(1) is None
        assert await cache.get(2) == "two"

    async def test_size_bound_evicts_oldest(self) -> None:
        cache = TtlCache("test", ttl=60, max_size=2)

        for key in range(3):
            await cache.put(key, str(key))

        assert len(cache) == 2
        assert await cache.get(0) is None
        assert await cache.get(2) == "2"


class TestStatsCaches:
    """Tests for StatsCaches."""

    async def test_invalidate_user_clears_user_and_summary(self) -> None:
        caches = StatsCaches(ttl=60)
        await caches.tc_stats.put(1, "stats-1")
        await caches.tc_stats.put(2, "stats-2")
        await caches.competition_summary.put(StatsCaches.COMPETITION_SUMMARY_KEY, "summary")

        await caches.invalidate_user(1)

        assert await caches.tc_stats.get(1) is None
        assert await caches.tc_stats.get(2) == "stats-2"
        assert await caches.competition_summary.get(StatsCaches.COMPETITION_SUMMARY_KEY) is None

    async def test_invalidate_all(self) -> None:
        caches = StatsCaches(ttl=60)
        for region in caches.regions():
            await region.put(1, "value")

        await caches.invalidate_all()

        for region in caches.regions():
            assert await region.get(1) is None
