from __future__ import annotations

import asyncio

import pytest

from stylecore.cache import (
    InMemoryResponseCache,
    TTLClass,
    TypedResponseCache,
    build_cache_key,
    content_hash,
    write_then_invalidate,
)
from stylecore.colors import PaletteColor


def run_async(coro):
    return asyncio.run(coro)


class _Clock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_get_returns_value_until_ttl_boundary():
    async def scenario() -> None:
        clock = _Clock()
        cache = InMemoryResponseCache(clock=clock)
        await cache.set("analysis:abc", {"looks": 3}, ttl_s=10)

        clock.now += 9.999
        assert await cache.get("analysis:abc") == {"looks": 3}

        clock.now = 1_010.0
        assert await cache.get("analysis:abc") is None
        assert cache.size() == 0

    run_async(scenario())


def test_default_ttl_applies_when_none_given():
    async def scenario() -> None:
        clock = _Clock()
        cache = InMemoryResponseCache(default_ttl_s=1800, clock=clock)
        await cache.set("k", "v")
        clock.now += 1799
        assert await cache.get("k") == "v"
        clock.now += 1
        assert await cache.get("k") is None

    run_async(scenario())


def test_lru_eviction_keeps_recently_read_keys():
    async def scenario() -> None:
        cache = InMemoryResponseCache(capacity=3, clock=_Clock())
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.set("c", 3)
        assert await cache.get("a") == 1

        await cache.set("d", 4)

        assert await cache.get("b") is None
        assert await cache.get("a") == 1
        assert await cache.get("c") == 3
        assert await cache.get("d") == 4
        assert cache.size() == 3

    run_async(scenario())


def test_default_capacity_evicts_exactly_the_least_recently_used_entry():
    async def scenario() -> None:
        clock = _Clock()
        cache = InMemoryResponseCache(clock=clock)
        assert cache.capacity == 1000
        for index in range(1000):
            clock.now += 0.001
            await cache.set(f"key-{index}", index)
        assert await cache.get("key-0") == 0

        await cache.set("key-1000", 1000)

        assert cache.size() == 1000
        assert await cache.get("key-1") is None
        assert await cache.get("key-0") == 0
        assert await cache.get("key-1000") == 1000

    run_async(scenario())


def test_overwrite_refreshes_ttl_and_recency():
    async def scenario() -> None:
        clock = _Clock()
        cache = InMemoryResponseCache(capacity=2, clock=clock)
        await cache.set("a", 1, ttl_s=5)
        await cache.set("b", 2, ttl_s=5)
        clock.now += 4
        await cache.set("a", 10, ttl_s=5)
        await cache.set("c", 3, ttl_s=5)

        assert await cache.get("b") is None
        clock.now += 4
        assert await cache.get("a") == 10

    run_async(scenario())


def test_invalidate_removes_exact_key_and_prefix_matches():
    async def scenario() -> None:
        cache = InMemoryResponseCache(clock=_Clock())
        await cache.set("analysis:abc123:casual:male", 1)
        await cache.set("analysis:abc123:formal:male", 2)
        await cache.set("analysis:zzz999:casual:male", 3)

        removed = await cache.invalidate("analysis:abc123")

        assert removed == 2
        assert await cache.get("analysis:abc123:casual:male") is None
        assert await cache.get("analysis:zzz999:casual:male") == 3
        assert await cache.invalidate("analysis:missing") == 0

    run_async(scenario())


def test_sweep_and_clear():
    async def scenario() -> None:
        clock = _Clock()
        cache = InMemoryResponseCache(clock=clock)
        await cache.set("short", 1, ttl_s=TTLClass.SHORT)
        await cache.set("long", 2, ttl_s=TTLClass.LONG)
        clock.now += TTLClass.SHORT

        assert await cache.sweep() == 1
        assert cache.size() == 1

        await cache.clear()
        assert cache.size() == 0

    run_async(scenario())


def test_rejects_invalid_configuration_and_ttl():
    with pytest.raises(ValueError):
        InMemoryResponseCache(capacity=0)
    with pytest.raises(ValueError):
        InMemoryResponseCache(default_ttl_s=0)

    async def scenario() -> None:
        cache = InMemoryResponseCache()
        with pytest.raises(ValueError):
            await cache.set("k", 1, ttl_s=0)

    run_async(scenario())


def test_concurrent_writers_never_exceed_capacity():
    async def scenario() -> None:
        cache = InMemoryResponseCache(capacity=10, clock=_Clock())
        await asyncio.gather(*(cache.set(f"k{i}", i) for i in range(50)))
        assert cache.size() == 10
        values = await asyncio.gather(*(cache.get(f"k{i}") for i in range(40, 50)))
        assert values == list(range(40, 50))

    run_async(scenario())


def test_write_then_invalidate_clears_stale_entry_before_returning():
    async def scenario() -> None:
        cache = InMemoryResponseCache(clock=_Clock())
        store = {"profile:7": "old"}
        await cache.set("profile:7:summary", "old")

        async def write() -> str:
            store["profile:7"] = "new"
            assert await cache.get("profile:7:summary") == "old"
            return "ack"

        result = await write_then_invalidate(cache, "profile:7", write)

        assert result == "ack"
        assert await cache.get("profile:7:summary") is None

    run_async(scenario())


def test_write_then_invalidate_invalidates_when_write_fails():
    async def scenario() -> None:
        cache = InMemoryResponseCache(clock=_Clock())
        await cache.set("profile:7:summary", "old")

        async def write() -> None:
            raise RuntimeError("store unavailable")

        with pytest.raises(RuntimeError, match="store unavailable"):
            await write_then_invalidate(cache, "profile:7", write)
        assert await cache.get("profile:7:summary") is None

    run_async(scenario())


def test_build_cache_key_is_deterministic_and_order_insensitive():
    digest = content_hash(b"image-bytes")
    assert len(digest) == 64

    key = build_cache_key("Analysis", "ABC123", "Casual", "male")
    assert key == "analysis:abc123:casual:male"

    first = build_cache_key("looks", digest, ["navy", "cream"], None, True)
    second = build_cache_key("looks", digest, ["cream", "navy"], None, True)
    assert first == second
    assert first.endswith(":cream,navy:-:1")

    assert build_cache_key("ns", "h", "a:b") == "ns:h:a_b"
    with pytest.raises(ValueError):
        build_cache_key(" ", digest)


def test_typed_cache_round_trips_dataclasses_and_drops_invalid_payloads():
    async def scenario() -> None:
        backend = InMemoryResponseCache(clock=_Clock())
        typed: TypedResponseCache[list[PaletteColor]] = TypedResponseCache(
            backend, list[PaletteColor]
        )
        colors = [PaletteColor(hex="#283C8C", weight=0.75, name="blue", rgb=(40, 60, 140))]

        await typed.set("palette:1", colors)
        raw = await backend.get("palette:1")
        assert raw[0]["rgb"] == [40, 60, 140]
        assert await typed.get("palette:1") == colors
        assert typed.backend_id == "inmemory"

        await backend.set("palette:2", [{"hex": "#000000"}])
        assert await typed.get("palette:2") is None
        assert await backend.get("palette:2") is None

    run_async(scenario())
