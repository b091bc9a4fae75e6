import anyio
import pytest

from specvault.cache import (
    CacheLayer,
    invalidate_folder_aggregates,
    spec_cache_key,
)
from specvault.exceptions import StorageNotFoundError

pytestmark = pytest.mark.anyio


class Counter:
    """Loader that counts calls and returns ``prefix-<n>``."""

    def __init__(self, prefix: str = "value") -> None:
        self.prefix = prefix
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        return f"{self.prefix}-{self.calls}"


class TestGet:
    async def test_miss_loads_and_stores(self, cache: CacheLayer) -> None:
        loader = Counter()

        assert await cache.get("k", loader) == "value-1"
        assert cache.has("k")
        assert cache.stats().misses == 1
        assert cache.stats().hits == 0

    async def test_hit_returns_stored_value_without_loading(
        self, cache: CacheLayer
    ) -> None:
        loader = Counter()
        _ = await cache.get("k", loader)

        assert await cache.get("k", loader) == "value-1"
        assert loader.calls == 1
        assert cache.stats().hits == 1

    async def test_concurrent_misses_share_one_load(self, cache: CacheLayer) -> None:
        calls = 0
        release = anyio.Event()

        async def slow() -> str:
            nonlocal calls
            calls += 1
            await release.wait()
            return "shared"

        results: list[str] = []

        async def reader() -> None:
            results.append(await cache.get("k", slow))

        async with anyio.create_task_group() as tg:
            for _ in range(5):
                tg.start_soon(reader)
            await anyio.wait_all_tasks_blocked()
            release.set()

        assert calls == 1
        assert results == ["shared"] * 5

    async def test_concurrent_waiters_share_the_failure(self, cache: CacheLayer) -> None:
        release = anyio.Event()

        async def failing() -> str:
            await release.wait()
            msg = "backend down"
            raise OSError(msg)

        errors: list[BaseException] = []

        async def reader() -> None:
            try:
                _ = await cache.get("k", failing)
            except OSError as e:
                errors.append(e)

        async with anyio.create_task_group() as tg:
            for _ in range(3):
                tg.start_soon(reader)
            await anyio.wait_all_tasks_blocked()
            release.set()

        assert len(errors) == 3
        assert all(e is errors[0] for e in errors)
        assert not cache.has("k")

    async def test_failed_load_is_not_cached(self, cache: CacheLayer) -> None:
        async def failing() -> str:
            msg = "nope"
            raise ValueError(msg)

        with pytest.raises(ValueError, match="nope"):
            _ = await cache.get("k", failing)

        assert await cache.get("k", Counter()) == "value-1"


class TestRevalidation:
    async def test_hit_refreshes_in_background(self) -> None:
        loader = Counter()
        async with CacheLayer() as cache:
            _ = await cache.get("k", loader)

            assert await cache.get("k", loader) == "value-1"
            await anyio.wait_all_tasks_blocked()

            assert loader.calls == 2
            assert await cache.get("k", loader) == "value-2"

    async def test_no_refresh_outside_context(self, cache: CacheLayer) -> None:
        loader = Counter()
        _ = await cache.get("k", loader)
        _ = await cache.get("k", loader)

        assert loader.calls == 1

    async def test_no_refresh_when_disabled(self) -> None:
        loader = Counter()
        async with CacheLayer(revalidate=False) as cache:
            _ = await cache.get("k", loader)
            _ = await cache.get("k", loader)
            await anyio.wait_all_tasks_blocked()

        assert loader.calls == 1

    async def test_failed_refresh_keeps_stale_value(self) -> None:
        async with CacheLayer() as cache:
            _ = await cache.get("k", Counter())

            async def failing() -> str:
                msg = "refresh failed"
                raise OSError(msg)

            assert await cache.get("k", failing) == "value-1"
            await anyio.wait_all_tasks_blocked()

            assert cache.has("k")
            assert await cache.get("k", Counter()) == "value-1"

    async def test_entering_twice_fails(self) -> None:
        async with CacheLayer() as cache:
            with pytest.raises(RuntimeError, match="already entered"):
                _ = await cache.__aenter__()

    async def test_error_in_body_propagates_unwrapped(self) -> None:
        loader = Counter()
        with pytest.raises(StorageNotFoundError, match="gone"):
            async with CacheLayer() as cache:
                _ = await cache.get("k", loader)
                _ = await cache.get("k", loader)
                msg = "gone"
                raise StorageNotFoundError(msg, operation="read", path="k")

    async def test_cache_can_be_reentered_after_an_error(self) -> None:
        cache = CacheLayer()
        with pytest.raises(ValueError, match="boom"):
            async with cache:
                msg = "boom"
                raise ValueError(msg)

        async with cache:
            assert await cache.get("k", Counter()) == "value-1"


class TestEviction:
    async def test_evicts_least_recently_used_by_count(self) -> None:
        cache = CacheLayer(max_items=2)
        cache.set("a", "1")
        cache.set("b", "2")
        _ = await cache.get("a", Counter())
        cache.set("c", "3")

        assert cache.keys() == ("a", "c")

    def test_evicts_by_size(self) -> None:
        cache = CacheLayer(max_bytes=10)
        cache.set("a", b"12345")
        cache.set("b", b"12345")
        cache.set("c", b"1")

        assert cache.keys() == ("b", "c")
        assert cache.stats().size_bytes == 6

    def test_oversized_value_is_not_stored(self) -> None:
        cache = CacheLayer(max_bytes=4)
        cache.set("a", b"12")
        cache.set("a", b"123456")

        assert not cache.has("a")
        assert cache.stats().size_bytes == 0

    async def test_oversized_value_is_still_returned(self) -> None:
        cache = CacheLayer(max_bytes=4)

        async def big() -> bytes:
            return b"123456789"

        assert await cache.get("k", big) == b"123456789"
        assert not cache.has("k")

    def test_rejects_non_positive_bounds(self) -> None:
        with pytest.raises(ValueError, match="Cache bounds"):
            _ = CacheLayer(max_items=0)


class TestInvalidation:
    def test_exact_pattern(self, cache: CacheLayer) -> None:
        cache.set("folders:list", ())
        cache.set("folders:list:bare", ())

        assert cache.invalidate("folders:list") == 1
        assert cache.keys() == ("folders:list:bare",)

    def test_trailing_wildcard(self, cache: CacheLayer) -> None:
        for key in ("folders:active:count", "folders:active:specs", "folders:list"):
            cache.set(key, 1)

        assert cache.invalidate("folders:active:*") == 2
        assert cache.keys() == ("folders:list",)

    def test_inner_wildcard(self, cache: CacheLayer) -> None:
        for key in ("folders:a:count", "folders:b:count", "folders:a:specs"):
            cache.set(key, 1)

        assert cache.invalidate("folders:*:count") == 2
        assert cache.keys() == ("folders:a:specs",)

    def test_wildcard_does_not_overlap_head_and_tail(self, cache: CacheLayer) -> None:
        cache.set("ab", 1)

        assert cache.invalidate("ab*b") == 0

    def test_rejects_multiple_wildcards(self, cache: CacheLayer) -> None:
        with pytest.raises(ValueError, match="at most one"):
            _ = cache.invalidate("a*b*")

    def test_invalidate_all(self, cache: CacheLayer) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate_all()

        assert cache.keys() == ()
        assert cache.stats().size_bytes == 0

    def test_delete(self, cache: CacheLayer) -> None:
        cache.set("a", 1)

        assert cache.delete("a")
        assert not cache.delete("a")

    async def test_invalidation_detaches_in_flight_load(self, cache: CacheLayer) -> None:
        release = anyio.Event()

        async def slow() -> str:
            await release.wait()
            return "stale"

        results: list[str] = []

        async def reader() -> None:
            results.append(await cache.get("k", slow))

        async with anyio.create_task_group() as tg:
            tg.start_soon(reader)
            await anyio.wait_all_tasks_blocked()
            _ = cache.invalidate("k")
            release.set()

        assert results == ["stale"]
        assert not cache.has("k")
        assert await cache.get("k", Counter("fresh")) == "fresh-1"

    def test_folder_aggregates(self, cache: CacheLayer) -> None:
        for key in (
            "folders:list",
            "folders:list:bare",
            "folders:active:count",
            "folders:recycled:count",
            "stats:global",
            spec_cache_key("petstore", "v1.0.0"),
        ):
            cache.set(key, 1)

        invalidate_folder_aggregates(cache, "active")

        assert cache.keys() == ("folders:recycled:count", "specs:petstore:v1.0.0")


class TestStatsAndWarm:
    async def test_hit_rate(self, cache: CacheLayer) -> None:
        assert cache.stats().hit_rate == 0.0

        loader = Counter()
        _ = await cache.get("k", loader)
        _ = await cache.get("k", loader)
        _ = await cache.get("k", loader)

        stats = cache.stats()
        assert (stats.hits, stats.misses) == (2, 1)
        assert stats.hit_rate == pytest.approx(2 / 3)
        assert stats.item_count == 1

    async def test_warm_loads_every_key(self, cache: CacheLayer) -> None:
        await cache.warm({"a": Counter("a"), "b": Counter("b")})

        assert set(cache.keys()) == {"a", "b"}
        assert cache.stats().misses == 2
