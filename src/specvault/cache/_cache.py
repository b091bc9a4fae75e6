# pyright: reportAny=false
"""Read-through LRU cache with stale-while-revalidate refresh.

The cache sits in front of every read path in the vault. Values are looked up
by string key; on a miss the caller-supplied loader runs and its result is
stored. On a hit the cached value is returned immediately and, when the cache
has an active task group, the loader is re-run in the background so the next
caller sees fresh data.

Concurrent loads for the same key are coalesced: one loader call runs and
every caller waiting on that key receives its result or its exception.

Cached values must be treated as immutable by callers.
"""

from collections import OrderedDict
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import TracebackType
from typing import Final, Self, cast

import anyio
import orjson
from anyio.abc import TaskGroup
from structlog.typing import FilteringBoundLogger

from specvault.utils import get_null_logger

__all__ = [
    "DEFAULT_MAX_BYTES",
    "DEFAULT_MAX_ITEMS",
    "CacheLayer",
    "CacheStats",
    "Loader",
]

DEFAULT_MAX_BYTES: Final = 500 * 1024 * 1024
DEFAULT_MAX_ITEMS: Final = 1000

type Loader[T] = Callable[[], Awaitable[T]]


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Point-in-time cache statistics.

    Attributes:
        hits: Number of ``get`` calls served from the cache.
        misses: Number of ``get`` calls that had to wait for a load.
        item_count: Number of entries currently stored.
        size_bytes: Estimated total size of stored values.
    """

    hits: int
    misses: int
    item_count: int
    size_bytes: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


@dataclass(slots=True)
class _Entry:
    value: object
    size_bytes: int


class _PendingLoad:
    """Handle shared by every caller waiting on one in-flight load."""

    __slots__: Final = ("completed", "discarded", "done", "error", "value")

    def __init__(self) -> None:
        self.done: anyio.Event = anyio.Event()
        self.value: object = None
        self.error: Exception | None = None
        self.completed: bool = False
        # Set when the key is invalidated mid-flight; the result is still
        # handed to waiters but never stored.
        self.discarded: bool = False


def _estimate_size(value: object) -> int:
    if isinstance(value, bytes | bytearray | str):
        return len(value)
    try:
        return len(orjson.dumps(value, default=str, option=orjson.OPT_NON_STR_KEYS))
    except orjson.JSONEncodeError:
        return len(repr(value))


def _compile_pattern(pattern: str) -> Callable[[str], bool]:
    """Build a key matcher for an invalidation pattern.

    ``*`` may appear at most once and matches any run of characters.
    """
    wildcards = pattern.count("*")
    if wildcards == 0:
        return lambda key: key == pattern
    if wildcards > 1:
        msg = f"Invalidation pattern may contain at most one '*': {pattern!r}"
        raise ValueError(msg)

    head, tail = pattern.split("*")
    min_length = len(head) + len(tail)
    return lambda key: (
        len(key) >= min_length and key.startswith(head) and key.endswith(tail)
    )


class CacheLayer:
    """Size-bounded LRU read-through cache.

    Entries are evicted least-recently-used first once either the item
    count or the estimated byte size exceeds its bound. There is no TTL;
    only eviction and explicit invalidation remove entries.

    Background refreshes need a task group: use the cache as an async
    context manager for the lifetime of the process. Outside the context
    the cache still works but serves hits without refreshing them.

    Attributes:
        max_bytes: Upper bound on the summed size of stored values.
        max_items: Upper bound on the number of stored values.
    """

    __slots__: Final = (
        "_entries",
        "_hits",
        "_logger",
        "_misses",
        "_pending",
        "_revalidate",
        "_size_bytes",
        "_task_group",
        "max_bytes",
        "max_items",
    )

    max_bytes: int
    max_items: int
    _entries: OrderedDict[str, _Entry]
    _pending: dict[str, _PendingLoad]
    _hits: int
    _misses: int
    _size_bytes: int
    _revalidate: bool
    _task_group: TaskGroup | None
    _logger: FilteringBoundLogger

    def __init__(
        self,
        max_bytes: int = DEFAULT_MAX_BYTES,
        max_items: int = DEFAULT_MAX_ITEMS,
        *,
        revalidate: bool = True,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize an empty cache.

        Args:
            max_bytes: Upper bound on the summed size of stored values.
            max_items: Upper bound on the number of stored values.
            revalidate: Refresh entries in the background on every hit.
            logger: Optional logger for cache events.

        Raises:
            ValueError: If either bound is less than 1.
        """
        if max_bytes < 1 or max_items < 1:
            msg = f"Cache bounds must be >= 1, got {max_bytes=} {max_items=}"
            raise ValueError(msg)

        self.max_bytes = max_bytes
        self.max_items = max_items
        self._entries = OrderedDict()
        self._pending = {}
        self._hits = 0
        self._misses = 0
        self._size_bytes = 0
        self._revalidate = revalidate
        self._task_group = None
        self._logger = logger if logger is not None else get_null_logger()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> Self:
        if self._task_group is not None:
            msg = "CacheLayer is already entered"
            raise RuntimeError(msg)
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        task_group = self._task_group
        self._task_group = None
        if task_group is None:
            return None
        # Outstanding refreshes are abandoned, not awaited. The body's own
        # exception is left to propagate as raised, outside any exception group.
        task_group.cancel_scope.cancel()
        _ = await task_group.__aexit__(None, None, None)
        return None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get[T](self, key: str, loader: Loader[T]) -> T:
        """Return the value for ``key``, loading it on a miss.

        Args:
            key: Cache key.
            loader: Coroutine factory producing the current value.

        Returns:
            The cached or freshly loaded value.

        Raises:
            Exception: Whatever ``loader`` raised, when the value had to be
                loaded and the load failed.
        """
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
            self._hits += 1
            self._logger.debug("cache_hit", key=key)
            self._schedule_refresh(key, loader)
            return cast("T", entry.value)

        self._misses += 1
        self._logger.debug("cache_miss", key=key)
        return await self._load_or_join(key, loader)

    def has(self, key: str) -> bool:
        return key in self._entries

    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            item_count=len(self._entries),
            size_bytes=self._size_bytes,
        )

    def keys(self) -> tuple[str, ...]:
        """Stored keys, least recently used first."""
        return tuple(self._entries)

    async def warm(self, warmers: Mapping[str, Loader[object]]) -> None:
        """Load several keys concurrently.

        Args:
            warmers: Mapping of cache key to the loader for that key.
        """
        async with anyio.create_task_group() as tg:
            for key, loader in warmers.items():
                tg.start_soon(self.get, key, loader)

        self._logger.info(
            "cache_warmed",
            keys=len(warmers),
            item_count=len(self._entries),
            size_bytes=self._size_bytes,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def set(self, key: str, value: object) -> None:
        """Store ``value`` under ``key`` and evict as needed.

        A value larger than ``max_bytes`` is not stored; any previous value
        for the key is dropped instead.
        """
        size = _estimate_size(value)
        self._remove(key)

        if size > self.max_bytes:
            self._logger.warning(
                "cache_value_too_large", key=key, size_bytes=size, max_bytes=self.max_bytes
            )
            return

        self._entries[key] = _Entry(value=value, size_bytes=size)
        self._size_bytes += size
        self._evict()

    def delete(self, key: str) -> bool:
        """Remove ``key`` and detach any in-flight load for it.

        Returns:
            True if a stored entry was removed.
        """
        self._discard_pending(lambda k: k == key)
        return self._remove(key)

    def invalidate(self, pattern: str) -> int:
        """Remove every key matching ``pattern``.

        In-flight loads for matching keys are detached: their waiters still
        receive the result, but it is not stored.

        Args:
            pattern: Exact key, or a key with one ``*`` wildcard such as
                ``folders:*`` or ``folders:*:count``.

        Returns:
            Number of stored entries removed.

        Raises:
            ValueError: If the pattern contains more than one ``*``.
        """
        matches = _compile_pattern(pattern)
        doomed = [key for key in self._entries if matches(key)]
        for key in doomed:
            self._remove(key)
        self._discard_pending(matches)

        if doomed:
            self._logger.debug("cache_invalidated", pattern=pattern, removed=len(doomed))
        return len(doomed)

    def invalidate_all(self) -> None:
        self._discard_pending(lambda _key: True)
        self._entries.clear()
        self._size_bytes = 0
        self._logger.debug("cache_cleared")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _load_or_join[T](self, key: str, loader: Loader[T]) -> T:
        pending = self._pending.get(key)
        if pending is None:
            pending = _PendingLoad()
            self._pending[key] = pending
            return await self._run_load(key, loader, pending)

        await pending.done.wait()
        if pending.error is not None:
            raise pending.error
        if not pending.completed:
            # The owning task was cancelled before producing a value.
            return await self._load_or_join(key, loader)
        return cast("T", pending.value)

    async def _run_load[T](self, key: str, loader: Loader[T], pending: _PendingLoad) -> T:
        try:
            value = await loader()
        except Exception as e:
            pending.error = e
            raise
        else:
            pending.value = value
            pending.completed = True
            if not pending.discarded:
                self.set(key, value)
            return value
        finally:
            if self._pending.get(key) is pending:
                del self._pending[key]
            pending.done.set()

    def _schedule_refresh[T](self, key: str, loader: Loader[T]) -> None:
        if not self._revalidate or self._task_group is None or key in self._pending:
            return
        pending = _PendingLoad()
        self._pending[key] = pending
        self._task_group.start_soon(self._refresh, key, loader, pending)

    async def _refresh[T](self, key: str, loader: Loader[T], pending: _PendingLoad) -> None:
        try:
            await self._run_load(key, loader, pending)
        except Exception as e:  # noqa: BLE001
            self._logger.warning(
                "cache_refresh_failed", key=key, error=str(e), error_type=type(e).__name__
            )

    def _discard_pending(self, matches: Callable[[str], bool]) -> None:
        for key in [k for k in self._pending if matches(k)]:
            self._pending.pop(key).discarded = True

    def _remove(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._size_bytes -= entry.size_bytes
        return True

    def _evict(self) -> None:
        while self._entries and (
            len(self._entries) > self.max_items or self._size_bytes > self.max_bytes
        ):
            key, entry = self._entries.popitem(last=False)
            self._size_bytes -= entry.size_bytes
            self._logger.debug("cache_evicted", key=key, size_bytes=entry.size_bytes)
