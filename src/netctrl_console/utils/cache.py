"""Query cache shared by every reader of netctrl resources.

Reads are keyed by a tuple such as ``("clusters",)`` or
``("agents", "cluster", cluster_id)``. Concurrent reads of the same key share
one in-flight fetch, results stay cached until the key is invalidated (or an
optional staleness window elapses), and mutations invalidate whole key
prefixes once they succeed.

All state changes happen on the event loop thread, at fetch completion or
invalidation, so no locking is needed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from netctrl_console.utils.errors import QueryCancelledError

logger = logging.getLogger(__name__)

QueryKey = tuple[str, ...]
T = TypeVar("T")
Fetcher = Callable[[], Awaitable[T]]


class QueryState(str, Enum):
    """Lifecycle of a cached query."""

    IDLE = "idle"
    FETCHING = "fetching"
    FRESH = "fresh"
    ERRORED = "errored"


@dataclass
class CacheEntry:
    """State kept for one query key."""

    state: QueryState = QueryState.IDLE
    value: Any = None
    error: BaseException | None = None
    updated_at: float = 0.0
    future: asyncio.Future[Any] | None = field(default=None, repr=False)


class QueryCache:
    """Keyed cache with in-flight request deduplication.

    Usage:
        cache = QueryCache()
        clusters = await cache.fetch(("clusters",), client.list)
        await cache.mutate(lambda: client.delete(cid), invalidates=[("clusters",)])
    """

    def __init__(
        self,
        stale_time: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            stale_time: Seconds a result stays fresh. None keeps results
                until they are invalidated.
            clock: Monotonic time source, in seconds.
        """
        self._stale_time = stale_time
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[QueryKey]:
        """Get all cached keys."""
        return list(self._entries)

    def state(self, key: QueryKey) -> QueryState:
        """Get the state of a key (IDLE if unknown)."""
        entry = self._entries.get(key)
        return entry.state if entry else QueryState.IDLE

    def peek(self, key: QueryKey) -> Any:
        """Get the cached value for a key without fetching, or None."""
        entry = self._entries.get(key)
        if entry is None or entry.state != QueryState.FRESH:
            return None
        return entry.value

    def error(self, key: QueryKey) -> BaseException | None:
        """Get the error retained by an errored key, if any."""
        entry = self._entries.get(key)
        return entry.error if entry else None

    def stats(self) -> dict[str, int]:
        """Get hit/miss counters and the number of cached keys."""
        return {"hits": self._hits, "misses": self._misses, "size": len(self._entries)}

    def _is_stale(self, entry: CacheEntry) -> bool:
        if self._stale_time is None:
            return False
        return self._clock() - entry.updated_at >= self._stale_time

    async def fetch(self, key: QueryKey, fetcher: Fetcher[T]) -> T:
        """Read a key, fetching it if needed.

        - FRESH: the cached value is returned, ``fetcher`` is not called.
        - FETCHING: the caller waits for the fetch already in flight.
        - ERRORED: the retained error is raised again; use ``retry``.
        - IDLE or stale: a new fetch is started.

        Raises:
            Whatever ``fetcher`` raised.
        """
        entry = self._entries.get(key)
        if entry is not None:
            if entry.state == QueryState.FRESH and not self._is_stale(entry):
                self._hits += 1
                logger.debug(f"Cache hit: {key}")
                return entry.value  # type: ignore[no-any-return]
            if entry.state == QueryState.FETCHING and entry.future is not None:
                logger.debug(f"Joining in-flight fetch: {key}")
                return await asyncio.shield(entry.future)  # type: ignore[no-any-return]
            if entry.state == QueryState.ERRORED and entry.error is not None:
                raise entry.error

        return await asyncio.shield(self._start(key, fetcher))  # type: ignore[no-any-return]

    async def retry(self, key: QueryKey, fetcher: Fetcher[T]) -> T:
        """Fetch a key again whatever its state.

        An in-flight fetch is joined rather than duplicated.
        """
        entry = self._entries.get(key)
        if entry is not None and entry.state == QueryState.FETCHING and entry.future is not None:
            return await asyncio.shield(entry.future)  # type: ignore[no-any-return]
        return await asyncio.shield(self._start(key, fetcher))  # type: ignore[no-any-return]

    def subscribe(self, key: QueryKey, fetcher: Fetcher[T]) -> QueryHandle[T]:
        """Start reading a key on behalf of a view that may go away.

        A fetch the key needs is started before this returns, so it runs to
        completion even if the handle is cancelled straight away. Must be
        called from a running event loop.
        """
        entry = self._entries.get(key)
        if entry is None or (entry.state == QueryState.FRESH and self._is_stale(entry)):
            self._start(key, fetcher)
        return QueryHandle(self, key, fetcher)

    def _start(self, key: QueryKey, fetcher: Fetcher[Any]) -> asyncio.Future[Any]:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        entry = CacheEntry(state=QueryState.FETCHING, future=future)
        self._entries[key] = entry
        self._misses += 1
        logger.debug(f"Cache miss, fetching: {key}")

        # The fetch runs in its own task so that readers going away never
        # abort it for the others
        task = loop.create_task(self._run(key, entry, future, fetcher))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return future

    async def _run(
        self,
        key: QueryKey,
        entry: CacheEntry,
        future: asyncio.Future[Any],
        fetcher: Fetcher[Any],
    ) -> None:
        # Invalidation replaces or drops the entry; a result for an entry that
        # is no longer current is handed to its waiters but not stored
        try:
            value = await fetcher()
        except asyncio.CancelledError:
            if self._entries.get(key) is entry:
                del self._entries[key]
            future.cancel()
            raise
        except Exception as e:
            if self._entries.get(key) is entry:
                entry.state = QueryState.ERRORED
                entry.error = e
                entry.future = None
            logger.debug(f"Fetch failed for {key}: {e}")
            future.set_exception(e)
            # Nobody may be waiting any more
            future.exception()
            return

        if self._entries.get(key) is entry:
            entry.state = QueryState.FRESH
            entry.value = value
            entry.error = None
            entry.updated_at = self._clock()
            entry.future = None
        else:
            logger.debug(f"Discarding result for invalidated key: {key}")
        future.set_result(value)

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every entry whose key starts with ``prefix``.

        Returns:
            Number of entries dropped.
        """
        size = len(prefix)
        stale = [key for key in self._entries if key[:size] == prefix]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} entries under {prefix}")
        return len(stale)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    async def wait_idle(self) -> None:
        """Wait for every in-flight fetch to settle."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def mutate(
        self,
        operation: Callable[[], Awaitable[T]],
        invalidates: Iterable[QueryKey] = (),
    ) -> T:
        """Run a write and invalidate the given prefixes once it succeeds.

        On failure the cache is left untouched and the error propagates.
        """
        result = await operation()
        for prefix in invalidates:
            self.invalidate(prefix)
        return result


class QueryHandle(Generic[T]):
    """A view's pending read of a cached query.

    Handles come from :meth:`QueryCache.subscribe`, which has already started
    any fetch the key needs. Cancelling the handle only detaches this reader:
    the shared fetch keeps running and still fills the cache.
    """

    def __init__(self, cache: QueryCache, key: QueryKey, fetcher: Fetcher[T]) -> None:
        self.key = key
        self._cancelled = False
        self._task: asyncio.Task[T] = asyncio.ensure_future(cache.fetch(key, fetcher))

    @property
    def cancelled(self) -> bool:
        """Whether the reader went away."""
        return self._cancelled

    def done(self) -> bool:
        """Whether the result (or cancellation) is available."""
        return self._task.done()

    def cancel(self) -> None:
        """Discard this reader's result."""
        if not self._task.done():
            self._cancelled = True
            self._task.cancel()

    async def result(self) -> T:
        """Wait for the value.

        Raises:
            QueryCancelledError: If ``cancel()`` was called first.
        """
        try:
            return await self._task
        except asyncio.CancelledError:
            if self._cancelled:
                raise QueryCancelledError(self.key) from None
            raise
