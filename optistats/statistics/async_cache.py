"""
Single-flight asynchronous loading cache.

For every key at most one load is in flight at a time. Concurrent ``get`` calls for a key
that is being loaded attach to the pending future instead of issuing another load, and
batched ``get_all`` calls only load keys that are neither cached nor already in flight;
keys already in flight join the existing operation, whether it was started by ``get`` or
by another batch. Waiters await a shielded future, so a cancelled waiter never cancels the
shared load.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from optistats.errors import AsyncLoadError, StatisticsError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class AsyncCacheLoader(Generic[K, V]):
    async def load(self, key: K) -> V:
        raise NotImplementedError

    async def load_all(self, keys: list[K]) -> dict[K, V]:
        """Load several keys at once. Keys absent from the result were not found."""
        return {key: await self.load(key) for key in keys}

    async def reload(self, key: K, old_value: V) -> V:
        return await self.load(key)


@dataclass(slots=True)
class CacheStats:
    hit_count: int = 0
    miss_count: int = 0
    load_success_count: int = 0
    load_failure_count: int = 0
    eviction_count: int = 0


@dataclass(slots=True)
class _Entry(Generic[V]):
    value: V
    written_at: float


class AsyncLoadingCache(Generic[K, V]):
    def __init__(
        self,
        *,
        loader: AsyncCacheLoader[K, V],
        max_size: int | None = None,
        expire_after_write_s: float | None = None,
        refresh_after_write_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1.")
        self._loader = loader
        self._max_size = max_size
        self._expire_after_write_s = expire_after_write_s
        self._refresh_after_write_s = refresh_after_write_s
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)
        self._entries: OrderedDict[K, _Entry[V]] = OrderedDict()
        self._pending: dict[K, asyncio.Future[V]] = {}
        self._refreshing: dict[K, asyncio.Task[None]] = {}
        self._discard_on_completion: set[K] = set()
        self._tasks: set[asyncio.Task] = set()
        self._stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def stats(self) -> CacheStats:
        return CacheStats(
            hit_count=self._stats.hit_count,
            miss_count=self._stats.miss_count,
            load_success_count=self._stats.load_success_count,
            load_failure_count=self._stats.load_failure_count,
            eviction_count=self._stats.eviction_count,
        )

    def is_loading(self, key: K) -> bool:
        return key in self._pending

    async def get(self, key: K) -> V:
        value = self._lookup(key)
        if value is not _MISSING:
            return value
        future = self._pending.get(key)
        if future is None:
            future = self._start_load(key)
        return await asyncio.shield(future)

    async def get_all(self, keys: Iterable[K]) -> dict[K, V]:
        requested = list(dict.fromkeys(keys))
        found: dict[K, V] = {}
        waiting: dict[K, asyncio.Future[V]] = {}
        to_load: list[K] = []

        for key in requested:
            value = self._lookup(key)
            if value is not _MISSING:
                found[key] = value
                continue
            pending = self._pending.get(key)
            if pending is not None:
                waiting[key] = pending
            else:
                to_load.append(key)

        if to_load:
            waiting.update(self._start_batch(to_load))

        for key, future in waiting.items():
            found[key] = await asyncio.shield(future)
        return {key: found[key] for key in requested}

    def get_if_present(self, key: K) -> V | None:
        value = self._lookup(key, record=False)
        return None if value is _MISSING else value

    def put(self, key: K, value: V) -> None:
        self._cancel_refresh(key)
        if key in self._pending:
            self._discard_on_completion.add(key)
        self._store(key, value)

    def invalidate(self, key: K) -> None:
        # An in-flight load still completes for its waiters but is not stored.
        if key in self._pending:
            self._discard_on_completion.add(key)
        self._cancel_refresh(key)
        self._entries.pop(key, None)

    def invalidate_all(self, keys: Iterable[K] | None = None) -> None:
        targets = list(self._entries) + list(self._pending) if keys is None else list(keys)
        for key in targets:
            self.invalidate(key)

    def refresh(self, key: K) -> None:
        """Reload ``key`` in the background; the current value is served until it completes."""
        entry = self._entries.get(key)
        if entry is None:
            if key not in self._pending:
                self._start_load(key)
            return
        self._schedule_refresh(key, entry.value)

    async def aclose(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._refreshing.clear()

    def _lookup(self, key: K, *, record: bool = True) -> object:
        entry = self._entries.get(key)
        if entry is None:
            if record:
                self._stats.miss_count += 1
            return _MISSING

        age = self._clock() - entry.written_at
        if self._expire_after_write_s is not None and age >= self._expire_after_write_s:
            self._cancel_refresh(key)
            del self._entries[key]
            if record:
                self._stats.miss_count += 1
            return _MISSING

        self._entries.move_to_end(key)
        if record:
            self._stats.hit_count += 1
            if self._refresh_after_write_s is not None and age >= self._refresh_after_write_s:
                self._schedule_refresh(key, entry.value)
        return entry.value

    def _store(self, key: K, value: V) -> None:
        self._entries[key] = _Entry(value=value, written_at=self._clock())
        self._entries.move_to_end(key)
        if self._max_size is None:
            return
        while len(self._entries) > self._max_size:
            evicted, _ = self._entries.popitem(last=False)
            self._cancel_refresh(evicted)
            self._stats.eviction_count += 1

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _new_future(self, key: K) -> asyncio.Future[V]:
        future: asyncio.Future[V] = asyncio.get_running_loop().create_future()
        # Retrieve the outcome even when every waiter has gone away.
        future.add_done_callback(_consume_outcome)
        self._pending[key] = future
        return future

    def _start_load(self, key: K) -> asyncio.Future[V]:
        future = self._new_future(key)
        task = self._spawn(self._run_load(key, future))
        task.add_done_callback(lambda _: self._release({key: future}))
        return future

    def _start_batch(self, keys: list[K]) -> dict[K, asyncio.Future[V]]:
        futures = {key: self._new_future(key) for key in keys}
        task = self._spawn(self._run_batch(futures))
        task.add_done_callback(lambda _: self._release(futures))
        return futures

    async def _run_load(self, key: K, future: asyncio.Future[V]) -> None:
        try:
            value = await self._loader.load(key)
        except Exception as exc:
            self._fail(key, future, _as_load_error(exc))
            return
        self._complete(key, future, value)

    async def _run_batch(self, futures: dict[K, asyncio.Future[V]]) -> None:
        try:
            loaded = await self._loader.load_all(list(futures))
        except Exception as exc:
            error = _as_load_error(exc)
            for key, future in futures.items():
                self._fail(key, future, error)
            return
        for key, future in futures.items():
            # Keys the loader did not return are recorded as absent.
            self._complete(key, future, loaded.get(key))

    def _complete(self, key: K, future: asyncio.Future[V], value: V) -> None:
        if self._pending.get(key) is future:
            del self._pending[key]
        self._stats.load_success_count += 1
        if key in self._discard_on_completion:
            self._discard_on_completion.discard(key)
        else:
            self._store(key, value)
        if not future.done():
            future.set_result(value)

    def _fail(self, key: K, future: asyncio.Future[V], error: Exception) -> None:
        if self._pending.get(key) is future:
            del self._pending[key]
        self._discard_on_completion.discard(key)
        self._stats.load_failure_count += 1
        self._logger.debug("Cache load failed key=%s error=%s", key, error)
        if not future.done():
            future.set_exception(error)

    def _release(self, futures: dict[K, asyncio.Future[V]]) -> None:
        # Runs once the load task is done; a task cancelled before or during its
        # load leaves futures unresolved.
        for key, future in futures.items():
            if future.done():
                continue
            if self._pending.get(key) is future:
                del self._pending[key]
                self._discard_on_completion.discard(key)
            future.cancel()

    def _schedule_refresh(self, key: K, old_value: V) -> None:
        if key in self._refreshing or key in self._pending:
            return
        self._refreshing[key] = self._spawn(self._run_refresh(key, old_value))

    def _cancel_refresh(self, key: K) -> None:
        task = self._refreshing.pop(key, None)
        if task is not None:
            task.cancel()

    async def _run_refresh(self, key: K, old_value: V) -> None:
        try:
            value = await self._loader.reload(key, old_value)
        except Exception as exc:
            self._refreshing.pop(key, None)
            self._stats.load_failure_count += 1
            self._logger.warning("Background refresh failed for key=%s: %s", key, exc)
            return
        self._refreshing.pop(key, None)
        self._stats.load_success_count += 1
        self._store(key, value)


def _as_load_error(exc: Exception) -> Exception:
    if isinstance(exc, StatisticsError):
        return exc
    error = AsyncLoadError(f"Cache load failed: {exc}")
    error.__cause__ = exc
    return error


def _consume_outcome(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()


__all__ = ["AsyncCacheLoader", "AsyncLoadingCache", "CacheStats"]
