from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Hashable

from cachetools import TTLCache


class AsyncTTLCache:
    """TTL cache for coroutine results.

    Concurrent misses on the same key share one load. Failed loads are not
    cached.
    """

    def __init__(self, *, maxsize: int, ttl_seconds: int) -> None:
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._inflight: dict[Hashable, asyncio.Future] = {}

    async def get_or_load(self, key: Hashable, loader: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return self._entries[key]
        except KeyError:
            pass

        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(loader())
            self._inflight[key] = pending
            pending.add_done_callback(lambda fut, k=key: self._settle(k, fut))
        # A cancelled caller must not cancel the load other callers wait on.
        return await asyncio.shield(pending)

    def _settle(self, key: Hashable, fut: asyncio.Future) -> None:
        self._inflight.pop(key, None)
        if not fut.cancelled() and fut.exception() is None:
            self._entries[key] = fut.result()

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
