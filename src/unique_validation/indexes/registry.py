"""
Index metadata registry.

Maps a collection's full name ("db.collection") to the field composition of
each of its indexes, as reported by `index_information()`. Each collection is
introspected once, on first use, and then served from memory.

The registry is a plain object owned by whoever builds the translators (one
per process is typical, one per test keeps tests isolated). `clear()` drops
cached entries, e.g. after indexes are rebuilt.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class IndexDescriptor(BaseModel):
    """One index: its name and its fields in key order."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[str, ...]
    unique: bool = False

    @classmethod
    def from_index_information(cls, name: str, info: Mapping[str, Any]) -> IndexDescriptor:
        # info["key"] is a list of (field, direction) pairs in index order
        return cls(
            name=name,
            fields=tuple(field for field, _ in info.get("key", [])),
            unique=bool(info.get("unique", False)),
        )


IndexMap = Mapping[str, IndexDescriptor]


def collection_key(collection: Any) -> str:
    return getattr(collection, "full_name", None) or collection.name


class IndexRegistry:
    """
    Lazily populated cache of index descriptors, keyed by collection full name.

    Concurrent first lookups for the same collection share a single in-flight
    introspection task instead of taking a lock. Callers await it through
    `asyncio.shield`, so a cancelled caller abandons its wait without cancelling
    the lookup for the others; the cache entry lands when the task finishes.
    """

    def __init__(self) -> None:
        self._cache: dict[str, IndexMap] = {}
        self._pending: dict[str, asyncio.Future] = {}

    def peek(self, collection: Any) -> IndexMap | None:
        """Cached indexes for `collection`, without any I/O (None if not loaded yet)."""
        return self._cache.get(collection_key(collection))

    async def get_indexes(self, collection: Any) -> IndexMap:
        """
        Return {index name: IndexDescriptor} for `collection`.

        Errors raised by the introspection call propagate unchanged and are not cached.
        """
        key = collection_key(collection)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(collection, key))
            self._pending[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))

        return await asyncio.shield(task)

    def clear(self, collection: Any = None) -> None:
        """
        Drop the cache for one collection, or for all of them.

        A lookup already in flight still answers its own waiters, but its result
        is not cached; the next lookup introspects again.
        """
        if collection is None:
            self._cache.clear()
            self._pending.clear()
        else:
            key = collection_key(collection)
            self._cache.pop(key, None)
            self._pending.pop(key, None)

    async def _fetch(self, collection: Any, key: str) -> IndexMap:
        start = time.perf_counter()
        information = await collection.index_information()
        indexes = {
            name: IndexDescriptor.from_index_information(name, info)
            for name, info in information.items()
        }
        if self._pending.get(key) is asyncio.current_task():
            self._cache[key] = indexes

        logger.debug(
            "registry.fetch.success",
            extra={
                "collection": key,
                "indexes": sorted(indexes),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return indexes

    def _forget(self, key: str, task: asyncio.Future) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Mark a failure as retrieved when every waiter went away (cancelled).
        if not task.cancelled():
            task.exception()
