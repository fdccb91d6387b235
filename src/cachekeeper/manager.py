from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, Protocol

from cachekeeper.schemas import (
    AbsoluteTime,
    CacheItem,
    CacheItemPriority,
    SlidingTime,
    now_utc,
)

logger = logging.getLogger(__name__)


class BackingStore(Protocol):
    def add(self, storage_key: int, item: CacheItem) -> int: ...

    def load_all(self) -> dict[str, CacheItem]: ...

    def count(self) -> int: ...

    def flush(self) -> None: ...

    def remove(self, storage_key: int) -> None: ...

    def remove_stale(self, storage_key: int) -> None: ...

    def refresh_access_time(self, storage_key: int, timestamp: datetime) -> None: ...


class CacheManager:
    """In-memory cache mirrored into a backing store.

    Expiration is judged here, never by the store. Calls are not synchronized;
    callers sharing a manager across threads must hold their own lock.
    """

    def __init__(
        self,
        store: BackingStore,
        *,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.store = store
        self.clock = clock
        self._items = store.load_all()
        self._next_storage_key = 1 + max(
            (item.storage_key for item in self._items.values() if item.storage_key is not None),
            default=0,
        )

    @property
    def count(self) -> int:
        return len(self._items)

    def contains(self, key: str) -> bool:
        return key in self._items

    def keys(self) -> list[str]:
        return sorted(self._items)

    def add(
        self,
        key: str,
        value: Any,
        *,
        priority: CacheItemPriority = CacheItemPriority.NORMAL,
        expirations: Iterable[SlidingTime | AbsoluteTime] = (),
    ) -> CacheItem:
        storage_key = self._allocate_storage_key()
        item = CacheItem(
            key=key,
            value=value,
            priority=priority,
            last_accessed_time=self.clock(),
            expirations=tuple(expirations),
            storage_key=storage_key,
        )
        try:
            self.store.add(storage_key, item)
        except Exception:
            # A failed data write leaves the new info file behind.
            self.store.remove_stale(storage_key)
            raise

        previous = self._items.get(key)
        self._items[key] = item
        if previous is not None and previous.storage_key is not None:
            self.store.remove_stale(previous.storage_key)
        return item

    def get_data(self, key: str) -> Any:
        item = self._items.get(key)
        if item is None:
            return None

        now = self.clock()
        if item.has_expired(now):
            logger.info("cache expired key=%s storage_key=%s", key, item.storage_key)
            self._drop(key)
            return None

        item.touch(now)
        if item.storage_key is not None:
            self.store.refresh_access_time(item.storage_key, now)
        return item.value

    def remove(self, key: str) -> None:
        item = self._items.pop(key, None)
        if item is None or item.storage_key is None:
            return
        self.store.remove(item.storage_key)

    def remove_expired(self) -> int:
        now = self.clock()
        expired = [key for key, item in self._items.items() if item.has_expired(now)]
        for key in expired:
            self._drop(key)
        if expired:
            logger.info("cache sweep removed=%s", len(expired))
        return len(expired)

    def flush(self) -> None:
        self.store.flush()
        self._items.clear()

    def _drop(self, key: str) -> None:
        item = self._items.pop(key)
        if item.storage_key is not None:
            self.store.remove_stale(item.storage_key)

    def _allocate_storage_key(self) -> int:
        storage_key = self._next_storage_key
        self._next_storage_key += 1
        return storage_key
