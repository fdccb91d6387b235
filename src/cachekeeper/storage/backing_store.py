from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from cachekeeper.codec import ValueCodec, build_codec
from cachekeeper.config import StoreConfig
from cachekeeper.exceptions import (
    DataWriteError,
    InfoWriteError,
    InvalidEntryError,
    LoadError,
    NotFoundError,
)
from cachekeeper.schemas import CacheItem, CacheItemPriority, SlidingTime
from cachekeeper.storage.files import delete_quietly, write_bytes_atomic, write_text_atomic
from cachekeeper.storage.records import InfoRecord, replace_timestamp

DATA_EXTENSION = ".cachedata"
INFO_EXTENSION = ".cacheinfo"

logger = logging.getLogger(__name__)


class FileBackingStore:
    """Persists cache items as ``<storage key>.cacheinfo`` / ``.cachedata`` file pairs.

    The store does no locking and never evaluates expirations; the cache manager
    decides when items are added, refreshed or dropped and serializes its calls.
    """

    def __init__(
        self,
        config_attributes: Mapping[str, Any] | StoreConfig,
        codec: ValueCodec | None = None,
    ) -> None:
        if isinstance(config_attributes, StoreConfig):
            config = config_attributes
        else:
            config = StoreConfig.from_attributes(config_attributes)

        self.config = config
        self.directory = config.directory
        self.codec = codec if codec is not None else build_codec(config.codec)

    @classmethod
    def from_config(cls, config: StoreConfig, codec: ValueCodec | None = None) -> FileBackingStore:
        return cls(config, codec=codec)

    @classmethod
    def at(cls, directory: str | Path, codec: ValueCodec | None = None) -> FileBackingStore:
        return cls({"path": str(directory)}, codec=codec)

    def add(self, storage_key: int, item: CacheItem) -> int:
        """Write both files of an entry, replacing any previous pair for the key.

        Returns ``storage_key`` so callers can report which pair was written.
        """
        if "".join(item.key.splitlines()) != item.key:
            raise InvalidEntryError(f"cache key must not contain line breaks: {item.key!r}")

        payload = self.codec.encode(item.value)
        record = InfoRecord(
            key=item.key,
            last_accessed_time=item.last_accessed_time,
            sliding_expiration=item.sliding_expiration,
        )
        info_path = self._info_path(storage_key)
        try:
            write_text_atomic(info_path, record.to_text())
        except OSError as exc:
            raise InfoWriteError("Cannot create cache info file", info_path) from exc

        data_path = self._data_path(storage_key)
        try:
            write_bytes_atomic(data_path, payload)
        except OSError as exc:
            raise DataWriteError("Cannot create cache data file", data_path) from exc

        logger.info(
            "file_store add storage_key=%s sliding=%s bytes=%s",
            storage_key,
            record.sliding_expiration,
            len(payload),
        )
        return storage_key

    def load_all(self) -> dict[str, CacheItem]:
        """Rebuild every stored item, keyed by logical key.

        Entries are read in ascending storage-key order; when two pairs carry the
        same logical key the later one wins. Any unreadable pair aborts the load.
        """
        try:
            data_paths = self._data_files()
        except OSError as exc:
            raise LoadError("Cannot enumerate cache directory", self.directory) from exc

        items: dict[str, CacheItem] = {}
        for data_path in data_paths:
            item = self._load_entry(data_path)
            previous = items.get(item.key)
            if previous is not None:
                logger.warning(
                    "file_store load duplicate_key storage_keys=%s,%s kept=%s",
                    previous.storage_key,
                    item.storage_key,
                    item.storage_key,
                )
            items[item.key] = item

        logger.info("file_store load entries=%s directory=%s", len(items), self.directory)
        return items

    def count(self) -> int:
        """Number of data files on disk; expiration is not consulted."""
        return len(self._data_files())

    def flush(self) -> None:
        removed = 0
        for data_path in self._data_files():
            if delete_quietly(data_path):
                removed += 1
            delete_quietly(data_path.with_suffix(INFO_EXTENSION))
        logger.info("file_store flush removed=%s directory=%s", removed, self.directory)

    def remove(self, storage_key: int) -> None:
        """Delete an entry the caller expects to exist."""
        data_path = self._data_path(storage_key)
        try:
            data_path.unlink()
        except FileNotFoundError as exc:
            raise NotFoundError("Cannot remove cached item", data_path) from exc

        delete_quietly(self._info_path(storage_key))
        logger.info("file_store remove storage_key=%s", storage_key)

    def remove_stale(self, storage_key: int) -> None:
        """Delete an entry if present; any failure is ignored."""
        data_removed = delete_quietly(self._data_path(storage_key))
        info_removed = delete_quietly(self._info_path(storage_key))
        logger.info(
            "file_store remove_stale storage_key=%s data=%s info=%s",
            storage_key,
            data_removed,
            info_removed,
        )

    def refresh_access_time(self, storage_key: int, timestamp: datetime) -> None:
        info_path = self._info_path(storage_key)
        try:
            text = info_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError("Cannot find cache info file", info_path) from exc

        try:
            write_text_atomic(info_path, replace_timestamp(text, timestamp))
        except OSError as exc:
            raise InfoWriteError("Cannot update cache info file", info_path) from exc
        logger.debug("file_store refresh storage_key=%s", storage_key)

    def _load_entry(self, data_path: Path) -> CacheItem:
        storage_key = _parse_storage_key(data_path)
        if storage_key is None:
            raise LoadError("Cache data file is not named by a storage key", data_path)

        info_path = data_path.with_suffix(INFO_EXTENSION)
        try:
            record = InfoRecord.from_text(info_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise LoadError("Cannot read cache info file", info_path) from exc

        try:
            payload = data_path.read_bytes()
        except OSError as exc:
            raise LoadError("Cannot read cache data file", data_path) from exc
        try:
            value = self.codec.decode(payload)
        except Exception as exc:
            raise LoadError("Cannot decode cache data file", data_path) from exc

        expirations: tuple[SlidingTime, ...] = ()
        if record.sliding_expiration is not None and record.sliding_expiration.total_seconds() > 0:
            expirations = (SlidingTime(duration=record.sliding_expiration),)

        return CacheItem(
            key=record.key,
            value=value,
            priority=CacheItemPriority.NORMAL,
            last_accessed_time=record.last_accessed_time,
            expirations=expirations,
            storage_key=storage_key,
        )

    def _data_files(self) -> list[Path]:
        paths = [
            path
            for path in self.directory.iterdir()
            if path.suffix == DATA_EXTENSION and path.is_file()
        ]
        return sorted(paths, key=_storage_key_sort_key)

    def _data_path(self, storage_key: int) -> Path:
        return self.directory / f"{storage_key}{DATA_EXTENSION}"

    def _info_path(self, storage_key: int) -> Path:
        return self.directory / f"{storage_key}{INFO_EXTENSION}"


def _parse_storage_key(path: Path) -> int | None:
    try:
        return int(path.stem)
    except ValueError:
        return None


def _storage_key_sort_key(path: Path) -> tuple[int, int, str]:
    storage_key = _parse_storage_key(path)
    if storage_key is None:
        return (1, 0, path.name)
    return (0, storage_key, path.name)
