"""cachekeeper: durable file-system backing store for an in-memory cache."""

from .codec import JsonCodec, PickleCodec, ValueCodec, build_codec
from .config import StoreConfig, load_config
from .exceptions import (
    BackingStoreError,
    ConfigurationError,
    DataWriteError,
    InfoWriteError,
    InvalidEntryError,
    LoadError,
    NotFoundError,
)
from .manager import CacheManager
from .schemas import AbsoluteTime, CacheItem, CacheItemPriority, SlidingTime
from .storage import FileBackingStore

__all__ = [
    "AbsoluteTime",
    "BackingStoreError",
    "CacheItem",
    "CacheItemPriority",
    "CacheManager",
    "ConfigurationError",
    "DataWriteError",
    "FileBackingStore",
    "InfoWriteError",
    "InvalidEntryError",
    "JsonCodec",
    "LoadError",
    "NotFoundError",
    "PickleCodec",
    "SlidingTime",
    "StoreConfig",
    "ValueCodec",
    "build_codec",
    "load_config",
]
