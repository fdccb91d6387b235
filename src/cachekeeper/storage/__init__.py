"""File-backed persistence for cache items."""

from .backing_store import DATA_EXTENSION, INFO_EXTENSION, FileBackingStore
from .records import InfoRecord, format_duration, parse_duration

__all__ = [
    "DATA_EXTENSION",
    "INFO_EXTENSION",
    "FileBackingStore",
    "InfoRecord",
    "format_duration",
    "parse_duration",
]
