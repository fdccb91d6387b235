"""Exception hierarchy for the file-backed cache store."""

from __future__ import annotations

from pathlib import Path


class BackingStoreError(Exception):
    """Base class for every error raised by cachekeeper."""


class ConfigurationError(BackingStoreError, ValueError):
    """Raised when store configuration is missing or invalid."""


class InvalidEntryError(BackingStoreError, ValueError):
    """Raised when a cache item cannot be represented on disk."""


class EntryWriteError(BackingStoreError, OSError):
    """Raised when one half of an entry's file pair cannot be written."""

    def __init__(self, message: str, path: str | Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class InfoWriteError(EntryWriteError):
    """Raised when the ``.cacheinfo`` file of an entry cannot be written."""


class DataWriteError(EntryWriteError):
    """Raised when the ``.cachedata`` file of an entry cannot be written."""


class LoadError(BackingStoreError):
    """Raised when any entry fails to load; the whole load is aborted."""

    def __init__(self, message: str, path: str | Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class NotFoundError(BackingStoreError, FileNotFoundError):
    """Raised when an explicit remove or refresh targets a missing entry."""

    def __init__(self, message: str, path: str | Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)
