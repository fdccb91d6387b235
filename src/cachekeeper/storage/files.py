"""Atomic write and best-effort delete helpers for entry files."""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path

TEMP_SUFFIX = ".tmp"

logger = logging.getLogger(__name__)


def write_bytes_atomic(path: Path, payload: bytes) -> None:
    """Persist bytes by writing a sibling temp file then renaming it over ``path``.

    The parent directory must already exist. Temp files are dot-prefixed and end
    in ``.tmp`` so directory scans for entry files never pick them up.
    """
    temp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=TEMP_SUFFIX,
            delete=False,
        ) as handle:
            temp_name = handle.name
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_name, path)
    except Exception:
        if temp_name:
            with suppress(FileNotFoundError):
                Path(temp_name).unlink()
        raise


def write_text_atomic(path: Path, text: str) -> None:
    write_bytes_atomic(path, text.encode("utf-8"))


def delete_quietly(path: Path) -> bool:
    """Delete ``path``, ignoring any failure. Returns True when the file was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.debug("file_store delete_failed path=%s error=%s", path, exc)
        return False
    return True
