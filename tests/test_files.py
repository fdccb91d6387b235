from __future__ import annotations

import os

import pytest

import cachekeeper.storage.files as files_module
from cachekeeper.storage.files import delete_quietly, write_bytes_atomic, write_text_atomic


def test_write_text_atomic_replaces_content_without_leftovers(tmp_path) -> None:
    target = tmp_path / "1.cacheinfo"
    target.write_text("stale\n", encoding="utf-8")

    write_text_atomic(target, "fresh\n")

    assert target.read_bytes() == b"fresh\n"
    assert [path.name for path in tmp_path.iterdir()] == ["1.cacheinfo"]


def test_write_bytes_atomic_cleans_temp_file_on_failure(monkeypatch, tmp_path) -> None:
    target = tmp_path / "1.cachedata"
    target.write_bytes(b"previous")

    def _fail_replace(src, dst) -> None:
        raise PermissionError("locked")

    monkeypatch.setattr(files_module.os, "replace", _fail_replace)

    with pytest.raises(PermissionError):
        write_bytes_atomic(target, b"next")

    assert target.read_bytes() == b"previous"
    assert [path.name for path in tmp_path.iterdir()] == ["1.cachedata"]


def test_write_bytes_atomic_requires_existing_directory(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        write_bytes_atomic(tmp_path / "missing" / "1.cachedata", b"data")


def test_delete_quietly(tmp_path) -> None:
    target = tmp_path / "1.cachedata"
    target.write_bytes(b"data")

    assert delete_quietly(target) is True
    assert delete_quietly(target) is False


def test_delete_quietly_swallows_os_errors(monkeypatch, tmp_path) -> None:
    target = tmp_path / "1.cachedata"
    target.write_bytes(b"data")

    def _fail_unlink(self, missing_ok=False) -> None:
        raise PermissionError("locked")

    monkeypatch.setattr(type(target), "unlink", _fail_unlink)

    assert delete_quietly(target) is False
    assert os.path.exists(target)
