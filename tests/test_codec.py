from __future__ import annotations

import pytest

from cachekeeper.codec import JsonCodec, PickleCodec, build_codec
from cachekeeper.exceptions import ConfigurationError


def test_build_codec_by_name() -> None:
    assert isinstance(build_codec("pickle"), PickleCodec)
    assert isinstance(build_codec(" JSON "), JsonCodec)


def test_build_codec_unknown_name() -> None:
    with pytest.raises(ConfigurationError, match="supported: json, pickle"):
        build_codec("msgpack")


def test_json_codec_keeps_non_ascii_text() -> None:
    codec = JsonCodec()
    payload = codec.encode({"name": "캐시 항목"})

    assert "캐시 항목".encode("utf-8") in payload
    assert codec.decode(payload) == {"name": "캐시 항목"}


def test_pickle_codec_preserves_python_types() -> None:
    codec = PickleCodec()
    value = {"tags": {"a", "b"}, "pair": (1, 2)}

    assert codec.decode(codec.encode(value)) == value
