from __future__ import annotations

import json
import pickle
from typing import Any, Protocol

from cachekeeper.exceptions import ConfigurationError


class ValueCodec(Protocol):
    """Turns cached values into the bytes stored in ``.cachedata`` files and back."""

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: bytes) -> Any: ...


class PickleCodec:
    """Binary codec for arbitrary picklable Python objects.

    Only load stores written by a trusted process: unpickling runs arbitrary code.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self.protocol = protocol

    def encode(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def decode(self, data: bytes) -> Any:
        return pickle.loads(data)


class JsonCodec:
    """UTF-8 JSON codec for JSON-compatible values."""

    def encode(self, value: Any) -> bytes:
        return json.dumps(value, ensure_ascii=False, sort_keys=True).encode("utf-8")

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


_CODECS: dict[str, type[PickleCodec] | type[JsonCodec]] = {
    "pickle": PickleCodec,
    "json": JsonCodec,
}


def build_codec(name: str) -> ValueCodec:
    normalized = name.strip().lower()
    codec_cls = _CODECS.get(normalized)
    if codec_cls is None:
        supported = ", ".join(sorted(_CODECS))
        raise ConfigurationError(f"Unknown codec: {name!r} (supported: {supported})")
    return codec_cls()
