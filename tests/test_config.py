from __future__ import annotations

import json
from pathlib import Path

import pytest

from cachekeeper.config import StoreConfig, load_config
from cachekeeper.exceptions import ConfigurationError

ROOT = Path(__file__).resolve().parents[1]


def test_store_config_keeps_path_verbatim() -> None:
    config = StoreConfig.from_attributes({"path": " data/cache"})

    assert config.path == " data/cache"
    assert config.directory == Path(" data/cache")
    assert config.codec == "pickle"


def test_store_config_rejects_unknown_codec() -> None:
    with pytest.raises(ConfigurationError):
        StoreConfig.from_attributes({"path": "cache", "codec": "xml"})


def test_store_config_ignores_host_attributes() -> None:
    config = StoreConfig.from_attributes(
        {"path": "cache", "type": "custom", "name": "File Store", "codec": "json"}
    )

    assert config.path == "cache"
    assert config.codec == "json"


def test_missing_path_message_names_attribute() -> None:
    with pytest.raises(ConfigurationError, match="'path' attribute not found"):
        StoreConfig.from_attributes({"codec": "json"})


def test_config_example_load_and_validate() -> None:
    config = load_config(ROOT / "config" / "store.example.yaml")

    assert config.path == "data/cache/store"
    assert config.codec == "pickle"


def test_load_config_from_json(tmp_path) -> None:
    config_path = tmp_path / "store.json"
    config_path.write_text(
        json.dumps({"store": {"path": str(tmp_path / "cache"), "codec": "JSON"}}),
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.directory == tmp_path / "cache"
    assert config.codec == "json"


@pytest.mark.parametrize(
    "raw",
    [
        "store: [unclosed",
        "- just\n- a list\n",
        "other:\n  path: cache\n",
        "store:\n  path: ''\n",
    ],
)
def test_load_config_rejects_invalid_files(tmp_path, raw) -> None:
    config_path = tmp_path / "store.yaml"
    config_path.write_text(raw, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(config_path)


def test_load_config_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "absent.yaml")
