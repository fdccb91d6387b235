from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from cachekeeper.exceptions import ConfigurationError

PATH_ATTRIBUTE = "path"
SUPPORTED_CODECS = ("pickle", "json")


class StoreConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str
    codec: str = "pickle"

    @field_validator("path", mode="before")
    @classmethod
    def validate_path(cls, value: Any) -> str:
        if isinstance(value, Path):
            value = str(value)
        if not isinstance(value, str) or value == "":
            raise ValueError(f"'{PATH_ATTRIBUTE}' attribute not found")
        return value

    @field_validator("codec")
    @classmethod
    def validate_codec(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SUPPORTED_CODECS:
            raise ValueError(f"codec must be one of: {', '.join(SUPPORTED_CODECS)}")
        return normalized

    @property
    def directory(self) -> Path:
        return Path(self.path)

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> StoreConfig:
        """Validate raw backing-store attributes such as ``{"path": "cache"}``.

        Attributes other than ``path`` and ``codec`` belong to the host configuration
        and are ignored.
        """
        raw_path = attributes.get(PATH_ATTRIBUTE)
        if raw_path is None or raw_path == "":
            raise ConfigurationError(
                f"Error in application configuration: '{PATH_ATTRIBUTE}' attribute not found"
            )
        try:
            known = {name: value for name, value in attributes.items() if name in cls.model_fields}
            return cls.model_validate(known)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid store configuration: {exc}") from exc


def load_config(path: str | Path) -> StoreConfig:
    """Load the ``store`` section of a JSON or YAML configuration file."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration file: {path}") from exc

    payload = _parse_yaml_or_json(raw)
    section = payload.get("store")
    if not isinstance(section, dict):
        raise ConfigurationError("Configuration must contain a 'store' object.")
    return StoreConfig.from_attributes(section)


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = _parse_yaml(raw)
    if not isinstance(parsed, dict):
        raise ConfigurationError("Configuration root must be an object.")
    return parsed


def _parse_yaml(raw: str) -> Any:
    import yaml

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid configuration file: {exc}") from exc
