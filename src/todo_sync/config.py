"""Configuration loading for todo-sync.

Configuration lives in a YAML file at the repository root. Keys mirror the
historical dashed option names (``case-sensitive``, ``label.TODO`` ...). Nested
mappings are flattened into dotted keys, so both spellings below are accepted::

    label.TODO: todo
    label:
      FIXME: fixme

The result is a single frozen :class:`SyncConfig` built once per run.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_LABELS",
    "DEFAULT_SIGNATURE",
    "SyncConfig",
    "load_config",
]

DEFAULT_CONFIG_NAME = ".todo-sync.yaml"
DEFAULT_SIGNATURE = "(Auto-generated by todo-sync)"
DEFAULT_LABELS: Dict[str, str] = {
    "TODO": "todo",
    "FIXME": "fixme",
}

_LABEL_PREFIXES = ("label.", "labels.")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be read or is invalid."""


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, prefix=f"{name}."))
        else:
            flat[name] = value
    return flat


class SyncConfig(BaseModel):
    """Validated, immutable configuration shared by every component of a run."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    service: str = "github"
    repo: Optional[str] = None
    remote: str = "origin"
    case_sensitive: bool = Field(False, alias="case-sensitive")
    label_whitespace: bool = Field(True, alias="label-whitespace")
    confirm_create: bool = Field(True, alias="confirm-create")
    context: int = Field(3, ge=0)
    signature: Optional[str] = DEFAULT_SIGNATURE
    labels: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_LABELS))
    github_host: str = Field("github.com", alias="github.host")
    github_token: Optional[str] = Field(None, alias="github.token")

    @model_validator(mode="before")
    @classmethod
    def _collect_labels(cls, data: Any) -> Any:
        """Gather ``label.<trigger>`` keys into the ordered ``labels`` mapping."""
        if not isinstance(data, Mapping):
            return data

        flat = _flatten(data)
        labels: Dict[str, str] = dict(DEFAULT_LABELS)
        remaining: Dict[str, Any] = {}
        for key, value in flat.items():
            prefix = next((candidate for candidate in _LABEL_PREFIXES if key.startswith(candidate)), None)
            if prefix is None:
                remaining[key] = value
                continue
            trigger = key[len(prefix):]
            if not trigger:
                raise ValueError(f"Label key '{key}' does not name a trigger.")
            if value is None or value is False or value == "":
                labels.pop(trigger, None)
                continue
            if not isinstance(value, str):
                raise ValueError(f"Label for trigger '{trigger}' must be a string, got {value!r}.")
            labels[trigger] = value.strip()

        remaining["labels"] = labels
        return remaining

    @field_validator("service")
    @classmethod
    def _normalise_service(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("signature")
    @classmethod
    def _blank_signature(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value

    def trigger_table(self) -> Dict[str, str]:
        """Return the ordered trigger -> label mapping.

        With ``label-whitespace`` enabled every trigger carries a trailing space
        so ``TODO`` does not match inside ``TODOS``.
        """
        suffix = " " if self.label_whitespace else ""
        return {f"{trigger}{suffix}": label for trigger, label in self.labels.items() if label}

    def with_overrides(self, **overrides: Any) -> "SyncConfig":
        """Return a copy with ``overrides`` applied (ignoring ``None`` values)."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return self.model_copy(update=values)


def load_config(path: Path | str | None, overrides: Mapping[str, Any] | None = None) -> SyncConfig:
    """Load YAML configuration from ``path`` and validate it.

    A missing file yields the defaults. ``overrides`` use the same keys as the
    file and take precedence over it.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            try:
                with config_path.open("r", encoding="utf-8") as handle:
                    loaded = yaml.safe_load(handle) or {}
            except yaml.YAMLError as error:
                raise ConfigError(f"Failed to parse config {config_path}: {error}") from error
            except OSError as error:
                raise ConfigError(f"Failed to read config {config_path}: {error}") from error
            if not isinstance(loaded, dict):
                raise ConfigError("Configuration must be a mapping at the top level.")
            data = _flatten(loaded)

    if overrides:
        data.update(_flatten(overrides))

    try:
        return SyncConfig.model_validate(data)
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration: {error}") from error
