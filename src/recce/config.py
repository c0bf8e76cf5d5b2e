"""Recorder configuration: defaults, settings loading and option functions."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recce.errors import ConfigLoadError, ErrorContext


class RecceSettings(BaseSettings):
    """Run-wide defaults for recorders.

    Every field can be overridden with a ``RECCE_``-prefixed environment
    variable, e.g. ``RECCE_OUTPUT_DIR=build/recordings``.
    """

    model_config = SettingsConfigDict(
        env_prefix="RECCE_",
        extra="ignore",
    )

    host: str = "http://localhost"
    port: str = "8080"
    group: str = "rest"
    output_dir: str = "recordings"
    prefix: str = "rec"

    @field_validator("host", "port", "group", "output_dir", "prefix", mode="before")
    @classmethod
    def coerce_scalars(cls, v: Any) -> Any:
        # YAML reads `port: 8080` as an int
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    def to_config(self) -> RecorderConfig:
        return RecorderConfig(
            host=self.host,
            port=self.port,
            group=self.group,
            output_dir=self.output_dir,
            prefix=self.prefix,
        )


@dataclass(frozen=True)
class RecorderConfig:
    """Display and file-naming metadata for one recorder.

    None of these values affect the request sent to the handler; ``host`` and
    ``port`` only appear in the generated ``.rest`` file. ``prefix`` is
    accepted but not used in file names.
    """

    host: str = "http://localhost"
    port: str = "8080"
    group: str = "rest"
    output_dir: str = "recordings"
    prefix: str = "rec"


Option = Callable[[RecorderConfig], RecorderConfig]


def with_host(host: str) -> Option:
    """Set the host shown in the ``.rest`` file."""

    def apply(config: RecorderConfig) -> RecorderConfig:
        return replace(config, host=host)

    return apply


def with_port(port: str) -> Option:
    """Set the port shown in the ``.rest`` file."""

    def apply(config: RecorderConfig) -> RecorderConfig:
        return replace(config, port=str(port))

    return apply


def with_group(group: str) -> Option:
    """Set the group, a path-like string such as ``tasks/create``.

    Each segment becomes a nested directory under the output directory.
    """

    def apply(config: RecorderConfig) -> RecorderConfig:
        return replace(config, group=group)

    return apply


def with_output_directory(output_dir: str | Path) -> Option:
    """Set the root directory for recorded scenarios."""

    def apply(config: RecorderConfig) -> RecorderConfig:
        return replace(config, output_dir=str(output_dir))

    return apply


def with_prefix(prefix: str) -> Option:
    """Set the filename prefix. Stored on the config only."""

    def apply(config: RecorderConfig) -> RecorderConfig:
        return replace(config, prefix=prefix)

    return apply


def resolve_config(*options: Option, settings: RecceSettings | None = None) -> RecorderConfig:
    """Apply options, in order, on top of the run-wide defaults."""
    config = (settings or RecceSettings()).to_config()
    for option in options:
        config = option(config)
    return config


def load_settings(config_path: str | Path | None = None) -> RecceSettings:
    """Load settings from an optional YAML file and the environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            config_data = _load_yaml(config_path)

    config_data.update(_get_env_overrides())
    return RecceSettings(**config_data)


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(
            f"Failed to parse YAML configuration: {e}",
            context=ErrorContext(path=str(path)),
            cause=e,
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Configuration must be a YAML mapping, got {type(data).__name__}",
            context=ErrorContext(path=str(path)),
        )
    return data


def _get_env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in RecceSettings.model_fields:
        value = os.environ.get(f"RECCE_{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


__all__ = [
    "Option",
    "RecceSettings",
    "RecorderConfig",
    "load_settings",
    "resolve_config",
    "with_group",
    "with_host",
    "with_output_directory",
    "with_port",
    "with_prefix",
]
