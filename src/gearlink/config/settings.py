from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, expand_path
from .toml import read_toml, render_table, write_lines

CONFIG_ENV_VAR = "GEARLINK_CONFIG"


class BackendConfig(BaseModel):
    """Simulated backend: per-command delay and an optional inventory file."""

    model_config = {"frozen": True, "extra": "forbid"}

    latency: float = Field(default=0.05, ge=0)
    fixture: str = ""


class BluetoothConfig(BaseModel):
    """Defaults for Bluetooth discovery, overridable per scan."""

    model_config = {"frozen": True, "extra": "forbid"}

    scan_duration: int = Field(default=5, ge=1, le=30)
    scan_filter: str = ""
    signal_interval: float = Field(default=5.0, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    backend: BackendConfig = Field(default_factory=BackendConfig)
    bluetooth: BluetoothConfig = Field(default_factory=BluetoothConfig)


class ConfigLocation(NamedTuple):
    path: Path
    exists: bool


def resolve_config_path(allow_missing: bool = False) -> ConfigLocation:
    """Locate the config file: ``$GEARLINK_CONFIG`` first, then the XDG default.

    An explicit ``$GEARLINK_CONFIG`` that does not exist is an error unless
    ``allow_missing`` is set; a missing default file just means defaults.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if not env_path:
        path = default_config_path()
        return ConfigLocation(path, path.exists())

    path = expand_path(env_path)
    if not path.exists() and not allow_missing:
        raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
    return ConfigLocation(path, path.exists())


def load_settings(path: Path) -> Settings:
    data = read_toml(path, "config")
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    location = resolve_config_path()
    return load_settings(location.path) if location.exists else Settings()


def fixture_path_from_settings(settings: Settings) -> Path | None:
    if not settings.backend.fixture:
        return None
    return expand_path(settings.backend.fixture)


def render_settings_toml(settings: Settings) -> str:
    lines = ["# gearlink configuration", ""]
    for section in Settings.model_fields:
        lines += render_table(f"[{section}]", getattr(settings, section).model_dump())
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    write_lines(path, [render_settings_toml(settings)])
