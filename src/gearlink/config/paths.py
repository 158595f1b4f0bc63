from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "gearlink"
CONFIG_FILENAME = "config.toml"
FIXTURE_FILENAME = "devices.toml"


def xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def config_dir() -> Path:
    return xdg_config_home() / APP_NAME


def default_config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def expand_path(value: str) -> Path:
    """Expand ``~`` and environment variables in a path taken from config."""
    return Path(os.path.expandvars(os.path.expanduser(value)))
