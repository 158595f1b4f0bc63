from __future__ import annotations

from .fixture import (
    BackendFixture,
    BluetoothFixture,
    default_fixture,
    load_fixture,
    render_fixture_toml,
    write_fixture,
)
from .paths import (
    APP_NAME,
    CONFIG_FILENAME,
    FIXTURE_FILENAME,
    config_dir,
    default_config_path,
    expand_path,
)
from .settings import (
    CONFIG_ENV_VAR,
    BackendConfig,
    BluetoothConfig,
    ConfigLocation,
    Settings,
    fixture_path_from_settings,
    get_settings,
    load_settings,
    render_settings_toml,
    resolve_config_path,
    write_settings,
)

__all__ = [
    "APP_NAME",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "FIXTURE_FILENAME",
    "BackendConfig",
    "BackendFixture",
    "BluetoothConfig",
    "BluetoothFixture",
    "ConfigLocation",
    "Settings",
    "config_dir",
    "default_config_path",
    "default_fixture",
    "expand_path",
    "fixture_path_from_settings",
    "get_settings",
    "load_fixture",
    "load_settings",
    "render_fixture_toml",
    "render_settings_toml",
    "resolve_config_path",
    "write_fixture",
    "write_settings",
]
