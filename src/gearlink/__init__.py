"""gearlink - keep a live view of instruments and Bluetooth peripherals in sync with the backend."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import (
    BluetoothCoordinator,
    CommandResult,
    DeviceCoordinator,
    DeviceHub,
    DeviceRegistry,
    LocalEventBus,
    MockBackend,
)
from .errors import (
    BackendUnavailable,
    GearlinkError,
    NotFound,
    RemoteFailure,
    UnsupportedOperation,
)
from .models import DeviceKind, DeviceRecord, DeviceStats, Universe

__all__ = [
    "BackendUnavailable",
    "BluetoothCoordinator",
    "CommandResult",
    "DeviceCoordinator",
    "DeviceHub",
    "DeviceKind",
    "DeviceRecord",
    "DeviceRegistry",
    "DeviceStats",
    "GearlinkError",
    "LocalEventBus",
    "MockBackend",
    "NotFound",
    "RemoteFailure",
    "Settings",
    "Universe",
    "UnsupportedOperation",
    "__version__",
    "get_settings",
]

__version__ = version("gearlink")
