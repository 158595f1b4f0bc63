from __future__ import annotations

from .adapter import BluetoothAdapter
from .connection import ConnectionCoordinator
from .coordinator import BluetoothCoordinator, DeviceCoordinator
from .events import EventBus, Lifecycle, LifecycleEmitter, LocalEventBus
from .executor import CommandExecutor, CommandResult, run_command
from .hub import DeviceHub
from .mock_backend import MockBackend
from .monitor import SignalMonitor
from .registry import DeviceRegistry
from .scan import ScanCoordinator

__all__ = [
    "BluetoothAdapter",
    "BluetoothCoordinator",
    "CommandExecutor",
    "CommandResult",
    "ConnectionCoordinator",
    "DeviceCoordinator",
    "DeviceHub",
    "DeviceRegistry",
    "EventBus",
    "Lifecycle",
    "LifecycleEmitter",
    "LocalEventBus",
    "MockBackend",
    "ScanCoordinator",
    "SignalMonitor",
    "run_command",
]
