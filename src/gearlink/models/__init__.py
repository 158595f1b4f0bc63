"""Data models for gearlink."""

from gearlink.models.device import (
    STATUS_CONNECTED,
    AdapterStatus,
    DeviceKind,
    DeviceRecord,
    DeviceStats,
    ScanSession,
)
from gearlink.models.universe import (
    BLUETOOTH_AVAILABLE,
    BLUETOOTH_PAIRED,
    INSTRUMENTS,
    Topics,
    Universe,
)

__all__ = [
    "BLUETOOTH_AVAILABLE",
    "BLUETOOTH_PAIRED",
    "INSTRUMENTS",
    "STATUS_CONNECTED",
    "AdapterStatus",
    "DeviceKind",
    "DeviceRecord",
    "DeviceStats",
    "ScanSession",
    "Topics",
    "Universe",
]
