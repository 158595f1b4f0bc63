"""Device models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Backend status code for a connected device (0 unknown, 1 disconnected).
STATUS_CONNECTED = 2

_ID_KEYS = ("id", "device_id", "address")
_RECORD_KEYS = {"id", "name", "type", "connected"}


class DeviceKind(str, Enum):
    INSTRUMENT = "instrument"
    BLUETOOTH_PAIRED = "bluetooth_paired"
    BLUETOOTH_AVAILABLE = "bluetooth_available"


class DeviceRecord(BaseModel):
    """A device as last reported by the backend."""

    model_config = {"frozen": True, "extra": "forbid"}

    id: str
    name: str = ""
    type: str = ""
    connected: bool = False
    kind: DeviceKind = DeviceKind.INSTRUMENT
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_backend(cls, raw: Mapping[str, Any], kind: DeviceKind) -> DeviceRecord:
        """Build a record from a backend device entry.

        Keys other than id/name/type/connected are kept verbatim in ``metadata``.
        """
        identifier = next(
            (raw[key] for key in _ID_KEYS if raw.get(key) not in (None, "")), None
        )
        if identifier is None:
            raise ValueError(f"Device entry has no identifier: {dict(raw)!r}")

        # pydantic parses the flag, so "false" or 0 mean disconnected and junk is rejected
        connected: Any = raw.get("connected")
        if connected is None:
            connected = raw.get("status") == STATUS_CONNECTED

        return cls(
            id=str(identifier),
            name=str(raw.get("name") or identifier),
            type=str(raw.get("type") or ""),
            connected=connected,
            kind=kind,
            metadata={k: v for k, v in raw.items() if k not in _RECORD_KEYS},
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class DeviceStats(BaseModel):
    """Counters derived from a registry snapshot."""

    total: int
    connected: int
    disconnected: int
    scanning: bool
    last_scan: datetime | None = None


@dataclass
class ScanSession:
    scanning: bool = False
    last_scan: datetime | None = None


class AdapterStatus(BaseModel):
    """Bluetooth adapter state as reported by ``bluetooth_status``.

    Fields beyond ``enabled`` and ``scan_timeout`` are backend specific and kept as is.
    """

    model_config = {"frozen": True, "extra": "allow"}

    enabled: bool = False
    scan_timeout: int | None = None
