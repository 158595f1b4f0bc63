"""Device universe configuration.

A universe is an independent device category with its own registry and scan
guard. Coordinators are generic; everything that differs between instruments
and Bluetooth devices (command names, payload keys, topics) lives here.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from gearlink.models.device import DeviceKind


class Topics(BaseModel):
    """Event bus topic per lifecycle outcome. ``None`` disables the event."""

    model_config = {"frozen": True, "extra": "forbid"}

    scan_started: str | None = None
    scan_complete: str | None = None
    scan_error: str | None = None
    connected: str | None = None
    disconnected: str | None = None
    connect_failed: str | None = None
    disconnect_failed: str | None = None
    paired: str | None = None
    pair_failed: str | None = None
    forgotten: str | None = None
    forget_failed: str | None = None
    unpaired: str | None = None
    unpair_failed: str | None = None
    signal_updated: str | None = None
    signal_failed: str | None = None

    def names(self) -> list[str]:
        return [topic for topic in self.model_dump().values() if topic]


class Universe(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    name: str
    kind: DeviceKind

    list_command: str
    connect_command: str | None = None
    disconnect_command: str | None = None
    pair_command: str | None = None
    forget_command: str | None = None
    unpair_command: str | None = None
    signal_command: str | None = None
    scan_args: dict[str, Any] = Field(default_factory=dict)

    list_key: str = "devices"
    id_key: str = "deviceId"
    record_key: str = "device"

    topics: Topics = Field(default_factory=Topics)

    def with_scan_args(self, **args: Any) -> Universe:
        return self.model_copy(update={"scan_args": {**self.scan_args, **args}})


INSTRUMENTS = Universe(
    name="instruments",
    kind=DeviceKind.INSTRUMENT,
    list_command="list_devices",
    connect_command="connect_device",
    disconnect_command="disconnect_device",
    list_key="instruments",
    id_key="instrumentId",
    record_key="instrument",
    topics=Topics(
        scan_started="instruments:scan:started",
        scan_complete="instruments:scan:complete",
        scan_error="instruments:scan:error",
        connected="instruments:connected",
        disconnected="instruments:disconnected",
        connect_failed="instruments:connect:failed",
        disconnect_failed="instruments:disconnect:failed",
    ),
)

BLUETOOTH_AVAILABLE = Universe(
    name="bluetooth-available",
    kind=DeviceKind.BLUETOOTH_AVAILABLE,
    list_command="bluetooth_scan",
    signal_command="bluetooth_signal",
    scan_args={"duration": 5, "filter": ""},
    topics=Topics(
        scan_started="bluetooth:scan_started",
        scan_complete="bluetooth:scanned",
        scan_error="bluetooth:scan_failed",
        signal_updated="bluetooth:signal",
        signal_failed="bluetooth:signal_failed",
    ),
)

BLUETOOTH_PAIRED = Universe(
    name="bluetooth-paired",
    kind=DeviceKind.BLUETOOTH_PAIRED,
    list_command="bluetooth_paired",
    connect_command="bluetooth_connect",
    disconnect_command="bluetooth_disconnect",
    pair_command="bluetooth_pair",
    forget_command="bluetooth_forget",
    unpair_command="bluetooth_unpair",
    topics=Topics(
        scan_started="bluetooth:paired_started",
        scan_complete="bluetooth:paired_list",
        scan_error="bluetooth:paired_failed",
        connected="bluetooth:connected",
        disconnected="bluetooth:disconnected",
        connect_failed="bluetooth:connect_failed",
        disconnect_failed="bluetooth:disconnect_failed",
        paired="bluetooth:paired",
        pair_failed="bluetooth:pair_failed",
        forgotten="bluetooth:forgotten",
        forget_failed="bluetooth:forget_failed",
        unpaired="bluetooth:unpaired",
        unpair_failed="bluetooth:unpair_failed",
    ),
)
