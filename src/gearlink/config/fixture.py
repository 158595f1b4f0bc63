"""Simulated backend inventory loaded from TOML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from .toml import read_toml, render_table, write_lines

# Entries stay plain dicts: the backend reports whatever fields it has and the
# coordinator passes unknown ones through as metadata.
DeviceEntry = dict[str, Any]


class BluetoothFixture(BaseModel):
    model_config = {"extra": "forbid"}

    enabled: bool = True
    available: list[DeviceEntry] = Field(default_factory=list)
    paired: list[DeviceEntry] = Field(default_factory=list)


class BackendFixture(BaseModel):
    model_config = {"extra": "forbid"}

    instruments: list[DeviceEntry] = Field(default_factory=list)
    bluetooth: BluetoothFixture = Field(default_factory=BluetoothFixture)


def default_fixture() -> BackendFixture:
    return BackendFixture(
        instruments=[
            {"id": "usb-piano", "name": "Stage Piano", "type": "usb", "status": 2},
            {"id": "usb-drums", "name": "E-Drum Kit", "type": "usb", "status": 1},
            {"id": "virtual-1", "name": "Virtual Synth", "type": "virtual"},
        ],
        bluetooth=BluetoothFixture(
            available=[
                {"address": "AA:BB:CC:00:00:01", "name": "BLE Keys", "rssi": -52},
                {"address": "AA:BB:CC:00:00:02", "name": "BLE Pads", "rssi": -71},
            ],
            paired=[
                {
                    "address": "AA:BB:CC:00:00:03",
                    "name": "BLE Wind",
                    "type": "ble",
                    "connected": False,
                },
            ],
        ),
    )


def load_fixture(path: Path) -> BackendFixture:
    data = read_toml(path, "fixture")
    try:
        return BackendFixture.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid fixture file: {path}\n{exc}") from exc


def render_fixture_toml(fixture: BackendFixture) -> str:
    sections = (
        ("instruments", fixture.instruments),
        ("bluetooth.available", fixture.bluetooth.available),
        ("bluetooth.paired", fixture.bluetooth.paired),
    )
    lines = ["# gearlink simulated devices", ""]
    lines += render_table("[bluetooth]", {"enabled": fixture.bluetooth.enabled})
    for name, entries in sections:
        for entry in entries:
            lines += render_table(f"[[{name}]]", entry)
    return "\n".join(lines)


def write_fixture(fixture: BackendFixture, path: Path) -> None:
    write_lines(path, [render_fixture_toml(fixture)])
