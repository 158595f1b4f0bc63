"""In-process simulated backend for development and testing."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from gearlink.config import BackendFixture, default_fixture
from gearlink.core.executor import CommandResult
from gearlink.models import STATUS_CONNECTED

logger = logging.getLogger(__name__)

STATUS_DISCONNECTED = 1
BLUETOOTH_DISABLED = "Bluetooth is disabled"

Entry = dict[str, Any]


def _entry_id(entry: Entry) -> str:
    return str(entry.get("id") or entry.get("device_id") or entry.get("address") or "")


@dataclass
class MockBackend:
    """Answers every coordinator command from an in-memory device inventory.

    ``failures`` maps a command name to the error it should answer with, and
    ``online = False`` makes every call raise ``ConnectionError``.
    """

    instruments: list[Entry] = field(default_factory=list)
    available: list[Entry] = field(default_factory=list)
    paired: list[Entry] = field(default_factory=list)
    bluetooth_enabled: bool = True
    scan_timeout: int = 5
    latency: float = 0.0
    online: bool = True
    failures: dict[str, str] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list, repr=False)

    _handlers: dict[str, Callable[[dict[str, Any]], Awaitable[CommandResult]]] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._handlers = {
            "list_devices": self._list_devices,
            "connect_device": self._connect_instrument,
            "disconnect_device": self._disconnect_instrument,
            "bluetooth_scan": self._bluetooth_scan,
            "bluetooth_paired": self._bluetooth_paired,
            "bluetooth_pair": self._bluetooth_pair,
            "bluetooth_connect": self._bluetooth_connect,
            "bluetooth_disconnect": self._bluetooth_disconnect,
            "bluetooth_forget": self._bluetooth_forget,
            "bluetooth_unpair": self._bluetooth_forget,
            "bluetooth_signal": self._bluetooth_signal,
            "bluetooth_status": self._bluetooth_status,
            "bluetooth_config": self._bluetooth_config,
        }

    @classmethod
    def from_fixture(
        cls, fixture: BackendFixture | None = None, latency: float = 0.0
    ) -> MockBackend:
        fixture = fixture or default_fixture()
        return cls(
            instruments=copy.deepcopy(fixture.instruments),
            available=copy.deepcopy(fixture.bluetooth.available),
            paired=copy.deepcopy(fixture.bluetooth.paired),
            bluetooth_enabled=fixture.bluetooth.enabled,
            latency=latency,
        )

    @property
    def commands(self) -> list[str]:
        return list(self._handlers)

    def count(self, name: str) -> int:
        return sum(1 for command, _ in self.calls if command == name)

    async def execute(self, name: str, args: dict[str, Any]) -> CommandResult:
        self.calls.append((name, dict(args)))
        logger.debug("Mock backend received %s %s", name, args)

        if self.latency:
            await asyncio.sleep(self.latency)
        if not self.online:
            raise ConnectionError("Backend offline")
        if name in self.failures:
            return CommandResult.fail(self.failures[name])

        handler = self._handlers.get(name)
        if handler is None:
            return CommandResult.fail(f"Unknown command: {name}")
        return await handler(args)

    async def _list_devices(self, _args: dict[str, Any]) -> CommandResult:
        return CommandResult.ok(instruments=copy.deepcopy(self.instruments))

    async def _connect_instrument(self, args: dict[str, Any]) -> CommandResult:
        return self._set_instrument_status(args, STATUS_CONNECTED)

    async def _disconnect_instrument(self, args: dict[str, Any]) -> CommandResult:
        return self._set_instrument_status(args, STATUS_DISCONNECTED)

    def _set_instrument_status(self, args: dict[str, Any], status: int) -> CommandResult:
        entry = self._find(self.instruments, args.get("device_id"))
        if entry is None:
            return CommandResult.fail(f"Device not found: {args.get('device_id')}")
        entry["status"] = status
        entry.pop("connected", None)
        return CommandResult.ok()

    async def _bluetooth_scan(self, args: dict[str, Any]) -> CommandResult:
        if not self.bluetooth_enabled:
            return CommandResult.fail(BLUETOOTH_DISABLED)
        query = str(args.get("filter") or "").lower()
        devices = [
            entry
            for entry in self.available
            if not query or query in str(entry.get("name", "")).lower()
        ]
        return CommandResult.ok(devices=copy.deepcopy(devices))

    async def _bluetooth_paired(self, _args: dict[str, Any]) -> CommandResult:
        return CommandResult.ok(devices=copy.deepcopy(self.paired))

    async def _bluetooth_pair(self, args: dict[str, Any]) -> CommandResult:
        if not self.bluetooth_enabled:
            return CommandResult.fail(BLUETOOTH_DISABLED)
        device_id = args.get("device_id")
        if self._find(self.paired, device_id) is not None:
            return CommandResult.ok()

        entry = self._find(self.available, device_id)
        if entry is None:
            return CommandResult.fail(f"Device not found: {device_id}")
        paired = {**entry, "connected": False}
        paired.pop("rssi", None)
        self.paired.append(paired)
        return CommandResult.ok()

    async def _bluetooth_forget(self, args: dict[str, Any]) -> CommandResult:
        device_id = args.get("device_id")
        self.paired = [entry for entry in self.paired if _entry_id(entry) != device_id]
        return CommandResult.ok()

    async def _bluetooth_connect(self, args: dict[str, Any]) -> CommandResult:
        return self._set_paired_connected(args, True)

    async def _bluetooth_disconnect(self, args: dict[str, Any]) -> CommandResult:
        return self._set_paired_connected(args, False)

    def _set_paired_connected(self, args: dict[str, Any], connected: bool) -> CommandResult:
        if connected and not self.bluetooth_enabled:
            return CommandResult.fail(BLUETOOTH_DISABLED)
        entry = self._find(self.paired, args.get("device_id"))
        if entry is None:
            return CommandResult.fail(f"Device not paired: {args.get('device_id')}")
        entry["connected"] = connected
        return CommandResult.ok()

    async def _bluetooth_signal(self, args: dict[str, Any]) -> CommandResult:
        entry = self._find(self.available, args.get("device_id"))
        if entry is None:
            return CommandResult.fail(f"Device not found: {args.get('device_id')}")
        return CommandResult.ok(rssi=int(entry.get("rssi", 0)))

    async def _bluetooth_status(self, _args: dict[str, Any]) -> CommandResult:
        return CommandResult.ok(
            enabled=self.bluetooth_enabled, scan_timeout=self.scan_timeout, adapter="hci0"
        )

    async def _bluetooth_config(self, args: dict[str, Any]) -> CommandResult:
        enabled = args.get("enabled")
        if not isinstance(enabled, bool):
            return CommandResult.fail("Invalid config: enabled must be a boolean")
        self.bluetooth_enabled = enabled
        if args.get("scan_timeout"):
            self.scan_timeout = int(args["scan_timeout"])
        return CommandResult.ok()

    @staticmethod
    def _find(entries: list[Entry], device_id: Any) -> Entry | None:
        return next((entry for entry in entries if _entry_id(entry) == device_id), None)
