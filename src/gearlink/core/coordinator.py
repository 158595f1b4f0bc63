from __future__ import annotations

import asyncio
from typing import Any

from gearlink.core.adapter import BluetoothAdapter
from gearlink.core.connection import ConnectionCoordinator, Refresh
from gearlink.core.events import EventBus, LifecycleEmitter
from gearlink.core.executor import CommandExecutor
from gearlink.core.monitor import SignalMonitor
from gearlink.core.registry import DeviceRegistry
from gearlink.core.scan import ScanCoordinator
from gearlink.models import (
    BLUETOOTH_AVAILABLE,
    BLUETOOTH_PAIRED,
    AdapterStatus,
    DeviceRecord,
    DeviceStats,
    Universe,
)


class DeviceCoordinator:
    """Registry, scan guard and connection commands for one device universe."""

    def __init__(
        self,
        universe: Universe,
        executor: CommandExecutor | None,
        bus: EventBus,
        refresh: Refresh | None = None,
    ) -> None:
        self.universe = universe
        self.registry = DeviceRegistry()
        self.emitter = LifecycleEmitter(bus, universe)
        self.scanner = ScanCoordinator(universe, self.registry, executor, self.emitter)
        self.connections = ConnectionCoordinator(
            universe,
            self.registry,
            executor,
            self.emitter,
            refresh=refresh or self.scanner.refresh,
        )

    async def scan(self, **args: Any) -> list[DeviceRecord]:
        return await self.scanner.scan(**args)

    async def refresh(self, **args: Any) -> list[DeviceRecord]:
        return await self.scanner.refresh(**args)

    async def connect(self, device_id: str) -> DeviceRecord | None:
        return await self.connections.connect(device_id)

    async def disconnect(self, device_id: str) -> DeviceRecord | None:
        return await self.connections.disconnect(device_id)

    async def pair(self, device_id: str, pin: str = "") -> DeviceRecord | None:
        return await self.connections.pair(device_id, pin=pin)

    async def forget(self, device_id: str) -> DeviceRecord | None:
        return await self.connections.forget(device_id)

    async def unpair(self, device_id: str) -> DeviceRecord | None:
        return await self.connections.unpair(device_id)

    async def signal(self, device_id: str) -> int:
        return await self.connections.signal(device_id)

    def get(self, device_id: str) -> DeviceRecord | None:
        return self.registry.find(device_id)

    def get_all(self) -> list[DeviceRecord]:
        return self.registry.all()

    def get_connected(self) -> list[DeviceRecord]:
        return self.registry.connected()

    def get_count(self) -> int:
        return self.registry.count()

    def get_connected_count(self) -> int:
        return self.registry.connected_count()

    @property
    def scanning(self) -> bool:
        return self.scanner.scanning

    def stats(self) -> DeviceStats:
        total = self.registry.count()
        connected = self.registry.connected_count()
        session = self.scanner.session
        return DeviceStats(
            total=total,
            connected=connected,
            disconnected=total - connected,
            scanning=session.scanning,
            last_scan=session.last_scan,
        )


class BluetoothCoordinator:
    """Available and paired Bluetooth devices as two independent universes.

    Discovery fills ``available``. Pairing commands run against ``paired`` and
    always re-fetch the paired list from the backend afterwards. The adapter
    and the signal monitor hang off the same backend connection.
    """

    def __init__(
        self,
        executor: CommandExecutor | None,
        bus: EventBus,
        scan_duration: int = 5,
        scan_filter: str = "",
        signal_interval: float = 5.0,
    ) -> None:
        self.available = DeviceCoordinator(
            BLUETOOTH_AVAILABLE.with_scan_args(duration=scan_duration, filter=scan_filter),
            executor,
            bus,
        )
        self.paired = DeviceCoordinator(BLUETOOTH_PAIRED, executor, bus)
        self.adapter = BluetoothAdapter(executor, bus, scan_timeout=scan_duration)
        self.monitor = SignalMonitor(self.available, interval=signal_interval)

    async def scan(self, **args: Any) -> list[DeviceRecord]:
        return await self.available.scan(**args)

    async def list_paired(self) -> list[DeviceRecord]:
        return await self.paired.scan()

    async def pair(self, device_id: str, pin: str = "") -> DeviceRecord | None:
        return await self.paired.pair(device_id, pin=pin)

    async def forget(self, device_id: str) -> DeviceRecord | None:
        return await self.paired.forget(device_id)

    async def unpair(self, device_id: str) -> DeviceRecord | None:
        return await self.paired.unpair(device_id)

    async def connect(self, device_id: str) -> DeviceRecord | None:
        return await self.paired.connect(device_id)

    async def disconnect(self, device_id: str) -> DeviceRecord | None:
        return await self.paired.disconnect(device_id)

    async def signal(self, device_id: str) -> int:
        return await self.available.signal(device_id)

    async def load_status(self) -> AdapterStatus:
        return await self.adapter.load_status()

    async def configure(self, enabled: bool, scan_timeout: int | None = None) -> AdapterStatus:
        return await self.adapter.configure(enabled, scan_timeout=scan_timeout)

    async def reload(self) -> None:
        """Re-read the adapter status and the paired list, e.g. after the backend reconnects.

        Both requests run even when one fails; the first failure is raised.
        """
        results = await asyncio.gather(
            self.load_status(), self.list_paired(), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    def start_monitor(self, interval: float | None = None) -> None:
        self.monitor.start(interval)

    async def stop_monitor(self) -> None:
        await self.monitor.stop()

    def stats(self) -> dict[str, DeviceStats]:
        return {
            "available": self.available.stats(),
            "paired": self.paired.stats(),
        }
