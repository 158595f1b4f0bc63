"""Wires the coordinators to an event bus.

The hub owns the instrument and Bluetooth coordinators and turns intent
topics published by the presentation layer into coordinator calls. A
``backend:connected`` notification reloads the adapter status and the paired
list. Intent handlers only schedule work: failures are already published as
lifecycle events by the coordinators, the hub just logs the finished task.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from gearlink.config import Settings
from gearlink.core.coordinator import BluetoothCoordinator, DeviceCoordinator
from gearlink.core.events import EventBus, Handler, Payload, Unsubscribe
from gearlink.core.executor import CommandExecutor
from gearlink.models import INSTRUMENTS, DeviceStats

logger = logging.getLogger(__name__)

Action = Callable[[Payload], Coroutine[Any, Any, Any]]


def _device_id(payload: Payload) -> str:
    device_id = payload.get("device_id")
    if not device_id:
        raise ValueError("Intent payload is missing 'device_id'")
    return str(device_id)


def _enabled(payload: Payload) -> bool:
    enabled = payload.get("enabled")
    if not isinstance(enabled, bool):
        raise ValueError("Intent payload needs a boolean 'enabled'")
    return enabled


class DeviceHub:
    def __init__(
        self,
        executor: CommandExecutor | None,
        bus: EventBus,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings()
        self.bus = bus
        self.instruments = DeviceCoordinator(INSTRUMENTS, executor, bus)
        self.bluetooth = BluetoothCoordinator(
            executor,
            bus,
            scan_duration=settings.bluetooth.scan_duration,
            scan_filter=settings.bluetooth.scan_filter,
            signal_interval=settings.bluetooth.signal_interval,
        )
        self._subscriptions: list[Unsubscribe] = []
        self._tasks: set[asyncio.Task[Any]] = set()

    def bind(self) -> None:
        if self._subscriptions:
            return

        instruments = self.instruments
        bluetooth = self.bluetooth

        async def start_monitor(payload: Payload) -> None:
            interval = payload.get("interval")
            bluetooth.start_monitor(None if interval is None else float(interval))

        intents: dict[str, Action] = {
            "instruments:scan_requested": lambda _: instruments.scan(),
            "instruments:connect_requested": lambda p: instruments.connect(_device_id(p)),
            "instruments:disconnect_requested": lambda p: instruments.disconnect(
                _device_id(p)
            ),
            "device:discovered": lambda _: instruments.scan(),
            "bluetooth:scan_requested": lambda _: bluetooth.scan(),
            "bluetooth:paired_requested": lambda _: bluetooth.list_paired(),
            "bluetooth:pair_requested": lambda p: bluetooth.pair(
                _device_id(p), pin=str(p.get("pin") or "")
            ),
            "bluetooth:forget_requested": lambda p: bluetooth.forget(_device_id(p)),
            "bluetooth:unpair_requested": lambda p: bluetooth.unpair(_device_id(p)),
            "bluetooth:signal_requested": lambda p: bluetooth.signal(_device_id(p)),
            "bluetooth:status_requested": lambda _: bluetooth.load_status(),
            "bluetooth:config_requested": lambda p: bluetooth.configure(
                _enabled(p), scan_timeout=p.get("scan_timeout")
            ),
            "bluetooth:monitor_start_requested": start_monitor,
            "bluetooth:monitor_stop_requested": lambda _: bluetooth.stop_monitor(),
            "backend:connected": lambda _: bluetooth.reload(),
            "devices:connect_requested": lambda p: bluetooth.connect(_device_id(p)),
            "devices:disconnect_requested": lambda p: bluetooth.disconnect(
                _device_id(p)
            ),
        }
        for topic, action in intents.items():
            self._subscriptions.append(self.bus.subscribe(topic, self._spawn(topic, action)))

        pushes: dict[str, Handler] = {
            "device:connected": lambda p: instruments.connections.apply_remote_state(
                _device_id(p), True
            ),
            "device:disconnected": lambda p: instruments.connections.apply_remote_state(
                _device_id(p), False
            ),
        }
        for topic, handler in pushes.items():
            self._subscriptions.append(self.bus.subscribe(topic, handler))

        logger.debug("Bound %d topics", len(self._subscriptions))

    def unbind(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()

    async def close(self) -> None:
        """Stop listening, stop the signal monitor and wait for pending requests."""
        self.unbind()
        await self.bluetooth.stop_monitor()
        await self.drain()

    @property
    def bound(self) -> bool:
        return bool(self._subscriptions)

    async def drain(self) -> None:
        """Wait until every task started from an intent has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def snapshot(self) -> dict[str, DeviceStats]:
        return {
            "instruments": self.instruments.stats(),
            "bluetooth_available": self.bluetooth.available.stats(),
            "bluetooth_paired": self.bluetooth.paired.stats(),
        }

    def _spawn(self, topic: str, action: Action) -> Handler:
        async def run(payload: Payload) -> Any:
            return await action(payload)

        def handler(payload: Payload) -> None:
            task = asyncio.get_running_loop().create_task(run(payload))
            self._tasks.add(task)
            task.add_done_callback(lambda done: self._finished(topic, done))

        return handler

    def _finished(self, topic: str, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Request %s failed: %s", topic, exc)
