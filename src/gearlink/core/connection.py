from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from gearlink.core.events import Lifecycle, LifecycleEmitter
from gearlink.core.executor import CommandExecutor, run_command
from gearlink.core.registry import DeviceRegistry
from gearlink.errors import NotFound, RemoteFailure, UnsupportedOperation
from gearlink.models import DeviceRecord, Universe

logger = logging.getLogger(__name__)

Refresh = Callable[[], Awaitable[list[DeviceRecord]]]


class ConnectionCoordinator:
    """Issues per-device commands and reconciles the registry from their results.

    connect/disconnect update the cached connection flag on success. Pairing
    state is owned by the backend, so pair/forget/unpair re-fetch the list
    instead of editing the cache. Commands for the same device id run one at a
    time; different ids do not wait on each other.
    """

    def __init__(
        self,
        universe: Universe,
        registry: DeviceRegistry,
        executor: CommandExecutor | None,
        emitter: LifecycleEmitter,
        refresh: Refresh | None = None,
    ) -> None:
        self._universe = universe
        self._registry = registry
        self._executor = executor
        self._emitter = emitter
        self._refresh = refresh
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    async def connect(self, device_id: str) -> DeviceRecord | None:
        return await self._set_connected(device_id, True)

    async def disconnect(self, device_id: str) -> DeviceRecord | None:
        return await self._set_connected(device_id, False)

    async def pair(self, device_id: str, pin: str = "") -> DeviceRecord | None:
        return await self._change_pairing(
            "pair", device_id, Lifecycle.PAIRED, Lifecycle.PAIR_FAILED, pin=pin
        )

    async def forget(self, device_id: str) -> DeviceRecord | None:
        return await self._change_pairing(
            "forget", device_id, Lifecycle.FORGOTTEN, Lifecycle.FORGET_FAILED
        )

    async def unpair(self, device_id: str) -> DeviceRecord | None:
        return await self._change_pairing(
            "unpair", device_id, Lifecycle.UNPAIRED, Lifecycle.UNPAIR_FAILED
        )

    async def signal(self, device_id: str) -> int:
        """Query the signal strength of a device and cache it as ``metadata.rssi``."""
        command = self._command("signal")
        async with self._device_lock(device_id):
            data = await self._run(command, device_id, Lifecycle.SIGNAL_FAILED)
            rssi = self._rssi(command, device_id, data.get("rssi"))

            record = self._registry.find(device_id)
            if record is not None:
                record = self._registry.upsert(
                    device_id, metadata={**record.metadata, "rssi": rssi}
                )
            self._emitter.device_event(
                Lifecycle.SIGNAL_UPDATED, device_id, record, rssi=rssi
            )
            return rssi

    def apply_remote_state(self, device_id: str, connected: bool) -> DeviceRecord | None:
        """Reconcile a connection change pushed by the backend."""
        record = self._mark(device_id, connected)
        outcome = Lifecycle.CONNECTED if connected else Lifecycle.DISCONNECTED
        self._emitter.device_event(outcome, device_id, record)
        return record

    async def _set_connected(self, device_id: str, connected: bool) -> DeviceRecord | None:
        op = "connect" if connected else "disconnect"
        command = self._command(op)
        failed = Lifecycle.CONNECT_FAILED if connected else Lifecycle.DISCONNECT_FAILED

        async with self._device_lock(device_id):
            logger.info("%s %s: %s", op.capitalize(), self._universe.name, device_id)
            await self._run(command, device_id, failed)

            record = self._mark(device_id, connected)
            outcome = Lifecycle.CONNECTED if connected else Lifecycle.DISCONNECTED
            self._emitter.device_event(outcome, device_id, record)
            return record

    async def _change_pairing(
        self,
        op: str,
        device_id: str,
        done: Lifecycle,
        failed: Lifecycle,
        **extra: Any,
    ) -> DeviceRecord | None:
        command = self._command(op)
        if self._refresh is None:
            raise UnsupportedOperation(f"{self._universe.name} cannot refresh after {op}")

        async with self._device_lock(device_id):
            logger.info("%s %s: %s", op.capitalize(), self._universe.name, device_id)
            await self._run(command, device_id, failed, **extra)

            devices = await self._refresh()
            record = self._registry.find(device_id)
            self._emitter.device_event(
                done,
                device_id,
                record,
                **{self._universe.list_key: [device.to_payload() for device in devices]},
            )
            return record

    async def _run(
        self, command: str, device_id: str, failed: Lifecycle, **extra: Any
    ) -> dict[str, Any]:
        try:
            return await run_command(
                self._executor, command, {"device_id": device_id, **extra}
            )
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.error("%s failed for %s: %s", command, device_id, message)
            self._emitter.device_failed(failed, device_id, message)
            raise

    def _rssi(self, command: str, device_id: str, value: Any) -> int:
        # a missing or null reading is reported as 0
        try:
            return int(value or 0)
        except (OverflowError, TypeError, ValueError):
            error = RemoteFailure(command, f"Invalid rssi value: {value!r}")
            logger.error("%s failed for %s: %s", command, device_id, error.message)
            self._emitter.device_failed(Lifecycle.SIGNAL_FAILED, device_id, error.message)
            raise error from None

    def _mark(self, device_id: str, connected: bool) -> DeviceRecord | None:
        try:
            return self._registry.upsert(device_id, connected=connected)
        except NotFound:
            logger.debug(
                "%s is not cached in %s, skipping cache update",
                device_id,
                self._universe.name,
            )
            return None

    def _command(self, op: str) -> str:
        command: str | None = getattr(self._universe, f"{op}_command")
        if command is None:
            raise UnsupportedOperation(f"{self._universe.name} does not support {op}")
        return command

    @asynccontextmanager
    async def _device_lock(self, device_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(device_id, asyncio.Lock())
        self._holders[device_id] = self._holders.get(device_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[device_id] -= 1
            if not self._holders[device_id]:
                del self._holders[device_id]
                del self._locks[device_id]

    def busy(self, device_id: str) -> bool:
        return device_id in self._locks
