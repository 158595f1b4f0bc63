"""Bluetooth adapter status and configuration.

The adapter is a single backend object rather than a device universe, so it
publishes its own topics instead of going through ``LifecycleEmitter``.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from gearlink.core.events import EventBus
from gearlink.core.executor import CommandExecutor, run_command
from gearlink.errors import RemoteFailure
from gearlink.models import AdapterStatus

logger = logging.getLogger(__name__)

STATUS_COMMAND = "bluetooth_status"
CONFIG_COMMAND = "bluetooth_config"

STATUS_LOADED = "bluetooth:status:loaded"
STATUS_FAILED = "bluetooth:status:failed"
CONFIG_UPDATED = "bluetooth:config:updated"
CONFIG_FAILED = "bluetooth:config:failed"

TOPICS = (STATUS_LOADED, STATUS_FAILED, CONFIG_UPDATED, CONFIG_FAILED)


class BluetoothAdapter:
    """Reads and changes whether the backend's Bluetooth adapter is enabled."""

    def __init__(
        self, executor: CommandExecutor | None, bus: EventBus, scan_timeout: int = 5
    ) -> None:
        self._executor = executor
        self._bus = bus
        self._scan_timeout = scan_timeout
        self._status = AdapterStatus()

    @property
    def status(self) -> AdapterStatus:
        return self._status

    @property
    def enabled(self) -> bool:
        return self._status.enabled

    async def load_status(self) -> AdapterStatus:
        data = await self._run(STATUS_COMMAND, {}, STATUS_FAILED)
        try:
            status = AdapterStatus.model_validate(data)
        except ValidationError as exc:
            error = RemoteFailure(STATUS_COMMAND, f"Invalid status: {exc}")
            self._report(STATUS_FAILED, error)
            raise error from exc

        self._status = status
        logger.info("Bluetooth adapter is %s", "enabled" if status.enabled else "disabled")
        self._bus.emit(STATUS_LOADED, status.model_dump(mode="json"))
        return status

    async def configure(self, enabled: bool, scan_timeout: int | None = None) -> AdapterStatus:
        """Enable or disable the adapter; ``scan_timeout`` defaults to the scan duration."""
        args = {"enabled": enabled, "scan_timeout": scan_timeout or self._scan_timeout}
        await self._run(CONFIG_COMMAND, args, CONFIG_FAILED)

        self._status = self._status.model_copy(update=args)
        logger.info("Bluetooth adapter configured: %s", args)
        self._bus.emit(CONFIG_UPDATED, dict(args))
        return self._status

    async def _run(self, command: str, args: dict[str, Any], failed: str) -> dict[str, Any]:
        try:
            return await run_command(self._executor, command, args)
        except Exception as exc:
            self._report(failed, exc)
            raise

    def _report(self, topic: str, exc: Exception) -> None:
        message = str(exc) or type(exc).__name__
        logger.error("%s: %s", topic, message)
        self._bus.emit(topic, {"error": message})
