"""Periodic signal strength polling for nearby Bluetooth devices."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from gearlink.errors import GearlinkError

if TYPE_CHECKING:
    from gearlink.core.coordinator import DeviceCoordinator

logger = logging.getLogger(__name__)


class SignalMonitor:
    """Queries the signal of every cached device once per ``interval`` seconds.

    A failed reading is already published as ``signal_failed`` by the
    coordinator; the monitor logs it and moves on to the next device.
    """

    def __init__(self, coordinator: DeviceCoordinator, interval: float = 5.0) -> None:
        self._coordinator = coordinator
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval: float | None = None) -> None:
        """Start polling on the running loop, replacing a poller that is already running."""
        if interval is not None:
            self.interval = interval
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.get_running_loop().create_task(self._poll())
        logger.info("Signal monitoring started, every %ss", self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.wait({task})
        logger.info("Signal monitoring stopped")

    async def poll_once(self) -> dict[str, int]:
        readings: dict[str, int] = {}
        for record in self._coordinator.get_all():
            try:
                readings[record.id] = await self._coordinator.signal(record.id)
            except GearlinkError as exc:
                logger.debug("No signal reading for %s: %s", record.id, exc)
        return readings

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.poll_once()
