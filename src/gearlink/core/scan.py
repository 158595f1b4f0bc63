from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from gearlink.core.events import LifecycleEmitter
from gearlink.core.executor import CommandExecutor, run_command
from gearlink.core.registry import DeviceRegistry
from gearlink.errors import BackendUnavailable, RemoteFailure
from gearlink.models import DeviceRecord, ScanSession, Universe

logger = logging.getLogger(__name__)


class ScanCoordinator:
    """Single-flight discovery for one universe: ``Idle -> Scanning -> Idle``."""

    def __init__(
        self,
        universe: Universe,
        registry: DeviceRegistry,
        executor: CommandExecutor | None,
        emitter: LifecycleEmitter,
    ) -> None:
        self._universe = universe
        self._registry = registry
        self._executor = executor
        self._emitter = emitter
        self._session = ScanSession()
        # resolved when the scan in flight ends; created on the loop running it
        self._finished: asyncio.Future[None] | None = None

    @property
    def scanning(self) -> bool:
        return self._session.scanning

    @property
    def session(self) -> ScanSession:
        return replace(self._session)

    async def scan(self, **args: Any) -> list[DeviceRecord]:
        name = self._universe.name

        if self._executor is None:
            error = BackendUnavailable()
            logger.error("Cannot scan %s: %s", name, error)
            self._emitter.scan_error(str(error))
            raise error

        if self._session.scanning:
            logger.warning("Scan of %s already in progress", name)
            return self._registry.all()

        self._session.scanning = True
        finished = asyncio.get_running_loop().create_future()
        self._finished = finished
        try:
            self._emitter.scan_started()
            logger.info("Scanning for %s...", name)

            data = await run_command(
                self._executor,
                self._universe.list_command,
                {**self._universe.scan_args, **args},
            )
            self._registry.replace_all(self._parse(data))
            self._session.last_scan = datetime.now(timezone.utc)

            total = self._registry.count()
            connected = self._registry.connected_count()
            logger.info("Found %d %s (%d connected)", total, name, connected)

            records = self._registry.all()
            self._emitter.scan_complete(records, total, connected)
            return records

        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.error("Scan of %s failed: %s", name, message)
            self._emitter.scan_error(message)
            raise

        finally:
            self._session.scanning = False
            self._finished = None
            finished.set_result(None)

    async def wait_idle(self) -> None:
        while self._finished is not None:
            # shielded so a cancelled waiter does not cancel the scan's future
            await asyncio.shield(self._finished)

    async def refresh(self, **args: Any) -> list[DeviceRecord]:
        """Run a scan whose result is guaranteed to postdate this call."""
        await self.wait_idle()
        return await self.scan(**args)

    def _parse(self, data: dict[str, Any]) -> list[DeviceRecord]:
        entries = data.get(self._universe.list_key) or []
        if not isinstance(entries, list):
            raise RemoteFailure(
                self._universe.list_command,
                f"Expected a list under '{self._universe.list_key}'",
            )
        try:
            return [
                DeviceRecord.from_backend(entry, self._universe.kind)
                for entry in entries
            ]
        except (AttributeError, TypeError, ValueError) as exc:
            raise RemoteFailure(self._universe.list_command, str(exc)) from exc
