"""Test doubles shared by the coordinator tests."""

from __future__ import annotations

import asyncio
from typing import Any

from gearlink.core import CommandResult, LocalEventBus

Response = CommandResult | BaseException


class RecordingBus(LocalEventBus):
    """Local bus that also keeps every publication in order."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, topic: str, payload: dict[str, Any] | None = None) -> None:
        self.events.append((topic, payload if payload is not None else {}))
        super().emit(topic, payload)

    def published(self) -> list[str]:
        return [topic for topic, _ in self.events]

    def payloads(self, topic: str) -> list[dict[str, Any]]:
        return [payload for name, payload in self.events if name == topic]


class StubExecutor:
    """Scripted executor: one response (or a queue of them) per command name.

    ``hold(name)`` parks calls to ``name`` until ``release(name)``.
    """

    def __init__(self, responses: dict[str, Response | list[Response]] | None = None):
        self.responses: dict[str, Response | list[Response]] = dict(responses or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._gates: dict[str, asyncio.Event] = {}

    def hold(self, name: str) -> None:
        self._gates[name] = asyncio.Event()

    def release(self, name: str) -> None:
        self._gates.pop(name).set()

    def count(self, name: str) -> int:
        return sum(1 for command, _ in self.calls if command == name)

    async def execute(self, name: str, args: dict[str, Any]) -> CommandResult:
        self.calls.append((name, dict(args)))
        gate = self._gates.get(name)
        if gate is not None:
            await gate.wait()

        response = self.responses.get(name, CommandResult.ok())
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, BaseException):
            raise response
        return response


def instrument(device_id: str, connected: bool = False, **extra: Any) -> dict[str, Any]:
    return {"id": device_id, "name": f"Instrument {device_id}", "type": "usb",
            "connected": connected, **extra}


def bt_device(address: str, name: str = "BLE", **extra: Any) -> dict[str, Any]:
    return {"address": address, "name": name, **extra}
