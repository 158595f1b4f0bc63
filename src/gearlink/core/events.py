"""Event bus contract and lifecycle event translation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any, Protocol

from gearlink.models import DeviceRecord, Universe

logger = logging.getLogger(__name__)

Payload = dict[str, Any]
Handler = Callable[[Payload], None]
Unsubscribe = Callable[[], None]


class EventBus(Protocol):
    def emit(self, topic: str, payload: Payload | None = None) -> None: ...

    def subscribe(self, topic: str, handler: Handler) -> Unsubscribe: ...


class LocalEventBus:
    """In-process bus with synchronous, in-order delivery.

    A failing handler is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[tuple[Handler, bool]]] = {}

    def subscribe(self, topic: str, handler: Handler, once: bool = False) -> Unsubscribe:
        entry = (handler, once)
        self._handlers.setdefault(topic, []).append(entry)

        def unsubscribe() -> None:
            handlers = self._handlers.get(topic, [])
            if entry in handlers:
                handlers.remove(entry)
            if not handlers:
                self._handlers.pop(topic, None)

        return unsubscribe

    def once(self, topic: str, handler: Handler) -> Unsubscribe:
        return self.subscribe(topic, handler, once=True)

    def emit(self, topic: str, payload: Payload | None = None) -> None:
        entries = list(self._handlers.get(topic, []))
        if not entries:
            return

        data = payload if payload is not None else {}
        for handler, once in entries:
            if once:
                self._drop(topic, (handler, once))
            try:
                handler(data)
            except Exception:
                logger.exception("Error in handler for %s", topic)

    def _drop(self, topic: str, entry: tuple[Handler, bool]) -> None:
        handlers = self._handlers.get(topic, [])
        if entry in handlers:
            handlers.remove(entry)
        if not handlers:
            self._handlers.pop(topic, None)

    def listener_count(self, topic: str) -> int:
        return len(self._handlers.get(topic, []))

    def topics(self) -> list[str]:
        return list(self._handlers)


class Lifecycle(str, Enum):
    SCAN_STARTED = "scan_started"
    SCAN_COMPLETE = "scan_complete"
    SCAN_ERROR = "scan_error"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CONNECT_FAILED = "connect_failed"
    DISCONNECT_FAILED = "disconnect_failed"
    PAIRED = "paired"
    PAIR_FAILED = "pair_failed"
    FORGOTTEN = "forgotten"
    FORGET_FAILED = "forget_failed"
    UNPAIRED = "unpaired"
    UNPAIR_FAILED = "unpair_failed"
    SIGNAL_UPDATED = "signal_updated"
    SIGNAL_FAILED = "signal_failed"


def _dump(record: DeviceRecord | None) -> Payload | None:
    return None if record is None else record.to_payload()


class LifecycleEmitter:
    """Turns coordinator outcomes into one bus publication each.

    Topic names and payload keys come from the universe, so coordinators never
    spell out a topic themselves.
    """

    def __init__(self, bus: EventBus, universe: Universe) -> None:
        self._bus = bus
        self._universe = universe

    def topic(self, outcome: Lifecycle) -> str | None:
        return getattr(self._universe.topics, outcome.value)

    def publish(self, outcome: Lifecycle, payload: Payload) -> None:
        topic = self.topic(outcome)
        if topic is None:
            return
        self._bus.emit(topic, payload)

    def scan_started(self) -> None:
        self.publish(Lifecycle.SCAN_STARTED, {})

    def scan_complete(
        self, records: Iterable[DeviceRecord], total: int, connected: int
    ) -> None:
        self.publish(
            Lifecycle.SCAN_COMPLETE,
            {
                self._universe.list_key: [record.to_payload() for record in records],
                "total": total,
                "connected": connected,
            },
        )

    def scan_error(self, error: str) -> None:
        self.publish(Lifecycle.SCAN_ERROR, {"error": error})

    def device_event(
        self,
        outcome: Lifecycle,
        device_id: str,
        record: DeviceRecord | None,
        **extra: Any,
    ) -> None:
        payload = {
            self._universe.id_key: device_id,
            self._universe.record_key: _dump(record),
        }
        payload.update(extra)
        self.publish(outcome, payload)

    def device_failed(self, outcome: Lifecycle, device_id: str, error: str) -> None:
        self.publish(outcome, {self._universe.id_key: device_id, "error": error})
