import logging

from gearlink.core import Lifecycle, LifecycleEmitter, LocalEventBus
from gearlink.models import BLUETOOTH_AVAILABLE, INSTRUMENTS, DeviceKind, DeviceRecord


def test_delivery_in_subscription_order():
    bus = LocalEventBus()
    seen = []
    bus.subscribe("t", lambda p: seen.append(("first", p)))
    bus.subscribe("t", lambda p: seen.append(("second", p)))

    bus.emit("t", {"n": 1})
    bus.emit("t")

    assert seen == [("first", {"n": 1}), ("second", {"n": 1}), ("first", {}), ("second", {})]


def test_unsubscribe_and_once():
    bus = LocalEventBus()
    seen = []
    unsubscribe = bus.subscribe("t", lambda p: seen.append("always"))
    bus.once("t", lambda p: seen.append("once"))

    bus.emit("t")
    bus.emit("t")
    unsubscribe()
    unsubscribe()
    bus.emit("t")

    assert seen == ["always", "once", "always"]
    assert bus.listener_count("t") == 0
    assert bus.topics() == []


def test_failing_handler_does_not_stop_delivery(caplog):
    bus = LocalEventBus()
    seen = []

    def broken(_payload):
        raise RuntimeError("handler bug")

    bus.subscribe("t", broken)
    bus.subscribe("t", lambda p: seen.append(p))

    with caplog.at_level(logging.ERROR, logger="gearlink.core.events"):
        bus.emit("t", {"ok": True})

    assert seen == [{"ok": True}]
    assert "Error in handler for t" in caplog.text


def test_emitter_uses_universe_keys(bus):
    emitter = LifecycleEmitter(bus, INSTRUMENTS)
    record = DeviceRecord(id="A", name="Piano", connected=True)

    emitter.scan_complete([record], 1, 1)
    emitter.device_event(Lifecycle.CONNECTED, "A", record)
    emitter.device_failed(Lifecycle.DISCONNECT_FAILED, "A", "busy")

    assert bus.events == [
        (
            "instruments:scan:complete",
            {"instruments": [record.to_payload()], "total": 1, "connected": 1},
        ),
        ("instruments:connected", {"instrumentId": "A", "instrument": record.to_payload()}),
        ("instruments:disconnect:failed", {"instrumentId": "A", "error": "busy"}),
    ]
    assert record.to_payload()["kind"] == DeviceKind.INSTRUMENT.value


def test_emitter_skips_outcomes_without_topic(bus):
    emitter = LifecycleEmitter(bus, BLUETOOTH_AVAILABLE)

    assert emitter.topic(Lifecycle.PAIRED) is None
    emitter.device_event(Lifecycle.PAIRED, "AA:01", None)
    emitter.scan_error("timeout")

    assert bus.events == [("bluetooth:scan_failed", {"error": "timeout"})]
