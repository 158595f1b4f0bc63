import asyncio

import pytest
from helpers import StubExecutor, bt_device, instrument

from gearlink.core import BluetoothCoordinator, CommandResult, DeviceCoordinator
from gearlink.errors import BackendUnavailable, RemoteFailure, UnsupportedOperation
from gearlink.models import INSTRUMENTS


def scanned(bus, executor) -> DeviceCoordinator:
    coordinator = DeviceCoordinator(INSTRUMENTS, executor, bus)
    asyncio.run(coordinator.scan())
    bus.events.clear()
    return coordinator


def test_connect_updates_cache_and_publishes(bus, two_instruments):
    coordinator = scanned(bus, two_instruments)
    assert coordinator.get_connected_count() == 1

    record = asyncio.run(coordinator.connect("B"))

    assert record.connected is True
    assert coordinator.get("B").connected is True
    assert coordinator.get_connected_count() == 2
    assert two_instruments.calls[-1] == ("connect_device", {"device_id": "B"})

    (payload,) = bus.payloads("instruments:connected")
    assert payload["instrumentId"] == "B"
    assert payload["instrument"]["connected"] is True


def test_connect_unknown_device_still_issues_command(bus, two_instruments):
    coordinator = scanned(bus, two_instruments)

    assert asyncio.run(coordinator.connect("X")) is None

    assert two_instruments.count("connect_device") == 1
    assert coordinator.get("X") is None
    assert coordinator.get_count() == 2
    assert bus.events == [("instruments:connected", {"instrumentId": "X", "instrument": None})]


def test_disconnect_never_drives_count_negative(bus):
    executor = StubExecutor({"list_devices": CommandResult.ok(instruments=[instrument("A")])})
    coordinator = scanned(bus, executor)

    asyncio.run(coordinator.disconnect("A"))
    asyncio.run(coordinator.disconnect("A"))
    asyncio.run(coordinator.disconnect("ghost"))

    assert coordinator.get_connected_count() == 0
    assert bus.published() == ["instruments:disconnected"] * 3


def test_connect_failure_publishes_and_raises(bus, two_instruments):
    coordinator = scanned(bus, two_instruments)
    two_instruments.responses["connect_device"] = CommandResult.fail("busy")

    with pytest.raises(RemoteFailure, match="busy") as excinfo:
        asyncio.run(coordinator.connect("B"))

    assert excinfo.value.command == "connect_device"
    assert coordinator.get("B").connected is False
    assert bus.events == [("instruments:connect:failed", {"instrumentId": "B", "error": "busy"})]


def test_disconnect_failure_has_its_own_topic(bus, two_instruments):
    coordinator = scanned(bus, two_instruments)
    two_instruments.responses["disconnect_device"] = TimeoutError("slow")

    with pytest.raises(RemoteFailure):
        asyncio.run(coordinator.disconnect("A"))

    assert coordinator.get("A").connected is True
    assert bus.published() == ["instruments:disconnect:failed"]


def test_connect_without_executor(bus):
    coordinator = DeviceCoordinator(INSTRUMENTS, None, bus)

    with pytest.raises(BackendUnavailable):
        asyncio.run(coordinator.connect("A"))

    assert bus.events == [
        (
            "instruments:connect:failed",
            {"instrumentId": "A", "error": "Backend service not available"},
        )
    ]


def test_instruments_cannot_pair(bus, two_instruments):
    coordinator = DeviceCoordinator(INSTRUMENTS, two_instruments, bus)

    with pytest.raises(UnsupportedOperation):
        asyncio.run(coordinator.pair("A"))
    with pytest.raises(UnsupportedOperation):
        asyncio.run(coordinator.signal("A"))

    assert two_instruments.calls == []
    assert bus.events == []


def test_same_device_operations_are_serialized(bus, two_instruments):
    coordinator = scanned(bus, two_instruments)
    connections = coordinator.connections

    async def main():
        two_instruments.hold("connect_device")
        connecting = asyncio.create_task(coordinator.connect("B"))
        disconnecting = asyncio.create_task(coordinator.disconnect("B"))
        for _ in range(3):
            await asyncio.sleep(0)

        assert connections.busy("B")
        assert two_instruments.count("connect_device") == 1
        assert two_instruments.count("disconnect_device") == 0

        two_instruments.release("connect_device")
        await asyncio.gather(connecting, disconnecting)

    asyncio.run(main())

    assert coordinator.get("B").connected is False
    assert bus.published() == ["instruments:connected", "instruments:disconnected"]
    assert not connections.busy("B")


def test_different_devices_do_not_wait_on_each_other(bus, two_instruments):
    coordinator = scanned(bus, two_instruments)

    async def main():
        two_instruments.hold("connect_device")
        tasks = [asyncio.create_task(coordinator.connect(i)) for i in ("A", "B")]
        await asyncio.sleep(0)
        assert two_instruments.count("connect_device") == 2
        two_instruments.release("connect_device")
        await asyncio.gather(*tasks)

    asyncio.run(main())

    assert coordinator.get_connected_count() == 2


def test_remote_state_push_updates_cache(bus, two_instruments):
    coordinator = scanned(bus, two_instruments)

    coordinator.connections.apply_remote_state("A", False)

    assert coordinator.get_connected_count() == 0
    assert bus.payloads("instruments:disconnected")[0]["instrumentId"] == "A"


def pairing_executor(paired_after: list) -> StubExecutor:
    return StubExecutor(
        {
            "bluetooth_paired": CommandResult.ok(devices=paired_after),
            "bluetooth_scan": CommandResult.ok(
                devices=[bt_device("AA:01", "Keys", rssi=-60)]
            ),
            "bluetooth_signal": CommandResult.ok(rssi=-45),
        }
    )


def test_pair_refetches_paired_list(bus):
    executor = pairing_executor([bt_device("AA:01", "Keys", connected=False)])
    bluetooth = BluetoothCoordinator(executor, bus)

    record = asyncio.run(bluetooth.pair("AA:01", pin="0000"))

    assert record.id == "AA:01"
    assert [name for name, _ in executor.calls] == ["bluetooth_pair", "bluetooth_paired"]
    assert executor.calls[0][1] == {"device_id": "AA:01", "pin": "0000"}
    assert bus.published() == [
        "bluetooth:paired_started",
        "bluetooth:paired_list",
        "bluetooth:paired",
    ]
    (payload,) = bus.payloads("bluetooth:paired")
    assert payload["deviceId"] == "AA:01"
    assert [d["id"] for d in payload["devices"]] == ["AA:01"]
    assert bluetooth.paired.get_count() == 1


def test_forget_twice_is_harmless(bus):
    executor = pairing_executor([])
    bluetooth = BluetoothCoordinator(executor, bus)

    first = asyncio.run(bluetooth.forget("AA:01"))
    second = asyncio.run(bluetooth.forget("AA:01"))

    assert first is None and second is None
    assert executor.count("bluetooth_forget") == 2
    assert bus.payloads("bluetooth:forgotten") == [
        {"deviceId": "AA:01", "device": None, "devices": []}
    ] * 2


def test_unpair_uses_its_own_command(bus):
    executor = pairing_executor([])
    bluetooth = BluetoothCoordinator(executor, bus)

    asyncio.run(bluetooth.unpair("AA:01"))

    assert executor.calls[0] == ("bluetooth_unpair", {"device_id": "AA:01"})
    assert bus.published()[-1] == "bluetooth:unpaired"


def test_pair_failure_skips_refresh(bus):
    executor = pairing_executor([])
    executor.responses["bluetooth_pair"] = CommandResult.fail("Device not found")
    bluetooth = BluetoothCoordinator(executor, bus)

    with pytest.raises(RemoteFailure):
        asyncio.run(bluetooth.pair("AA:09"))

    assert executor.count("bluetooth_paired") == 0
    assert bus.events == [
        ("bluetooth:pair_failed", {"deviceId": "AA:09", "error": "Device not found"})
    ]


def test_failed_refresh_after_pair(bus):
    executor = pairing_executor([])
    executor.responses["bluetooth_paired"] = CommandResult.fail("adapter reset")
    bluetooth = BluetoothCoordinator(executor, bus)

    with pytest.raises(RemoteFailure, match="adapter reset"):
        asyncio.run(bluetooth.pair("AA:01"))

    assert "bluetooth:paired" not in bus.published()
    assert bus.payloads("bluetooth:paired_failed") == [{"error": "adapter reset"}]


def test_signal_caches_rssi(bus):
    executor = pairing_executor([])
    bluetooth = BluetoothCoordinator(executor, bus)
    asyncio.run(bluetooth.scan())

    assert asyncio.run(bluetooth.signal("AA:01")) == -45

    assert bluetooth.available.get("AA:01").metadata["rssi"] == -45
    (payload,) = bus.payloads("bluetooth:signal")
    assert payload["rssi"] == -45
    assert payload["device"]["metadata"]["rssi"] == -45


def test_bluetooth_connect_targets_paired(bus):
    executor = pairing_executor([bt_device("AA:01", "Keys", connected=False)])
    bluetooth = BluetoothCoordinator(executor, bus)
    asyncio.run(bluetooth.list_paired())

    asyncio.run(bluetooth.connect("AA:01"))

    assert executor.calls[-1] == ("bluetooth_connect", {"device_id": "AA:01"})
    assert bluetooth.paired.get_connected_count() == 1
    assert bluetooth.stats()["paired"].connected == 1
    assert bus.published()[-1] == "bluetooth:connected"


def test_signal_without_reading_reports_zero(bus):
    executor = pairing_executor([])
    executor.responses["bluetooth_signal"] = CommandResult.ok(rssi=None)
    bluetooth = BluetoothCoordinator(executor, bus)
    asyncio.run(bluetooth.scan())
    bus.events.clear()

    assert asyncio.run(bluetooth.signal("AA:01")) == 0

    assert bluetooth.available.get("AA:01").metadata["rssi"] == 0
    assert bus.published() == ["bluetooth:signal"]


def test_signal_with_garbage_reading_fails(bus):
    executor = pairing_executor([])
    executor.responses["bluetooth_signal"] = CommandResult.ok(rssi="loud")
    bluetooth = BluetoothCoordinator(executor, bus)
    asyncio.run(bluetooth.scan())
    bus.events.clear()

    with pytest.raises(RemoteFailure, match="Invalid rssi") as excinfo:
        asyncio.run(bluetooth.signal("AA:01"))

    assert excinfo.value.command == "bluetooth_signal"
    assert bluetooth.available.get("AA:01").metadata["rssi"] == -60
    (payload,) = bus.payloads("bluetooth:signal_failed")
    assert payload["deviceId"] == "AA:01"
    assert "loud" in payload["error"]
