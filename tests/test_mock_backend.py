import asyncio

from gearlink.config import default_fixture
from gearlink.core import MockBackend


def call(backend: MockBackend, name: str, **args):
    return asyncio.run(backend.execute(name, args))


def test_from_fixture_copies_inventory():
    fixture = default_fixture()
    backend = MockBackend.from_fixture(fixture)

    call(backend, "connect_device", device_id="usb-drums")

    assert fixture.instruments[1]["status"] == 1
    assert backend.instruments[1]["status"] == 2
    assert "bluetooth_signal" in backend.commands


def test_instrument_status_changes():
    backend = MockBackend.from_fixture()

    assert call(backend, "disconnect_device", device_id="usb-piano").success
    listed = call(backend, "list_devices").data["instruments"]
    missing = call(backend, "connect_device", device_id="nope")

    assert listed[0]["status"] == 1
    assert missing.error == "Device not found: nope"
    assert backend.count("connect_device") == 1


def test_scan_filters_by_name():
    backend = MockBackend.from_fixture()

    result = call(backend, "bluetooth_scan", duration=5, filter="keys")

    assert [d["name"] for d in result.data["devices"]] == ["BLE Keys"]


def test_pair_then_forget():
    backend = MockBackend.from_fixture()

    assert call(backend, "bluetooth_pair", device_id="AA:BB:CC:00:00:02", pin="").success
    assert call(backend, "bluetooth_pair", device_id="AA:BB:CC:00:00:02").success
    assert not call(backend, "bluetooth_pair", device_id="00:00:00:00:00:00").success

    paired = call(backend, "bluetooth_paired").data["devices"]
    assert [d["address"] for d in paired] == ["AA:BB:CC:00:00:03", "AA:BB:CC:00:00:02"]
    assert "rssi" not in paired[1]

    call(backend, "bluetooth_forget", device_id="AA:BB:CC:00:00:03")
    call(backend, "bluetooth_unpair", device_id="AA:BB:CC:00:00:03")
    assert [d["address"] for d in backend.paired] == ["AA:BB:CC:00:00:02"]


def test_bluetooth_connect_requires_pairing():
    backend = MockBackend.from_fixture()

    result = call(backend, "bluetooth_connect", device_id="AA:BB:CC:00:00:01")

    assert result.error == "Device not paired: AA:BB:CC:00:00:01"


def test_signal_reports_rssi():
    backend = MockBackend.from_fixture()

    assert call(backend, "bluetooth_signal", device_id="AA:BB:CC:00:00:02").data == {"rssi": -71}


def test_failures_offline_and_unknown():
    backend = MockBackend.from_fixture()
    backend.failures["list_devices"] = "timeout"

    assert call(backend, "list_devices").error == "timeout"
    assert call(backend, "reboot").error == "Unknown command: reboot"

    backend.online = False
    try:
        call(backend, "list_devices")
    except ConnectionError as exc:
        assert str(exc) == "Backend offline"
    else:
        raise AssertionError("expected ConnectionError")


def test_adapter_status_and_config():
    backend = MockBackend.from_fixture()

    assert call(backend, "bluetooth_status").data == {
        "enabled": True,
        "scan_timeout": 5,
        "adapter": "hci0",
    }
    assert call(backend, "bluetooth_config", enabled=False, scan_timeout=10).success
    assert not call(backend, "bluetooth_config", enabled="off").success

    status = call(backend, "bluetooth_status").data
    assert (status["enabled"], status["scan_timeout"]) == (False, 10)


def test_disabled_adapter_refuses_discovery():
    fixture = default_fixture()
    fixture.bluetooth.enabled = False
    backend = MockBackend.from_fixture(fixture)

    assert call(backend, "bluetooth_scan", duration=5).error == "Bluetooth is disabled"
    assert call(backend, "bluetooth_pair", device_id="AA:BB:CC:00:00:01").error == (
        "Bluetooth is disabled"
    )
    assert call(backend, "bluetooth_connect", device_id="AA:BB:CC:00:00:03").error == (
        "Bluetooth is disabled"
    )
    assert call(backend, "bluetooth_disconnect", device_id="AA:BB:CC:00:00:03").success
