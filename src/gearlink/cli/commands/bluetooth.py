from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from gearlink.cli.common import (
    build_hub,
    device_table,
    load_settings_or_exit,
    run_or_exit,
)
from gearlink.core import DeviceHub
from gearlink.utils.redaction import Redactor

app = typer.Typer(no_args_is_help=True, help="Discover, pair and connect Bluetooth devices")

EventsOption = Annotated[
    bool, typer.Option("--events", help="Print lifecycle events as they are published")
]
RedactOption = Annotated[
    bool, typer.Option("--redact", help="Redact device addresses in output")
]


def _hub(console: Console, events: bool) -> DeviceHub:
    return build_hub(load_settings_or_exit(), console if events else None)


@app.command("scan")
def scan_devices(
    name_filter: Annotated[
        str | None, typer.Option("--filter", help="Only report devices whose name matches")
    ] = None,
    duration: Annotated[
        int | None, typer.Option("--duration", min=1, max=30, help="Scan duration in seconds")
    ] = None,
    events: EventsOption = False,
    redact: RedactOption = False,
) -> None:
    """Scan for nearby Bluetooth devices."""
    console = Console()
    hub = _hub(console, events)

    args: dict[str, object] = {}
    if name_filter is not None:
        args["filter"] = name_filter
    if duration is not None:
        args["duration"] = duration

    console.print("Scanning for Bluetooth devices...")
    devices = run_or_exit(hub.bluetooth.scan(**args), console)

    if not devices:
        console.print("No Bluetooth devices found.")
        return

    console.print(device_table(devices, Redactor(enabled=redact)))
    console.print(f"\n[green]Found {len(devices)} device(s)[/green]")


@app.command("paired")
def list_paired(events: EventsOption = False, redact: RedactOption = False) -> None:
    """List paired Bluetooth devices."""
    console = Console()
    hub = _hub(console, events)

    devices = run_or_exit(hub.bluetooth.list_paired(), console)
    if not devices:
        console.print("No paired devices.")
        return

    console.print(device_table(devices, Redactor(enabled=redact)))
    stats = hub.bluetooth.paired.stats()
    console.print(f"\n{stats.total} paired, {stats.connected} connected")


@app.command("pair")
def pair_device(
    device_id: Annotated[str, typer.Argument(help="Device address")],
    pin: Annotated[str, typer.Option("--pin", help="Pairing PIN")] = "",
    events: EventsOption = False,
    redact: RedactOption = False,
) -> None:
    """Pair a Bluetooth device."""
    console = Console()
    hub = _hub(console, events)
    redactor = Redactor(enabled=redact)

    run_or_exit(hub.bluetooth.pair(device_id, pin=pin), console)

    console.print(f"[green]✓[/green] Paired {redactor.redact_id(device_id)}")
    console.print(device_table(hub.bluetooth.paired.get_all(), redactor))


@app.command("forget")
def forget_device(
    device_id: Annotated[str, typer.Argument(help="Device address")],
    events: EventsOption = False,
    redact: RedactOption = False,
) -> None:
    """Forget a paired Bluetooth device."""
    console = Console()
    hub = _hub(console, events)
    redactor = Redactor(enabled=redact)

    run_or_exit(hub.bluetooth.forget(device_id), console)

    console.print(f"[green]✓[/green] Forgot {redactor.redact_id(device_id)}")
    remaining = hub.bluetooth.paired.get_count()
    console.print(f"{remaining} paired device(s) remaining")


async def _connect_paired(hub: DeviceHub, device_id: str, connect: bool) -> None:
    await hub.bluetooth.list_paired()
    if connect:
        await hub.bluetooth.connect(device_id)
    else:
        await hub.bluetooth.disconnect(device_id)


@app.command("connect")
def connect_device(
    device_id: Annotated[str, typer.Argument(help="Device address")],
    events: EventsOption = False,
) -> None:
    """Connect a paired Bluetooth device."""
    console = Console()
    hub = _hub(console, events)
    run_or_exit(_connect_paired(hub, device_id, True), console)
    console.print(f"[green]✓[/green] Connected {device_id}")


@app.command("disconnect")
def disconnect_device(
    device_id: Annotated[str, typer.Argument(help="Device address")],
    events: EventsOption = False,
) -> None:
    """Disconnect a paired Bluetooth device."""
    console = Console()
    hub = _hub(console, events)
    run_or_exit(_connect_paired(hub, device_id, False), console)
    console.print(f"[green]✓[/green] Disconnected {device_id}")


async def _scan_and_measure(hub: DeviceHub, device_id: str) -> int:
    await hub.bluetooth.scan()
    return await hub.bluetooth.signal(device_id)


@app.command("signal")
def signal_strength(
    device_id: Annotated[str, typer.Argument(help="Device address")],
    events: EventsOption = False,
) -> None:
    """Show the signal strength of a nearby device."""
    console = Console()
    hub = _hub(console, events)
    rssi = run_or_exit(_scan_and_measure(hub, device_id), console)
    console.print(f"{device_id}: {rssi} dBm")


@app.command("status")
def adapter_status(events: EventsOption = False) -> None:
    """Show whether the Bluetooth adapter is enabled."""
    console = Console()
    hub = _hub(console, events)
    status = run_or_exit(hub.bluetooth.load_status(), console)

    state = "[green]enabled[/green]" if status.enabled else "[red]disabled[/red]"
    console.print(f"Bluetooth adapter: {state}")
    if status.scan_timeout is not None:
        console.print(f"Scan timeout: {status.scan_timeout}s")


@app.command("config")
def configure_adapter(
    enabled: Annotated[
        bool, typer.Option("--enable/--disable", help="Turn the Bluetooth adapter on or off")
    ] = True,
    scan_timeout: Annotated[
        int | None, typer.Option("--scan-timeout", min=1, max=30, help="Scan timeout in seconds")
    ] = None,
    events: EventsOption = False,
) -> None:
    """Enable or disable the Bluetooth adapter."""
    console = Console()
    hub = _hub(console, events)
    status = run_or_exit(hub.bluetooth.configure(enabled, scan_timeout=scan_timeout), console)
    state = "enabled" if status.enabled else "disabled"
    console.print(f"[green]✓[/green] Bluetooth {state}, scan timeout {status.scan_timeout}s")


async def _monitor(hub: DeviceHub, console: Console, interval: float, duration: float) -> None:
    id_key = hub.bluetooth.available.universe.id_key
    hub.bus.subscribe(
        "bluetooth:signal",
        lambda payload: console.print(f"{payload[id_key]}: {payload['rssi']} dBm"),
    )
    await hub.bluetooth.scan()
    hub.bluetooth.start_monitor(interval)
    try:
        await asyncio.sleep(duration)
    finally:
        await hub.bluetooth.stop_monitor()


@app.command("monitor")
def monitor_signal(
    interval: Annotated[
        float | None, typer.Option("--interval", min=0.1, help="Seconds between readings")
    ] = None,
    duration: Annotated[
        float, typer.Option("--duration", min=0, help="Seconds to keep monitoring")
    ] = 15.0,
    events: EventsOption = False,
) -> None:
    """Poll the signal strength of nearby devices for a while."""
    console = Console()
    settings = load_settings_or_exit()
    hub = build_hub(settings, console if events else None)
    interval = interval or settings.bluetooth.signal_interval

    console.print(f"Monitoring signal strength every {interval}s for {duration}s...")
    run_or_exit(_monitor(hub, console, interval, duration), console)
    console.print("Monitoring stopped.")
