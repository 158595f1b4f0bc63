from __future__ import annotations

import typer
from rich.console import Console

from gearlink.cli.common import build_hub, load_settings_or_exit, run_or_exit
from gearlink.core import DeviceHub
from gearlink.models import DeviceRecord


async def _scan_then(hub: DeviceHub, device_id: str, connect: bool) -> DeviceRecord | None:
    await hub.instruments.scan()
    if connect:
        return await hub.instruments.connect(device_id)
    return await hub.instruments.disconnect(device_id)


def _toggle(device_id: str, connect: bool, events: bool) -> None:
    console = Console()
    settings = load_settings_or_exit()
    hub = build_hub(settings, console if events else None)

    record = run_or_exit(_scan_then(hub, device_id, connect), console)

    verb = "Connected" if connect else "Disconnected"
    if record is None:
        console.print(f"[yellow]![/yellow] {verb} '{device_id}' (not in last scan)")
    else:
        console.print(f"[green]✓[/green] {verb} '{record.name}' ({record.id})")
    console.print(
        f"Instruments connected: {hub.instruments.get_connected_count()}"
        f"/{hub.instruments.get_count()}"
    )


def connect(
    device_id: str = typer.Argument(..., help="Instrument identifier"),
    events: bool = typer.Option(False, "--events", help="Print lifecycle events"),
) -> None:
    """Connect an instrument."""
    _toggle(device_id, True, events)


def disconnect(
    device_id: str = typer.Argument(..., help="Instrument identifier"),
    events: bool = typer.Option(False, "--events", help="Print lifecycle events"),
) -> None:
    """Disconnect an instrument."""
    _toggle(device_id, False, events)


def register(app: typer.Typer) -> None:
    app.command()(connect)
    app.command()(disconnect)
