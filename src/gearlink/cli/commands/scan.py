from __future__ import annotations

import logging

import typer
from rich.console import Console

from gearlink.cli.common import (
    build_hub,
    device_table,
    load_settings_or_exit,
    run_or_exit,
)
from gearlink.utils.redaction import Redactor

logger = logging.getLogger(__name__)


def scan(
    type_filter: str | None = typer.Option(
        None, "--type", "-t", help="Only show instruments of this type"
    ),
    events: bool = typer.Option(
        False, "--events", help="Print lifecycle events as they are published"
    ),
) -> None:
    """Discover instruments and show their connection state."""
    console = Console()

    settings = load_settings_or_exit()
    hub = build_hub(settings, console if events else None)

    console.print("Scanning for instruments...")
    records = run_or_exit(hub.instruments.scan(), console)

    if not records:
        console.print("No instruments found.")
        return

    if type_filter:
        records = hub.instruments.registry.filter_by_type(type_filter)
        logger.debug("Filtered to %d instrument(s) of type %s", len(records), type_filter)

    console.print(device_table(records, Redactor(enabled=False)))

    stats = hub.instruments.stats()
    console.print(
        f"\n[green]Found {stats.total} instrument(s), {stats.connected} connected[/green]"
    )


def register(app: typer.Typer) -> None:
    app.command()(scan)
