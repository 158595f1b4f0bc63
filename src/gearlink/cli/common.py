from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Iterable
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gearlink.config import (
    BackendFixture,
    ConfigLocation,
    Settings,
    default_fixture,
    fixture_path_from_settings,
    get_settings,
    load_fixture,
    resolve_config_path,
)
from gearlink.core import DeviceHub, LocalEventBus, MockBackend
from gearlink.core.adapter import TOPICS as ADAPTER_TOPICS
from gearlink.core.events import Handler
from gearlink.errors import GearlinkError
from gearlink.models import DeviceRecord
from gearlink.utils.redaction import Redactor

T = TypeVar("T")


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> ConfigLocation:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def load_fixture_or_exit(settings: Settings) -> BackendFixture:
    path = fixture_path_from_settings(settings)
    if path is None:
        return default_fixture()
    try:
        return load_fixture(path)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_backend(settings: Settings) -> MockBackend:
    return MockBackend.from_fixture(
        load_fixture_or_exit(settings), latency=settings.backend.latency
    )


def build_hub(settings: Settings, console: Console | None = None) -> DeviceHub:
    """Hub over the simulated backend; prints every lifecycle event when a console is given."""
    bus = LocalEventBus()
    hub = DeviceHub(build_backend(settings), bus, settings)
    if console is not None:
        universes = (
            hub.instruments.universe,
            hub.bluetooth.available.universe,
            hub.bluetooth.paired.universe,
        )
        topics = [topic for universe in universes for topic in universe.topics.names()]
        for topic in [*topics, *ADAPTER_TOPICS]:
            bus.subscribe(topic, _printer(console, topic))
    return hub


def _printer(console: Console, topic: str) -> Handler:
    def handler(payload: dict[str, Any]) -> None:
        console.print(f"[dim]event[/dim] [magenta]{topic}[/magenta] {escape(str(payload))}")

    return handler


def run_or_exit(coro: Coroutine[Any, Any, T], console: Console) -> T:
    try:
        return asyncio.run(coro)
    except GearlinkError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None


def device_table(records: Iterable[DeviceRecord], redactor: Redactor) -> Table:
    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Type")
    table.add_column("Connected")
    table.add_column("Details")

    for record in records:
        details = ", ".join(
            f"{key}={redactor.redact_id(str(value))}"
            for key, value in record.metadata.items()
        )
        table.add_row(
            redactor.redact_id(record.id),
            record.name,
            record.type,
            "[green]yes[/green]" if record.connected else "no",
            details,
        )
    return table
