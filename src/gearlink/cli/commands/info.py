from __future__ import annotations

import typer
from rich.console import Console

from gearlink.cli.common import load_settings_or_exit, resolve_config_path_or_exit
from gearlink.config import fixture_path_from_settings
from gearlink.models import BLUETOOTH_AVAILABLE, BLUETOOTH_PAIRED, INSTRUMENTS


def register(app: typer.Typer) -> None:
    @app.command()
    def info() -> None:
        """Show configuration and the device universes gearlink coordinates."""
        settings = load_settings_or_exit()
        config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)
        fixture_path = fixture_path_from_settings(settings)

        console = Console()

        console.print("[bold]gearlink Info[/bold]\n")
        console.print(f"Config file: {config_path if config_exists else 'defaults'}")
        console.print(f"Device fixture: {fixture_path or 'built-in sample'}")
        console.print(f"Backend latency: {settings.backend.latency}s")
        console.print(f"Bluetooth scan duration: {settings.bluetooth.scan_duration}s")
        console.print(f"Signal monitor interval: {settings.bluetooth.signal_interval}s")

        console.print("\n[bold]Universes[/bold]")
        for universe in (INSTRUMENTS, BLUETOOTH_AVAILABLE, BLUETOOTH_PAIRED):
            console.print(
                f"{universe.name}: list via '{universe.list_command}', "
                f"{len(universe.topics.names())} topic(s)"
            )
