from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from gearlink.config import (
    FIXTURE_FILENAME,
    BackendConfig,
    Settings,
    default_fixture,
    resolve_config_path,
    write_fixture,
    write_settings,
)


def register(app: typer.Typer) -> None:
    @app.command()
    def init(
        fixture: Annotated[
            bool,
            typer.Option("--fixture", help="Also write a sample simulated-device file"),
        ] = False,
        force: Annotated[
            bool,
            typer.Option("--force", "-f", help="Overwrite existing files"),
        ] = False,
    ) -> None:
        """Write a default gearlink configuration."""
        console = Console()

        config_path, config_exists = resolve_config_path(allow_missing=True)
        fixture_path = config_path.parent / FIXTURE_FILENAME

        settings = Settings()
        if fixture:
            settings = Settings(backend=BackendConfig(fixture=str(fixture_path)))

            if fixture_path.exists() and not force:
                console.print(f"[dim]Fixture exists:[/dim] {fixture_path}")
            else:
                write_fixture(default_fixture(), fixture_path)
                console.print(f"[green]✓[/green] Wrote fixture: {fixture_path}")

        if config_exists and not force:
            console.print(f"[dim]Config exists:[/dim] {config_path}")
            return

        write_settings(settings, config_path)
        action = "Overwrote" if config_exists else "Created"
        console.print(f"[green]✓[/green] {action} config: {config_path}")
