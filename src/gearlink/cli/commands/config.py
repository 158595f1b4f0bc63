from __future__ import annotations

from typing import Annotated

import typer

from gearlink.cli.common import (
    load_fixture_or_exit,
    load_settings_or_exit,
    resolve_config_path_or_exit,
)
from gearlink.config import render_fixture_toml, render_settings_toml

app = typer.Typer(no_args_is_help=True, help="Inspect gearlink configuration")


@app.command("show")
def show_config(
    fixture: Annotated[
        bool,
        typer.Option("--fixture", help="Also print the simulated device inventory"),
    ] = False,
) -> None:
    """Print the settings in effect and where they came from."""
    settings = load_settings_or_exit()
    location = resolve_config_path_or_exit(allow_missing=True)

    typer.echo(f"Config source: {location.path if location.exists else 'defaults'}")
    typer.echo(render_settings_toml(settings))
    if fixture:
        typer.echo(render_fixture_toml(load_fixture_or_exit(settings)))


@app.command("path")
def config_path() -> None:
    """Print the config file location, whether or not it exists."""
    typer.echo(resolve_config_path_or_exit(allow_missing=True).path)
