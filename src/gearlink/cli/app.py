from __future__ import annotations

from typing import Annotated

import typer

from gearlink.utils.logging import setup_logging

from .commands import bluetooth as bluetooth_cmd
from .commands import config as config_cmd
from .commands.devices import register as register_devices
from .commands.info import register as register_info
from .commands.init import register as register_init
from .commands.scan import register as register_scan

app = typer.Typer(
    help="gearlink - instrument and Bluetooth device coordinator", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(bluetooth_cmd.app, name="bluetooth")

register_init(app)
register_scan(app)
register_devices(app)
register_info(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (default: $LOGLEVEL or INFO)"),
    ] = None,
) -> None:
    """gearlink CLI."""
    try:
        setup_logging(log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"gearlink version {get_version('gearlink')}")
        raise typer.Exit()
