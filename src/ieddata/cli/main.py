"""ieddata CLI - ieddata command."""

from typing import Any

import click

from ieddata import __version__
from ieddata.cli.apps import apps_command
from ieddata.cli.device import device_command
from ieddata.cli.locate import locate_command
from ieddata.config.loader import load_config
from ieddata.config.models import LoggingConfig
from ieddata.core.errors import IedDataError
from ieddata.core.logging import configure_logging, set_operation_id


def _logging_config(verbose: bool, log_json: bool) -> LoggingConfig:
    """The configured logging section, with command line flags applied on top."""
    config = load_config().logging
    updates: dict[str, Any] = {}
    if verbose:
        updates["level"] = "DEBUG"
    if log_json:
        updates["outputs"] = [
            output.model_copy(update={"format": "json"}) for output in config.outputs
        ]
    return config.model_copy(update=updates)


@click.group()
@click.version_option(version=__version__, prog_name="ieddata")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--log-json", is_flag=True, help="Log as JSON lines")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_json: bool) -> None:
    """ieddata - read Industrial Edge app engine databases from the host."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    try:
        configure_logging(config=_logging_config(verbose, log_json))
    except IedDataError as e:
        raise click.ClickException(e.message) from e
    set_operation_id()


cli.add_command(locate_command, name="locate")
cli.add_command(apps_command, name="apps")
cli.add_command(device_command, name="device")


if __name__ == "__main__":
    cli()
