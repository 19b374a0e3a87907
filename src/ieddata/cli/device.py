"""ieddata device command - show IED device information."""

import json

import click
from rich.console import Console
from rich.table import Table

from ieddata.cli.utils import open_for_cli, with_db_options
from ieddata.core.errors import IedDataError


@click.command()
@with_db_options
def device_command(dbname: str, pid: int | None, wait_sec: float, as_json: bool) -> None:
    """Show the IED's device key/value information."""
    with open_for_cli(dbname, pid, wait_sec) as db:
        try:
            info = db.device_info()
        except IedDataError as e:
            raise click.ClickException(e.message) from e

    if as_json:
        click.echo(json.dumps(info, indent=2, sort_keys=True))
        return

    table = Table(show_header=False, box=None, padding=(0, 1), pad_edge=False)
    for key in sorted(info):
        table.add_row(f"[cyan]{key}[/cyan]", info[key])
    Console().print(table)
