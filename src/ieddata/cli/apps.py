"""ieddata apps command - list installed IE apps."""

import json

import click
from rich.console import Console
from rich.table import Table

from ieddata.cli.utils import open_for_cli, with_db_options
from ieddata.core.errors import IedDataError


@click.command()
@with_db_options
def apps_command(dbname: str, pid: int | None, wait_sec: float, as_json: bool) -> None:
    """List the IE apps installed on this IED, sorted by title."""
    with open_for_cli(dbname, pid, wait_sec) as db:
        try:
            apps = sorted(db.apps(), key=lambda app: app.title)
        except IedDataError as e:
            raise click.ClickException(e.message) from e

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": app.id,
                        "title": app.title,
                        "version": app.version,
                        "versionId": app.version_id,
                        "repositoryName": app.repository_name,
                        "debuggingEnabled": bool(app.is_debugging_enabled),
                        "created": app.created.isoformat(),
                        "modified": app.modified.isoformat(),
                    }
                    for app in apps
                ],
                indent=2,
            )
        )
        return

    table = Table(show_header=True, box=None, padding=(0, 2), pad_edge=False)
    table.add_column("TITLE")
    table.add_column("VERSION")
    table.add_column("ID", style="dim")
    for app in apps:
        table.add_row(app.title, app.version, app.id)
    Console().print(table)
