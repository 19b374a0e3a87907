"""ieddata locate command - print the runtime container's PID."""

import json

import click

from ieddata.config.constants import EDGE_IOT_CORE_CONTAINER_NAME
from ieddata.config.loader import load_config
from ieddata.container.locator import locate
from ieddata.core.errors import IedDataError


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def locate_command(as_json: bool) -> None:
    """Find the Industrial Edge runtime container and print its PID."""
    try:
        config = load_config()
        pid = locate(
            EDGE_IOT_CORE_CONTAINER_NAME,
            docker_host=config.docker.host,
            timeout=config.docker.timeout_sec,
        )
    except IedDataError as e:
        raise click.ClickException(e.message) from e

    if as_json:
        click.echo(json.dumps({"container": EDGE_IOT_CORE_CONTAINER_NAME, "pid": pid}))
    else:
        click.echo(str(pid))
