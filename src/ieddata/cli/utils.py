"""CLI utilities."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

import click
import structlog

from ieddata.config.constants import PLATFORM_BOX_DB
from ieddata.config.loader import load_config
from ieddata.config.models import IedDataConfig
from ieddata.core.errors import IedDataError, NotFoundError, UnavailableError
from ieddata.db.database import AppEngineDB
from ieddata.ops import open as open_db
from ieddata.ops import open_in_pid

logger = structlog.get_logger()

T = TypeVar("T")

RETRY_BASE_DELAY_SEC = 0.25
RETRY_MAX_DELAY_SEC = 5.0

# Things that may still show up: the container starting, the app engine
# creating its database.
RETRYABLE_ERRORS = (NotFoundError, UnavailableError)


def retry_until(
    fn: Callable[[], T],
    wait_sec: float,
    *,
    base_delay: float = RETRY_BASE_DELAY_SEC,
    max_delay: float = RETRY_MAX_DELAY_SEC,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """Call fn, retrying retryable errors with exponential backoff.

    Gives up and re-raises the last error once wait_sec has passed. With
    wait_sec <= 0, fn is called exactly once.
    """
    deadline = clock() + wait_sec
    attempt = 0
    while True:
        try:
            return fn()
        except RETRYABLE_ERRORS as e:
            remaining = deadline - clock()
            if remaining <= 0:
                raise
            delay = min(base_delay * (2**attempt), max_delay, remaining)
            logger.debug("open_retry", attempt=attempt + 1, delay_sec=delay, error=e.error_name)
            sleep(delay)
            attempt += 1


def open_for_cli(dbname: str, pid: int | None, wait_sec: float) -> AppEngineDB:
    """Open a database for a CLI command, turning errors into ClickExceptions."""
    try:
        config: IedDataConfig = load_config()
    except IedDataError as e:
        raise click.ClickException(e.message) from e

    def attempt() -> AppEngineDB:
        if pid is not None:
            return open_in_pid(dbname, pid, config=config)
        return open_db(dbname, config=config)

    try:
        return retry_until(attempt, wait_sec)
    except IedDataError as e:
        raise click.ClickException(e.message) from e


db_options = [
    click.option(
        "--db",
        "dbname",
        default=PLATFORM_BOX_DB,
        show_default=True,
        help="App engine database file name",
    ),
    click.option(
        "--pid",
        type=click.IntRange(min=1),
        default=None,
        help="PID of the runtime container, skips container discovery",
    ),
    click.option(
        "--wait",
        "wait_sec",
        type=click.FloatRange(min=0),
        default=0.0,
        help="Keep retrying for up to this many seconds",
    ),
    click.option("--json", "as_json", is_flag=True, help="Output as JSON"),
]


def with_db_options(fn: Callable[..., T]) -> Callable[..., T]:
    for option in reversed(db_options):
        fn = option(fn)
    return fn
