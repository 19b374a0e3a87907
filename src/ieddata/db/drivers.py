"""Database drivers, looked up by name at open time.

Drivers are listed explicitly here instead of registering themselves as a
side effect of being imported.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import NullPool

from ieddata.core.errors import InvalidError


@dataclass(frozen=True, slots=True)
class Driver:
    """How to open a database file read-only and check that it is usable."""

    name: str
    create_engine: Callable[[Path], Engine]
    probe_sql: str


def sqlite_engine(path: Path) -> Engine:
    """Engine opening a single SQLite file strictly read-only.

    NullPool: every connection is closed when given back, so disposing the
    engine leaves no descriptor open on the file.
    """
    return create_engine(
        f"sqlite:///file:{path}?mode=ro&uri=true",
        poolclass=NullPool,
    )


# Touching sqlite_master forces SQLite to actually read the file header,
# unlike "SELECT 1" which succeeds even on garbage.
SQLITE = Driver(
    name="sqlite",
    create_engine=sqlite_engine,
    probe_sql="SELECT count(*) FROM sqlite_master",
)

DRIVERS = MappingProxyType({SQLITE.name: SQLITE})


def get_driver(name: str) -> Driver:
    """Look up a driver by name."""
    try:
        return DRIVERS[name]
    except KeyError:
        raise InvalidError.unknown_driver(name, sorted(DRIVERS)) from None
