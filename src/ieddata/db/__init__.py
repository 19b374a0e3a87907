"""App engine database access: opening, projecting, querying."""

from ieddata.db.database import AppEngineDB, open_database
from ieddata.db.drivers import DRIVERS, SQLITE, Driver, get_driver
from ieddata.db.models import App, DeviceEntry
from ieddata.db.projector import (
    ZERO_TIME,
    RecordProjector,
    column_name,
    first_lower,
    projector_for,
)

__all__ = [
    "App",
    "AppEngineDB",
    "DRIVERS",
    "DeviceEntry",
    "Driver",
    "RecordProjector",
    "SQLITE",
    "ZERO_TIME",
    "column_name",
    "first_lower",
    "get_driver",
    "open_database",
    "projector_for",
]
