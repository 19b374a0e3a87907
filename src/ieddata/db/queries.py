"""Read queries against a platform box database."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import Engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session, select

from ieddata.core.errors import DataIntegrityError, IedDataError, UnavailableError
from ieddata.db.models import App, DeviceEntry
from ieddata.db.projector import projector_for

logger = structlog.get_logger()

APPS_QUERY = "SELECT * FROM application INNER JOIN applicationversions USING(appId)"


def _reason(err: SQLAlchemyError) -> str:
    orig = getattr(err, "orig", None)
    return str(orig) if orig is not None else str(err)


def _translate(err: SQLAlchemyError, what: str) -> IedDataError:
    """Map an engine error; a missing table means the wrong database."""
    reason = _reason(err)
    if isinstance(err, OperationalError) and "no such table" in reason:
        return DataIntegrityError.missing_table(reason)
    return UnavailableError.query_failed(what, reason)


def query_apps(engine: Engine) -> list[App]:
    """Installed apps with their versions.

    Unknown columns are ignored and missing ones left at their zero value, so
    this keeps working when the app engine schema changes. An empty app
    identifier means we are looking at some other database and fails the
    whole read.
    """
    try:
        with engine.connect() as conn:
            result = conn.execute(text(APPS_QUERY))
            columns = list(result.keys())
            rows = result.all()
    except SQLAlchemyError as err:
        raise _translate(err, "installed apps") from err

    projector = projector_for(App)
    projection = projector.project(columns)
    apps: list[App] = []
    for row in rows:
        app = projector.scan(row, projection)
        if not app.id:
            raise DataIntegrityError.empty_join_key("appId")
        apps.append(app)
    logger.debug("apps_read", count=len(apps))
    return apps


def query_device_info(engine: Engine) -> dict[str, str]:
    """Key/value pairs describing the IED, as per the device table."""
    try:
        with Session(engine) as session:
            entries = session.exec(select(DeviceEntry)).all()
            info = {entry.device_key: entry.device_value or "" for entry in entries}
    except SQLAlchemyError as err:
        raise _translate(err, "device information") from err
    logger.debug("device_info_read", count=len(info))
    return info


def query_rows(engine: Engine, sql: str, **params: Any) -> list[dict[str, Any]]:
    """Run an arbitrary read-only statement and return rows as dicts."""
    try:
        with engine.connect() as conn:
            result = conn.execute(text(sql), params)
            return [dict(row) for row in result.mappings()]
    except SQLAlchemyError as err:
        raise _translate(err, "database") from err
