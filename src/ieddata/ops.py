"""Open app engine databases inside the IED runtime container.

These hide discovering the runtime container and reaching into its mount
namespace, handing out an AppEngineDB that reads a private copy of the
requested database.
"""

from __future__ import annotations

import posixpath

import structlog

from ieddata.config.constants import DB_BASE_DIR, EDGE_IOT_CORE_CONTAINER_NAME, PLATFORM_BOX_DB
from ieddata.config.loader import load_config
from ieddata.config.models import IedDataConfig
from ieddata.container.locator import locate
from ieddata.core.errors import InvalidError
from ieddata.db.database import AppEngineDB, open_database
from ieddata.nsfs.resolver import resolve
from ieddata.nsfs.sanitize import sanitize

logger = structlog.get_logger()


def open(  # noqa: A001
    dbname: str = PLATFORM_BOX_DB,
    *,
    config: IedDataConfig | None = None,
) -> AppEngineDB:
    """Open the named app engine database, such as "platformbox.db".

    The database name is sanitized, keeping only ASCII alphanumerics, dots
    (but not ".."), dashes and underscores.

    Raises:
        NotFoundError: no runtime container, database directory or file.
        UnavailableError: the runtime or the database could not be accessed.
    """
    cfg = config or load_config()
    pid = locate(
        EDGE_IOT_CORE_CONTAINER_NAME,
        docker_host=cfg.docker.host,
        timeout=cfg.docker.timeout_sec,
    )
    return open_in_pid(dbname, pid, config=cfg)


def open_in_pid(
    dbname: str,
    pid: int,
    *,
    config: IedDataConfig | None = None,
) -> AppEngineDB:
    """Like open, but with the runtime container's PID already known.

    Use this when the PID comes from some other discovery, skipping the
    container lookup.
    """
    name = sanitize(dbname)
    if not name.strip("."):
        raise InvalidError.unsafe_name(dbname, "no file name left after sanitizing")
    return open_path(posixpath.join(DB_BASE_DIR, name), pid, config=config)


def open_path(
    path: str,
    pid: int,
    *,
    config: IedDataConfig | None = None,
) -> AppEngineDB:
    """Open the database at an absolute path inside pid's mount namespace.

    The path is used as is; callers must have sanitized untrusted parts.
    """
    cfg = config or load_config()
    ref = resolve(pid, path)
    db = open_database(ref, driver=cfg.database.driver, temp_dir=cfg.database.temp_dir)
    logger.info("app_engine_db_opened", path=path, pid=pid)
    return db
