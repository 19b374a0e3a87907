"""Read-only access to a database file living in another container.

Opening a database through a /proc/<pid>/root path works in some situations
and fails in others, in particular while the owning process keeps writing to
it. So we never open the live file: it is copied byte for byte into a private
temporary file first, which is then opened read-only and probed. The copy
trades freshness for never interfering with (or being disturbed by) the
writer. Closing the database deletes the copy.
"""

from __future__ import annotations

import contextlib
import errno
import os
import shutil
import stat
import tempfile
import threading
from pathlib import Path
from types import TracebackType
from typing import Any

import structlog
from sqlalchemy import Engine, text

from ieddata.config.constants import COPY_CHUNK_BYTES, DEFAULT_DRIVER_NAME, TEMP_COPY_PREFIX
from ieddata.core.errors import UnavailableError
from ieddata.db.drivers import Driver, get_driver
from ieddata.db.models import App
from ieddata.db.queries import query_apps, query_device_info, query_rows
from ieddata.nsfs.resolver import NamespaceFileRef

logger = structlog.get_logger()


class AppEngineDB:
    """An open IED app engine database.

    Owns the engine on the private copy and the copy itself. close() releases
    both exactly once; it is idempotent and may be called concurrently, also
    while a query is running on another thread (it then waits for the query).
    """

    def __init__(self, engine: Engine, copied_path: Path | None = None, source: str = "") -> None:
        self.engine = engine
        self.source = source
        self._copied_path = copied_path
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> AppEngineDB:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<AppEngineDB {self.source or self.engine.url} ({state})>"

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def copied_path(self) -> Path | None:
        """Path of the private copy, None once closed."""
        with self._lock:
            return self._copied_path

    def apps(self) -> list[App]:
        """Installed apps; make sure a platform box database has been opened."""
        with self._lock:
            self._check_open()
            return query_apps(self.engine)

    def device_info(self) -> dict[str, str]:
        """IED key/value information from the device table."""
        with self._lock:
            self._check_open()
            return query_device_info(self.engine)

    def query(self, sql: str, **params: Any) -> list[dict[str, Any]]:
        """Run a read-only statement, e.g. against tables without a facade."""
        with self._lock:
            self._check_open()
            return query_rows(self.engine, sql, **params)

    def close(self) -> None:
        """Close the engine and delete the private copy; later calls are no-ops."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            copied, self._copied_path = self._copied_path, None
            self.engine.dispose()
            if copied is not None:
                _discard(copied)
        logger.debug("database_closed", source=self.source)

    def _check_open(self) -> None:
        if self._closed:
            raise UnavailableError.query_failed(self.source or "database", "database is closed")


def _discard(path: Path) -> None:
    with contextlib.suppress(FileNotFoundError):
        path.unlink()


def _copy_to_temp(ref: NamespaceFileRef, temp_dir: str | None) -> Path:
    """Copy the referenced file into a new private temporary file."""
    try:
        src_fd = ref.open()
    except OSError as err:
        raise UnavailableError.open_failed(ref.host_path, err.strerror or str(err)) from err

    try:
        if not stat.S_ISREG(os.fstat(src_fd).st_mode):
            raise OSError(errno.EINVAL, "not a regular file")
        src = os.fdopen(src_fd, "rb")
    except OSError as err:
        os.close(src_fd)
        raise UnavailableError.open_failed(ref.host_path, err.strerror or str(err)) from err

    with src:
        try:
            tmp_fd, tmp_name = tempfile.mkstemp(prefix=TEMP_COPY_PREFIX, dir=temp_dir)
        except OSError as err:
            raise UnavailableError.open_failed(ref.host_path, f"cannot create copy: {err}") from err
        copied = Path(tmp_name)
        try:
            with os.fdopen(tmp_fd, "wb") as dst:
                shutil.copyfileobj(src, dst, COPY_CHUNK_BYTES)
        except OSError as err:
            _discard(copied)
            raise UnavailableError.open_failed(ref.host_path, err.strerror or str(err)) from err

    logger.debug("database_copied", source=ref.host_path, copy=str(copied))
    return copied


def open_database(
    ref: NamespaceFileRef,
    *,
    driver: str | Driver = DEFAULT_DRIVER_NAME,
    temp_dir: str | None = None,
) -> AppEngineDB:
    """Open a resolved database file read-only via a private copy.

    The engine is probed before returning, as creating it merely validates
    parameters. On any failure everything acquired so far is released.

    Raises:
        UnavailableError: copying, opening or probing failed.
        InvalidError: unknown driver name.
    """
    drv = get_driver(driver) if isinstance(driver, str) else driver
    copied = _copy_to_temp(ref, temp_dir)

    engine: Engine | None = None
    try:
        engine = drv.create_engine(copied)
        with engine.connect() as conn:
            conn.execute(text(drv.probe_sql)).scalar()
    except BaseException as err:
        if engine is not None:
            engine.dispose()
        _discard(copied)
        if isinstance(err, Exception):
            reason = str(getattr(err, "orig", None) or err)
            raise UnavailableError.probe_failed(ref.host_path, reason) from err
        raise

    logger.info("database_opened", source=ref.host_path, driver=drv.name)
    return AppEngineDB(engine, copied_path=copied, source=ref.host_path)
