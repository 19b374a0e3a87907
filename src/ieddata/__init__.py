"""Read-only access to Industrial Edge app engine databases.

Example:
    import ieddata

    with ieddata.open(ieddata.PLATFORM_BOX_DB) as db:
        for app in db.apps():
            print(app.title, app.version)
"""

from ieddata.config.constants import (
    DB_BASE_DIR,
    EDGE_IOT_CORE_CONTAINER_NAME,
    PLATFORM_BOX_DB,
)
from ieddata.core.errors import (
    DataIntegrityError,
    IedDataError,
    InternalError,
    InvalidError,
    NotFoundError,
    UnavailableError,
)
from ieddata.db import App, AppEngineDB
from ieddata.ops import open, open_in_pid, open_path

__version__ = "0.1.0"

__all__ = [
    "App",
    "AppEngineDB",
    "DB_BASE_DIR",
    "DataIntegrityError",
    "EDGE_IOT_CORE_CONTAINER_NAME",
    "IedDataError",
    "InternalError",
    "InvalidError",
    "NotFoundError",
    "PLATFORM_BOX_DB",
    "UnavailableError",
    "open",
    "open_in_pid",
    "open_path",
]
