"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
provides app engine database fixtures built with SQLAlchemy.
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local ieddata package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of ieddata modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("ieddata"):
        del sys.modules[module_name]

from sqlalchemy import create_engine, text  # noqa: E402

APPS = [
    # appId, title, version, repositoryName, isDebuggingEnabled, createdDate
    (
        "1842f53281412f9c657c7765494ff80e",
        "AppC",
        "1.1.0",
        "ccc",
        0,
        "2021-06-01 08:00:00+00:00",
    ),
    (
        "195ff5e2e15a149ca5eb7c59d3857cc5",
        "AppA",
        "1.9.18",
        "aaa",
        1,
        "2021-03-04 10:11:12.123456789+00:00",
    ),
    (
        "2a267358a0403fddb039924fbc4f3169",
        "AppD",
        "0.19.1",
        "ddd",
        0,
        "2022-11-30T23:59:59Z",
    ),
    (
        "7bd06d3bbf816d0658d5a871b0a498ff",
        "AppB",
        "0.6.66666666666",
        "bbb",
        0,
        "1640995200",
    ),
]

DEVICE = {
    "deviceName": "iedx12345",
    "ownerEmail": "foo.bar@example.com",
}

# Both tables carry createdDate; the joined result therefore has it twice.
VERSION_CREATED = "1999-12-31 00:00:00+00:00"


def _sqlite_url(path: Path) -> str:
    return f"sqlite:///{path}"


def build_appengine_db(path: Path) -> Path:
    """Write a platform box database with four apps and device information.

    The application table has a column unknown to App, and lacks several
    App fields, to exercise the dynamic projection.
    """
    engine = create_engine(_sqlite_url(path))
    try:
        with engine.begin() as conn:
            conn.execute(
                text(
                    "CREATE TABLE application ("
                    " appId TEXT PRIMARY KEY, title TEXT, repositoryName TEXT,"
                    " description TEXT, icon TEXT, projectId TEXT, appOwnerId TEXT,"
                    " webAddress TEXT, runasservice INTEGER, isDebuggingEnabled INTEGER,"
                    " isVisible INTEGER, createdDate TEXT, modifiedDate TEXT,"
                    " someFutureColumn BLOB)"
                )
            )
            conn.execute(
                text(
                    "CREATE TABLE applicationversions ("
                    " appVersionId TEXT PRIMARY KEY, appId TEXT, appVersion TEXT,"
                    " versionStatus INTEGER, releaseNotes TEXT, createdDate TEXT)"
                )
            )
            conn.execute(
                text("CREATE TABLE device (deviceKey TEXT PRIMARY KEY, deviceValue TEXT)")
            )
            for app_id, title, version, repo, debug, created in APPS:
                conn.execute(
                    text(
                        "INSERT INTO application VALUES (:id, :title, :repo, :desc,"
                        " :icon, :project, :owner, :url, 1, :debug, 1, :created, NULL, x'00ff')"
                    ),
                    {
                        "id": app_id,
                        "title": title,
                        "repo": repo,
                        "desc": f"The {title} app",
                        "icon": f"/images/{app_id}.png",
                        "project": f"project-{repo}",
                        "owner": "owner-1",
                        "url": f"https://{repo}.example.com",
                        "debug": debug,
                        "created": created,
                    },
                )
                conn.execute(
                    text(
                        "INSERT INTO applicationversions VALUES"
                        " (:vid, :id, :version, 2, 'fixes', :created)"
                    ),
                    {
                        "vid": f"v-{app_id[:8]}",
                        "id": app_id,
                        "version": version,
                        "created": VERSION_CREATED,
                    },
                )
            for key, value in DEVICE.items():
                conn.execute(
                    text("INSERT INTO device VALUES (:key, :value)"),
                    {"key": key, "value": value},
                )
    finally:
        engine.dispose()
    return path


def build_other_db(path: Path) -> Path:
    """Write a valid SQLite database that is not a platform box database."""
    engine = create_engine(_sqlite_url(path))
    try:
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE other (id INTEGER PRIMARY KEY, name TEXT)"))
            conn.execute(text("INSERT INTO other (name) VALUES ('thing')"))
    finally:
        engine.dispose()
    return path


def build_keyless_db(path: Path) -> Path:
    """Write a database whose apps join on an empty identifier."""
    engine = create_engine(_sqlite_url(path))
    try:
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE application (appId TEXT, title TEXT)"))
            conn.execute(
                text("CREATE TABLE applicationversions (appId TEXT, appVersion TEXT)")
            )
            conn.execute(text("INSERT INTO application VALUES ('', 'Nameless')"))
            conn.execute(text("INSERT INTO applicationversions VALUES ('', '1.0')"))
    finally:
        engine.dispose()
    return path


@pytest.fixture(scope="session")
def db_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Directory standing in for the runtime container's database directory."""
    directory = tmp_path_factory.mktemp("app_engine_db")
    build_appengine_db(directory / "platformbox.db")
    build_other_db(directory / "other.db")
    build_keyless_db(directory / "keyless.db")
    (directory / "not.a.db").write_bytes(b"this is definitely not an SQLite database\n" * 64)
    (directory / "subdir").mkdir()
    return directory


@pytest.fixture(scope="session")
def appengine_db_path(db_dir: Path) -> Path:
    return db_dir / "platformbox.db"


@pytest.fixture
def copy_dir(tmp_path: Path) -> Path:
    """Private directory for temporary database copies."""
    directory = tmp_path / "copies"
    directory.mkdir()
    return directory


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user config files and IEDDATA__ env vars out of tests."""
    monkeypatch.setattr(
        "ieddata.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-such-config.yaml"
    )
    for key in list(os.environ):
        if key.upper().startswith("IEDDATA__"):
            monkeypatch.delenv(key)


def open_fds() -> dict[int, str]:
    """Open file descriptors of this process and what they point to."""
    fds = {}
    for entry in os.listdir("/proc/self/fd"):
        try:
            fds[int(entry)] = os.readlink(f"/proc/self/fd/{entry}")
        except OSError:
            # the descriptor used for listing the directory itself
            continue
    return fds


@pytest.fixture
def no_leaked_fds() -> Generator[None, None, None]:
    """Fail the test if it leaves file descriptors open."""
    before = open_fds()
    yield
    leaked = {fd: target for fd, target in open_fds().items() if before.get(fd) != target}
    assert leaked == {}
