"""Tests for opening app engine databases via private copies."""

from __future__ import annotations

import os
import threading
from pathlib import Path

import pytest

from ieddata.config.constants import TEMP_COPY_PREFIX
from ieddata.core.errors import ErrorCode, InvalidError, UnavailableError
from ieddata.db.database import AppEngineDB, open_database
from ieddata.db.drivers import DRIVERS, SQLITE, Driver, get_driver, sqlite_engine
from ieddata.nsfs.resolver import NamespaceFileRef, resolve


def ref_for(path: Path) -> NamespaceFileRef:
    """Reference a local file through this process's own mount namespace."""
    return resolve(os.getpid(), str(path))


def copies(directory: Path) -> list[Path]:
    return sorted(directory.glob(f"{TEMP_COPY_PREFIX}*"))


class TestDrivers:
    """Driver registry tests."""

    def test_given_default_name_when_looked_up_then_sqlite(self) -> None:
        assert get_driver("sqlite") is SQLITE
        assert list(DRIVERS) == ["sqlite"]

    def test_given_unknown_name_when_looked_up_then_invalid(self) -> None:
        with pytest.raises(InvalidError) as exc_info:
            get_driver("oracle")

        assert exc_info.value.code == ErrorCode.UNKNOWN_DRIVER
        assert exc_info.value.details["known"] == ["sqlite"]


class TestOpenDatabase:
    """open_database() tests."""

    def test_given_platform_box_when_opened_then_reads_private_copy(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        """The database is read from a private copy in the temp directory."""
        # When
        db = open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir))

        # Then
        try:
            assert copies(copy_dir) == [db.copied_path]
            assert len(db.apps()) == 4
            assert db.device_info()["deviceName"] == "iedx12345"
        finally:
            db.close()

    def test_given_open_db_when_closed_then_copy_removed(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        """Closing deletes the private copy."""
        db = open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir))

        db.close()

        assert db.closed
        assert db.copied_path is None
        assert copies(copy_dir) == []

    def test_given_context_manager_when_left_then_closed(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        with open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir)) as db:
            assert not db.closed

        assert db.closed
        assert copies(copy_dir) == []

    def test_given_closed_db_when_closed_again_then_no_error(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        """Closing is idempotent."""
        db = open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir))

        db.close()
        db.close()

        assert db.closed

    def test_given_closed_db_when_queried_then_unavailable(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        db = open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir))
        db.close()

        with pytest.raises(UnavailableError) as exc_info:
            db.apps()

        assert "closed" in exc_info.value.message

    def test_given_many_threads_when_closing_concurrently_then_released_once(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        """Concurrent close() calls are safe."""
        # Given
        db = open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir))
        start = threading.Barrier(8)
        errors: list[BaseException] = []

        def close() -> None:
            start.wait()
            try:
                db.close()
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        # When
        threads = [threading.Thread(target=close) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)

        # Then
        assert errors == []
        assert db.closed
        assert copies(copy_dir) == []

    def test_given_concurrent_readers_when_querying_then_consistent(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        """Queries from several threads on one database all succeed."""
        results: list[int] = []
        lock = threading.Lock()

        with open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir)) as db:

            def read() -> None:
                count = len(db.apps())
                with lock:
                    results.append(count)

            threads = [threading.Thread(target=read) for _ in range(6)]
            for t in threads:
                t.start()
            for t in threads:
                t.join(5)

        assert results == [4] * 6

    def test_given_open_and_close_when_done_then_no_fds_leaked(
        self, appengine_db_path: Path, copy_dir: Path, no_leaked_fds: None
    ) -> None:
        """Engine connections and copy descriptors are all released."""
        for _ in range(3):
            with open_database(ref_for(appengine_db_path), temp_dir=str(copy_dir)) as db:
                db.apps()
                db.device_info()

    def test_given_garbage_file_when_opened_then_probe_fails_and_cleans_up(
        self, db_dir: Path, copy_dir: Path, no_leaked_fds: None
    ) -> None:
        """A file that is not a database fails the liveness probe."""
        with pytest.raises(UnavailableError) as exc_info:
            open_database(ref_for(db_dir / "not.a.db"), temp_dir=str(copy_dir))

        assert exc_info.value.code == ErrorCode.DATABASE_PROBE_FAILED
        assert "unable to open database" in exc_info.value.message
        assert copies(copy_dir) == []

    def test_given_directory_when_opened_then_open_fails_and_cleans_up(
        self, db_dir: Path, copy_dir: Path
    ) -> None:
        """Only regular files are copied."""
        with pytest.raises(UnavailableError) as exc_info:
            open_database(ref_for(db_dir / "subdir"), temp_dir=str(copy_dir))

        assert exc_info.value.code == ErrorCode.DATABASE_OPEN_FAILED
        assert copies(copy_dir) == []

    def test_given_symlink_to_root_when_opened_then_open_fails(
        self, tmp_path: Path, copy_dir: Path, no_leaked_fds: None
    ) -> None:
        """A database name pointing at "/" is an open failure, not a crash."""
        # Given
        link = tmp_path / "rootlink.db"
        link.symlink_to("/")
        ref = ref_for(link)
        assert ref.resolved_path == "/"

        # When / Then
        with pytest.raises(UnavailableError) as exc_info:
            open_database(ref, temp_dir=str(copy_dir))

        assert exc_info.value.code == ErrorCode.DATABASE_OPEN_FAILED
        assert copies(copy_dir) == []

    def test_given_file_replaced_by_symlink_when_opened_then_refused(
        self, tmp_path: Path, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        """A symlink swapped in after resolution is not followed."""
        # Given
        victim = tmp_path / "swap.db"
        victim.write_bytes(appengine_db_path.read_bytes())
        ref = ref_for(victim)
        victim.unlink()
        victim.symlink_to(appengine_db_path)

        # When / Then
        with pytest.raises(UnavailableError) as exc_info:
            open_database(ref, temp_dir=str(copy_dir))

        assert exc_info.value.code == ErrorCode.DATABASE_OPEN_FAILED

    def test_given_unknown_driver_when_opened_then_invalid_without_copy(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        with pytest.raises(InvalidError):
            open_database(ref_for(appengine_db_path), driver="mysql", temp_dir=str(copy_dir))

        assert copies(copy_dir) == []

    def test_given_driver_object_when_opened_then_used(
        self, appengine_db_path: Path, copy_dir: Path
    ) -> None:
        """Drivers can also be handed in directly."""
        custom = Driver(name="sqlite-custom", create_engine=sqlite_engine, probe_sql="SELECT 1")

        with open_database(ref_for(appengine_db_path), driver=custom, temp_dir=str(copy_dir)) as db:
            assert db.query("SELECT count(*) AS n FROM device") == [{"n": 2}]


class TestAppEngineDB:
    """AppEngineDB tests with a directly created engine."""

    def test_given_engine_without_copy_when_closed_then_engine_disposed(
        self, appengine_db_path: Path
    ) -> None:
        db = AppEngineDB(sqlite_engine(appengine_db_path), source="test")

        assert "open" in repr(db)
        db.close()

        assert "closed" in repr(db)
        assert appengine_db_path.exists()
