"""Resolve file paths inside another process's mount namespace.

Instead of switching the calling thread into the target mount namespace, all
lookups go through the target process's ``/proc/<pid>/root`` view. The root
directory is opened once per resolution, so both the directory and the file
lookup see the same namespace root even if the process exits midway.
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass

import structlog

from ieddata.core.errors import InternalError, InvalidError, NotFoundError
from ieddata.nsfs.procfsroot import eval_symlinks_at, open_beneath, open_root

logger = structlog.get_logger()


def proc_root(pid: int) -> str:
    """Host-visible path of the root directory of pid's mount namespace."""
    return f"/proc/{pid}/root"


@dataclass(frozen=True, slots=True)
class NamespaceFileRef:
    """A file reached through a process's mount namespace.

    resolved_path is absolute and free of symlinks, relative to the
    namespace root of backing_pid.
    """

    resolved_path: str
    backing_pid: int

    @property
    def root(self) -> str:
        return proc_root(self.backing_pid)

    @property
    def host_path(self) -> str:
        """Path of the file as seen from the caller's own mount namespace."""
        return self.root + self.resolved_path

    def open(self, flags: int = os.O_RDONLY) -> int:
        """Open the resolved file without following any symlink."""
        return open_beneath(self.root, self.resolved_path, flags)


def _check_pid(pid: int) -> None:
    if isinstance(pid, bool) or not isinstance(pid, int) or pid <= 0:
        raise InvalidError.bad_pid(pid)


def resolve(pid: int, path: str) -> NamespaceFileRef:
    """Resolve path inside the mount namespace of pid.

    The parent directory is resolved first so that a missing directory
    (configuration problem) is reported differently from a missing file
    (data not yet there).

    Raises:
        InvalidError: pid is not a positive integer.
        NotFoundError: process gone, directory or file missing.
        InternalError: any other failure to walk the namespace.
    """
    _check_pid(pid)
    # ".." is left to symlink resolution, which clamps it at the root
    path = "/" + path.lstrip("/")
    directory = posixpath.dirname(path)

    try:
        root_fd = open_root(proc_root(pid))
    except (FileNotFoundError, ProcessLookupError) as err:
        raise NotFoundError.process(pid, err.strerror or str(err)) from err
    except OSError as err:
        raise InternalError.unexpected(
            f"cannot access {proc_root(pid)}: {err.strerror or err}", pid=pid
        ) from err

    try:
        try:
            eval_symlinks_at(root_fd, directory)
        except (FileNotFoundError, NotADirectoryError) as err:
            reason = f"{err.strerror}: {err.filename}"
            raise NotFoundError.directory(directory, pid, reason) from err
        try:
            resolved = eval_symlinks_at(root_fd, path)
        except (FileNotFoundError, NotADirectoryError) as err:
            raise NotFoundError.file(path, pid, f"{err.strerror}: {err.filename}") from err
    except OSError as err:
        raise InternalError.unexpected(
            f"cannot determine full database path {path} in {proc_root(pid)}: {err}", pid=pid
        ) from err
    finally:
        os.close(root_fd)

    logger.debug("path_resolved", pid=pid, path=path, resolved=resolved)
    return NamespaceFileRef(resolved_path=resolved, backing_pid=pid)
