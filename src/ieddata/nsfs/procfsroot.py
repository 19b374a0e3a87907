"""Symlink resolution rooted in another process's mount namespace.

Paths are resolved as if the given root directory (usually ``/proc/<pid>/root``)
were ``/``, without the calling process ever switching namespaces:

- Every component is looked up relative to a directory file descriptor,
  never through a full host path, so intermediate components cannot be
  redirected outside the root after they have been checked.
- Absolute symlink targets restart at the root, relative ones continue from
  the directory containing the link.
- ``..`` never climbs above the root.
"""

from __future__ import annotations

import errno
import os
import stat
from collections import deque

from ieddata.config.constants import MAX_SYMLINKS

_DIR_FLAGS = os.O_PATH | os.O_DIRECTORY | os.O_CLOEXEC


def _components(path: str) -> list[str]:
    return [part for part in path.split("/") if part not in ("", ".")]


def _joined(dirs: list[tuple[str, int]], name: str | None = None) -> str:
    parts = [d for d, _ in dirs]
    if name is not None:
        parts.append(name)
    return "/" + "/".join(parts)


def _close_all(dirs: list[tuple[str, int]]) -> None:
    for _, fd in dirs:
        os.close(fd)
    dirs.clear()


def open_root(root: str) -> int:
    """Open a root directory as an O_PATH descriptor."""
    return os.open(root, _DIR_FLAGS)


def eval_symlinks_at(root_fd: int, path: str, max_symlinks: int = MAX_SYMLINKS) -> str:
    """Resolve all symlinks in path, treating root_fd as "/".

    Returns the fully resolved absolute path, expressed relative to the root.
    Raises FileNotFoundError, NotADirectoryError, or OSError(ELOOP) carrying
    the offending in-root path.
    """
    pending = deque(_components(path))
    dirs: list[tuple[str, int]] = []
    links = 0
    try:
        while pending:
            name = pending.popleft()
            if name == "..":
                if dirs:
                    _, fd = dirs.pop()
                    os.close(fd)
                continue

            parent_fd = dirs[-1][1] if dirs else root_fd
            try:
                st = os.stat(name, dir_fd=parent_fd, follow_symlinks=False)
            except FileNotFoundError as err:
                raise FileNotFoundError(
                    errno.ENOENT, os.strerror(errno.ENOENT), _joined(dirs, name)
                ) from err

            if stat.S_ISLNK(st.st_mode):
                links += 1
                if links > max_symlinks:
                    raise OSError(errno.ELOOP, os.strerror(errno.ELOOP), _joined(dirs, name))
                target = os.readlink(name, dir_fd=parent_fd)
                if target.startswith("/"):
                    _close_all(dirs)
                pending.extendleft(reversed(_components(target)))
                continue

            if not pending:
                return _joined(dirs, name)
            if not stat.S_ISDIR(st.st_mode):
                raise NotADirectoryError(
                    errno.ENOTDIR, os.strerror(errno.ENOTDIR), _joined(dirs, name)
                )
            dirs.append((name, os.open(name, _DIR_FLAGS | os.O_NOFOLLOW, dir_fd=parent_fd)))
        return _joined(dirs)
    finally:
        _close_all(dirs)


def eval_symlinks(path: str, root: str, max_symlinks: int = MAX_SYMLINKS) -> str:
    """Resolve path inside root; see eval_symlinks_at."""
    root_fd = open_root(root)
    try:
        return eval_symlinks_at(root_fd, path, max_symlinks)
    finally:
        os.close(root_fd)


def open_beneath(root: str, resolved_path: str, flags: int = os.O_RDONLY) -> int:
    """Open an already resolved path beneath root, refusing any symlink.

    Each component is opened with O_NOFOLLOW relative to its parent, so a
    symlink swapped in after resolution makes the open fail instead of
    escaping the root. Returns a file descriptor owned by the caller.
    """
    parts = _components(resolved_path)
    if not parts:
        # the root itself, e.g. after following a symlink to "/"
        raise OSError(errno.EISDIR, os.strerror(errno.EISDIR), resolved_path)
    if ".." in parts:
        raise OSError(errno.EINVAL, "not a resolved path", resolved_path)

    dir_fd = open_root(root)
    try:
        for name in parts[:-1]:
            next_fd = os.open(name, _DIR_FLAGS | os.O_NOFOLLOW, dir_fd=dir_fd)
            os.close(dir_fd)
            dir_fd = next_fd
        return os.open(parts[-1], flags | os.O_NOFOLLOW | os.O_CLOEXEC, dir_fd=dir_fd)
    finally:
        os.close(dir_fd)
