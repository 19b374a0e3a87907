"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
They describe the layout of the Industrial Edge runtime container and
implementation limits.

For configurable values, see models.py (DockerConfig, DatabaseConfig, etc.).
"""

# =============================================================================
# Industrial Edge Runtime Layout
# =============================================================================

EDGE_IOT_CORE_CONTAINER_NAME = "edge-iot-core"
"""Name of the IED runtime container."""

DB_BASE_DIR = "/data/app_engine/db"
"""Location of app engine-related SQLite database files inside the runtime container."""

PLATFORM_BOX_DB = "platformbox.db"
"""File name of the platform box database."""

# =============================================================================
# Container Runtime
# =============================================================================

DEFAULT_DOCKER_HOST = "unix:///proc/1/root/run/docker.sock"
"""Host Docker socket reached through PID 1's root, so this also works from
inside a container sharing the host PID namespace."""

# =============================================================================
# Internal Implementation Constants
# =============================================================================

DEFAULT_DRIVER_NAME = "sqlite"
"""Name of the database driver looked up at open time."""

TEMP_COPY_PREFIX = "temp-db-copy-"
"""Prefix of private database copies in the temporary directory."""

MAX_SYMLINKS = 255
"""Symlink expansions allowed while resolving a single path."""

COPY_CHUNK_BYTES = 1024 * 1024
"""Read size when copying a database out of a container."""
