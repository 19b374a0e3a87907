"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (IEDDATA__SECTION__KEY)
3. Global YAML (~/.config/ieddata/config.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    IEDDATA__<SECTION>__<KEY>=<VALUE>

Examples:
    IEDDATA__LOGGING__LEVEL=DEBUG
    IEDDATA__DOCKER__HOST=unix:///run/docker.sock
    IEDDATA__DATABASE__TEMP_DIR=/dev/shm
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ieddata.config.constants import DEFAULT_DOCKER_HOST, DEFAULT_DRIVER_NAME

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        IEDDATA__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level; the CLI's -v raises it to DEBUG.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DockerConfig(BaseModel):
    """Container runtime configuration.

    Env vars:
        IEDDATA__DOCKER__HOST: Docker API endpoint
        IEDDATA__DOCKER__TIMEOUT_SEC: API call timeout
    """

    host: str = Field(
        default=DEFAULT_DOCKER_HOST,
        description="Docker API endpoint used to discover the runtime container.",
    )
    timeout_sec: float = Field(
        default=10.0,
        description="Timeout for individual Docker API calls. "
        "The event stream itself is not subject to this timeout.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class DatabaseConfig(BaseModel):
    """Database access configuration.

    Env vars:
        IEDDATA__DATABASE__DRIVER: Registered driver name
        IEDDATA__DATABASE__TEMP_DIR: Where private database copies are placed
    """

    driver: str = Field(
        default=DEFAULT_DRIVER_NAME,
        description="Name of the registered database driver.",
    )
    temp_dir: str | None = Field(
        default=None,
        description="Directory for private database copies. Default: system temp dir.",
    )


class IedDataConfig(BaseModel):
    """Root configuration for ieddata."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    docker: DockerConfig = Field(default_factory=DockerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
