"""Config module exports."""

from ieddata.config.loader import IedDataSettings, load_config
from ieddata.config.models import (
    DatabaseConfig,
    DockerConfig,
    IedDataConfig,
    LoggingConfig,
    LogOutputConfig,
)

__all__ = [
    "load_config",
    "IedDataConfig",
    "IedDataSettings",
    "DatabaseConfig",
    "DockerConfig",
    "LoggingConfig",
    "LogOutputConfig",
]
