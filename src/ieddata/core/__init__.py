"""Core module exports."""

from ieddata.core.errors import (
    DataIntegrityError,
    ErrorCode,
    IedDataError,
    InternalError,
    InvalidError,
    NotFoundError,
    UnavailableError,
)
from ieddata.core.logging import (
    clear_operation_id,
    configure_logging,
    get_operation_id,
    set_operation_id,
)

__all__ = [
    # Errors
    "DataIntegrityError",
    "ErrorCode",
    "IedDataError",
    "InternalError",
    "InvalidError",
    "NotFoundError",
    "UnavailableError",
    # Logging
    "clear_operation_id",
    "configure_logging",
    "get_operation_id",
    "set_operation_id",
]
