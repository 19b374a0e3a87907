"""ieddata error types with typed error codes.

Error code ranges:
- 1xxx: NotFound (container, process, directory, file)
- 2xxx: Invalid (unsafe names, bad PIDs, configuration)
- 3xxx: Unavailable (engine open/probe/query failures)
- 4xxx: DataIntegrity (wrong database opened)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # NotFound (1xxx)
    CONTAINER_NOT_FOUND = 1001
    PROCESS_NOT_FOUND = 1002
    DIRECTORY_NOT_FOUND = 1003
    FILE_NOT_FOUND = 1004

    # Invalid (2xxx)
    INVALID_PID = 2001
    INVALID_NAME = 2002
    CONFIG_PARSE_ERROR = 2003
    CONFIG_INVALID_VALUE = 2004
    UNKNOWN_DRIVER = 2005

    # Unavailable (3xxx)
    DATABASE_OPEN_FAILED = 3001
    DATABASE_PROBE_FAILED = 3002
    QUERY_FAILED = 3003
    RUNTIME_UNAVAILABLE = 3004

    # DataIntegrity (4xxx)
    EMPTY_JOIN_KEY = 4001
    MISSING_TABLE = 4002
    UNCONVERTIBLE_VALUE = 4003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


# No slots: contextlib reassigns __traceback__ on errors leaving a generator.
@dataclass(frozen=True)
class IedDataError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONTAINER_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class NotFoundError(IedDataError):
    """Something the caller asked for is not there (yet)."""

    @classmethod
    def container(cls, name: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.CONTAINER_NOT_FOUND,
            message=f"no Industrial Edge runtime container {name!r} present",
            retryable=True,
            details={"container": name},
        )

    @classmethod
    def process(cls, pid: int, reason: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.PROCESS_NOT_FOUND,
            message=f"no such process or mount namespace for PID {pid}: {reason}",
            retryable=True,
            details={"pid": pid, "reason": reason},
        )

    @classmethod
    def directory(cls, path: str, pid: int, reason: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.DIRECTORY_NOT_FOUND,
            message=f"database directory {path} does not exist in /proc/{pid}/root: {reason}",
            details={"path": path, "pid": pid, "reason": reason},
        )

    @classmethod
    def file(cls, path: str, pid: int, reason: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.FILE_NOT_FOUND,
            message=f"database file {path} does not exist in /proc/{pid}/root: {reason}",
            retryable=True,
            details={"path": path, "pid": pid, "reason": reason},
        )


class InvalidError(IedDataError):
    """Malformed or unsafe input, including configuration."""

    @classmethod
    def bad_pid(cls, pid: Any) -> "InvalidError":
        return cls(
            code=ErrorCode.INVALID_PID,
            message=f"invalid process ID {pid!r}: must be a positive integer",
            details={"pid": str(pid)},
        )

    @classmethod
    def unsafe_name(cls, name: str, reason: str) -> "InvalidError":
        return cls(
            code=ErrorCode.INVALID_NAME,
            message=f"invalid database name {name!r}: {reason}",
            details={"name": name, "reason": reason},
        )

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "InvalidError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "InvalidError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def unknown_driver(cls, driver: str, known: list[str]) -> "InvalidError":
        return cls(
            code=ErrorCode.UNKNOWN_DRIVER,
            message=f"unknown database driver {driver!r}, known drivers: {', '.join(known)}",
            details={"driver": driver, "known": known},
        )


class UnavailableError(IedDataError):
    """The engine or the container runtime did not cooperate."""

    @classmethod
    def open_failed(cls, path: str, reason: str) -> "UnavailableError":
        return cls(
            code=ErrorCode.DATABASE_OPEN_FAILED,
            message=f"unable to open database {path}, reason: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def probe_failed(cls, path: str, reason: str) -> "UnavailableError":
        return cls(
            code=ErrorCode.DATABASE_PROBE_FAILED,
            message=f"unable to open database {path}, liveness probe failed: {reason}",
            retryable=True,
            details={"path": path, "reason": reason},
        )

    @classmethod
    def query_failed(cls, query: str, reason: str) -> "UnavailableError":
        return cls(
            code=ErrorCode.QUERY_FAILED,
            message=f"cannot query {query}, reason: {reason}",
            details={"query": query, "reason": reason},
        )

    @classmethod
    def runtime(cls, host: str, reason: str) -> "UnavailableError":
        return cls(
            code=ErrorCode.RUNTIME_UNAVAILABLE,
            message=f"cannot talk to container runtime at {host}, reason: {reason}",
            retryable=True,
            details={"host": host, "reason": reason},
        )


class DataIntegrityError(IedDataError):
    """The data read does not look like it came from the expected database."""

    @classmethod
    def empty_join_key(cls, field: str) -> "DataIntegrityError":
        return cls(
            code=ErrorCode.EMPTY_JOIN_KEY,
            message=f"empty IE App identifier ({field}): did you open the correct database?",
            details={"field": field},
        )

    @classmethod
    def missing_table(cls, reason: str) -> "DataIntegrityError":
        return cls(
            code=ErrorCode.MISSING_TABLE,
            message=f"missing table ({reason}): did you open the correct database?",
            details={"reason": reason},
        )

    @classmethod
    def unconvertible(cls, column: str, value: Any, target: str) -> "DataIntegrityError":
        return cls(
            code=ErrorCode.UNCONVERTIBLE_VALUE,
            message=f"cannot convert column {column!r} value {value!r} to {target}",
            details={"column": column, "value": repr(value), "target": target},
        )


class InternalError(IedDataError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
