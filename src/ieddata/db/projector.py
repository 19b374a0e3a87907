"""Project result sets with drifting column sets onto fixed record types.

Upstream tables gain and lose columns independent of our releases. Instead of
a rigid decode, a projection is computed once per result set shape: each
reported column is bound to the record field with the same storage name, or
to nothing (the value is read and dropped). Record fields without a column
keep their default (zero) value.

Storage names come from a field's ``db`` metadata entry; otherwise the field
name is turned into camelCase (``version_status`` -> ``versionStatus``).
"""

from __future__ import annotations

import dataclasses
import re
import threading
import typing
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from functools import cache
from typing import Any, Generic, TypeVar

from ieddata.core.errors import DataIntegrityError

R = TypeVar("R")

Converter = Callable[[Any], Any]

ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)
"""Zero value of time fields, the same instant Go and SQLite tools use."""

_TRUE_STRINGS = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSE_STRINGS = frozenset({"", "0", "f", "false", "n", "no", "off"})

# Fractional seconds beyond microseconds, e.g. nanosecond timestamps.
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")

# Text time layouts written by SQLite and Go drivers: "T" or blank separator,
# optional seconds and fraction, an offset with or without colon (possibly
# blank-separated) that may carry a zone abbreviation as in "-0700 MST".
_TIME_TEXT = re.compile(
    r"(?P<stamp>\d{4}-\d{2}-\d{2}(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?)"
    r"\s*(?:(?P<zulu>Z)|(?P<sign>[+-])(?P<hh>\d{2}):?(?P<mm>\d{2})(?:\s+[A-Za-z]{1,5})?)?"
)

# Unix seconds; shorter digit runs look like years or compact dates.
_EPOCH_TEXT = re.compile(r"-?\d{9,}(?:\.\d+)?")


def first_lower(s: str) -> str:
    """Return s with only its first character in lower case."""
    return s[:1].lower() + s[1:]


def column_name(field: dataclasses.Field[Any]) -> str:
    """Storage (column) name of a record field."""
    explicit = field.metadata.get("db")
    if explicit:
        return str(explicit)
    pascal = "".join(part[:1].upper() + part[1:] for part in field.name.split("_"))
    return first_lower(pascal)


def to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def to_int(value: Any) -> int:
    """Integers stay raw integers, including 0/1 flags."""
    if value is None:
        return 0
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not integral")
        return int(value)
    if isinstance(value, str | bytes):
        return int(value.strip() or 0)
    raise TypeError(f"unsupported type {type(value).__name__}")


def to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return int(lowered) != 0
    raise TypeError(f"unsupported type {type(value).__name__}")


def to_time(value: Any) -> datetime:
    """Parse SQLite's time encodings: Unix seconds or ISO 8601 text.

    Naive times are taken to be UTC.
    """
    if value is None:
        return ZERO_TIME
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=UTC)
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO_TIME
        if _EPOCH_TEXT.fullmatch(text):
            return datetime.fromtimestamp(float(text), tz=UTC)
        return _parse_time_text(text)
    raise TypeError(f"unsupported type {type(value).__name__}")


def _parse_time_text(text: str) -> datetime:
    match = _TIME_TEXT.fullmatch(text)
    if match is None:
        raise ValueError(f"unrecognized time layout: {text!r}")
    iso = _EXCESS_FRACTION.sub(r"\1", match["stamp"])
    if len(iso) == len("2006-01-02"):
        iso += "T00:00:00"
    if match["zulu"]:
        iso += "+00:00"
    elif match["sign"]:
        iso += f"{match['sign']}{match['hh']}:{match['mm']}"
    parsed = datetime.fromisoformat(iso)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


_CONVERTERS: dict[Any, Converter] = {
    str: to_str,
    int: to_int,
    bool: to_bool,
    datetime: to_time,
}


@dataclasses.dataclass(frozen=True, slots=True)
class Binding:
    """Where one result column goes; field is None for discarded columns."""

    column: str
    field: str | None = None
    convert: Converter | None = None


Projection = tuple[Binding, ...]


class RecordProjector(Generic[R]):
    """Maps result columns onto the fields of a dataclass record type."""

    def __init__(self, record_type: type[R]) -> None:
        if not dataclasses.is_dataclass(record_type):
            raise TypeError(f"{record_type.__name__} is not a dataclass")
        self.record_type = record_type
        hints = typing.get_type_hints(record_type)
        self._fields: dict[str, tuple[str, Converter]] = {}
        for field in dataclasses.fields(record_type):
            convert = _CONVERTERS.get(hints[field.name])
            if convert is None:
                raise TypeError(
                    f"{record_type.__name__}.{field.name}: unsupported field type "
                    f"{hints[field.name]!r}"
                )
            self._fields[column_name(field)] = (field.name, convert)
        self._lock = threading.Lock()
        self._projections: dict[tuple[str, ...], Projection] = {}

    @property
    def column_names(self) -> list[str]:
        return list(self._fields)

    def project(self, columns: Sequence[str]) -> Projection:
        """Bind result columns to fields; cached per column list.

        Only the first of several equally named columns is bound.
        """
        key = tuple(columns)
        with self._lock:
            cached = self._projections.get(key)
        if cached is not None:
            return cached

        bound: set[str] = set()
        bindings: list[Binding] = []
        for column in key:
            target = self._fields.get(column)
            if target is None or column in bound:
                bindings.append(Binding(column))
                continue
            bound.add(column)
            bindings.append(Binding(column, target[0], target[1]))
        projection = tuple(bindings)

        with self._lock:
            self._projections[key] = projection
        return projection

    def scan(self, row: Sequence[Any], projection: Projection) -> R:
        """Build one record from a result row using a projection."""
        values: dict[str, Any] = {}
        for binding, value in zip(projection, row, strict=True):
            if binding.field is None or binding.convert is None:
                continue
            try:
                values[binding.field] = binding.convert(value)
            except (TypeError, ValueError) as err:
                target = self._type_name(binding.convert)
                raise DataIntegrityError.unconvertible(binding.column, value, target) from err
        return self.record_type(**values)

    @staticmethod
    def _type_name(convert: Converter) -> str:
        for tp, conv in _CONVERTERS.items():
            if conv is convert:
                return str(tp.__name__)
        return "unknown"


@cache
def projector_for(record_type: type[R]) -> RecordProjector[R]:
    """Shared projector per record type, built on first use."""
    return RecordProjector(record_type)
