"""
Date handling for ZN-Vault SDK.

The server has changed its timestamp serialization over time and different
endpoints still disagree, so decoding walks a fixed list of formats and the
first one that matches wins. More specific formats come before the shorter
ones sharing the same separator style.
"""

import re
from datetime import datetime, timezone
from typing import Annotated, Any, Callable, Optional, Tuple

from pydantic import BeforeValidator, PlainSerializer

DateParser = Callable[[str], Optional[datetime]]

_SQL_PREFIX = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}"
_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class InvalidDateFormat(ValueError):
    """Raised when a value matches none of the known date formats."""

    def __init__(self, value: Any):
        super().__init__(f"Invalid date format: {value}")
        self.value = value


def _iso_parser(fmt: str) -> DateParser:
    def parse(value: str) -> Optional[datetime]:
        if "T" not in value:
            return None
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            return None

    return parse


def _sql_parser(fraction_digits: int) -> DateParser:
    if fraction_digits:
        pattern = re.compile(r"^%s\.\d{%d}$" % (_SQL_PREFIX, fraction_digits))
        fmt = "%Y-%m-%d %H:%M:%S.%f"
    else:
        pattern = re.compile(r"^%s$" % _SQL_PREFIX)
        fmt = "%Y-%m-%d %H:%M:%S"

    def parse(value: str) -> Optional[datetime]:
        if not pattern.match(value):
            return None
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            return None

    return parse


def _parse_epoch(value: str) -> Optional[datetime]:
    if not _NUMERIC.match(value):
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


# Order matters: see module docstring.
DATE_FORMATS: Tuple[Tuple[str, DateParser], ...] = (
    ("iso8601-fractional", _iso_parser("%Y-%m-%dT%H:%M:%S.%f%z")),
    ("iso8601", _iso_parser("%Y-%m-%dT%H:%M:%S%z")),
    ("sql-microseconds", _sql_parser(6)),
    ("sql-5-digit-fraction", _sql_parser(5)),
    ("sql-milliseconds", _sql_parser(3)),
    ("sql", _sql_parser(0)),
    ("unix-epoch", _parse_epoch),
)


def parse_datetime(value: Any) -> datetime:
    """
    Decode a timestamp received from the server.

    Strings are matched against DATE_FORMATS in order. JSON numbers are read
    as Unix epoch seconds. The result is always timezone-aware; values with no
    offset on the wire are taken as UTC.

    Raises:
        InvalidDateFormat: if no format matches.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise InvalidDateFormat(value)
    if not isinstance(value, str):
        raise InvalidDateFormat(value)

    text = value.strip()
    for _name, parser in DATE_FORMATS:
        parsed = parser(text)
        if parsed is not None:
            return parsed
    raise InvalidDateFormat(value)


def format_datetime(value: datetime) -> str:
    """Encode a datetime as ISO-8601 in UTC with a Z designator."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


Timestamp = Annotated[
    datetime,
    BeforeValidator(parse_datetime),
    PlainSerializer(format_datetime, when_used="json"),
]
