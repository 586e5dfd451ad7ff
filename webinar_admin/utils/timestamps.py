"""Conversions between display strings, native datetimes and persisted timestamps.

A date value crossing a layer boundary is one of three things:

- ``datetime``: the in-memory representation used by models
- ``PersistedTimestamp``: the handle stored in the document database
- ``str``: the ``YYYY-MM-DDTHH:MM`` string used by form inputs

No timezone conversion is performed. Naive datetimes are mapped to epoch
seconds as if they were UTC so that a value survives a round trip unchanged.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

DISPLAY_FORMAT = "%Y-%m-%dT%H:%M"
_SECONDS_FORMAT = "%Y-%m-%dT%H:%M:%S"
_EPOCH = datetime(1970, 1, 1)


@dataclass(frozen=True, order=True)
class PersistedTimestamp:
    """Opaque timestamp handle as stored by the document database."""

    seconds: int
    nanoseconds: int = 0

    def __post_init__(self):
        if not 0 <= self.nanoseconds < 1_000_000_000:
            raise ValueError(f"nanoseconds out of range: {self.nanoseconds}")

    @classmethod
    def from_datetime(cls, value: datetime) -> "PersistedTimestamp":
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        delta = value - _EPOCH
        seconds = delta.days * 86400 + delta.seconds
        return cls(seconds=seconds, nanoseconds=delta.microseconds * 1000)

    @classmethod
    def now(cls) -> "PersistedTimestamp":
        return cls.from_datetime(datetime.now(timezone.utc))

    def to_datetime(self) -> datetime:
        return _EPOCH + timedelta(seconds=self.seconds, microseconds=self.nanoseconds // 1000)


DateValue = Union[None, str, datetime, PersistedTimestamp]


def parse_display_string(value: str) -> datetime:
    """
    Parse a ``YYYY-MM-DDTHH:MM`` string into a naive datetime.

    Args:
        value: Display string (seconds are accepted and dropped)

    Returns:
        datetime truncated to minute precision

    Raises:
        ValueError: If the string is not a valid local date/time
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")

    text = value.strip()
    for fmt in (DISPLAY_FORMAT, _SECONDS_FORMAT):
        try:
            return datetime.strptime(text, fmt).replace(second=0)
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {value}")


def to_native_date(value: DateValue) -> Optional[datetime]:
    """
    Resolve any date representation to a native datetime.

    Returns:
        datetime, or None for empty values

    Raises:
        ValueError: If a string cannot be parsed
        TypeError: If the value is not a supported representation
    """
    if value is None or value == "":
        return None
    if isinstance(value, PersistedTimestamp):
        return value.to_datetime()
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return parse_display_string(value)
    raise TypeError(f"Unsupported date format: {value!r}")


def to_display_string(value: DateValue) -> str:
    """
    Format a date for a ``datetime-local`` style input.

    Unsupported or unparsable values give an empty string.
    """
    try:
        native = to_native_date(value)
    except (ValueError, TypeError):
        return ""
    if native is None:
        return ""
    return native.strftime(DISPLAY_FORMAT)


def to_persisted(value: DateValue) -> Optional[PersistedTimestamp]:
    """
    Convert a date value into the handle written to the database.

    Raises:
        ValueError: If a string cannot be parsed
        TypeError: If the value is not a supported representation
    """
    if isinstance(value, PersistedTimestamp):
        return value
    native = to_native_date(value)
    if native is None:
        return None
    return PersistedTimestamp.from_datetime(native)


def from_persisted(value: Optional[PersistedTimestamp]) -> Optional[datetime]:
    """Convert a stored handle back into a native datetime."""
    if value is None:
        return None
    return value.to_datetime()


def format_event_date(value: DateValue) -> str:
    """Long human-readable date, e.g. ``Saturday, June 01, 2024 @ 10:00 AM``."""
    try:
        native = to_native_date(value)
    except (ValueError, TypeError):
        native = None
    if native is None:
        return "Date not available"
    return native.strftime("%A, %B %d, %Y @ %I:%M %p")


def format_session_time(value: DateValue) -> Optional[str]:
    """Short time label for session badges, or None when there is no time."""
    try:
        native = to_native_date(value)
    except (ValueError, TypeError):
        return None
    if native is None:
        return None
    return native.strftime("%I:%M %p")
