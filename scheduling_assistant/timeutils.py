"""Parsing and timezone helpers for the wire formats used by the API and the LLM layer.

Dates travel as ``YYYY-MM-DD``, times of day as 24-hour ``HH:mm`` and exact
slot starts as ``YYYY-MM-DD HH:mm`` in the provider's local timezone.
"""

import re
from datetime import date, datetime, time
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from scheduling_assistant.config import settings

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
DATETIME_FORMAT = f"{DATE_FORMAT} {TIME_FORMAT}"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string."""
    value = value.strip()
    if not _DATE_RE.match(value):
        raise ValueError(f"Date '{value}' must use the YYYY-MM-DD format")
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise ValueError(f"Date '{value}' is not a valid calendar date") from exc


def parse_time(value: str) -> time:
    """Parse a strict 24-hour ``HH:mm`` string."""
    value = value.strip()
    if not _TIME_RE.match(value):
        raise ValueError(f"Time '{value}' must use the 24-hour HH:mm format")
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def parse_local_datetime(value: str) -> tuple[date, time]:
    """Split a ``YYYY-MM-DD HH:mm`` string into its date and time parts."""
    parts = value.strip().split(" ")
    if len(parts) != 2:
        raise ValueError(f"Start time '{value}' must use the 'YYYY-MM-DD HH:mm' format")
    return parse_date(parts[0]), parse_time(parts[1])


def coerce_date(value):
    if isinstance(value, str):
        return parse_date(value)
    return value


def coerce_time(value):
    if isinstance(value, str):
        return parse_time(value)
    return value


@lru_cache
def get_zone(name: str | None = None) -> ZoneInfo:
    """Resolve an IANA zone name, defaulting to the service timezone."""
    zone_name = name or settings.timezone
    try:
        return ZoneInfo(zone_name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown timezone '{zone_name}'") from exc


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def format_time(value: time | datetime) -> str:
    return value.strftime(TIME_FORMAT)
