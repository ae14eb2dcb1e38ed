"""Timestamp parsing and local-time formatting utilities."""

import logging
import zoneinfo
from datetime import datetime, timezone, tzinfo

logger = logging.getLogger(__name__)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a Granola ISO-8601 timestamp into an aware datetime.

    Accepts a trailing ``Z``. Naive values are assumed to be UTC.
    Returns ``None`` for empty or unparseable input.
    """
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def local_timezone(name: str | None = None) -> tzinfo | None:
    """Return the zone named *name*, or ``None`` for the system's local time.

    ``None`` lets :meth:`datetime.astimezone` apply the UTC offset in force
    at each converted instant. An unknown zone name is logged and ignored.
    """
    if name:
        try:
            return zoneinfo.ZoneInfo(name)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, using system local time", name)
    return None


def convert_to_local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """Convert a datetime (assumed UTC if naive) to *tz* or the local zone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def format_local_datetime(dt: datetime, tz: tzinfo | None = None) -> str:
    return convert_to_local(dt, tz).strftime("%Y-%m-%d %H:%M")


def format_local_date(dt: datetime, tz: tzinfo | None = None) -> str:
    return convert_to_local(dt, tz).strftime("%Y-%m-%d")


def format_local_time(dt: datetime, tz: tzinfo | None = None, seconds: bool = True) -> str:
    fmt = "%H:%M:%S" if seconds else "%H:%M"
    return convert_to_local(dt, tz).strftime(fmt)
