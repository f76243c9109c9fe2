"""System time utilities for docscript."""

from datetime import datetime, timezone
import os
from zoneinfo import ZoneInfo


def current_time(tz: str = None) -> datetime:
    """Get current time as an aware datetime.

    Args:
        tz: Timezone string (e.g., 'US/Arizona'). Defaults to UTC.

    Returns:
        Current datetime object.
    """
    if tz:
        return datetime.now(ZoneInfo(tz))
    return datetime.now(timezone.utc)


def iso_timestamp(tz: str = None) -> str:
    """Render the current instant as an ISO-8601 string.

    UTC instants use the ``Z`` suffix with millisecond precision, the same
    shape JSON documents usually carry.
    """
    now = current_time(tz)
    text = now.isoformat(timespec="milliseconds")
    if now.utcoffset() == timezone.utc.utcoffset(None):
        text = text.replace("+00:00", "Z")
    return text


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string produced by iso_timestamp()."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def get_timezone() -> str:
    """Get configured timezone from environment.

    Returns:
        Timezone string (e.g., 'US/Arizona' or 'UTC').
    """
    return os.environ.get("DOCSCRIPT_TZ", "UTC")
