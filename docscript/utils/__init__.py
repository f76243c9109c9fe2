"""docscript utilities."""

from .time import current_time, get_timezone, iso_timestamp, parse_timestamp

__all__ = ["current_time", "get_timezone", "iso_timestamp", "parse_timestamp"]
