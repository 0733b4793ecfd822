"""Utility functions for icalfeed."""

from icalfeed.utils.masking import mask_key
from icalfeed.utils.dates import (
    add_days,
    format_date,
    format_timestamp,
    parse_calendar_date,
    resolve_timezone,
    today_in,
)

__all__ = [
    "mask_key",
    "add_days",
    "format_date",
    "format_timestamp",
    "parse_calendar_date",
    "resolve_timezone",
    "today_in",
]
