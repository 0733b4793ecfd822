"""Calendar date parsing, formatting and timezone helpers."""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union

import pytz
from dateutil import parser as dateutil_parser

from icalfeed.exceptions.errors import ConfigurationError

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]

ICAL_DATE_FORMAT = "%Y%m%d"
ICAL_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def parse_calendar_date(value: DateLike) -> date:
    """Coerce a database value into a ``datetime.date``.

    Accepts ``date`` objects, ``datetime`` objects (the date part is kept)
    and strict ISO-8601 strings such as ``2024-01-05`` or
    ``2024-01-05T00:00:00+00:00``.

    Args:
        value: The raw value.

    Returns:
        The calendar date.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected an ISO date, got {value!r}")
    try:
        return dateutil_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Unparseable date {value!r}: {exc}") from exc


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def format_date(day: date) -> str:
    """Render an all-day value as ``YYYYMMDD``."""
    return day.strftime(ICAL_DATE_FORMAT)


def format_timestamp(moment: datetime) -> str:
    """Render a UTC date-time as ``YYYYMMDDTHHMMSSZ``.

    Naive datetimes are assumed to already be in UTC.
    """
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(pytz.utc).strftime(ICAL_TIMESTAMP_FORMAT)


def resolve_timezone(tz_name: str):
    """Resolve an IANA zone name to a pytz timezone.

    Args:
        tz_name: The zone name (e.g. "Atlantic/Madeira").

    Returns:
        The pytz timezone object.

    Raises:
        ConfigurationError: If the name is not a known zone.
    """
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError as exc:
        raise ConfigurationError(f"Unknown timezone '{tz_name}'") from exc


def today_in(tz_name: str, now: Optional[datetime] = None) -> date:
    """Return the current calendar date in the given zone."""
    tz = resolve_timezone(tz_name)
    moment = now or datetime.now(pytz.utc)
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(tz).date()
