"""ICS feed building utilities."""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

import pytz
from icalendar.parser import Contentline, Contentlines

from icalfeed.config.constants import ICS_CALSCALE, ICS_METHOD, ICS_VERSION
from icalfeed.config.settings import DEFAULT_CONFIG, FeedConfig
from icalfeed.core.event_model import CalendarEvent
from icalfeed.core.text import escape_text
from icalfeed.exceptions.errors import ValidationError
from icalfeed.utils.dates import format_date, format_timestamp, resolve_timezone

logger = logging.getLogger(__name__)


def build_calendar(
    resource_id: str,
    resource_name: str,
    timezone_name: Optional[str],
    events: Iterable[CalendarEvent],
    *,
    generated_at: Optional[datetime] = None,
    config: Optional[FeedConfig] = None,
) -> str:
    """Render a complete VCALENDAR document for one resource.

    Every event is validated before anything is rendered, so either a
    whole document is returned or an error is raised.

    Args:
        resource_id: Identifier of the resource the feed describes.
        resource_name: Display name, used for the calendar name.
        timezone_name: IANA zone label advertised in X-WR-TIMEZONE.
            Falls back to the configured zone when empty.
        events: Events to include, in output order.
        generated_at: DTSTAMP for every event. Captured once from the
            clock when not given.
        config: Deployment strings (PRODID, UID domain, refresh interval).

    Returns:
        The document as text with CRLF line endings.

    Raises:
        ValidationError: If an event is malformed or two events share a uid.
        ConfigurationError: If the timezone name is unknown.
    """
    config = config or DEFAULT_CONFIG
    timezone_name = timezone_name or config.timezone
    resolve_timezone(timezone_name)

    events = _validate_events(events)

    stamp = format_timestamp(generated_at or datetime.now(pytz.utc))

    lines = _calendar_header(resource_name, timezone_name, config)
    for event in events:
        lines.extend(_event_lines(event, stamp, resource_id))
    lines.append(Contentline("END:VCALENDAR"))

    logger.info(
        "Built calendar for resource %s with %d event(s)", resource_id, len(events)
    )
    return _format_ics_output(lines)


def _validate_events(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """Return normalized copies of the events, rejecting duplicate uids."""
    seen = set()
    validated = []
    for event in events:
        validated.append(event.validate())
        if event.uid in seen:
            raise ValidationError("duplicate uid in calendar", uid=event.uid)
        seen.add(event.uid)
    return validated


def _property(name: str, value: str) -> Contentline:
    return Contentline(f"{name}:{value}")


def _calendar_header(
    resource_name: str, timezone_name: str, config: FeedConfig
) -> Contentlines:
    """Create the VCALENDAR envelope properties."""
    name = escape_text(resource_name)
    suffix = escape_text(config.calendar_suffix)
    calname = f"{name} - {suffix}" if suffix else name
    return Contentlines([
        Contentline("BEGIN:VCALENDAR"),
        _property("VERSION", ICS_VERSION),
        _property("PRODID", config.prodid),
        _property("CALSCALE", ICS_CALSCALE),
        _property("METHOD", ICS_METHOD),
        _property("X-WR-CALNAME", calname),
        _property("X-WR-CALDESC", f"Availability calendar for {calname}"),
        _property("X-WR-TIMEZONE", timezone_name),
        _property("REFRESH-INTERVAL;VALUE=DURATION", config.refresh_interval),
        _property("X-PUBLISHED-TTL", config.refresh_interval),
    ])


def _event_lines(event: CalendarEvent, stamp: str, resource_id: str) -> List[Contentline]:
    """Create the content lines of one all-day VEVENT."""
    lines = [
        Contentline("BEGIN:VEVENT"),
        _property("UID", escape_text(event.uid)),
        _property("DTSTAMP", stamp),
        _property("DTSTART;VALUE=DATE", format_date(event.start)),
        _property("DTEND;VALUE=DATE", format_date(event.end)),
        _property("SUMMARY", escape_text(event.summary)),
        _property("DESCRIPTION", escape_text(event.description)),
        _property("STATUS", event.status.value),
        _property("TRANSP", "OPAQUE"),
    ]
    if event.categories:
        lines.append(_property(
            "CATEGORIES", ",".join(escape_text(c) for c in event.categories)
        ))
    lines.append(_property("X-RESOURCE-ID", escape_text(event.resource_id or resource_id)))
    if event.availability is not None:
        lines.append(_property("X-AVAILABILITY-STATUS", event.availability.value))
    lines.append(Contentline("END:VEVENT"))
    return lines


def _format_ics_output(lines: List[Contentline]) -> str:
    """Serialize content lines, folding long ones, with CRLF endings."""
    raw_ical = Contentlines(lines).to_ical()
    return raw_ical.decode("utf-8")
