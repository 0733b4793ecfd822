"""Core feed synthesis: models, range merging, event factories and the builder."""

from icalfeed.core.event_model import (
    AvailabilityRecord,
    AvailabilityStatus,
    BookingRecord,
    CalendarEvent,
    DateRange,
    EventStatus,
    ResourceMetadata,
    StatusRange,
)
from icalfeed.core.events import (
    combine_events,
    events_from_availability,
    events_from_bookings,
    events_from_ranges,
)
from icalfeed.core.ics_builder import build_calendar
from icalfeed.core.ranges import expand_ranges, merge_availability, merge_dates
from icalfeed.core.text import escape_text, unescape_text

__all__ = [
    "AvailabilityRecord",
    "AvailabilityStatus",
    "BookingRecord",
    "CalendarEvent",
    "DateRange",
    "EventStatus",
    "ResourceMetadata",
    "StatusRange",
    "combine_events",
    "events_from_availability",
    "events_from_bookings",
    "events_from_ranges",
    "build_calendar",
    "expand_ranges",
    "merge_availability",
    "merge_dates",
    "escape_text",
    "unescape_text",
]
