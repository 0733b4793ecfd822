"""
icalfeed - iCalendar availability feeds for bookable apartments

Merges per-day availability rows into date ranges and renders them, along
with confirmed bookings, into RFC 5545 calendar documents.
"""

__version__ = "1.0.0"

# Public API - import commonly used components
from icalfeed.config.settings import DEFAULT_CONFIG, FeedConfig, load_config
from icalfeed.exceptions.errors import (
    FeedError,
    ValidationError,
    NotFoundError,
    DataSourceError,
    ConfigurationError,
)
from icalfeed.core.event_model import (
    AvailabilityRecord,
    BookingRecord,
    CalendarEvent,
    DateRange,
)
from icalfeed.core.ranges import merge_availability, merge_dates
from icalfeed.core.ics_builder import build_calendar
from icalfeed.core.text import escape_text, unescape_text
from icalfeed.service import FeedResponse, FeedService

__all__ = [
    # Version
    "__version__",
    # Config
    "DEFAULT_CONFIG",
    "FeedConfig",
    "load_config",
    # Exceptions
    "FeedError",
    "ValidationError",
    "NotFoundError",
    "DataSourceError",
    "ConfigurationError",
    # Core
    "AvailabilityRecord",
    "BookingRecord",
    "CalendarEvent",
    "DateRange",
    "merge_availability",
    "merge_dates",
    "build_calendar",
    "escape_text",
    "unescape_text",
    # Service
    "FeedResponse",
    "FeedService",
]
