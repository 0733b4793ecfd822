"""Feed service: fetch rows for a resource and render its calendar feed."""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from email.utils import format_datetime
from typing import Dict, Optional

import pytz

from icalfeed.config.constants import (
    CACHE_CONTROL_NO_STORE,
    CACHE_CONTROL_PUBLIC,
    CONTENT_TYPE,
    FILENAME_SUFFIX,
)
from icalfeed.config.settings import DEFAULT_CONFIG, FeedConfig
from icalfeed.core.event_model import DateRange, ResourceMetadata
from icalfeed.core.events import (
    combine_events,
    events_from_availability,
    events_from_bookings,
    events_from_ranges,
)
from icalfeed.core.ics_builder import build_calendar
from icalfeed.core.ranges import expand_ranges, merge_availability
from icalfeed.storage.base import FeedDataSource
from icalfeed.utils.dates import add_days, today_in

logger = logging.getLogger(__name__)


@dataclass
class FeedResponse:
    """A rendered feed plus the HTTP headers it should be served with."""

    body: str
    filename: str
    headers: Dict[str, str] = field(default_factory=dict)


def feed_filename(resource_name: str) -> str:
    """Suggested download name: non-alphanumerics become dashes."""
    return re.sub(r"[^a-zA-Z0-9]", "-", resource_name) + FILENAME_SUFFIX


def _response_headers(filename: str, cache_control: str, generated_at: datetime) -> Dict[str, str]:
    return {
        "Content-Type": CONTENT_TYPE,
        "Content-Disposition": f'attachment; filename="{filename}"',
        "Cache-Control": cache_control,
        "Last-Modified": format_datetime(generated_at.astimezone(timezone.utc), usegmt=True),
    }


class FeedService:
    """Builds availability feeds from a :class:`FeedDataSource`."""

    def __init__(self, source: FeedDataSource, config: FeedConfig = DEFAULT_CONFIG):
        self.source = source
        self.config = config

    def availability_window(self, today: Optional[date] = None) -> DateRange:
        """Dates from today through ``window_days`` ahead, as a half-open range."""
        start = today or today_in(self.config.timezone)
        return DateRange(start, add_days(start, self.config.window_days + 1))

    def _render(
        self,
        resource: ResourceMetadata,
        events,
        cache_control: str,
        generated_at: Optional[datetime],
    ) -> FeedResponse:
        generated_at = generated_at or datetime.now(pytz.utc)
        if generated_at.tzinfo is None:
            generated_at = pytz.utc.localize(generated_at)
        body = build_calendar(
            resource.id,
            resource.name,
            self.config.timezone,
            events,
            generated_at=generated_at,
            config=self.config,
        )
        filename = feed_filename(resource.name)
        return FeedResponse(
            body=body,
            filename=filename,
            headers=_response_headers(filename, cache_control, generated_at),
        )

    def availability_feed(
        self,
        resource_id: str,
        today: Optional[date] = None,
        per_day: bool = False,
        generated_at: Optional[datetime] = None,
    ) -> FeedResponse:
        """Feed of booked and blocked days for one resource.

        Args:
            resource_id: The apartment id.
            today: First day of the availability window.
            per_day: Emit one event per day instead of merged ranges.
            generated_at: Pinned DTSTAMP, mostly for tests.

        Raises:
            NotFoundError: If the resource does not exist.
            ValidationError: If a row cannot be rendered.
        """
        resource = self.source.fetch_resource_metadata(resource_id)
        window = self.availability_window(today)
        records = self.source.fetch_availability(resource_id, window)
        logger.info(
            "Exporting %d unavailable day(s) for %s (%s to %s)",
            len(records), resource_id, window.start, window.end,
        )

        if per_day:
            events = events_from_availability(resource, records, self.config)
        else:
            events = events_from_ranges(resource, merge_availability(records), self.config)
        return self._render(resource, events, CACHE_CONTROL_PUBLIC, generated_at)

    def export_token_feed(
        self,
        token: str,
        today: Optional[date] = None,
        generated_at: Optional[datetime] = None,
    ) -> FeedResponse:
        """Feed for an export token: confirmed bookings plus unavailable days.

        Booked and blocked rows are both exported, since stays synced in
        from other channels only exist as booked rows. Days already covered
        by a booking are dropped from the rows so they are not listed twice.
        """
        resource_id = self.source.resolve_export_token(token)
        resource = self.source.fetch_resource_metadata(resource_id)
        bookings = self.source.fetch_confirmed_bookings(resource_id)
        covered = set(expand_ranges(
            DateRange(b.check_in_date, b.check_out_date)
            for b in bookings
            if b.check_out_date > b.check_in_date
        ))
        records = [
            r for r in self.source.fetch_availability(resource_id, self.availability_window(today))
            if r.date not in covered
        ]
        logger.info(
            "Exporting %d booking(s) and %d other unavailable day(s) for token of %s",
            len(bookings), len(records), resource_id,
        )

        events = combine_events(
            events_from_bookings(bookings, self.config, resource_id=resource.id),
            events_from_ranges(resource, merge_availability(records), self.config),
        )
        return self._render(resource, events, CACHE_CONTROL_NO_STORE, generated_at)
