"""Data-access interface consumed by the feed service."""

from typing import List, Protocol

from icalfeed.core.event_model import (
    AvailabilityRecord,
    BookingRecord,
    DateRange,
    ResourceMetadata,
)


class FeedDataSource(Protocol):
    """Upstream collaborator that knows where resources and rows live.

    Implementations raise :class:`~icalfeed.exceptions.NotFoundError` for
    unknown resources or tokens and
    :class:`~icalfeed.exceptions.DataSourceError` when the backend fails.
    """

    def fetch_resource_metadata(self, resource_id: str) -> ResourceMetadata:
        ...

    def fetch_availability(
        self, resource_id: str, window: DateRange
    ) -> List[AvailabilityRecord]:
        """Unavailable rows whose date falls inside ``window``."""
        ...

    def fetch_confirmed_bookings(self, resource_id: str) -> List[BookingRecord]:
        ...

    def resolve_export_token(self, token: str) -> str:
        """Map an active export token to its resource id."""
        ...
