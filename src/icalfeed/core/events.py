"""Turn availability ranges, per-day rows and bookings into calendar events.

Every factory here produces plain text summaries and descriptions; TEXT
escaping happens once, when the builder serializes the event.
"""

import logging
from typing import Iterable, List, Optional

from icalfeed.config.constants import (
    BLOCKED_LABEL,
    BOOKED_LABEL,
    BOOKING_SUMMARY,
    MISSING_VALUE,
    UID_PREFIX_BOOKING,
    UID_PREFIX_DAY,
    UID_PREFIX_RANGE,
)
from icalfeed.config.settings import DEFAULT_CONFIG, FeedConfig
from icalfeed.core.event_model import (
    AvailabilityRecord,
    AvailabilityStatus,
    BookingRecord,
    CalendarEvent,
    EventStatus,
    ResourceMetadata,
    StatusRange,
)
from icalfeed.utils.dates import add_days, format_date

logger = logging.getLogger(__name__)


def make_uid(prefix: str, key: str, config: FeedConfig = DEFAULT_CONFIG) -> str:
    """Build a UID that stays the same for the same underlying data."""
    return f"{prefix}-{key}@{config.uid_domain}"


def _status_label(status: AvailabilityStatus) -> str:
    return BOOKED_LABEL if status is AvailabilityStatus.BOOKED else BLOCKED_LABEL


def _event_status(status: AvailabilityStatus) -> EventStatus:
    # Bookings are firm; manual blocks may still be lifted.
    if status is AvailabilityStatus.BOOKED:
        return EventStatus.CONFIRMED
    return EventStatus.TENTATIVE


def events_from_ranges(
    resource: ResourceMetadata,
    ranges: Iterable[StatusRange],
    config: FeedConfig = DEFAULT_CONFIG,
) -> List[CalendarEvent]:
    """One event per merged range (range mode)."""
    events = []
    for r in ranges:
        label = _status_label(r.status)
        nights = r.days
        description = (
            f"Status: {label}\n"
            f"{nights} night{'s' if nights != 1 else ''} unavailable\n"
            f"Apartment: {resource.name}"
        )
        events.append(CalendarEvent(
            uid=make_uid(UID_PREFIX_RANGE, f"{resource.id}-{format_date(r.start)}", config),
            start=r.start,
            end=r.end,
            summary=f"{resource.name} - {label}",
            description=description,
            status=_event_status(r.status),
            categories=(label,),
            resource_id=resource.id,
            availability=r.status,
        ))
    logger.debug("Built %d range events for %s", len(events), resource.id)
    return events


def _detail_lines(resource: ResourceMetadata) -> List[str]:
    lines = [f"Apartment: {resource.name}"]
    price = resource.details.get("price")
    if price not in (None, ""):
        lines.append(f"Price: €{price}/month")
    for key in ("size", "capacity"):
        value = resource.details.get(key)
        if value not in (None, ""):
            lines.append(f"{key.capitalize()}: {value}")
    return lines


def events_from_availability(
    resource: ResourceMetadata,
    records: Iterable[AvailabilityRecord],
    config: FeedConfig = DEFAULT_CONFIG,
) -> List[CalendarEvent]:
    """One single-day event per unavailable row (per-day mode)."""
    events = []
    for record in sorted(records, key=lambda r: r.date):
        if not record.status.is_unavailable:
            continue
        label = _status_label(record.status)
        lines = [f"Status: {label}"]
        if record.notes:
            lines.append(f"Notes: {record.notes}")
        if record.booking_reference:
            lines.append(f"Reference: {record.booking_reference}")
        lines.extend(_detail_lines(resource))
        events.append(CalendarEvent(
            uid=make_uid(UID_PREFIX_DAY, f"{resource.id}-{format_date(record.date)}", config),
            start=record.date,
            end=add_days(record.date, 1),
            summary=f"{resource.name} - {label}",
            description="\n".join(lines),
            status=_event_status(record.status),
            categories=(label,),
            resource_id=resource.id,
            availability=record.status,
        ))
    return events


def _booking_summary(guest_name: Optional[str]) -> str:
    if guest_name:
        return f"{BOOKING_SUMMARY} - {guest_name}"
    return BOOKING_SUMMARY


def events_from_bookings(
    bookings: Iterable[BookingRecord],
    config: FeedConfig = DEFAULT_CONFIG,
    resource_id: Optional[str] = None,
) -> List[CalendarEvent]:
    """One event per confirmed booking (booking mode).

    The booking's own check-in/check-out pair is used as the event range,
    independently of any availability rows.
    """
    events = []
    for booking in bookings:
        description = f"Booking Reference: {booking.booking_reference or MISSING_VALUE}"
        if booking.guest_name:
            description += f"\nGuest: {booking.guest_name}"
        if booking.booking_source:
            description += f"\nSource: {booking.booking_source}"
        events.append(CalendarEvent(
            uid=make_uid(UID_PREFIX_BOOKING, booking.id, config),
            start=booking.check_in_date,
            end=booking.check_out_date,
            summary=_booking_summary(booking.guest_name),
            description=description,
            status=EventStatus.CONFIRMED,
            categories=(BOOKED_LABEL,),
            resource_id=resource_id,
            availability=AvailabilityStatus.BOOKED,
        ))
    return events


def combine_events(*groups: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    """Union of events from several sources, ordered by start then uid."""
    combined = [event for group in groups for event in group]
    combined.sort(key=lambda e: (str(e.start), e.uid))
    return combined
