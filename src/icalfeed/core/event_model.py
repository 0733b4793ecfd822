"""Data model for availability rows, bookings and calendar events."""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from icalfeed.exceptions.errors import ValidationError
from icalfeed.utils.dates import parse_calendar_date


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"

    @property
    def is_unavailable(self) -> bool:
        return self is not AvailabilityStatus.AVAILABLE


class EventStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    TENTATIVE = "TENTATIVE"


def _require_date(row: Dict[str, Any], key: str, uid: Optional[str]) -> date:
    if row.get(key) is None:
        raise ValidationError(f"missing required field '{key}'", uid=uid)
    try:
        return parse_calendar_date(row[key])
    except ValueError as exc:
        raise ValidationError(f"field '{key}': {exc}", uid=uid) from exc


@dataclass(frozen=True)
class ResourceMetadata:
    """A resolved bookable resource (an apartment)."""

    id: str
    name: str
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceMetadata":
        """Create metadata from an ``apartments`` row.

        The display name is read from ``title`` (falling back to ``name``);
        the remaining columns are kept as details.
        """
        resource_id = data.get("id")
        name = data.get("title") or data.get("name")
        if not resource_id or not name:
            raise ValidationError("resource row needs 'id' and 'title'", uid=resource_id)
        details = {k: v for k, v in data.items() if k not in ("id", "title", "name")}
        return cls(id=str(resource_id), name=str(name), details=details)


@dataclass(frozen=True)
class AvailabilityRecord:
    """One resource's status on one day."""

    date: date
    status: AvailabilityStatus
    booking_reference: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailabilityRecord":
        """Create a record from an ``apartment_availability`` row.

        Raises:
            ValidationError: If the date or status is missing or malformed.
        """
        row_id = data.get("id")
        day = _require_date(data, "date", row_id)
        try:
            status = AvailabilityStatus(str(data.get("status", "")).lower())
        except ValueError as exc:
            raise ValidationError(
                f"unknown availability status {data.get('status')!r}", uid=row_id
            ) from exc
        return cls(
            date=day,
            status=status,
            booking_reference=data.get("booking_reference") or None,
            notes=data.get("notes") or None,
        )


@dataclass(frozen=True)
class BookingRecord:
    """A confirmed stay covering ``[check_in_date, check_out_date)``."""

    id: str
    check_in_date: date
    check_out_date: date
    guest_name: Optional[str] = None
    booking_reference: Optional[str] = None
    booking_source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookingRecord":
        """Create a booking from a ``bookings`` row.

        Raises:
            ValidationError: If the id or either date is missing or malformed.
        """
        booking_id = data.get("id")
        if not booking_id:
            raise ValidationError("booking row has no 'id'")
        booking_id = str(booking_id)
        return cls(
            id=booking_id,
            check_in_date=_require_date(data, "check_in_date", booking_id),
            check_out_date=_require_date(data, "check_out_date", booking_id),
            guest_name=data.get("guest_name") or None,
            booking_reference=data.get("booking_reference") or None,
            booking_source=data.get("booking_source") or None,
        )


@dataclass(frozen=True)
class DateRange:
    """Half-open range of calendar days, ``end`` exclusive."""

    start: date
    end: date

    def __post_init__(self):
        if self.end <= self.start:
            raise ValidationError(
                f"range end {self.end.isoformat()} is not after start {self.start.isoformat()}"
            )

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def __contains__(self, day: date) -> bool:
        return self.start <= day < self.end

    def __iter__(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)


@dataclass(frozen=True)
class StatusRange(DateRange):
    """A merged run of unavailable days sharing one status."""

    status: AvailabilityStatus = AvailabilityStatus.BLOCKED


@dataclass
class CalendarEvent:
    """An all-day VEVENT ready to be serialized."""

    uid: str
    start: date
    end: date
    summary: str
    description: str = ""
    status: EventStatus = EventStatus.CONFIRMED
    categories: Tuple[str, ...] = ()
    resource_id: Optional[str] = None
    availability: Optional[AvailabilityStatus] = None

    def validate(self) -> "CalendarEvent":
        """Check the event can be rendered.

        Dates given as strings or datetimes are reduced to calendar dates
        and a string status is upper-cased. The event itself is left
        untouched; the normalized values come back as a copy.

        Returns:
            A copy of the event with ``date`` bounds and an ``EventStatus``.

        Raises:
            ValidationError: Naming the event uid when a field is missing,
                a date is malformed, or ``end <= start``.
        """
        if not self.uid:
            raise ValidationError("event has no uid")
        if not self.summary:
            raise ValidationError("missing summary", uid=self.uid)
        bounds = {}
        for name in ("start", "end"):
            try:
                bounds[name] = parse_calendar_date(getattr(self, name))
            except ValueError as exc:
                raise ValidationError(f"malformed {name} date: {exc}", uid=self.uid) from exc
        if bounds["end"] <= bounds["start"]:
            raise ValidationError(
                f"end {bounds['end'].isoformat()} is not after start {bounds['start'].isoformat()}",
                uid=self.uid,
            )
        status = self.status
        if not isinstance(status, EventStatus):
            try:
                status = EventStatus(str(status).upper())
            except ValueError as exc:
                raise ValidationError(f"unknown status {status!r}", uid=self.uid) from exc
        return replace(self, status=status, **bounds)
