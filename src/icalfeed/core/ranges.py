"""Collapse per-day unavailability into the fewest contiguous date ranges."""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List

from icalfeed.core.event_model import (
    AvailabilityRecord,
    AvailabilityStatus,
    DateRange,
    StatusRange,
)
from icalfeed.exceptions.errors import ValidationError

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def merge_dates(dates: Iterable[date]) -> List[DateRange]:
    """Merge calendar dates into sorted, non-overlapping half-open ranges.

    Duplicates are ignored. Each run of consecutive days becomes one range
    whose ``end`` is the day after the last day of the run.

    Args:
        dates: Unavailable days, in any order.

    Returns:
        Ranges sorted by start. Empty input gives an empty list.
    """
    ordered = sorted(set(dates))
    if not ordered:
        return []

    ranges = []
    current_start = current_end = ordered[0]
    for day in ordered[1:]:
        if day - current_end == ONE_DAY:
            current_end = day
            continue
        ranges.append(DateRange(current_start, current_end + ONE_DAY))
        current_start = current_end = day
    ranges.append(DateRange(current_start, current_end + ONE_DAY))
    return ranges


def _index_by_date(records: Iterable[AvailabilityRecord]) -> Dict[date, AvailabilityStatus]:
    """Map each unavailable day to its status, rejecting conflicting duplicates."""
    statuses: Dict[date, AvailabilityStatus] = {}
    for record in records:
        if not record.status.is_unavailable:
            continue
        previous = statuses.get(record.date)
        if previous is not None and previous is not record.status:
            raise ValidationError(
                f"conflicting statuses {previous.value}/{record.status.value} "
                f"for {record.date.isoformat()}"
            )
        statuses[record.date] = record.status
    return statuses


def merge_availability(
    records: Iterable[AvailabilityRecord],
    split_on_status: bool = True,
) -> List[StatusRange]:
    """Merge availability rows into status-tagged ranges.

    ``available`` rows are skipped. With ``split_on_status`` a run is also
    closed where the status changes, so no range mixes booked and blocked
    days. Without it every unavailable day is merged together and each
    range takes the status of its first day.

    Args:
        records: Availability rows for one resource.
        split_on_status: Whether a status change closes the current run.

    Returns:
        Ranges sorted by start.

    Raises:
        ValidationError: If one day carries two different statuses.
    """
    statuses = _index_by_date(records)

    if not split_on_status:
        merged = merge_dates(statuses)
        mixed = [r for r in merged if len({statuses[d] for d in r}) > 1]
        for r in mixed:
            logger.warning(
                "Range %s..%s mixes booked and blocked days; labelled as %s",
                r.start, r.end, statuses[r.start].value,
            )
        return [StatusRange(r.start, r.end, statuses[r.start]) for r in merged]

    ranges: List[StatusRange] = []
    for status in (AvailabilityStatus.BOOKED, AvailabilityStatus.BLOCKED):
        days = [d for d, s in statuses.items() if s is status]
        ranges.extend(StatusRange(r.start, r.end, status) for r in merge_dates(days))
    ranges.sort(key=lambda r: r.start)
    return ranges


def expand_ranges(ranges: Iterable[DateRange]) -> List[date]:
    """Return every day covered by the given ranges, sorted."""
    days = set()
    for r in ranges:
        days.update(r)
    return sorted(days)
