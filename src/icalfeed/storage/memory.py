"""Dict-backed data source used by the CLI and the tests."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from icalfeed.core.event_model import (
    AvailabilityRecord,
    BookingRecord,
    DateRange,
    ResourceMetadata,
)
from icalfeed.exceptions.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class InMemoryDataSource:
    """Holds resources, availability rows, bookings and export tokens in memory."""

    def __init__(self):
        self._resources: Dict[str, ResourceMetadata] = {}
        self._availability: Dict[str, List[AvailabilityRecord]] = {}
        self._bookings: Dict[str, List[BookingRecord]] = {}
        self._tokens: Dict[str, str] = {}

    def add_resource(
        self,
        resource: ResourceMetadata,
        availability: Iterable[AvailabilityRecord] = (),
        bookings: Iterable[BookingRecord] = (),
        export_token: Optional[str] = None,
    ) -> None:
        self._resources[resource.id] = resource
        self._availability.setdefault(resource.id, []).extend(availability)
        self._bookings.setdefault(resource.id, []).extend(bookings)
        if export_token:
            self._tokens[export_token] = resource.id

    @classmethod
    def from_fixture(cls, data: Dict[str, Any]) -> "InMemoryDataSource":
        """Load a fixture of the form ``{"resources": [...]}``.

        Each resource entry carries the ``apartments`` columns plus optional
        ``availability``, ``bookings`` and ``export_token`` keys.

        Raises:
            ValidationError: If a row is malformed.
        """
        source = cls()
        resources = data.get("resources")
        if not isinstance(resources, list):
            raise ValidationError("fixture needs a 'resources' list")
        for entry in resources:
            entry = dict(entry)
            availability = [AvailabilityRecord.from_dict(r) for r in entry.pop("availability", [])]
            bookings = [BookingRecord.from_dict(b) for b in entry.pop("bookings", [])]
            token = entry.pop("export_token", None)
            source.add_resource(ResourceMetadata.from_dict(entry), availability, bookings, token)
        logger.info("Loaded %d resource(s) from fixture", len(source._resources))
        return source

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryDataSource":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_fixture(json.load(f))

    def fetch_resource_metadata(self, resource_id: str) -> ResourceMetadata:
        try:
            return self._resources[resource_id]
        except KeyError:
            raise NotFoundError("Apartment", resource_id) from None

    def fetch_availability(
        self, resource_id: str, window: DateRange
    ) -> List[AvailabilityRecord]:
        self.fetch_resource_metadata(resource_id)
        return sorted(
            (r for r in self._availability.get(resource_id, [])
             if r.date in window and r.status.is_unavailable),
            key=lambda r: r.date,
        )

    def fetch_confirmed_bookings(self, resource_id: str) -> List[BookingRecord]:
        self.fetch_resource_metadata(resource_id)
        return list(self._bookings.get(resource_id, []))

    def resolve_export_token(self, token: str) -> str:
        try:
            return self._tokens[token]
        except KeyError:
            raise NotFoundError("Export token", token) from None
