"""PostgREST-backed data source (the hosted database's REST interface)."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from icalfeed.config.constants import CONFIRMED_BOOKING_STATUSES, REST_TIMEOUT_SECONDS
from icalfeed.config.settings import FeedConfig
from icalfeed.core.event_model import (
    AvailabilityRecord,
    BookingRecord,
    DateRange,
    ResourceMetadata,
)
from icalfeed.exceptions.errors import ConfigurationError, DataSourceError, NotFoundError
from icalfeed.utils.masking import mask_key

logger = logging.getLogger(__name__)

Params = Sequence[Tuple[str, str]]


class RestDataSource:
    """Reads resources, availability and bookings over PostgREST.

    Args:
        base_url: Project URL, e.g. ``https://xyz.supabase.co``.
        service_key: Key sent as the bearer token.
        anon_key: Key sent in the ``apikey`` header; defaults to the
            service key.
        session: Optional ``requests.Session`` (tests inject a fake).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        anon_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = REST_TIMEOUT_SECONDS,
    ):
        if not base_url or not service_key:
            raise ConfigurationError("REST data source needs a base URL and a service key")
        self.rest_url = base_url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {service_key}",
            "apikey": anon_key or service_key,
            "Accept": "application/json",
        })
        logger.info("REST data source at %s (key %s)", self.rest_url, mask_key(service_key))

    @classmethod
    def from_config(cls, config: FeedConfig) -> "RestDataSource":
        return cls(
            config.supabase_url,
            config.supabase_service_key,
            config.supabase_anon_key,
        )

    def _get(self, table: str, params: Params) -> List[Dict[str, Any]]:
        url = f"{self.rest_url}/{table}"
        try:
            response = self.session.get(url, params=list(params), timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as exc:
            logger.error("Query on %s failed: %s", table, exc)
            raise DataSourceError(f"Error fetching {table}: {exc}") from exc
        except ValueError as exc:
            raise DataSourceError(f"Invalid JSON from {table}: {exc}") from exc
        if not isinstance(rows, list):
            raise DataSourceError(f"Expected a list of rows from {table}")
        return rows

    def fetch_resource_metadata(self, resource_id: str) -> ResourceMetadata:
        rows = self._get("apartments", [
            ("id", f"eq.{resource_id}"),
            ("select", "id,title,description,price,size,capacity"),
        ])
        if not rows:
            raise NotFoundError("Apartment", resource_id)
        return ResourceMetadata.from_dict(rows[0])

    def fetch_availability(
        self, resource_id: str, window: DateRange
    ) -> List[AvailabilityRecord]:
        rows = self._get("apartment_availability", [
            ("apartment_id", f"eq.{resource_id}"),
            ("date", f"gte.{window.start.isoformat()}"),
            ("date", f"lt.{window.end.isoformat()}"),
            ("status", "neq.available"),
            ("order", "date.asc"),
            ("select", "*"),
        ])
        return [AvailabilityRecord.from_dict(row) for row in rows]

    def fetch_confirmed_bookings(self, resource_id: str) -> List[BookingRecord]:
        statuses = ",".join(CONFIRMED_BOOKING_STATUSES)
        rows = self._get("bookings", [
            ("apartment_id", f"eq.{resource_id}"),
            ("status", f"in.({statuses})"),
            ("order", "check_in_date.asc"),
            ("select", "*"),
        ])
        return [BookingRecord.from_dict(row) for row in rows]

    def resolve_export_token(self, token: str) -> str:
        rows = self._get("apartment_ical_exports", [
            ("export_token", f"eq.{token}"),
            ("is_active", "eq.true"),
            ("select", "apartment_id"),
        ])
        if not rows or not rows[0].get("apartment_id"):
            raise NotFoundError("Export token", token)
        return str(rows[0]["apartment_id"])
