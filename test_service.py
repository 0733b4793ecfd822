import json
from datetime import date, datetime, timedelta

import pytest
import pytz
import requests
from icalendar import Calendar

from icalfeed.config.settings import FeedConfig
from icalfeed.core.event_model import DateRange
from icalfeed.exceptions import DataSourceError, NotFoundError
from icalfeed.service import FeedService, feed_filename
from icalfeed.storage.memory import InMemoryDataSource
from icalfeed.storage.rest import RestDataSource

TODAY = date(2024, 1, 1)
GENERATED_AT = pytz.utc.localize(datetime(2024, 1, 1, 12, 0, 0))

FIXTURE = {
    "resources": [
        {
            "id": "apt-1",
            "title": "Sea View Loft",
            "price": 1200,
            "size": "45 m2",
            "capacity": "2",
            "export_token": "tok-123",
            "availability": [
                {"date": "2024-01-01", "status": "booked"},
                {"date": "2024-01-02", "status": "booked"},
                {"date": "2024-01-03", "status": "blocked", "notes": "Deep clean"},
                {"date": "2024-01-10", "status": "blocked"},
                {"date": "2024-01-11", "status": "available"},
                {"date": "2023-12-31", "status": "blocked"},
            ],
            "bookings": [
                {"id": "b1", "check_in_date": "2024-01-01", "check_out_date": "2024-01-03",
                 "guest_name": "A, B", "booking_reference": "BND-1"},
            ],
        }
    ]
}


@pytest.fixture
def service() -> FeedService:
    return FeedService(InMemoryDataSource.from_fixture(FIXTURE))


def vevents(body: str) -> list:
    return list(Calendar.from_ical(body).walk("VEVENT"))


def test_availability_feed_merges_ranges(service: FeedService) -> None:
    feed = service.availability_feed("apt-1", today=TODAY, generated_at=GENERATED_AT)

    events = vevents(feed.body)
    spans = [(e["DTSTART"].dt, e["DTEND"].dt, str(e["STATUS"])) for e in events]
    assert spans == [
        (date(2024, 1, 1), date(2024, 1, 3), "CONFIRMED"),
        (date(2024, 1, 3), date(2024, 1, 4), "TENTATIVE"),
        (date(2024, 1, 10), date(2024, 1, 11), "TENTATIVE"),
    ]
    assert feed.headers["Content-Type"] == "text/calendar; charset=utf-8"
    assert feed.headers["Cache-Control"] == "public, max-age=3600"
    assert feed.headers["Content-Disposition"] == 'attachment; filename="Sea-View-Loft-availability.ics"'
    assert feed.headers["Last-Modified"] == "Mon, 01 Jan 2024 12:00:00 GMT"


def test_availability_feed_per_day(service: FeedService) -> None:
    feed = service.availability_feed("apt-1", today=TODAY, per_day=True, generated_at=GENERATED_AT)

    events = vevents(feed.body)
    assert len(events) == 4
    assert all((e["DTEND"].dt - e["DTSTART"].dt) == timedelta(days=1) for e in events)


def test_token_feed_combines_bookings_and_blocks(service: FeedService) -> None:
    feed = service.export_token_feed("tok-123", today=TODAY, generated_at=GENERATED_AT)

    uids = [str(e["UID"]) for e in vevents(feed.body)]
    assert uids == [
        "booking-b1@stayatbond.com",
        "range-apt-1-20240103@stayatbond.com",
        "range-apt-1-20240110@stayatbond.com",
    ]
    assert "SUMMARY:Booked - A\\, B" in feed.body
    assert feed.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"


def test_token_feed_keeps_booked_days_without_a_booking() -> None:
    channel_stay = {
        "resources": [{
            "id": "apt-2",
            "title": "Garden Studio",
            "export_token": "tok-sync",
            "availability": [
                {"date": "2024-01-05", "status": "booked", "booking_reference": "AIRBNB-77"},
                {"date": "2024-01-06", "status": "booked", "booking_reference": "AIRBNB-77"},
                {"date": "2024-01-20", "status": "booked"},
                {"date": "2024-01-21", "status": "booked"},
            ],
            "bookings": [
                {"id": "b9", "check_in_date": "2024-01-20", "check_out_date": "2024-01-22"},
            ],
        }]
    }
    service = FeedService(InMemoryDataSource.from_fixture(channel_stay))

    feed = service.export_token_feed("tok-sync", today=TODAY, generated_at=GENERATED_AT)

    spans = [(str(e["UID"]), e["DTSTART"].dt, e["DTEND"].dt) for e in vevents(feed.body)]
    assert spans == [
        ("range-apt-2-20240105@stayatbond.com", date(2024, 1, 5), date(2024, 1, 7)),
        ("booking-b9@stayatbond.com", date(2024, 1, 20), date(2024, 1, 22)),
    ]
    assert "X-AVAILABILITY-STATUS:booked" in feed.body


def test_unknown_resource_and_token(service: FeedService) -> None:
    with pytest.raises(NotFoundError):
        service.availability_feed("missing", today=TODAY)
    with pytest.raises(NotFoundError):
        service.export_token_feed("nope", today=TODAY)


def test_availability_window_respects_config() -> None:
    service = FeedService(InMemoryDataSource(), FeedConfig(window_days=30))

    window = service.availability_window(TODAY)

    assert window == DateRange(TODAY, date(2024, 2, 1))


def test_feed_filename_replaces_non_alphanumerics() -> None:
    assert feed_filename("Casa Ñ #2") == "Casa----2-availability.ics"


def test_fixture_file_round_trip(tmp_path) -> None:
    path = tmp_path / "fixture.json"
    path.write_text(json.dumps(FIXTURE), encoding="utf-8")

    source = InMemoryDataSource.from_json_file(path)

    assert source.fetch_resource_metadata("apt-1").name == "Sea View Loft"
    assert source.resolve_export_token("tok-123") == "apt-1"


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, tables):
        self.tables = tables
        self.headers = {}
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        table = url.rsplit("/", 1)[-1]
        result = self.tables[table]
        if isinstance(result, Exception):
            raise result
        return result


def test_rest_source_queries_postgrest() -> None:
    session = FakeSession({
        "apartment_ical_exports": FakeResponse([{"apartment_id": "apt-1"}]),
        "apartments": FakeResponse([{"id": "apt-1", "title": "Loft"}]),
        "apartment_availability": FakeResponse([{"date": "2024-01-05", "status": "blocked"}]),
        "bookings": FakeResponse([
            {"id": "b1", "check_in_date": "2024-01-01", "check_out_date": "2024-01-03"},
        ]),
    })
    source = RestDataSource("https://db.example.com/", "service-secret-key", session=session)

    feed = FeedService(source).export_token_feed("tok", today=TODAY, generated_at=GENERATED_AT)

    assert session.headers["Authorization"] == "Bearer service-secret-key"
    assert session.headers["apikey"] == "service-secret-key"
    urls = [url for url, _ in session.calls]
    assert urls[0] == "https://db.example.com/rest/v1/apartment_ical_exports"
    assert urls[-1] == "https://db.example.com/rest/v1/apartment_availability"
    availability_params = dict(session.calls[-1][1])
    assert availability_params["status"] == "neq.available"
    assert len(vevents(feed.body)) == 2


def test_rest_source_missing_rows_are_not_found() -> None:
    session = FakeSession({"apartments": FakeResponse([]), "apartment_ical_exports": FakeResponse([])})
    source = RestDataSource("https://db.example.com", "key", session=session)

    with pytest.raises(NotFoundError):
        source.fetch_resource_metadata("apt-x")
    with pytest.raises(NotFoundError):
        source.resolve_export_token("tok")


def test_rest_source_wraps_transport_errors() -> None:
    session = FakeSession({
        "apartments": requests.ConnectionError("connection refused"),
        "bookings": FakeResponse({"message": "boom"}, status_code=500),
    })
    source = RestDataSource("https://db.example.com", "key", session=session)

    with pytest.raises(DataSourceError):
        source.fetch_resource_metadata("apt-1")
    with pytest.raises(DataSourceError):
        source.fetch_confirmed_bookings("apt-1")
