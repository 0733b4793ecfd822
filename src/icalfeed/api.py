"""HTTP surface serving calendar feeds."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from icalfeed import __version__
from icalfeed.config.settings import load_config
from icalfeed.exceptions.errors import (
    ConfigurationError,
    DataSourceError,
    NotFoundError,
    ValidationError,
)
from icalfeed.service import FeedResponse, FeedService
from icalfeed.storage.rest import RestDataSource

logger = logging.getLogger(__name__)

ICS_SUFFIX = ".ics"

router = APIRouter(tags=["ical"])


def _strip_suffix(ref: str) -> str:
    return ref[: -len(ICS_SUFFIX)] if ref.endswith(ICS_SUFFIX) else ref


def _service_from_environment() -> FeedService:
    config = load_config()
    if not config.has_rest_source:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return FeedService(RestDataSource.from_config(config), config)


def get_service(request: Request) -> FeedService:
    """Dependency returning the app's service, created on first use."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        logger.info("Initializing feed service from environment...")
        service = _service_from_environment()
        request.app.state.service = service
    return service


def _to_response(feed: FeedResponse) -> Response:
    return Response(content=feed.body, headers=feed.headers, media_type=None)


@router.get("/ical-export/{resource_ref}")
def availability_export(
    resource_ref: str,
    per_day: bool = False,
    service: FeedService = Depends(get_service),
):
    """Availability feed for one apartment, cached for an hour."""
    resource_id = _strip_suffix(resource_ref)
    if not resource_id:
        return PlainTextResponse("Apartment ID is required", status_code=400)
    return _to_response(service.availability_feed(resource_id, per_day=per_day))


@router.get("/ical/{token_ref}")
def token_export(token_ref: str, service: FeedService = Depends(get_service)):
    """Bookings and blocks for the apartment behind an export token."""
    token = _strip_suffix(token_ref)
    if not token:
        return PlainTextResponse("Missing token - use /ical/{token}.ics format", status_code=400)
    return _to_response(service.export_token_feed(token))


@router.get("/ical")
def token_export_query(token: Optional[str] = None, service: FeedService = Depends(get_service)):
    if not token:
        return PlainTextResponse("Missing token - use /ical/{token}.ics format", status_code=400)
    return _to_response(service.export_token_feed(token))


async def _not_found(request: Request, exc: NotFoundError):
    logger.info("Not found on %s: %s", request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=404)


async def _invalid(request: Request, exc: ValidationError):
    logger.error("Invalid feed data on %s: %s", request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=422)


async def _upstream(request: Request, exc: DataSourceError):
    logger.error("Data source failure on %s: %s", request.url.path, exc)
    return PlainTextResponse("Error fetching availability data", status_code=502)


async def _misconfigured(request: Request, exc: ConfigurationError):
    logger.error("Configuration error: %s", exc)
    return PlainTextResponse("Feed service is not configured", status_code=500)


def create_app(service: Optional[FeedService] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        service: Service to use; when omitted it is built from the
            environment on the first request.
    """
    app = FastAPI(
        title="icalfeed",
        description="iCalendar availability feeds for bookable apartments",
        version=__version__,
    )
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.include_router(router)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(ValidationError, _invalid)
    app.add_exception_handler(DataSourceError, _upstream)
    app.add_exception_handler(ConfigurationError, _misconfigured)

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
