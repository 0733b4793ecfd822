"""Configuration module for icalfeed."""

from icalfeed.config.settings import DEFAULT_CONFIG, FeedConfig, load_config
from icalfeed.config.constants import (
    ICS_PRODID,
    DEFAULT_TIMEZONE,
    DEFAULT_UID_DOMAIN,
    DEFAULT_WINDOW_DAYS,
    CONTENT_TYPE,
    CACHE_CONTROL_PUBLIC,
    CACHE_CONTROL_NO_STORE,
)

__all__ = [
    "DEFAULT_CONFIG",
    "FeedConfig",
    "load_config",
    "ICS_PRODID",
    "DEFAULT_TIMEZONE",
    "DEFAULT_UID_DOMAIN",
    "DEFAULT_WINDOW_DAYS",
    "CONTENT_TYPE",
    "CACHE_CONTROL_PUBLIC",
    "CACHE_CONTROL_NO_STORE",
]
