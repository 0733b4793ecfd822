"""Custom exceptions for icalfeed."""

from icalfeed.exceptions.errors import (
    FeedError,
    ValidationError,
    NotFoundError,
    DataSourceError,
    ConfigurationError,
)

__all__ = [
    "FeedError",
    "ValidationError",
    "NotFoundError",
    "DataSourceError",
    "ConfigurationError",
]
