"""Exception hierarchy for icalfeed."""

from typing import Optional


class FeedError(Exception):
    """Base class for every error raised by icalfeed."""


class ValidationError(FeedError):
    """Raised when a record or event cannot be rendered into a feed.

    Attributes:
        uid: Identifier of the offending event or row, when known.
        reason: Human readable description of the problem.
    """

    def __init__(self, reason: str, uid: Optional[str] = None):
        self.uid = uid
        self.reason = reason
        if uid:
            message = f"Invalid event '{uid}': {reason}"
        else:
            message = f"Invalid feed data: {reason}"
        super().__init__(message)


class NotFoundError(FeedError):
    """Raised when a resource or export token does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class DataSourceError(FeedError):
    """Raised when the upstream data source cannot be queried."""


class ConfigurationError(FeedError):
    """Raised for invalid configuration values (unknown timezone, bad URL)."""
