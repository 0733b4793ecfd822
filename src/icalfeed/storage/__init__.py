"""Data sources the feed service reads from."""

from icalfeed.storage.base import FeedDataSource
from icalfeed.storage.memory import InMemoryDataSource
from icalfeed.storage.rest import RestDataSource

__all__ = [
    "FeedDataSource",
    "InMemoryDataSource",
    "RestDataSource",
]
