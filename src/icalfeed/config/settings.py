"""Runtime configuration loaded from the environment and ``.env`` files."""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values
from icalendar import vDuration

from icalfeed.config.constants import (
    DEFAULT_CALENDAR_SUFFIX,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_TIMEZONE,
    DEFAULT_UID_DOMAIN,
    DEFAULT_WINDOW_DAYS,
    ENV_CALENDAR_SUFFIX,
    ENV_PRODID,
    ENV_REFRESH_INTERVAL,
    ENV_SUPABASE_ANON_KEY,
    ENV_SUPABASE_SERVICE_KEY,
    ENV_SUPABASE_URL,
    ENV_TIMEZONE,
    ENV_UID_DOMAIN,
    ENV_WINDOW_DAYS,
    ICS_PRODID,
)
from icalfeed.utils.dates import resolve_timezone
from icalfeed.exceptions.errors import ConfigurationError
from icalfeed.utils.masking import mask_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedConfig:
    """Deployment specific strings injected into the feed builder."""

    prodid: str = ICS_PRODID
    timezone: str = DEFAULT_TIMEZONE
    uid_domain: str = DEFAULT_UID_DOMAIN
    calendar_suffix: str = DEFAULT_CALENDAR_SUFFIX
    refresh_interval: str = DEFAULT_REFRESH_INTERVAL
    window_days: int = DEFAULT_WINDOW_DAYS
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    def __post_init__(self):
        resolve_timezone(self.timezone)
        for name in ("prodid", "uid_domain"):
            value = getattr(self, name)
            if not value or any(ch in value for ch in "\r\n"):
                raise ConfigurationError(f"{name} must be a single non-empty line, got {value!r}")
        try:
            vDuration.from_ical(self.refresh_interval)
        except ValueError as exc:
            raise ConfigurationError(
                f"refresh_interval must be an ISO 8601 duration, got {self.refresh_interval!r}"
            ) from exc
        if self.window_days <= 0:
            raise ConfigurationError(
                f"window_days must be positive, got {self.window_days}"
            )

    def with_overrides(self, **changes) -> "FeedConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    @property
    def has_rest_source(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)


DEFAULT_CONFIG = FeedConfig()


def _read_environment(env_file: Optional[Union[str, Path]]) -> Dict[str, str]:
    """Merge a ``.env`` file with ``os.environ``; the process environment wins.

    The file is parsed without mutating ``os.environ``.
    """
    values: Dict[str, str] = {}
    if env_file is not None:
        path = Path(env_file)
        if path.exists():
            values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
        else:
            logger.warning("Config file %s does not exist, using environment only", path)
    values.update(os.environ)
    return values


def load_config(env_file: Optional[Union[str, Path]] = None) -> FeedConfig:
    """Build a :class:`FeedConfig` from environment variables.

    Args:
        env_file: Optional path to a ``.env`` file consulted before the
            process environment.

    Returns:
        The resolved configuration.

    Raises:
        ConfigurationError: If a value is present but invalid.
    """
    env = _read_environment(env_file)

    window_raw = env.get(ENV_WINDOW_DAYS)
    try:
        window_days = int(window_raw) if window_raw else DEFAULT_WINDOW_DAYS
    except ValueError as exc:
        raise ConfigurationError(
            f"{ENV_WINDOW_DAYS} must be an integer, got '{window_raw}'"
        ) from exc

    config = FeedConfig(
        prodid=env.get(ENV_PRODID) or ICS_PRODID,
        timezone=env.get(ENV_TIMEZONE) or DEFAULT_TIMEZONE,
        uid_domain=env.get(ENV_UID_DOMAIN) or DEFAULT_UID_DOMAIN,
        calendar_suffix=env.get(ENV_CALENDAR_SUFFIX) or DEFAULT_CALENDAR_SUFFIX,
        refresh_interval=env.get(ENV_REFRESH_INTERVAL) or DEFAULT_REFRESH_INTERVAL,
        window_days=window_days,
        supabase_url=env.get(ENV_SUPABASE_URL) or None,
        supabase_service_key=env.get(ENV_SUPABASE_SERVICE_KEY) or None,
        supabase_anon_key=env.get(ENV_SUPABASE_ANON_KEY) or None,
    )
    logger.debug(
        "Loaded config: timezone=%s uid_domain=%s rest=%s service_key=%s",
        config.timezone,
        config.uid_domain,
        config.supabase_url or "<none>",
        mask_key(config.supabase_service_key),
    )
    return config
