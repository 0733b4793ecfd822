"""Centralized constants for icalfeed.

Defaults for the calendar envelope, the HTTP cache policies and the
environment variable names read by :mod:`icalfeed.config.settings`.
"""

# ICS calendar constants
ICS_PRODID = "-//Bond Coliving//Calendar Export//EN"
ICS_VERSION = "2.0"
ICS_CALSCALE = "GREGORIAN"
ICS_METHOD = "PUBLISH"

# Feed defaults
DEFAULT_TIMEZONE = "Atlantic/Madeira"
DEFAULT_UID_DOMAIN = "stayatbond.com"
DEFAULT_CALENDAR_SUFFIX = "Bond Coliving"
DEFAULT_REFRESH_INTERVAL = "PT1H"
DEFAULT_WINDOW_DAYS = 730  # two years of availability

# UID prefixes, one per event source
UID_PREFIX_RANGE = "range"
UID_PREFIX_DAY = "day"
UID_PREFIX_BOOKING = "booking"

# Summary / description labels
BOOKED_LABEL = "BOOKED"
BLOCKED_LABEL = "BLOCKED"
BOOKING_SUMMARY = "Booked"
MISSING_VALUE = "N/A"

# HTTP response constants
CONTENT_TYPE = "text/calendar; charset=utf-8"
CACHE_CONTROL_PUBLIC = "public, max-age=3600"
CACHE_CONTROL_NO_STORE = "no-cache, no-store, must-revalidate"
FILENAME_SUFFIX = "-availability.ics"

# Environment variable names
ENV_PRODID = "ICALFEED_PRODID"
ENV_TIMEZONE = "ICALFEED_TIMEZONE"
ENV_UID_DOMAIN = "ICALFEED_UID_DOMAIN"
ENV_CALENDAR_SUFFIX = "ICALFEED_CALENDAR_SUFFIX"
ENV_REFRESH_INTERVAL = "ICALFEED_REFRESH_INTERVAL"
ENV_WINDOW_DAYS = "ICALFEED_WINDOW_DAYS"
ENV_SUPABASE_URL = "SUPABASE_URL"
ENV_SUPABASE_SERVICE_KEY = "SUPABASE_SERVICE_ROLE_KEY"
ENV_SUPABASE_ANON_KEY = "SUPABASE_ANON_KEY"

# Booking statuses that occupy the calendar
CONFIRMED_BOOKING_STATUSES = ("confirmed", "checked_in")

# Request timeout for the REST data source, in seconds
REST_TIMEOUT_SECONDS = 10
