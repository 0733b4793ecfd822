"""Keep Supabase credentials out of log lines."""

from typing import Optional

PLACEHOLDER_EMPTY = "<empty>"
PLACEHOLDER_SHORT = "***"


def mask_key(key: Optional[str], visible: int = 4) -> str:
    """Return ``key`` with everything but its ends replaced by ``...``.

    Keys too short to keep ``visible`` characters on both sides and
    still hide something are replaced entirely.
    """
    if not key:
        return PLACEHOLDER_EMPTY
    key = key.strip()
    if len(key) <= visible * 2:
        return PLACEHOLDER_SHORT
    return f"{key[:visible]}...{key[-visible:]}"
