"""iCalendar TEXT value escaping (RFC 5545 section 3.3.11)."""

from typing import Optional

# NOTE: ORDER MATTERS! The backslash goes first so the escapes added
# afterwards are not escaped a second time.
_ESCAPES = (
    ("\\", "\\\\"),
    (";", "\\;"),
    (",", "\\,"),
    ("\n", "\\n"),
)

_UNESCAPES = {
    "\\": "\\",
    ";": ";",
    ",": ",",
    "n": "\n",
    "N": "\n",
}


def escape_text(text: Optional[str]) -> str:
    """Escape free text for embedding in a TEXT property value.

    Carriage returns are dropped, then backslash, semicolon, comma and
    newline are escaped.

    Args:
        text: The raw text. ``None`` is treated as empty.

    Returns:
        The escaped value, guaranteed to contain no line breaks.
    """
    if not text:
        return ""
    escaped = str(text).replace("\r", "")
    for raw, replacement in _ESCAPES:
        escaped = escaped.replace(raw, replacement)
    return escaped


def unescape_text(value: str) -> str:
    """Reverse :func:`escape_text`.

    Scans left to right so an escaped backslash followed by ``n`` stays a
    backslash and a letter. Unknown escapes are kept verbatim.
    """
    chars = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == "\\" and i + 1 < len(value):
            nxt = value[i + 1]
            if nxt in _UNESCAPES:
                chars.append(_UNESCAPES[nxt])
                i += 2
                continue
        chars.append(ch)
        i += 1
    return "".join(chars)
