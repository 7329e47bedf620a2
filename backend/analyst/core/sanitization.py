"""
Sanitization helpers for user-provided text that reaches logs or headers.
"""
import re
from typing import Any

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')
_LINE_BREAKS = re.compile(r'[\r\n]+')
# Newlines and tabs are common in spreadsheet headers; other control characters are not
_UNSAFE_HEADER_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f]')
_RESERVED_NAMES = re.compile(r'^(CON|PRN|AUX|NUL|COM[1-9]|LPT[1-9])$', re.IGNORECASE)

MAX_COLUMN_NAME_LENGTH = 1000


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Strip path components and control characters from an uploaded filename.

    Returns "unknown" when nothing usable is left.
    """
    if not filename:
        return "unknown"

    filename = filename.replace('\\', '/').split('/')[-1]
    filename = _CONTROL_CHARS.sub('', filename).strip('. ')
    return filename[:max_length] or "unknown"


def sanitize_for_logging(value: Any, max_length: int = 500) -> str:
    """
    Make a value safe to interpolate into a log line (no log injection).

    Line breaks become spaces, other control characters are dropped and
    long values are cut with a trailing "...".
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    if not text:
        return ""

    text = _CONTROL_CHARS.sub('', _LINE_BREAKS.sub(' ', text))
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text


def validate_column_name(name: str) -> bool:
    """True when a column header is safe to use as a chart axis label."""
    if not name or len(name) > MAX_COLUMN_NAME_LENGTH:
        return False
    if '..' in name or _UNSAFE_HEADER_CHARS.search(name):
        return False
    return not _RESERVED_NAMES.match(name.strip())
