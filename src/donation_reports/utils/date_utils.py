"""Date parsing and formatting utilities."""

import calendar
import re
from datetime import date, datetime

# Common date format patterns
#
# Slash-separated dates (e.g., "03/04/2024") are always interpreted as US format (MM/DD/YYYY).
# Stored donations normally carry ISO dates, optionally with a time part
# ("2024-03-01T00:00:00.000Z"); the time part has no meaning for reporting.
DATE_PATTERNS = [
    (r"^(\d{4})-(\d{1,2})-(\d{1,2})$", "%Y-%m-%d"),
    (r"^(\d{1,2})/(\d{1,2})/(\d{4})$", "%m/%d/%Y"),
    (r"^(\d{1,2})-(\d{1,2})-(\d{4})$", "%m-%d-%Y"),
    (r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$", "%d.%m.%Y"),
    (r"^(\w{3})\s+(\d{1,2}),?\s+(\d{4})$", "%b %d, %Y"),
    (r"^(\w+)\s+(\d{1,2}),?\s+(\d{4})$", "%B %d, %Y"),
    (r"^(\d{8})$", "%Y%m%d"),
]

COMPILED_PATTERNS = [(re.compile(pattern), fmt) for pattern, fmt in DATE_PATTERNS]

# ISO date followed by a time component
_ISO_DATETIME_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]")


def parse_date(raw_date: str | date) -> date:
    """Parse a raw date value into a date object.

    Handles:
    - date/datetime objects (datetime is truncated to its date)
    - ISO: 2024-01-15, 2024-01-15T08:30:00.000Z
    - US: 01/15/2024, 01-15-2024
    - European: 15.01.2024
    - Text: Jan 15, 2024, January 15, 2024
    - Compact: 20240115

    Args:
        raw_date: The raw date to parse.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    if isinstance(raw_date, datetime):
        return raw_date.date()
    if isinstance(raw_date, date):
        return raw_date

    if not raw_date:
        raise ValueError("Empty date string")

    date_str = str(raw_date).strip()
    if not date_str:
        raise ValueError("Empty date string after stripping whitespace")

    iso_match = _ISO_DATETIME_PATTERN.match(date_str)
    if iso_match:
        date_str = iso_match.group(1)

    for pattern, fmt in COMPILED_PATTERNS:
        if pattern.match(date_str):
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                # Pattern matched but format didn't work, try next
                continue

    raise ValueError(f"Cannot parse date: '{raw_date}'")


def safe_parse_date(raw_date: str | None, default: date | None = None) -> date | None:
    """Parse a date string, returning default on failure."""
    if not raw_date:
        return default

    try:
        return parse_date(raw_date)
    except ValueError:
        return default


def date_to_iso(d: date) -> str:
    """Convert a date to ISO 8601 format (YYYY-MM-DD)."""
    return d.isoformat()


def month_key(d: date) -> str:
    """Grouping key for the calendar month of a date (YYYY-MM)."""
    return f"{d.year:04d}-{d.month:02d}"


def year_key(d: date) -> str:
    """Grouping key for the calendar year of a date (YYYY)."""
    return f"{d.year:04d}"


def format_month_key(key: str) -> str:
    """Format a YYYY-MM key for display, e.g. "2024-03" -> "March 2024".

    Keys that do not look like a month key are returned unchanged.
    """
    match = re.match(r"^(\d{4})-(\d{2})$", key)
    if not match:
        return key
    month = int(match.group(2))
    if not 1 <= month <= 12:
        return key
    return f"{calendar.month_name[month]} {match.group(1)}"


def format_display_date(d: date) -> str:
    """Format a date for display, e.g. "Mar 1, 2024"."""
    return f"{calendar.month_abbr[d.month]} {d.day}, {d.year}"


def is_date_in_range(
    d: date,
    start_date: date | None = None,
    end_date: date | None = None,
) -> bool:
    """Check if a date is within an inclusive range.

    Args:
        d: Date to check.
        start_date: Start of range (inclusive). None means no lower bound.
        end_date: End of range (inclusive). None means no upper bound.

    Returns:
        True if date is within range.
    """
    if start_date is not None and d < start_date:
        return False
    if end_date is not None and d > end_date:
        return False
    return True
