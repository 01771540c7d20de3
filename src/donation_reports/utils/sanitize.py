"""Sanitization utilities for safe output generation."""

import html
from typing import Optional


# Characters that trigger formula execution in spreadsheet applications
# when they appear at the start of a cell value.
# Includes | for DDE (Dynamic Data Exchange) attack prevention
_FORMULA_CHARS = ("=", "+", "-", "@", "\t", "\r", "\n", "|")


def sanitize_for_csv(value: Optional[str]) -> Optional[str]:
    """Sanitize a string value for safe CSV/Excel output.

    Prevents formula injection by prefixing values that start with
    formula-triggering characters (=, +, -, @, tab, etc.) with a
    single quote. Donor-entered text is the main source of such values.

    Args:
        value: String value to sanitize, or None.

    Returns:
        Sanitized string, or None if input was None.
    """
    if value is None:
        return None

    if not value:
        return value

    if value.startswith(_FORMULA_CHARS):
        return "'" + value

    return value


def escape_html(value: Optional[object]) -> str:
    """Escape a value for interpolation into an HTML document.

    Args:
        value: Any value; None renders as an empty string.

    Returns:
        HTML-escaped text (quotes included).
    """
    if value is None:
        return ""
    return html.escape(str(value), quote=True)
