"""Decimal utilities for donation amounts.

All monetary calculations use Decimal to avoid floating-point precision issues.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

# Currency symbols stripped when parsing amounts
CURRENCY_SYMBOLS = {"₱", "$", "€", "£", "¥"}

# Default display symbol for printed reports (Philippine peso)
DEFAULT_CURRENCY_SYMBOL = "₱"

_CURRENCY_CODE_PATTERN = re.compile(r"^\s*[A-Z]{3}\s+|\s+[A-Z]{3}\s*$")


def parse_amount(raw_amount: object) -> Decimal:
    """Parse a donation amount into a non-negative Decimal.

    Accepts Decimal, int, float and strings such as "1,234.56",
    "₱1,234.56" or "PHP 1234.56".

    Args:
        raw_amount: The raw amount value.

    Returns:
        Amount as Decimal.

    Raises:
        ValueError: If the amount is empty, unparseable, negative or not finite.
    """
    if raw_amount is None or isinstance(raw_amount, bool):
        raise ValueError(f"Invalid amount: {raw_amount!r}")

    if isinstance(raw_amount, Decimal):
        amount = raw_amount
    elif isinstance(raw_amount, (int, float)):
        # Convert float to string first for precision
        amount = Decimal(str(raw_amount))
    else:
        amount_str = str(raw_amount).strip()
        if not amount_str:
            raise ValueError("Empty amount string")
        amount_str = _CURRENCY_CODE_PATTERN.sub("", amount_str)
        for symbol in CURRENCY_SYMBOLS:
            amount_str = amount_str.replace(symbol, "")
        amount_str = amount_str.replace(",", "").replace(" ", "")
        try:
            amount = Decimal(amount_str)
        except InvalidOperation as e:
            raise ValueError(f"Cannot parse amount '{raw_amount}': {e}") from e

    if not amount.is_finite():
        raise ValueError(f"Amount must be finite: {raw_amount!r}")
    if amount < 0:
        raise ValueError(f"Amount must not be negative: {raw_amount!r}")
    return amount


def quantize_amount(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round an amount half-up to the given number of decimal places."""
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "0"
    return amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal, decimal_places: int = 2) -> str:
    """Format an amount as plain text for CSV output, e.g. "1234.50"."""
    return str(quantize_amount(amount, decimal_places))


def format_currency(
    amount: Decimal,
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
    decimal_places: int = 2,
) -> str:
    """Format an amount for display with grouping, e.g. "₱1,234.50".

    Args:
        amount: The amount to format.
        symbol: Currency glyph prefix.
        decimal_places: Number of decimal places (default 2).

    Returns:
        Formatted display string.
    """
    rounded = quantize_amount(amount, decimal_places)
    return f"{symbol}{rounded:,.{decimal_places}f}"


def safe_decimal(value: Optional[object], default: Decimal = Decimal("0")) -> Decimal:
    """Convert a value to Decimal, returning default when conversion fails."""
    if value is None:
        return default

    try:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, (int, str, float)):
            return Decimal(str(value))
        return default
    except (InvalidOperation, ValueError):
        return default
