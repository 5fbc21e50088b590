"""
Helper functions for the Stock Signal Tracker.
Common utilities for formatting and input parsing.
"""

from datetime import datetime, timezone
from typing import List, Union


# =============================================================================
# Formatting Functions
# =============================================================================

def format_currency(
    value: Union[int, float],
    currency: str = "$",
    decimals: int = 2,
) -> str:
    """
    Format a number as currency.

    No thousands separator is emitted, so the result is safe to embed in a
    comma-joined line.

    Args:
        value: Number to format
        currency: Currency symbol
        decimals: Decimal places

    Returns:
        Formatted currency string (e.g., "$123.45")
    """
    return f"{currency}{value:.{decimals}f}"


def format_percentage(
    value: Union[int, float],
    decimals: int = 2,
    include_sign: bool = False,
) -> str:
    """
    Format a fraction as percentage.

    Args:
        value: Number to format (0.15 = 15%)
        decimals: Decimal places
        include_sign: Include + for positive values

    Returns:
        Formatted percentage string
    """
    pct = value * 100
    sign = "+" if include_sign and pct > 0 else ""
    return f"{sign}{pct:.{decimals}f}%"


def format_timestamp(value: datetime) -> str:
    """
    Format a timestamp as RFC 3339.

    Fractional seconds use the shortest of milliseconds or microseconds that
    is exact, and are omitted when zero.
    """
    if value.microsecond == 0:
        return value.isoformat(timespec="seconds")
    if value.microsecond % 1000 == 0:
        return value.isoformat(timespec="milliseconds")
    return value.isoformat(timespec="microseconds")


# =============================================================================
# Input Parsing
# =============================================================================

def parse_timestamp(value: str) -> datetime:
    """
    Parse an RFC 3339 / ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing "Z", explicit offsets, and bare dates (midnight UTC).
    Naive timestamps are taken to be UTC.

    Raises:
        ValueError: If the value cannot be parsed
    """
    text = value.strip()
    if not text:
        raise ValueError("empty timestamp")

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_symbols(value: str) -> List[str]:
    """
    Split a comma-separated symbol list, keeping request order.

    Whitespace around entries is stripped and empty entries are dropped.
    Case is preserved.
    """
    return [s.strip() for s in value.split(",") if s.strip()]
