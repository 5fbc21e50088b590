"""
Utility modules for the Stock Signal Tracker.
"""

from utils.logging import setup_logging, get_logger
from utils.helpers import (
    format_currency,
    format_percentage,
    format_timestamp,
    parse_timestamp,
    parse_symbols,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "format_currency",
    "format_percentage",
    "format_timestamp",
    "parse_timestamp",
    "parse_symbols",
]
