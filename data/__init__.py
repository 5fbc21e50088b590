"""
Data clients for the Stock Signal Tracker.

Primary data source: Yahoo Finance chart API
"""

from data.yahoo_client import Quote, YahooClient, YahooError, YahooRateLimitError

__all__ = [
    "Quote",
    "YahooClient",
    "YahooError",
    "YahooRateLimitError",
]
