"""
Stock Signal Tracker.

Summarizes closing-price series into descriptive signals.

Modules:
- signals: Signal interface and the price/extrema/moving-average calculations
- scanner: Per-symbol orchestration into report rows
"""

from scanner.signals import (
    StockSignal,
    PriceDifference,
    MinPrice,
    MaxPrice,
    WindowedSMA,
    price_diff,
    min_price,
    max_price,
    n_window_sma,
)
from scanner.scanner import ReportRow, ScanReport, StockScanner, build_row

__all__ = [
    # Signals
    "StockSignal",
    "PriceDifference",
    "MinPrice",
    "MaxPrice",
    "WindowedSMA",
    "price_diff",
    "min_price",
    "max_price",
    "n_window_sma",
    # Orchestration
    "ReportRow",
    "ScanReport",
    "StockScanner",
    "build_row",
]
