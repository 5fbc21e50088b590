"""
Signal calculations over closing-price series.

Every signal shares one interface: given a price series (ascending by time),
return a result or None when the signal cannot be computed for that input.
Signals are stateless and never modify the series they are given.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def price_diff(series: Sequence[float]) -> Optional[Tuple[float, float]]:
    """
    Absolute and relative difference between the first and last price.

    The relative difference is relative to the first price; a first price of
    exactly 0.0 is replaced by 1.0 as the denominator.

    Returns:
        (absolute, relative) tuple, or None for an empty series
    """
    if not series:
        return None

    first, last = series[0], series[-1]
    abs_diff = last - first
    denom = 1.0 if first == 0.0 else first
    return abs_diff, abs_diff / denom


def min_price(series: Sequence[float]) -> Optional[float]:
    """Smallest price in the series, or None if it is empty."""
    if not series:
        return None
    return reduce(min, series, sys.float_info.max)


def max_price(series: Sequence[float]) -> Optional[float]:
    """Largest price in the series, or None if it is empty."""
    if not series:
        return None
    return reduce(max, series, -sys.float_info.max)


def n_window_sma(n: int, series: Sequence[float]) -> Optional[List[float]]:
    """
    Simple moving average over every contiguous window of n prices.

    Args:
        n: Window size, must be greater than 1
        series: Price series

    Returns:
        One average per full window (an empty list when the series is
        shorter than the window), or None if the series is empty or n <= 1
    """
    if not series or n <= 1:
        return None

    averages = []
    for i in range(len(series) - n + 1):
        total = 0.0
        # Summed left to right so results don't depend on sum()'s compensation
        for price in series[i : i + n]:
            total += price
        averages.append(total / n)
    return averages


class StockSignal(ABC, Generic[T]):
    """Common interface for all signal calculations."""

    @abstractmethod
    def calculate(self, series: Sequence[float]) -> Optional[T]:
        """
        Calculate the signal on the provided series.

        Args:
            series: Closing prices, ascending by time

        Returns:
            The signal value, or None if the series is not valid for it
        """
        pass


@dataclass(frozen=True)
class PriceDifference(StockSignal[Tuple[float, float]]):
    """Start-to-end change as (absolute, relative)."""

    def calculate(self, series: Sequence[float]) -> Optional[Tuple[float, float]]:
        return price_diff(series)


@dataclass(frozen=True)
class MinPrice(StockSignal[float]):
    """Minimum price of the period."""

    def calculate(self, series: Sequence[float]) -> Optional[float]:
        return min_price(series)


@dataclass(frozen=True)
class MaxPrice(StockSignal[float]):
    """Maximum price of the period."""

    def calculate(self, series: Sequence[float]) -> Optional[float]:
        return max_price(series)


@dataclass(frozen=True)
class WindowedSMA(StockSignal[List[float]]):
    """Simple moving average with a fixed window size."""

    window_size: int = 30

    def calculate(self, series: Sequence[float]) -> Optional[List[float]]:
        return n_window_sma(self.window_size, series)
