"""
Main scanner class that turns requested symbols into report rows.

Coordinates quote retrieval and signal calculation for each symbol.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from config.settings import get_settings
from data.yahoo_client import YahooClient
from scanner.signals import MaxPrice, MinPrice, PriceDifference, WindowedSMA
from utils.helpers import format_timestamp
from utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ReportRow:
    """Summary of one symbol over the requested period."""

    symbol: str
    period_start: datetime
    price: float  # Last close of the period
    change_pct: float  # Relative start-to-end change (0.05 = 5%)
    period_min: float
    period_max: float
    sma: float  # Latest moving-average value, 0.0 when unavailable

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "period_start": format_timestamp(self.period_start),
            "symbol": self.symbol,
            "price": self.price,
            "change_pct": self.change_pct * 100,
            "min": self.period_min,
            "max": self.period_max,
            "sma": self.sma,
        }


@dataclass
class ScanReport:
    """Complete scan report."""

    period_start: datetime
    period_end: datetime
    symbols_requested: int
    rows: List[ReportRow] = field(default_factory=list)
    execution_time_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "period_start": format_timestamp(self.period_start),
            "period_end": format_timestamp(self.period_end),
            "symbols_requested": self.symbols_requested,
            "symbols_reported": len(self.rows),
            "execution_time_seconds": round(self.execution_time_seconds, 2),
            "rows": [r.to_dict() for r in self.rows],
        }


def build_row(
    symbol: str,
    period_start: datetime,
    closes: Sequence[float],
    window_size: int = 30,
) -> Optional[ReportRow]:
    """
    Run every signal on a closing-price series and assemble a report row.

    Args:
        symbol: Security symbol
        period_start: Start of the requested period
        closes: Closing prices, ascending by time
        window_size: Moving-average window

    Returns:
        The report row, or None if the series is empty
    """
    if not closes:
        return None

    period_max = MaxPrice().calculate(closes)
    period_min = MinPrice().calculate(closes)
    _, pct_change = PriceDifference().calculate(closes) or (0.0, 0.0)
    sma = WindowedSMA(window_size).calculate(closes) or []

    return ReportRow(
        symbol=symbol,
        period_start=period_start,
        price=closes[-1],
        change_pct=pct_change,
        period_min=period_min,
        period_max=period_max,
        sma=sma[-1] if sma else 0.0,
    )


class StockScanner:
    """
    Per-symbol signal scanner.

    Fetches a closing-price series for each symbol, computes its signals and
    yields one report row per symbol that has data, in request order.
    """

    def __init__(
        self,
        client: Optional[YahooClient] = None,
        window_size: Optional[int] = None,
        max_concurrent: Optional[int] = None,
    ):
        """
        Initialize the scanner.

        Args:
            client: Quote client (creates new one if not provided)
            window_size: Moving-average window (default: settings.sma_window)
            max_concurrent: Symbols fetched at once (default: settings.max_concurrent)
        """
        settings = get_settings()
        self.client = client or YahooClient()
        self.window_size = window_size if window_size is not None else settings.sma_window
        self.max_concurrent = max(1, max_concurrent if max_concurrent is not None else settings.max_concurrent)

    async def scan_symbol(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
    ) -> Optional[ReportRow]:
        """
        Build the report row for a single symbol.

        Returns:
            The row, or None if the symbol has no quotes in the period

        Raises:
            YahooError: If the quotes could not be retrieved
        """
        closes = await self.client.fetch_closing_data(symbol, start, end)
        if not closes:
            logger.info(f"No quotes for {symbol} since {start.isoformat()}, skipping")
            return None

        row = build_row(symbol, start, closes, self.window_size)
        logger.debug(f"{symbol}: {len(closes)} closes, last={row.price:.2f}")
        return row

    async def iter_rows(
        self,
        symbols: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> AsyncIterator[ReportRow]:
        """
        Yield report rows in the order the symbols were requested.

        The first retrieval failure is raised and stops the scan; symbols
        after it are not reported.
        """
        if self.max_concurrent == 1:
            for symbol in symbols:
                row = await self.scan_symbol(symbol, start, end)
                if row is not None:
                    yield row
            return

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def scan_limited(symbol: str) -> Optional[ReportRow]:
            async with semaphore:
                return await self.scan_symbol(symbol, start, end)

        tasks = [asyncio.ensure_future(scan_limited(s)) for s in symbols]
        try:
            for task in tasks:
                row = await task
                if row is not None:
                    yield row
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def scan(
        self,
        symbols: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> List[ReportRow]:
        """Collect all report rows for the requested symbols."""
        return [row async for row in self.iter_rows(symbols, start, end)]

    async def run(
        self,
        symbols: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> ScanReport:
        """
        Run a complete scan and wrap the rows in a report.

        Args:
            symbols: Symbols to scan, in output order
            start: Period start
            end: Period end

        Returns:
            Complete scan report
        """
        start_time = datetime.now()
        rows = await self.scan(symbols, start, end)
        execution_time = (datetime.now() - start_time).total_seconds()

        logger.info(
            f"Scan complete: {len(rows)} of {len(symbols)} symbols reported "
            f"in {execution_time:.1f}s"
        )

        return ScanReport(
            period_start=start,
            period_end=end,
            symbols_requested=len(symbols),
            rows=rows,
            execution_time_seconds=execution_time,
        )

    async def close(self):
        """Clean up resources."""
        await self.client.close()
