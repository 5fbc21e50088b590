#!/usr/bin/env python3
"""
Stock Signal Tracker - Main Entry Point

Prints one summary line per symbol: last price, change over the period,
period min/max and the latest 30-day simple moving average.

Usage:
    # Default symbols since a given date
    python main.py --from 2020-07-02T00:00:00Z

    # Specific symbols
    python main.py --symbols AAPL,MSFT --from 2021-01-01

    # JSON instead of CSV
    python main.py --from 2021-01-01 --format json
"""

import argparse
import asyncio
import sys
from pathlib import Path
from datetime import datetime, timezone
from typing import List, Optional

from rich.console import Console

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import get_settings
from data.yahoo_client import YahooClient, YahooError
from output.formatter import CsvWriter, OutputFormat, OutputFormatter
from scanner.scanner import StockScanner
from utils.helpers import parse_symbols, parse_timestamp
from utils.logging import StepLogger, get_logger, setup_logging


console = Console(stderr=True)
logger = get_logger("main")


def _timestamp_arg(value: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Couldn't parse date '{value}'")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Summarize closing prices per symbol as CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py --from 2020-07-02T00:00:00Z            # Default symbols
    python main.py -s AAPL,MSFT --from 2021-01-01         # Specific symbols
    python main.py --from 2021-01-01 --format json        # JSON report
        """,
    )

    parser.add_argument(
        "--symbols", "-s",
        type=str,
        default=settings.default_symbols,
        help=f"Comma-separated list of symbols (default: {settings.default_symbols})",
    )
    parser.add_argument(
        "--from", "-f",
        dest="start",
        type=_timestamp_arg,
        required=True,
        help="Period start (RFC 3339, e.g. 2020-07-02T00:00:00Z)",
    )
    parser.add_argument(
        "--to", "-t",
        dest="end",
        type=_timestamp_arg,
        default=None,
        help="Period end (default: now)",
    )

    parser.add_argument(
        "--window",
        type=int,
        default=settings.sma_window,
        help=f"Moving-average window (default: {settings.sma_window})",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=settings.max_concurrent,
        help=f"Symbols fetched at once (default: {settings.max_concurrent})",
    )

    parser.add_argument(
        "--format",
        choices=["csv", "json"],
        default="csv",
        help="Output format (default: csv)",
    )

    # Logging
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-essential output",
    )

    return parser.parse_args(argv)


async def run_csv(scanner: StockScanner, symbols: List[str], start: datetime, end: datetime) -> int:
    """Stream CSV lines as rows are produced. The header is printed first."""
    writer = CsvWriter(sys.stdout)
    async for row in scanner.iter_rows(symbols, start, end):
        writer.write_row(row)
    return writer.rows_written


async def run_json(scanner: StockScanner, symbols: List[str], start: datetime, end: datetime) -> int:
    """Print the full report as JSON once every symbol is done."""
    report = await scanner.run(symbols, start, end)
    print(OutputFormatter().format(report, OutputFormat.JSON))
    return len(report.rows)


async def main_async(args: argparse.Namespace) -> int:
    """Async main function."""
    symbols = parse_symbols(args.symbols)
    start = args.start
    end = args.end or datetime.now(timezone.utc)

    scanner = StockScanner(
        client=YahooClient(),
        window_size=args.window,
        max_concurrent=args.concurrency,
    )

    try:
        with StepLogger("scan", symbols=len(symbols)):
            if args.format == "json":
                await run_json(scanner, symbols, start, end)
            else:
                await run_csv(scanner, symbols, start, end)
        return 0

    except YahooError as e:
        console.print(f"[red]Error: {e}[/red]")
        logger.error(f"Quote retrieval failed: {e}")
        return 1

    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        logger.exception("Scan failed")
        return 1

    finally:
        await scanner.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = "DEBUG" if args.verbose else ("WARNING" if args.quiet else None)
    setup_logging(level=log_level)

    # asyncio.run re-raises Ctrl-C here after cancelling the scan
    try:
        return asyncio.run(main_async(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted by user[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
