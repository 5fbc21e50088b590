"""
Tests for per-symbol orchestration.
"""
import asyncio
from datetime import datetime, timezone

import pytest

from data.yahoo_client import YahooError
from scanner.scanner import ReportRow, ScanReport, StockScanner, build_row

PERIOD_START = datetime(2020, 7, 2, tzinfo=timezone.utc)


def _collect(scanner, symbols, start, end):
    """Drain iter_rows, returning the rows seen and the error raised (if any)."""
    rows = []

    async def drain():
        async for row in scanner.iter_rows(symbols, start, end):
            rows.append(row)

    try:
        asyncio.run(drain())
    except YahooError as e:
        return rows, e
    return rows, None


class TestBuildRow:

    def test_empty_series_has_no_row(self):
        assert build_row("AAPL", PERIOD_START, []) is None

    def test_typical_series(self):
        row = build_row("AAPL", PERIOD_START, [2.0, 3.0, 5.0, 6.0, 1.0, 2.0, 10.0], window_size=3)

        assert row.symbol == "AAPL"
        assert row.period_start == PERIOD_START
        assert row.price == 10.0
        assert row.change_pct == 4.0
        assert row.period_min == 1.0
        assert row.period_max == 10.0
        assert row.sma == pytest.approx(13.0 / 3)

    def test_price_is_last_close_not_average(self):
        row = build_row("MSFT", PERIOD_START, [1.0, 2.0, 3.0, 4.0], window_size=2)
        assert row.price == 4.0
        assert row.sma == 3.5

    def test_short_series_defaults_sma_to_zero(self):
        """Fewer closes than the window gives an empty average list."""
        row = build_row("UBER", PERIOD_START, [2.0, 3.0, 5.0], window_size=30)
        assert row.sma == 0.0

    def test_degenerate_window_defaults_sma_to_zero(self):
        row = build_row("UBER", PERIOD_START, [2.0, 3.0, 5.0], window_size=1)
        assert row.sma == 0.0

    def test_single_close(self):
        row = build_row("GOOG", PERIOD_START, [42.0])
        assert row.price == 42.0
        assert row.change_pct == 0.0
        assert row.period_min == row.period_max == 42.0

    def test_to_dict_scales_percent(self):
        row = build_row("AAPL", PERIOD_START, [2.0, 3.0])
        data = row.to_dict()
        assert data["change_pct"] == 50.0
        assert data["period_start"] == "2020-07-02T00:00:00+00:00"
        assert data["symbol"] == "AAPL"


class TestStockScanner:

    def test_rows_follow_request_order(self, period, fake_client_factory):
        client = fake_client_factory({
            "MSFT": [1.0, 2.0],
            "AAPL": [3.0, 4.0],
            "GOOG": [5.0, 6.0],
        })
        scanner = StockScanner(client=client, window_size=30, max_concurrent=1)

        rows = asyncio.run(scanner.scan(["GOOG", "AAPL", "MSFT"], *period))

        assert [r.symbol for r in rows] == ["GOOG", "AAPL", "MSFT"]
        assert client.requested == ["GOOG", "AAPL", "MSFT"]

    def test_empty_series_symbol_is_omitted(self, period, fake_client_factory):
        client = fake_client_factory({"AAPL": [2.0, 3.0], "MSFT": [4.0, 8.0]})
        scanner = StockScanner(client=client, window_size=30, max_concurrent=1)

        rows = asyncio.run(scanner.scan(["AAPL", "EMPTY", "MSFT"], *period))

        assert [r.symbol for r in rows] == ["AAPL", "MSFT"]
        assert rows[1].change_pct == 1.0

    def test_retrieval_failure_stops_later_symbols(self, period, fake_client_factory):
        client = fake_client_factory(
            {"AAPL": [2.0, 3.0], "MSFT": [4.0, 8.0]},
            failing=["BAD"],
        )
        scanner = StockScanner(client=client, window_size=30, max_concurrent=1)

        rows, error = _collect(scanner, ["AAPL", "BAD", "MSFT"], *period)

        assert isinstance(error, YahooError)
        assert [r.symbol for r in rows] == ["AAPL"]
        assert client.requested == ["AAPL", "BAD"]

    def test_scan_raises_on_failure(self, period, fake_client_factory):
        client = fake_client_factory({}, failing=["BAD"])
        scanner = StockScanner(client=client, max_concurrent=1)

        with pytest.raises(YahooError):
            asyncio.run(scanner.scan(["BAD"], *period))

    def test_concurrent_scan_keeps_request_order(self, period, fake_client_factory):
        """The slowest symbol is requested first and still reported first."""
        client = fake_client_factory(
            {"AAPL": [1.0, 2.0], "MSFT": [3.0, 4.0], "GOOG": [5.0, 6.0]},
            delays={"AAPL": 0.05, "MSFT": 0.01},
        )
        scanner = StockScanner(client=client, window_size=30, max_concurrent=3)

        rows = asyncio.run(scanner.scan(["AAPL", "MSFT", "EMPTY", "GOOG"], *period))

        assert [r.symbol for r in rows] == ["AAPL", "MSFT", "GOOG"]

    def test_concurrent_scan_propagates_failure(self, period, fake_client_factory):
        client = fake_client_factory(
            {"AAPL": [1.0, 2.0], "GOOG": [5.0, 6.0]},
            failing=["BAD"],
            delays={"GOOG": 0.05},
        )
        scanner = StockScanner(client=client, window_size=30, max_concurrent=2)

        rows, error = _collect(scanner, ["AAPL", "BAD", "GOOG"], *period)

        assert isinstance(error, YahooError)
        assert [r.symbol for r in rows] == ["AAPL"]

    def test_run_builds_report(self, period, fake_client_factory):
        client = fake_client_factory({"AAPL": [2.0, 3.0, 5.0, 6.0, 1.0, 2.0, 10.0]})
        scanner = StockScanner(client=client, window_size=30)

        report = asyncio.run(scanner.run(["AAPL", "EMPTY"], *period))

        assert isinstance(report, ScanReport)
        assert report.symbols_requested == 2
        assert len(report.rows) == 1
        assert isinstance(report.rows[0], ReportRow)
        assert report.to_dict()["symbols_reported"] == 1

    def test_close_closes_client(self, fake_client_factory):
        client = fake_client_factory({})
        scanner = StockScanner(client=client)

        asyncio.run(scanner.close())

        assert client.closed

    def test_defaults_from_settings(self, fake_client_factory):
        scanner = StockScanner(client=fake_client_factory({}))
        assert scanner.window_size == 30
        assert scanner.max_concurrent == 1
