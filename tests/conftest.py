"""Shared test fixtures for the signal tracker test suite."""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import httpx
import pytest

from config.settings import Settings
from data.yahoo_client import YahooClient, YahooError


PERIOD_START = datetime(2020, 7, 2, tzinfo=timezone.utc)
PERIOD_END = datetime(2020, 8, 2, tzinfo=timezone.utc)


@pytest.fixture()
def period():
    return PERIOD_START, PERIOD_END


@pytest.fixture()
def settings() -> Settings:
    """Settings that ignore any local .env file."""
    return Settings(_env_file=None, max_retries=3)


def make_chart_payload(
    timestamps: List[int],
    adjcloses: Optional[List[Optional[float]]],
    closes: Optional[List[Optional[float]]] = None,
) -> dict:
    """Build a chart API payload in the shape Yahoo returns."""
    closes = closes if closes is not None else adjcloses
    indicators = {
        "quote": [{
            "open": closes,
            "high": closes,
            "low": closes,
            "close": closes,
            "volume": [1000] * len(timestamps),
        }],
    }
    if adjcloses is not None:
        indicators["adjclose"] = [{"adjclose": adjcloses}]

    return {
        "chart": {
            "result": [{
                "meta": {"currency": "USD", "dataGranularity": "1d"},
                "timestamp": timestamps,
                "indicators": indicators,
            }],
            "error": None,
        }
    }


def make_error_payload(description: str = "No data found, symbol may be delisted") -> dict:
    return {"chart": {"result": None, "error": {"code": "Not Found", "description": description}}}


@pytest.fixture()
def chart_payload():
    return make_chart_payload


@pytest.fixture()
def error_payload():
    return make_error_payload


@pytest.fixture()
def yahoo_client_factory(settings):
    """Create a YahooClient whose HTTP calls are served by a handler function."""
    def factory(handler) -> YahooClient:
        client = YahooClient(
            settings=settings,
            base_url="https://yahoo.test",
            transport=httpx.MockTransport(handler),
        )
        return client

    return factory


class FakeQuoteClient:
    """Stands in for YahooClient with fixed series per symbol."""

    def __init__(
        self,
        series: Dict[str, List[float]],
        failing: Iterable[str] = (),
        delays: Optional[Dict[str, float]] = None,
    ):
        self.series = series
        self.failing = set(failing)
        self.delays = delays or {}
        self.requested: List[str] = []
        self.closed = False

    async def fetch_closing_data(self, symbol, start, end):
        self.requested.append(symbol)
        if symbol in self.delays:
            await asyncio.sleep(self.delays[symbol])
        if symbol in self.failing:
            raise YahooError(f"Failed to fetch quotes for {symbol}")
        return list(self.series.get(symbol, []))

    async def close(self):
        self.closed = True


@pytest.fixture()
def fake_client_factory():
    return FakeQuoteClient
