"""
Yahoo Finance chart API client.
Source of daily quote history for the signal tracker.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import backoff

from config.settings import get_settings, Settings
from utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class YahooError(Exception):
    """Yahoo Finance data-access error."""
    pass


class YahooRateLimitError(YahooError):
    """Rate limit exceeded."""
    pass


def _is_permanent(exc: Exception) -> bool:
    """Client errors (4xx other than 429) are not worth retrying."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code < 500
    return False


@dataclass
class Quote:
    """A single daily quote."""

    timestamp: datetime
    adjclose: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[int] = None


def _value_at(values: Optional[List[Any]], index: int) -> Any:
    if not values or index >= len(values):
        return None
    return values[index]


def parse_chart_response(symbol: str, data: Dict[str, Any]) -> List[Quote]:
    """
    Extract quotes from a chart API payload.

    Entries without a price are skipped. When the payload carries no
    adjusted-close block the raw close is used instead.

    Raises:
        YahooError: If the payload reports an error or is malformed
    """
    if not isinstance(data, dict) or not isinstance(data.get("chart"), dict):
        raise YahooError(f"Malformed chart response for {symbol}")

    chart = data["chart"]
    error = chart.get("error")
    if error:
        description = error.get("description") if isinstance(error, dict) else error
        raise YahooError(f"Yahoo returned an error for {symbol}: {description}")

    results = chart.get("result") or []
    if not results:
        raise YahooError(f"No chart result for {symbol}")

    try:
        return _extract_quotes(results[0])
    except (AttributeError, TypeError, IndexError, KeyError, ValueError, OverflowError, OSError) as e:
        raise YahooError(f"Malformed chart response for {symbol}: {e}") from e


def _extract_quotes(result: Dict[str, Any]) -> List[Quote]:
    timestamps = result.get("timestamp") or []
    indicators = result.get("indicators") or {}
    quote_block = (indicators.get("quote") or [{}])[0] or {}
    adjclose_blocks = indicators.get("adjclose")
    adjcloses = (adjclose_blocks[0] or {}).get("adjclose") if adjclose_blocks else None

    quotes = []
    for i, ts in enumerate(timestamps):
        close = _value_at(quote_block.get("close"), i)
        price = _value_at(adjcloses, i) if adjcloses is not None else close
        if price is None:
            continue

        volume = _value_at(quote_block.get("volume"), i)
        quotes.append(Quote(
            timestamp=datetime.fromtimestamp(ts, tz=timezone.utc),
            adjclose=float(price),
            open=_value_at(quote_block.get("open"), i),
            high=_value_at(quote_block.get("high"), i),
            low=_value_at(quote_block.get("low"), i),
            close=close,
            volume=int(volume) if volume is not None else None,
        ))

    return quotes


class YahooClient:
    """
    Async client for the Yahoo Finance chart API.

    Provides:
    - Daily quote history for a symbol over a time range
    - Closing-price series extraction (sorted by time)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Yahoo client.

        Args:
            settings: Application settings.
            base_url: Override for the API base URL.
            transport: Custom httpx transport (used by tests).
        """
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.yahoo_base_url).rstrip("/")
        self._transport = transport

        self._client: Optional[httpx.AsyncClient] = None

        # Retry budget comes from this client's settings
        self._request = backoff.on_exception(
            backoff.expo,
            (httpx.TransportError, httpx.HTTPStatusError, YahooRateLimitError),
            max_tries=max(1, self.settings.max_retries),
            giveup=_is_permanent,
        )(self._send)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                limits=httpx.Limits(max_keepalive_connections=10),
                headers={"User-Agent": self.settings.user_agent},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "YahooClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _send(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an API request.

        Args:
            endpoint: API endpoint (e.g., "/v8/finance/chart/AAPL")
            params: Query parameters

        Returns:
            Decoded JSON response
        """
        url = f"{self.base_url}{endpoint}"

        client = await self._get_client()
        response = await client.get(url, params=params or {})

        if response.status_code == 429:
            raise YahooRateLimitError("Rate limit exceeded")

        # Unknown symbols come back as 404 with a chart.error payload
        if response.status_code == 404:
            try:
                return response.json()
            except ValueError:
                pass

        response.raise_for_status()
        return response.json()

    async def get_quote_history(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
    ) -> List[Quote]:
        """
        Get daily quotes for a symbol between two timestamps.

        Args:
            symbol: Security symbol
            start: Period start
            end: Period end

        Returns:
            Quotes in the order the API returned them

        Raises:
            YahooError: On any retrieval or decoding failure
        """
        endpoint = f"/v8/finance/chart/{symbol}"
        params = {
            "period1": int(start.timestamp()),
            "period2": int(end.timestamp()),
            "interval": "1d",
            "events": "div|split",
        }

        started = time.perf_counter()
        try:
            data = await self._request(endpoint, params=params)
            quotes = parse_chart_response(symbol, data)
        except YahooError as e:
            log_api_call("Yahoo", endpoint, symbol, False, (time.perf_counter() - started) * 1000, str(e))
            raise
        except (httpx.HTTPError, ValueError) as e:
            log_api_call("Yahoo", endpoint, symbol, False, (time.perf_counter() - started) * 1000, str(e))
            raise YahooError(f"Failed to fetch quotes for {symbol}: {e}") from e

        log_api_call("Yahoo", endpoint, symbol, True, (time.perf_counter() - started) * 1000)
        return quotes

    async def fetch_closing_data(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
    ) -> List[float]:
        """
        Retrieve quotes and extract the adjusted closing prices.

        Quotes are sorted ascending by timestamp before projection.

        Returns:
            Closing-price series (possibly empty)
        """
        quotes = await self.get_quote_history(symbol, start, end)
        if not quotes:
            return []

        quotes.sort(key=lambda q: q.timestamp)
        return [q.adjclose for q in quotes]
