"""Daily close history from the Yahoo Finance chart API."""

import logging
from typing import Any, List, Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from errors import DataUnavailable
from models import ChartResponse

logger = logging.getLogger(__name__)


class HistorySource(Protocol):
    """Anything that can hand back a chronological daily close series."""

    async def fetch(self, symbol: str) -> List[float]: ...

    async def close(self) -> None: ...


def parse_close_series(payload: Any, symbol: str) -> List[float]:
    """Decode a chart payload into closes, oldest first, with null gaps dropped."""
    try:
        response = ChartResponse.model_validate(payload)
    except ValidationError as exc:
        raise DataUnavailable(f"unexpected response shape for {symbol}: {exc.error_count()} error(s)") from exc

    chart = response.chart
    if not chart.result:
        reason = chart.error.description if chart.error and chart.error.description else "no result"
        raise DataUnavailable(f"provider returned no data for {symbol}: {reason}")

    quotes = chart.result[0].indicators.quote
    if not quotes:
        raise DataUnavailable(f"provider returned no quotes for {symbol}")

    closes = [price for price in quotes[0].close if price is not None]
    if not closes:
        raise DataUnavailable(f"provider returned no close prices for {symbol}")
    return closes


def _describe_error(response: httpx.Response) -> str:
    # Unknown symbols come back as 404 with {"chart": {"result": null, "error": {...}}}
    try:
        chart = ChartResponse.model_validate(response.json()).chart
    except (ValueError, ValidationError):
        return ""
    if chart.error and chart.error.description:
        return f": {chart.error.description}"
    return ""


class MarketDataClient:
    """Fetches ~2 years of daily closes per symbol. No retries, no caching."""

    def __init__(
        self,
        base_url: str = "https://query1.finance.yahoo.com",
        history_range: str = "2y",
        interval: str = "1d",
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.history_range = history_range
        self.interval = interval
        headers = {"User-Agent": user_agent} if user_agent else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def fetch(self, symbol: str) -> List[float]:
        """One outbound request; raises ``DataUnavailable`` on any failure."""
        path = f"/v8/finance/chart/{quote(symbol, safe='')}"
        params = {"interval": self.interval, "range": self.history_range}
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise DataUnavailable(f"request for {symbol} failed: {exc!r}") from exc

        if response.is_error:
            raise DataUnavailable(
                f"provider returned HTTP {response.status_code} for {symbol}{_describe_error(response)}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DataUnavailable(f"unparseable response for {symbol}") from exc

        closes = parse_close_series(payload, symbol)
        logger.debug(f"Fetched {len(closes)} closes for {symbol}")
        return closes

    async def close(self) -> None:
        """Close the HTTP client."""
        if not self._client.is_closed:
            await self._client.aclose()
