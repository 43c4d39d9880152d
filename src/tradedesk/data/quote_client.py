"""Live price lookups against an Alpha Vantage-style GLOBAL_QUOTE endpoint.

The client is deliberately thin: one request per ticker, no retry, no
backoff and no caching. Callers refresh explicitly. Concurrent refreshes
merge into a shared QuoteBook, which drops responses that arrive after a
newer one for the same ticker has already been applied.
"""

from __future__ import annotations

import logging

import httpx

from tradedesk.data.http import ServiceClient
from tradedesk.errors import QuoteUnavailable
from tradedesk.formatting import to_decimal
from tradedesk.models import Quote

logger = logging.getLogger(__name__)

PRICE_FIELD = "05. price"


class QuoteBook:
    """Per-ticker price map guarded by monotonically increasing sequence numbers."""

    def __init__(self) -> None:
        self._quotes: dict[str, Quote] = {}
        self._issued: dict[str, int] = {}
        self._applied: dict[str, int] = {}
        self._settled: dict[str, int] = {}

    def begin(self, ticker: str) -> int:
        """Register a new in-flight request for ``ticker`` and return its sequence number."""
        seq = self._issued.get(ticker, 0) + 1
        self._issued[ticker] = seq
        return seq

    def apply(self, quote: Quote, seq: int) -> bool:
        """Store ``quote`` unless a newer response for its ticker was already applied."""
        ticker = quote.ticker
        self._settle(ticker, seq)
        if seq <= self._applied.get(ticker, 0):
            logger.debug(
                "Discarding stale quote for %s (seq=%d, applied=%d)",
                ticker, seq, self._applied[ticker],
            )
            return False
        self._applied[ticker] = seq
        self._quotes[ticker] = quote
        return True

    def fail(self, ticker: str, seq: int) -> None:
        """Mark a request as finished without a quote; the old price stays."""
        self._settle(ticker, seq)

    def _settle(self, ticker: str, seq: int) -> None:
        self._settled[ticker] = max(self._settled.get(ticker, 0), seq)

    def get(self, ticker: str) -> Quote | None:
        return self._quotes.get(ticker)

    def price(self, ticker: str):
        quote = self._quotes.get(ticker)
        return quote.price if quote else None

    def is_pending(self, ticker: str) -> bool:
        return self._issued.get(ticker, 0) > self._settled.get(ticker, 0)


class QuoteClient(ServiceClient):
    """Fetches the latest traded price for a ticker (e.g. ``RELIANCE.BSE``)."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 30.0) -> None:
        super().__init__(base_url, timeout)
        self._api_key = api_key

    async def get_quote(self, ticker: str) -> Quote:
        """Return the current quote or raise QuoteUnavailable."""
        client = await self._http()
        params = {"function": "GLOBAL_QUOTE", "symbol": ticker, "apikey": self._api_key}
        try:
            response = await client.get(self._base_url, params=params, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise QuoteUnavailable(ticker, str(e) or type(e).__name__) from e

        if not isinstance(data, dict):
            raise QuoteUnavailable(ticker, "unexpected payload")

        payload = data.get("Global Quote")
        if not payload:
            # Rate limiting shows up as a "Note"/"Information" body with no quote
            reason = data.get("Note") or data.get("Information") or "no Global Quote payload"
            raise QuoteUnavailable(ticker, str(reason))

        price = to_decimal(payload.get(PRICE_FIELD))
        if price is None or price <= 0:
            raise QuoteUnavailable(ticker, "missing price")

        return Quote(ticker=ticker, price=price)

    async def refresh(self, book: QuoteBook, ticker: str) -> Quote | None:
        """Fetch ``ticker`` into ``book``; on failure the last known price stays and None is returned."""
        seq = book.begin(ticker)
        try:
            quote = await self.get_quote(ticker)
        except QuoteUnavailable as e:
            logger.warning("%s", e)
            book.fail(ticker, seq)
            return None
        if not book.apply(quote, seq):
            return book.get(ticker)
        return quote
