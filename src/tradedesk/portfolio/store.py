"""Client-side read-through copy of the user's positions, enriched with live quotes.

The backend is the source of truth for holdings; quotes are ephemeral and
live in a shared QuoteBook. Derived values (current value, profit/loss)
are computed on demand and only once a row's quote has resolved.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal

from tradedesk.data.backend_client import BackendClient
from tradedesk.data.quote_client import QuoteBook, QuoteClient
from tradedesk.errors import BackendUnavailable, ValidationFailure
from tradedesk.models import Position, Quote

logger = logging.getLogger(__name__)


@dataclass
class PositionRow:
    position: Position
    price: Decimal | None
    pending: bool = False

    @property
    def resolved(self) -> bool:
        return self.price is not None

    @property
    def current_value(self) -> Decimal | None:
        if self.price is None:
            return None
        return self.position.current_value(self.price)

    @property
    def profit_loss(self) -> Decimal | None:
        if self.price is None:
            return None
        return self.position.profit_loss(self.price)


@dataclass
class PortfolioSummary:
    count: int
    invested: Decimal
    current_value: Decimal
    profit_loss: Decimal
    unresolved: int  # rows whose quote has not resolved, excluded from the totals


class PositionStore:
    def __init__(
        self,
        backend: BackendClient,
        quotes: QuoteClient,
        token: str | None,
        book: QuoteBook | None = None,
    ) -> None:
        self.backend = backend
        self.quotes = quotes
        self.token = token
        self.book = book if book is not None else QuoteBook()
        self.positions: list[Position] = []
        self.balance: Decimal | None = None

    async def load_positions(self) -> list[Position]:
        self.positions = await self.backend.list_positions(self.token)
        logger.debug("Loaded %d positions", len(self.positions))
        return self.positions

    async def load_balance(self) -> Decimal:
        self.balance = await self.backend.get_balance(self.token)
        return self.balance

    def tickers(self) -> list[str]:
        """Distinct tickers in portfolio order."""
        return list(dict.fromkeys(p.ticker for p in self.positions))

    async def refresh_prices(self) -> dict[str, Quote | None]:
        """Quote every distinct ticker concurrently; one failure never blocks the rest."""
        tickers = self.tickers()
        results = await asyncio.gather(
            *(self.quotes.refresh(self.book, t) for t in tickers),
            return_exceptions=True,
        )
        quotes: dict[str, Quote | None] = {}
        for ticker, result in zip(tickers, results):
            if isinstance(result, BaseException):
                logger.warning("Quote refresh for %s failed", ticker, exc_info=result)
                quotes[ticker] = None
            else:
                quotes[ticker] = result
        return quotes

    def start_refresh(self) -> list[asyncio.Task]:
        """Fire off one quote task per ticker without waiting for any of them."""
        return [
            asyncio.create_task(self.quotes.refresh(self.book, t), name=f"quote:{t}")
            for t in self.tickers()
        ]

    async def reload(self) -> None:
        """Full refetch of positions, balance and prices."""
        await self.load_positions()
        try:
            await self.load_balance()
        except BackendUnavailable:
            logger.warning("Balance refresh failed; keeping previous value")
        await self.refresh_prices()

    def append(self, position: Position) -> None:
        self.positions.append(position)

    def find(self, position_id: str) -> Position:
        for position in self.positions:
            if position.id == position_id:
                return position
        raise ValidationFailure(f"No position with id {position_id}")

    def rows(self) -> list[PositionRow]:
        return [
            PositionRow(
                position=p,
                price=self.book.price(p.ticker),
                pending=self.book.is_pending(p.ticker),
            )
            for p in self.positions
        ]

    def summary(self) -> PortfolioSummary:
        rows = self.rows()
        resolved = [r for r in rows if r.resolved]
        invested = sum((r.position.invested_amount for r in resolved), Decimal("0"))
        value = sum((r.current_value for r in resolved), Decimal("0"))
        return PortfolioSummary(
            count=len(rows),
            invested=invested,
            current_value=value,
            profit_loss=value - invested,
            unresolved=len(rows) - len(resolved),
        )
