"""Buy and sell submission with client-side validation.

Validation runs before any network call. Buys append the backend's echo to
the store; sells always trigger a full reload instead of decrementing the
local copy, so the backend stays the only authority on residual quantity.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from tradedesk.errors import (
    BackendUnavailable,
    TradeDeskError,
    TradeRejected,
    Unauthenticated,
    ValidationFailure,
)
from tradedesk.formatting import to_decimal
from tradedesk.models import BuyIntent, Position, Quote, SellIntent, SellReport, SupportedStock, TradeReceipt
from tradedesk.portfolio.notices import NoticeBoard
from tradedesk.portfolio.store import PositionStore

logger = logging.getLogger(__name__)


def parse_units(value: Any) -> Decimal | None:
    units = to_decimal(value)
    if units is None or not units.is_finite():
        return None
    return units


def plain(value: Decimal) -> str:
    """Render a quantity without trailing zeros or exponent ("10", "2.5")."""
    return format(value.normalize(), "f")


class TradeSubmitter:
    def __init__(self, store: PositionStore, notices: NoticeBoard | None = None) -> None:
        self.store = store
        self.notices = notices if notices is not None else NoticeBoard()

    async def buy(
        self,
        stock: SupportedStock | None,
        units: Any,
        quote: Quote | None,
    ) -> TradeReceipt:
        """Submit a buy for ``units`` of ``stock`` at the price in ``quote``.

        ``quote`` must be a resolved quote for the same ticker; a buy is never
        submitted with a missing or stale price.
        """
        count = parse_units(units)
        if stock is None or count is None or count <= 0:
            raise ValidationFailure("Please select a stock and enter a valid number of units")
        if quote is None or quote.ticker != stock.symbol:
            raise ValidationFailure(f"Price for {stock.symbol} is still loading")
        if not self.store.token:
            raise Unauthenticated("Please log in to buy stocks")

        intent = BuyIntent(
            ticker=stock.symbol,
            display_name=stock.name,
            units=count,
            observed_price=quote.price,
        )
        try:
            receipt = await self.store.backend.add_position(self.store.token, intent)
        except TradeRejected as e:
            self.notices.error(f"Error: {e}")
            raise
        except BackendUnavailable:
            self.notices.error("Error: Could not complete purchase")
            raise

        self.store.append(receipt.position)
        self.notices.success(f"Successfully bought {plain(count)} units of {stock.name}!")
        return receipt

    def validate_sell_units(self, position: Position, units: Any) -> Decimal:
        """Enforce 0 < units <= quantity."""
        count = parse_units(units)
        if count is None or count <= 0:
            raise ValidationFailure("Please enter a valid number of units to sell.")
        if count > position.quantity:
            raise ValidationFailure(
                f"You only have {plain(position.quantity)} units available to sell."
            )
        return count

    def validate_sell(self, position: Position, units: Any) -> tuple[Decimal, Decimal]:
        """Return (units, price) for a sale or raise ValidationFailure."""
        count = self.validate_sell_units(position, units)
        price = self.store.book.price(position.ticker)
        if price is None:
            raise ValidationFailure(
                f"Current price for {position.ticker} has not loaded yet. Refresh prices and try again."
            )
        return count, price

    async def sell(self, position: Position, units: Any) -> SellReport:
        """Sell ``units`` of ``position`` at the current quoted price, then reload."""
        count, price = self.validate_sell(position, units)
        if not self.store.token:
            raise Unauthenticated("Please log in to sell stocks")

        intent = SellIntent(position_id=position.id, units=count, observed_price=price)
        await self.store.backend.mark_sold(self.store.token, intent)
        report = SellReport(position=position, units=count, price=price)

        try:
            await self.store.reload()
        except TradeDeskError as e:
            # The sale went through; a stale list is recoverable via refresh.
            logger.warning("Reload after sale of %s failed: %s", position.id, e)
        return report
