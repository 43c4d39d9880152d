from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from tradedesk.models.position import BOUGHT, SOLD, Position


@dataclass(frozen=True)
class BuyIntent:
    """Raw buy request: what the user asked for and the price they saw.

    Monetary totals are computed by the backend; ``total_cost`` is a preview.
    """

    ticker: str
    display_name: str
    units: Decimal
    observed_price: Decimal
    observed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_cost(self) -> Decimal:
        return self.observed_price * self.units

    def to_payload(self) -> dict:
        return {
            "tickerSymbol": self.ticker,
            "stockName": self.display_name,
            "quantity": float(self.units),
            "observedPrice": float(self.observed_price),
            "observedAt": self.observed_at.isoformat(),
            "status": BOUGHT,
        }


@dataclass(frozen=True)
class SellIntent:
    position_id: str
    units: Decimal
    observed_price: Decimal
    observed_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_payload(self) -> dict:
        # "S" regardless of partial or full; the backend works out the residual.
        return {
            "status": SOLD,
            "sellingPrice": float(self.observed_price),
            "units": float(self.units),
            "observedAt": self.observed_at.isoformat(),
        }


@dataclass
class TradeReceipt:
    """The backend's echo of a successful buy."""

    position: Position
    raw: dict = field(default_factory=dict)


@dataclass
class SellReport:
    position: Position
    units: Decimal
    price: Decimal

    @property
    def selling_value(self) -> Decimal:
        return self.price * self.units

    @property
    def cost_basis(self) -> Decimal:
        return self.position.invested_per_unit * self.units

    @property
    def profit_loss(self) -> Decimal:
        return self.selling_value - self.cost_basis

    @property
    def is_profitable(self) -> bool:
        return self.profit_loss >= 0
