from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from tradedesk.formatting import to_decimal

BOUGHT = "B"
SOLD = "S"


@dataclass
class Position:
    id: str
    ticker: str
    display_name: str
    quantity: Decimal
    invested_amount: Decimal  # total paid, as recorded by the backend
    bought_at: datetime | None = None
    status: str = BOUGHT

    @classmethod
    def from_backend(cls, row: dict) -> Position:
        """Build a Position from a trade-backend stock document."""
        quantity = to_decimal(row.get("quantity"))
        invested = to_decimal(row.get("investedPrice"))
        if quantity is None or invested is None or not row.get("tickerSymbol"):
            raise ValueError(f"Malformed position row: {row!r}")
        return cls(
            id=str(row.get("_id") or row.get("id") or ""),
            ticker=row["tickerSymbol"],
            display_name=row.get("stockName") or row["tickerSymbol"],
            quantity=quantity,
            invested_amount=invested,
            bought_at=_parse_timestamp(row.get("buyingDate")),
            status=row.get("status", BOUGHT),
        )

    @property
    def is_closed(self) -> bool:
        return self.quantity == 0

    @property
    def invested_per_unit(self) -> Decimal:
        if self.quantity == 0:
            return Decimal("0")
        return self.invested_amount / self.quantity

    def current_value(self, price: Decimal) -> Decimal:
        return price * self.quantity

    def profit_loss(self, price: Decimal) -> Decimal:
        return self.current_value(price) - self.invested_amount


def _parse_timestamp(value) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
