from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal


@dataclass(frozen=True)
class Quote:
    ticker: str
    price: Decimal
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))
