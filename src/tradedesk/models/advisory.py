from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from tradedesk.formatting import to_decimal


class RiskTolerance(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SupportedStock:
    symbol: str
    name: str
    has_model: bool = True
    sector: str = ""

    @classmethod
    def from_api(cls, row: dict, assume_model: bool = False) -> SupportedStock:
        return cls(
            symbol=row["symbol"],
            name=row.get("name") or row["symbol"],
            has_model=True if assume_model else bool(row.get("has_model", False)),
            sector=row.get("sector", "") or "",
        )


@dataclass
class StockPrediction:
    symbol: str
    current_price: Decimal | None
    predicted_price: Decimal | None
    predicted_return: Decimal | None
    recommendation: str = ""
    confidence: str = ""
    prediction_date: str = ""

    @classmethod
    def from_api(cls, row: dict) -> StockPrediction:
        confidence = row.get("confidence")
        return cls(
            symbol=row.get("symbol", ""),
            current_price=to_decimal(row.get("current_price")),
            predicted_price=to_decimal(row.get("predicted_price")),
            predicted_return=to_decimal(row.get("predicted_return")),
            recommendation=row.get("recommendation", "") or "",
            confidence="" if confidence is None else str(confidence),
            prediction_date=row.get("prediction_date", "") or "",
        )


@dataclass(frozen=True)
class RebalanceHolding:
    symbol: str
    name: str
    allocation_pct: Decimal  # 0-100, as entered by the user

    @property
    def weight(self) -> Decimal:
        return self.allocation_pct / 100


@dataclass
class RebalancedStock:
    symbol: str
    name: str
    current_weight: Decimal | None
    optimal_weight: Decimal | None
    action: str
    expected_return: Decimal | None

    @classmethod
    def from_api(cls, row: dict) -> RebalancedStock:
        return cls(
            symbol=row.get("symbol", ""),
            name=row.get("name", "") or row.get("symbol", ""),
            current_weight=to_decimal(row.get("current_weight")),
            optimal_weight=to_decimal(row.get("optimal_weight")),
            action=row.get("action", "Hold") or "Hold",
            expected_return=to_decimal(row.get("expected_return")),
        )


@dataclass
class RebalanceResult:
    rows: list[RebalancedStock]
    timestamp: str = ""
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict) -> RebalanceResult:
        return cls(
            rows=[RebalancedStock.from_api(r) for r in data.get("rebalanced_portfolio", [])],
            timestamp=data.get("timestamp", "") or "",
            raw=data,
        )
