from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from tradedesk.formatting import to_decimal


class RecommendationAction(Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"

    @classmethod
    def parse(cls, label: str | None) -> RecommendationAction | None:
        """Map free-form labels ("Strong Buy", "SELL", "hold") onto an action."""
        text = (label or "").upper()
        if "BUY" in text:
            return cls.BUY
        if "SELL" in text:
            return cls.SELL
        if "HOLD" in text:
            return cls.HOLD
        return None


@dataclass(frozen=True)
class Recommendation:
    """Advisory signal; never authoritative for any state transition."""

    action: RecommendationAction | None
    confidence: str = ""
    reason: str = ""
    predicted_return_pct: Decimal | None = None

    @classmethod
    def from_analysis(cls, data: dict) -> Recommendation:
        rec = data.get("recommendation") or {}
        if isinstance(rec, str):
            rec = {"action": rec}
        label = rec.get("action") or rec.get("recommendation")
        predicted = data.get("predicted_return")
        if predicted is None:
            predicted = (data.get("prediction") or {}).get("return_percent")
        confidence = rec.get("confidence")
        return cls(
            action=RecommendationAction.parse(label),
            confidence="" if confidence is None else str(confidence),
            reason=rec.get("reason", "") or "",
            predicted_return_pct=to_decimal(predicted),
        )
