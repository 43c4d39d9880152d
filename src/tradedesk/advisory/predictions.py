"""Filtering and sorting for the batch predictions table."""

from __future__ import annotations

from typing import Iterable

from tradedesk.errors import ValidationFailure
from tradedesk.models import StockPrediction

SORT_KEYS = (
    "symbol",
    "current_price",
    "predicted_price",
    "predicted_return",
    "recommendation",
    "confidence",
    "prediction_date",
)
RECOMMENDATION_FILTERS = ("ALL", "BUY", "HOLD", "SELL")


def filter_and_sort(
    predictions: Iterable[StockPrediction],
    recommendation: str = "ALL",
    key: str = "predicted_return",
    descending: bool = True,
) -> list[StockPrediction]:
    if key not in SORT_KEYS:
        raise ValidationFailure(f"Cannot sort predictions by {key!r}")
    recommendation = recommendation.upper()
    if recommendation not in RECOMMENDATION_FILTERS:
        raise ValidationFailure(f"Unknown recommendation filter {recommendation!r}")

    rows = list(predictions)
    if recommendation != "ALL":
        rows = [p for p in rows if p.recommendation.upper() == recommendation]

    # Rows missing the sort value always go last
    present = [p for p in rows if getattr(p, key) not in (None, "")]
    missing = [p for p in rows if getattr(p, key) in (None, "")]
    present.sort(key=lambda p: getattr(p, key), reverse=descending)
    return present + missing


def toggle_direction(current_key: str, current_descending: bool, new_key: str) -> bool:
    """Clicking the active column flips ascending to descending; anything else sorts ascending."""
    return current_key == new_key and not current_descending


def recommendation_counts(predictions: Iterable[StockPrediction]) -> dict[str, int]:
    """Per-recommendation totals over the unfiltered table, plus the overall count."""
    rows = list(predictions)
    counts = {
        label: sum(1 for p in rows if label in p.recommendation.upper())
        for label in RECOMMENDATION_FILTERS[1:]
    }
    counts["TOTAL"] = len(rows)
    return counts
