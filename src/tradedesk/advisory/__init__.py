from __future__ import annotations

from tradedesk.advisory.advisor import analyze_with_fallback, prediction_as_analysis, recommendation_tone
from tradedesk.advisory.predictions import filter_and_sort, recommendation_counts, toggle_direction
from tradedesk.advisory.rebalancer import parse_risk_tolerance, validate_holdings

__all__ = [
    "analyze_with_fallback",
    "filter_and_sort",
    "parse_risk_tolerance",
    "prediction_as_analysis",
    "recommendation_counts",
    "recommendation_tone",
    "toggle_direction",
    "validate_holdings",
]
