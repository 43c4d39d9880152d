from __future__ import annotations

from tradedesk.data.backend_client import BackendClient
from tradedesk.data.prediction_client import (
    PredictionClient,
    RecommendationClient,
    normalize_symbol,
)
from tradedesk.data.quote_client import QuoteBook, QuoteClient

__all__ = [
    "BackendClient",
    "PredictionClient",
    "QuoteBook",
    "QuoteClient",
    "RecommendationClient",
    "normalize_symbol",
]
