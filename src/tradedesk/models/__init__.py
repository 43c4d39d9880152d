from __future__ import annotations

from tradedesk.models.advisory import (
    RebalancedStock,
    RebalanceHolding,
    RebalanceResult,
    RiskTolerance,
    StockPrediction,
    SupportedStock,
)
from tradedesk.models.position import BOUGHT, SOLD, Position
from tradedesk.models.quote import Quote
from tradedesk.models.recommendation import Recommendation, RecommendationAction
from tradedesk.models.trade import BuyIntent, SellIntent, SellReport, TradeReceipt

__all__ = [
    # position
    "BOUGHT",
    "SOLD",
    "Position",
    # quote
    "Quote",
    # trade
    "BuyIntent",
    "SellIntent",
    "SellReport",
    "TradeReceipt",
    # recommendation
    "Recommendation",
    "RecommendationAction",
    # advisory
    "RiskTolerance",
    "SupportedStock",
    "StockPrediction",
    "RebalanceHolding",
    "RebalancedStock",
    "RebalanceResult",
]
