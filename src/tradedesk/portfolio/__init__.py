from __future__ import annotations

from tradedesk.portfolio.notices import Notice, NoticeBoard
from tradedesk.portfolio.sell_flow import SellSession, SellState, selling_advice
from tradedesk.portfolio.store import PortfolioSummary, PositionRow, PositionStore
from tradedesk.portfolio.trader import TradeSubmitter

__all__ = [
    "Notice",
    "NoticeBoard",
    "PortfolioSummary",
    "PositionRow",
    "PositionStore",
    "SellSession",
    "SellState",
    "TradeSubmitter",
    "selling_advice",
]
