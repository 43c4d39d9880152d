"""Stocks offered on the buy screen.

Tickers use the quote API's ``.BSE`` suffix convention.
"""

from __future__ import annotations

from tradedesk.models import SupportedStock

BUYABLE_STOCKS: tuple[SupportedStock, ...] = (
    SupportedStock("RELIANCE.BSE", "Reliance Industries Ltd"),
    SupportedStock("TCS.BSE", "Tata Consultancy Services Ltd"),
    SupportedStock("INFY.BSE", "Infosys Ltd"),
    SupportedStock("HDFCBANK.BSE", "HDFC Bank Ltd"),
    SupportedStock("ICICIBANK.BSE", "ICICI Bank Ltd"),
    SupportedStock("TATAMOTORS.BSE", "Tata Motors Ltd"),
    SupportedStock("SBIN.BSE", "State Bank of India"),
    SupportedStock("BAJFINANCE.BSE", "Bajaj Finance Ltd"),
)


def find_stock(ticker: str) -> SupportedStock | None:
    ticker = ticker.strip().upper()
    for stock in BUYABLE_STOCKS:
        if stock.symbol == ticker:
            return stock
    return None
