"""Buy screen: catalogue, price preview and purchase."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from tradedesk.api.deps import build_store, build_submitter, get_quotes, get_token
from tradedesk.catalogue import BUYABLE_STOCKS, find_stock
from tradedesk.data.quote_client import QuoteClient
from tradedesk.errors import BackendUnavailable, QuoteUnavailable, TradeRejected, ValidationFailure
from tradedesk.formatting import format_inr
from tradedesk.portfolio.trader import parse_units

logger = logging.getLogger(__name__)


class BuyRequest(BaseModel):
    ticker: str
    units: float


router = APIRouter()


@router.get("/buy/stocks")
def list_buyable() -> dict:
    return {
        "stocks": [{"symbol": s.symbol, "name": s.name} for s in BUYABLE_STOCKS],
    }


@router.get("/buy/quote")
async def quote_preview(
    ticker: str = Query(...),
    units: float = Query(1.0, gt=0),
    quotes: QuoteClient = Depends(get_quotes),
) -> dict:
    """Current price and the cost of ``units`` at that price (a preview only)."""
    stock = find_stock(ticker)
    if stock is None:
        raise HTTPException(status_code=404, detail=f"{ticker} is not available to buy")
    count = parse_units(units)
    if count is None:
        raise ValidationFailure("Please enter a valid number of units")
    quote = await quotes.get_quote(stock.symbol)
    total = quote.price * count
    return {
        "ticker": stock.symbol,
        "name": stock.name,
        "units": units,
        "price": float(quote.price),
        "priceDisplay": format_inr(quote.price),
        "total": float(total),
        "totalDisplay": format_inr(total),
        "fetchedAt": quote.fetched_at.isoformat(),
    }


@router.post("/buy")
async def buy_stock(
    body: BuyRequest,
    token: str | None = Depends(get_token),
    quotes: QuoteClient = Depends(get_quotes),
) -> dict:
    stock = find_stock(body.ticker)
    if stock is None:
        raise ValidationFailure("Please select a stock and enter a valid number of units")
    if body.units <= 0:
        raise ValidationFailure("Please select a stock and enter a valid number of units")

    try:
        quote = await quotes.get_quote(stock.symbol)
    except QuoteUnavailable as e:
        raise ValidationFailure(f"Price for {stock.symbol} is not available yet; try again") from e

    store = build_store(token)
    submitter = build_submitter(store)
    try:
        receipt = await submitter.buy(stock, body.units, quote)
    except (TradeRejected, BackendUnavailable) as e:
        notice = submitter.notices.current()
        status = 400 if isinstance(e, TradeRejected) else 503
        raise HTTPException(status_code=status, detail=notice.message if notice else str(e)) from e

    notice = submitter.notices.current()
    position = receipt.position
    return {
        "position": {
            "id": position.id,
            "ticker": position.ticker,
            "name": position.display_name,
            "quantity": float(position.quantity),
            "investedAmount": float(position.invested_amount),
            "investedDisplay": format_inr(position.invested_amount),
        },
        "notice": {
            "message": notice.message,
            "success": notice.success,
            "expiresInSeconds": submitter.notices.duration,
        } if notice else None,
    }
