"""Sell screen: holdings with live prices, advisory recommendation, and sale."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from tradedesk.advisory.rebalancer import parse_risk_tolerance
from tradedesk.api.deps import build_store, build_submitter, get_recommendations, get_token
from tradedesk.api.routes.shared import portfolio_view
from tradedesk.data.prediction_client import RecommendationClient
from tradedesk.errors import ValidationFailure
from tradedesk.formatting import format_inr
from tradedesk.portfolio.sell_flow import selling_advice
from tradedesk.portfolio.trader import parse_units, plain

logger = logging.getLogger(__name__)


class SellRequest(BaseModel):
    units: float


router = APIRouter()


@router.get("/sell/positions")
async def sell_positions(token: str | None = Depends(get_token)) -> dict:
    store = build_store(token)
    await store.reload()
    return portfolio_view(store)


@router.get("/sell/{position_id}/recommendation")
async def sell_recommendation(
    position_id: str,
    days: int = Query(30, ge=1),
    risk_tolerance: str = Query("medium", alias="riskTolerance"),
    token: str | None = Depends(get_token),
    recommendations: RecommendationClient = Depends(get_recommendations),
) -> dict:
    """Advisory only; an unavailable recommendation is a normal response."""
    risk = parse_risk_tolerance(risk_tolerance)
    store = build_store(token)
    await store.load_positions()
    position = store.find(position_id)

    rec = await recommendations.get_recommendation(position.ticker, days, risk.value)
    if rec is None:
        return {"available": False, "advice": selling_advice(None)}
    return {
        "available": True,
        "action": rec.action.value if rec.action else None,
        "confidence": rec.confidence,
        "reason": rec.reason,
        "predictedReturn": float(rec.predicted_return_pct) if rec.predicted_return_pct is not None else None,
        "advice": selling_advice(rec),
    }


@router.post("/sell/{position_id}")
async def sell_position(
    position_id: str,
    body: SellRequest,
    token: str | None = Depends(get_token),
) -> dict:
    units = parse_units(body.units)
    if units is None or units <= 0:
        raise ValidationFailure("Please enter a valid number of units to sell.")

    store = build_store(token)
    await store.load_positions()
    position = store.find(position_id)
    submitter = build_submitter(store)
    submitter.validate_sell_units(position, units)

    # The book is shared across requests; only a price fetched now may be used
    if await store.quotes.refresh(store.book, position.ticker) is None:
        raise ValidationFailure(
            f"Current price for {position.ticker} could not be fetched. Refresh prices and try again."
        )
    report = await submitter.sell(position, units)

    outcome = "Profit" if report.is_profitable else "Loss"
    message = (
        f"Successfully sold {plain(report.units)} units of {position.display_name} "
        f"for ₹{format_inr(report.selling_value)}!\n"
        f"{outcome}: ₹{format_inr(abs(report.profit_loss))}"
    )
    return {
        "message": message,
        "units": float(report.units),
        "price": float(report.price),
        "sellingValue": float(report.selling_value),
        "profitLoss": float(report.profit_loss),
        "profitable": report.is_profitable,
        "portfolio": portfolio_view(store),
    }
