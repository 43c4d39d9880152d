"""Portfolio rebalancer."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tradedesk.advisory.rebalancer import parse_risk_tolerance, validate_holdings
from tradedesk.api.deps import get_predictions
from tradedesk.data.prediction_client import PredictionClient
from tradedesk.formatting import format_percentage
from tradedesk.models import RebalanceHolding


class HoldingIn(BaseModel):
    symbol: str
    name: str = ""
    allocation: float  # percent, 0-100


class RebalanceRequest(BaseModel):
    portfolio: list[HoldingIn]
    riskTolerance: str = "medium"


router = APIRouter()


@router.get("/rebalance/stocks")
async def rebalance_stocks(client: PredictionClient = Depends(get_predictions)) -> dict:
    stocks = await client.list_rebalance_stocks()
    return {
        "stocks": [
            {"symbol": s.symbol, "name": s.name, "hasModel": s.has_model}
            for s in stocks
        ],
    }


@router.post("/rebalance")
async def rebalance(
    body: RebalanceRequest,
    client: PredictionClient = Depends(get_predictions),
) -> dict:
    risk = parse_risk_tolerance(body.riskTolerance)
    holdings = validate_holdings(
        (
            RebalanceHolding(h.symbol, h.name or h.symbol, Decimal(str(h.allocation)))
            for h in body.portfolio
        ),
        supported=await client.list_rebalance_stocks(),
    )
    result = await client.rebalance(holdings, risk.value)
    return {
        "rows": [
            {
                "symbol": r.symbol,
                "name": r.name,
                "currentWeight": format_percentage(
                    r.current_weight * 100 if r.current_weight is not None else None, signed=False
                ),
                "optimalWeight": format_percentage(
                    r.optimal_weight * 100 if r.optimal_weight is not None else None, signed=False
                ),
                "action": r.action,
                "expectedReturn": format_percentage(r.expected_return),
            }
            for r in result.rows
        ],
        "timestamp": result.timestamp,
    }
