"""Stock advisor: single-stock analysis from the prediction service."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tradedesk.advisory.advisor import MODEL_TYPES, analyze_with_fallback, recommendation_tone
from tradedesk.advisory.rebalancer import parse_risk_tolerance
from tradedesk.api.deps import get_predictions
from tradedesk.data.prediction_client import PredictionClient
from tradedesk.errors import ValidationFailure


class AnalyzeRequest(BaseModel):
    symbol: str
    days: int = 30
    modelType: str = "auto"
    riskTolerance: str = "medium"


router = APIRouter()


@router.get("/advisor/stocks")
async def advisor_stocks(client: PredictionClient = Depends(get_predictions)) -> dict:
    stocks = await client.list_stocks()
    return {
        "stocks": [
            {"symbol": s.symbol, "name": s.name, "hasModel": s.has_model, "sector": s.sector}
            for s in stocks
        ],
    }


@router.post("/advisor/analyze")
async def analyze(
    body: AnalyzeRequest,
    client: PredictionClient = Depends(get_predictions),
) -> dict:
    if body.modelType not in MODEL_TYPES:
        raise ValidationFailure(f"Unknown model type {body.modelType!r}")
    risk = parse_risk_tolerance(body.riskTolerance)
    analysis = await analyze_with_fallback(
        client, body.symbol, body.days, body.modelType, risk.value
    )
    return {"analysis": analysis, "tone": recommendation_tone(analysis)}
