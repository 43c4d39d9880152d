"""Batch predictions table."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from tradedesk.advisory.predictions import filter_and_sort, recommendation_counts
from tradedesk.api.deps import get_predictions
from tradedesk.data.prediction_client import PredictionClient
from tradedesk.formatting import format_currency, format_percentage

router = APIRouter()


@router.get("/predictions")
async def list_predictions(
    recommendation: str = Query("ALL"),
    sort: str = Query("predicted_return"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    client: PredictionClient = Depends(get_predictions),
) -> dict:
    predictions = await client.list_predictions()
    rows = filter_and_sort(
        predictions,
        recommendation=recommendation,
        key=sort,
        descending=direction == "desc",
    )
    return {
        "predictions": [
            {
                "symbol": p.symbol,
                "currentPrice": format_currency(p.current_price),
                "predictedPrice": format_currency(p.predicted_price),
                "predictedReturn": format_percentage(p.predicted_return),
                "recommendation": p.recommendation,
                "confidence": p.confidence,
                "predictionDate": p.prediction_date,
            }
            for p in rows
        ],
        "count": len(rows),
        "summary": recommendation_counts(predictions),
    }
