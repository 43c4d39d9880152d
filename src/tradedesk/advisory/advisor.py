"""Single-stock analysis for the advisor view."""

from __future__ import annotations

import logging

from tradedesk.data.prediction_client import PredictionClient
from tradedesk.errors import ServiceUnavailable, ValidationFailure
from tradedesk.formatting import to_decimal
from tradedesk.models import Recommendation, RecommendationAction

logger = logging.getLogger(__name__)

MODEL_TYPES = ("auto", "svr", "technical", "LSTM")


def prediction_as_analysis(symbol: str, prediction: dict) -> dict:
    """Reshape a bare prediction into the structure the analysis endpoint returns."""
    predicted_return = to_decimal(prediction.get("predicted_return")) or 0
    label = prediction.get("recommendation")
    confidence = prediction.get("confidence")
    return {
        "symbol": symbol,
        "company_name": symbol.replace(".NS", ""),
        "current_price": prediction.get("current_price"),
        "predicted_price": prediction.get("predicted_price"),
        "predicted_return": prediction.get("predicted_return"),
        "model_type": "LSTM",
        "analysis_date": prediction.get("prediction_date"),
        "recommendation": {
            "action": label,
            "confidence": confidence,
            "recommendation": label,
            "reason": f"LSTM model prediction with {confidence} confidence",
        },
        "trend_analysis": {
            "overall_trend": "Bullish" if predicted_return > 0 else "Bearish",
        },
        "risk_metrics": {"risk": float(abs(predicted_return) / 100)},
        "prediction": {
            "next_day_price": prediction.get("predicted_price"),
            "return_percent": prediction.get("predicted_return"),
            "confidence": confidence,
        },
        "fallback": True,
    }


async def analyze_with_fallback(
    client: PredictionClient,
    symbol: str,
    days: int = 30,
    model_type: str = "auto",
    risk_tolerance: str = "medium",
) -> dict:
    """Run the full analysis; fall back to the single-stock prediction if it fails."""
    if not symbol:
        raise ValidationFailure("Please select a stock to analyze")
    if days <= 0:
        raise ValidationFailure("Horizon must be at least one day")

    try:
        return await client.analyze_stock(symbol, days, model_type, risk_tolerance)
    except ServiceUnavailable as e:
        logger.warning("Analysis of %s failed (%s); trying bare prediction", symbol, e)

    prediction = await client.predict_stock(symbol)
    return prediction_as_analysis(symbol, prediction)


def recommendation_tone(analysis: dict | None) -> str:
    """Return positive, negative or neutral for colouring the recommendation."""
    if not analysis:
        return "neutral"
    action = Recommendation.from_analysis(analysis).action
    if action is RecommendationAction.BUY:
        return "positive"
    if action is RecommendationAction.SELL:
        return "negative"
    return "neutral"
