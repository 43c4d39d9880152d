from __future__ import annotations

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from tradedesk.advisory.advisor import (
    analyze_with_fallback,
    prediction_as_analysis,
    recommendation_tone,
)
from tradedesk.advisory.predictions import filter_and_sort, recommendation_counts, toggle_direction
from tradedesk.advisory.rebalancer import parse_risk_tolerance, validate_holdings
from tradedesk.data.prediction_client import PredictionClient
from tradedesk.errors import ServiceUnavailable, ValidationFailure
from tradedesk.models import RebalanceHolding, RiskTolerance, StockPrediction, SupportedStock


def _pred(symbol: str, ret: str | None, rec: str = "BUY") -> StockPrediction:
    return StockPrediction(
        symbol=symbol,
        current_price=Decimal("100"),
        predicted_price=None,
        predicted_return=Decimal(ret) if ret is not None else None,
        recommendation=rec,
    )


class TestAnalyzeWithFallback:
    @pytest.mark.asyncio
    async def test_uses_full_analysis(self):
        client = MagicMock(spec=PredictionClient)
        client.analyze_stock = AsyncMock(return_value={"symbol": "TCS.NS"})
        client.predict_stock = AsyncMock()
        result = await analyze_with_fallback(client, "TCS.NS")
        assert result == {"symbol": "TCS.NS"}
        client.predict_stock.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_to_prediction(self):
        client = MagicMock(spec=PredictionClient)
        client.analyze_stock = AsyncMock(side_effect=ServiceUnavailable("500"))
        client.predict_stock = AsyncMock(return_value={
            "predicted_return": -1.5, "recommendation": "SELL", "confidence": "Low",
        })
        result = await analyze_with_fallback(client, "TCS.NS")
        assert result["fallback"] is True
        assert result["trend_analysis"]["overall_trend"] == "Bearish"
        assert result["company_name"] == "TCS"

    @pytest.mark.asyncio
    async def test_rejects_empty_symbol(self):
        client = MagicMock(spec=PredictionClient)
        with pytest.raises(ValidationFailure):
            await analyze_with_fallback(client, "")

    @pytest.mark.asyncio
    async def test_rejects_non_positive_horizon(self):
        client = MagicMock(spec=PredictionClient)
        with pytest.raises(ValidationFailure):
            await analyze_with_fallback(client, "TCS.NS", days=0)


class TestTone:
    def test_tones(self) -> None:
        assert recommendation_tone({"recommendation": "Strong Buy"}) == "positive"
        assert recommendation_tone({"recommendation": {"action": "SELL"}}) == "negative"
        assert recommendation_tone({"recommendation": "HOLD"}) == "neutral"
        assert recommendation_tone(None) == "neutral"

    def test_fallback_analysis_tone(self) -> None:
        analysis = prediction_as_analysis("INFY.NS", {"predicted_return": 2, "recommendation": "BUY"})
        assert analysis["trend_analysis"]["overall_trend"] == "Bullish"
        assert recommendation_tone(analysis) == "positive"


class TestPredictionsTable:
    def test_sorts_descending_with_missing_last(self) -> None:
        rows = filter_and_sort([_pred("A", "1"), _pred("B", None), _pred("C", "3")])
        assert [p.symbol for p in rows] == ["C", "A", "B"]

    def test_sorts_ascending(self) -> None:
        rows = filter_and_sort([_pred("A", "1"), _pred("C", "3")], descending=False)
        assert [p.symbol for p in rows] == ["A", "C"]

    def test_filters_by_recommendation(self) -> None:
        rows = filter_and_sort([_pred("A", "1", "BUY"), _pred("B", "2", "SELL")], "sell")
        assert [p.symbol for p in rows] == ["B"]

    def test_rejects_unknown_key(self) -> None:
        with pytest.raises(ValidationFailure):
            filter_and_sort([], key="volume")

    def test_toggle_direction(self) -> None:
        assert toggle_direction("symbol", False, "symbol") is True
        assert toggle_direction("symbol", True, "symbol") is False
        assert toggle_direction("symbol", True, "confidence") is False

    def test_recommendation_counts(self) -> None:
        counts = recommendation_counts([
            _pred("A", "1", "STRONG BUY"),
            _pred("B", "2", "buy"),
            _pred("C", "3", "HOLD"),
            _pred("D", None, "N/A"),
        ])
        assert counts == {"BUY": 2, "HOLD": 1, "SELL": 0, "TOTAL": 4}


class TestRebalancer:
    def test_risk_tolerance(self) -> None:
        assert parse_risk_tolerance("HIGH") is RiskTolerance.HIGH
        with pytest.raises(ValidationFailure):
            parse_risk_tolerance("reckless")

    def test_valid_holdings(self) -> None:
        rows = validate_holdings([
            RebalanceHolding("A.NS", "A", Decimal("33.33")),
            RebalanceHolding("B.NS", "B", Decimal("33.33")),
            RebalanceHolding("C.NS", "C", Decimal("33.34")),
        ])
        assert len(rows) == 3

    def test_total_must_be_100(self) -> None:
        with pytest.raises(ValidationFailure, match="currently 90.00%"):
            validate_holdings([RebalanceHolding("A.NS", "A", Decimal("90"))])

    def test_duplicates_rejected(self) -> None:
        with pytest.raises(ValidationFailure, match="already in your portfolio"):
            validate_holdings([
                RebalanceHolding("A.NS", "A", Decimal("50")),
                RebalanceHolding("A.NS", "A", Decimal("50")),
            ])

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValidationFailure):
            validate_holdings([])

    def test_supported_stocks_need_a_model(self) -> None:
        supported = [SupportedStock("A.NS", "A"), SupportedStock("B.NS", "B", has_model=False)]
        rows = validate_holdings([RebalanceHolding("A.NS", "A", Decimal("100"))], supported)
        assert [h.symbol for h in rows] == ["A.NS"]
        with pytest.raises(ValidationFailure, match="no trained model"):
            validate_holdings([
                RebalanceHolding("A.NS", "A", Decimal("50")),
                RebalanceHolding("B.NS", "B", Decimal("50")),
            ], supported)
        with pytest.raises(ValidationFailure, match="not available for rebalancing"):
            validate_holdings([RebalanceHolding("Z.NS", "Z", Decimal("100"))], supported)
