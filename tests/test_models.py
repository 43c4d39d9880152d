from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from tradedesk.catalogue import BUYABLE_STOCKS, find_stock
from tradedesk.models import (
    BOUGHT,
    BuyIntent,
    Position,
    RebalanceHolding,
    RebalanceResult,
    Recommendation,
    RecommendationAction,
    SellIntent,
    SellReport,
    StockPrediction,
    SupportedStock,
)


def _row(**overrides) -> dict:
    row = {
        "_id": "p1",
        "tickerSymbol": "TCS.BSE",
        "stockName": "Tata Consultancy Services Ltd",
        "quantity": 10,
        "investedPrice": 25000,
        "buyingDate": "2024-03-01T10:00:00.000Z",
        "status": "B",
    }
    row.update(overrides)
    return row


class TestPosition:
    def test_from_backend(self) -> None:
        p = Position.from_backend(_row())
        assert p.id == "p1"
        assert p.ticker == "TCS.BSE"
        assert p.quantity == Decimal("10")
        assert p.invested_amount == Decimal("25000")
        assert p.bought_at == datetime(2024, 3, 1, 10, 0, tzinfo=UTC)
        assert p.status == BOUGHT

    def test_name_falls_back_to_ticker(self) -> None:
        p = Position.from_backend(_row(stockName=None))
        assert p.display_name == "TCS.BSE"

    def test_malformed_row(self) -> None:
        with pytest.raises(ValueError):
            Position.from_backend(_row(quantity="lots"))
        with pytest.raises(ValueError):
            Position.from_backend(_row(tickerSymbol=""))

    def test_derived_values(self) -> None:
        p = Position.from_backend(_row())
        price = Decimal("2600")
        assert p.current_value(price) == Decimal("26000")
        assert p.profit_loss(price) == Decimal("1000")
        assert p.invested_per_unit == Decimal("2500")

    def test_closed_position(self) -> None:
        p = Position.from_backend(_row(quantity=0, investedPrice=0))
        assert p.is_closed
        assert p.invested_per_unit == Decimal("0")


class TestTradeIntents:
    def test_buy_payload_is_raw_intent(self) -> None:
        at = datetime(2024, 3, 1, tzinfo=UTC)
        intent = BuyIntent("TCS.BSE", "TCS", Decimal("10"), Decimal("2500"), at)
        payload = intent.to_payload()
        assert payload == {
            "tickerSymbol": "TCS.BSE",
            "stockName": "TCS",
            "quantity": 10.0,
            "observedPrice": 2500.0,
            "observedAt": at.isoformat(),
            "status": "B",
        }
        assert intent.total_cost == Decimal("25000")

    def test_sell_payload(self) -> None:
        intent = SellIntent("p1", Decimal("4"), Decimal("2600"))
        payload = intent.to_payload()
        assert payload["status"] == "S"
        assert payload["units"] == 4.0
        assert payload["sellingPrice"] == 2600.0

    def test_sell_report_uses_cost_basis_per_unit(self) -> None:
        p = Position.from_backend(_row())
        report = SellReport(position=p, units=Decimal("4"), price=Decimal("2400"))
        assert report.selling_value == Decimal("9600")
        assert report.cost_basis == Decimal("10000")
        assert report.profit_loss == Decimal("-400")
        assert not report.is_profitable


class TestRecommendation:
    def test_parse_labels(self) -> None:
        assert RecommendationAction.parse("Strong Buy") is RecommendationAction.BUY
        assert RecommendationAction.parse("sell") is RecommendationAction.SELL
        assert RecommendationAction.parse("HOLD") is RecommendationAction.HOLD
        assert RecommendationAction.parse("unclear") is None
        assert RecommendationAction.parse(None) is None

    def test_from_analysis_dict(self) -> None:
        rec = Recommendation.from_analysis({
            "recommendation": {"action": "SELL", "confidence": 0.8, "reason": "Overbought"},
            "predicted_return": -3.2,
        })
        assert rec.action is RecommendationAction.SELL
        assert rec.confidence == "0.8"
        assert rec.reason == "Overbought"
        assert rec.predicted_return_pct == Decimal("-3.2")

    def test_from_analysis_string_and_nested_return(self) -> None:
        rec = Recommendation.from_analysis({
            "recommendation": "Hold",
            "prediction": {"return_percent": "1.5"},
        })
        assert rec.action is RecommendationAction.HOLD
        assert rec.predicted_return_pct == Decimal("1.5")


class TestAdvisoryModels:
    def test_supported_stock_from_api(self) -> None:
        s = SupportedStock.from_api({"symbol": "TCS.NS", "name": "TCS", "has_model": False})
        assert not s.has_model
        assert SupportedStock.from_api({"symbol": "TCS.NS"}, assume_model=True).has_model

    def test_prediction_from_api(self) -> None:
        p = StockPrediction.from_api({
            "symbol": "INFY.NS",
            "current_price": 1500,
            "predicted_price": 1550,
            "predicted_return": 3.33,
            "recommendation": "BUY",
            "confidence": "High",
        })
        assert p.predicted_return == Decimal("3.33")
        assert p.confidence == "High"

    def test_holding_weight(self) -> None:
        assert RebalanceHolding("A.NS", "A", Decimal("25")).weight == Decimal("0.25")

    def test_rebalance_result(self) -> None:
        result = RebalanceResult.from_api({
            "rebalanced_portfolio": [
                {"symbol": "A.NS", "current_weight": 0.5, "optimal_weight": 0.6,
                 "action": "Buy", "expected_return": 2.1},
            ],
            "timestamp": "2024-03-01",
        })
        assert result.rows[0].name == "A.NS"
        assert result.rows[0].optimal_weight == Decimal("0.6")
        assert result.timestamp == "2024-03-01"


class TestCatalogue:
    def test_find_stock(self) -> None:
        assert find_stock("tcs.bse") is not None
        assert find_stock("AAPL") is None

    def test_catalogue_uses_bse_suffix(self) -> None:
        assert len(BUYABLE_STOCKS) == 8
        assert all(s.symbol.endswith(".BSE") for s in BUYABLE_STOCKS)
