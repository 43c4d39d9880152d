"""Clients for the prediction/rebalancing service.

The models behind it (LSTM, SVR, technical indicators) are opaque; this
module only shapes requests and responses.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from tradedesk.data.http import ServiceClient
from tradedesk.errors import ServiceUnavailable
from tradedesk.models import (
    RebalanceHolding,
    RebalanceResult,
    Recommendation,
    RiskTolerance,
    StockPrediction,
    SupportedStock,
)

logger = logging.getLogger(__name__)


def normalize_symbol(ticker: str) -> str:
    """Map quote-API tickers onto the prediction service's NSE convention.

    ``.NS`` and ``.BO`` pass through, ``.BSE``/``.NSE`` become ``.NS`` and a
    bare ticker defaults to NSE.
    """
    symbol = ticker.strip().upper()
    if symbol.endswith((".NS", ".BO")):
        return symbol
    for suffix in (".BSE", ".NSE"):
        if symbol.endswith(suffix):
            return symbol[: -len(suffix)] + ".NS"
    return f"{symbol}.NS"


class PredictionClient(ServiceClient):
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        list_timeout: float = 5.0,
    ) -> None:
        super().__init__(base_url, timeout)
        self._list_timeout = list_timeout

    async def _call(
        self,
        method: str,
        path: str,
        body: dict | None = None,
        timeout: float | None = None,
    ) -> Any:
        client = await self._http()
        try:
            response = await client.request(
                method,
                self._url(path),
                json=body,
                timeout=timeout if timeout is not None else self._timeout,
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ServiceUnavailable(f"Prediction service call {path} failed: {e}") from e

    async def list_stocks(self) -> list[SupportedStock]:
        """Stocks available for single-stock analysis, sorted by name."""
        data = await self._call("GET", "/api/stocks", timeout=self._list_timeout)
        stocks = [SupportedStock.from_api(r, assume_model=True) for r in data.get("stocks", [])]
        return sorted(stocks, key=lambda s: s.name.casefold())

    async def list_rebalance_stocks(self) -> list[SupportedStock]:
        """Stocks for the rebalancer: those with a trained model first, then by name."""
        data = await self._call("GET", "/stocks/indian", timeout=self._list_timeout)
        stocks = [SupportedStock.from_api(r) for r in data.get("stocks", [])]
        return sorted(stocks, key=lambda s: (not s.has_model, s.name.casefold()))

    async def analyze_stock(
        self,
        symbol: str,
        days: int = 30,
        model_type: str = "auto",
        risk_tolerance: str = "medium",
        timeout: float | None = None,
    ) -> dict:
        body = {
            "symbol": symbol,
            "days": days,
            "model_type": model_type,
            "risk_tolerance": RiskTolerance(risk_tolerance).value,
        }
        return await self._call("POST", "/api/analyze/stock", body, timeout=timeout)

    async def predict_stock(self, symbol: str) -> dict:
        return await self._call("GET", f"/api/stocks/predict/{symbol}")

    async def list_predictions(self) -> list[StockPrediction]:
        data = await self._call("GET", "/api/stocks/predictions")
        return [StockPrediction.from_api(r) for r in data.get("predictions", [])]

    async def rebalance(
        self,
        holdings: Iterable[RebalanceHolding],
        risk_tolerance: str = "medium",
    ) -> RebalanceResult:
        body = {
            "portfolio": [
                {
                    "symbol": h.symbol,
                    "name": h.name,
                    "currentAllocation": float(h.allocation_pct),
                    "weight": float(h.weight),
                }
                for h in holdings
            ],
            "risk_tolerance": RiskTolerance(risk_tolerance).value,
        }
        data = await self._call("POST", "/rebalance/portfolio", body)
        return RebalanceResult.from_api(data)


class RecommendationClient:
    """Buy/sell/hold advice used to annotate the sell flow.

    Never raises: any failure is reported as ``None`` ("recommendation
    unavailable") so it cannot block the surrounding flow.
    """

    def __init__(
        self,
        predictions: PredictionClient,
        timeout: float = 10.0,
        model_type: str = "LSTM",
    ) -> None:
        self._predictions = predictions
        self._timeout = timeout
        self._model_type = model_type

    async def get_recommendation(
        self,
        ticker: str,
        horizon_days: int = 30,
        risk_tolerance: str = "medium",
    ) -> Recommendation | None:
        symbol = normalize_symbol(ticker)
        try:
            data = await self._predictions.analyze_stock(
                symbol,
                days=horizon_days,
                model_type=self._model_type,
                risk_tolerance=risk_tolerance,
                timeout=self._timeout,
            )
            return Recommendation.from_analysis(data)
        except (ServiceUnavailable, ValueError, AttributeError, TypeError) as e:
            logger.warning("Recommendation unavailable for %s: %s", symbol, e)
            return None
