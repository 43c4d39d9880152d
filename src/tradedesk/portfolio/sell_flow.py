"""The sell workflow as an explicit state machine.

    IDLE -> MODAL_OPEN -> SUBMITTING -> IDLE          (success, refetched)
                                     -> MODAL_CLOSED  (failure, error kept)

While the modal is open the recommendation fetch runs as its own task.
Confirming never waits for it.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

from tradedesk.data.prediction_client import RecommendationClient
from tradedesk.errors import TradeDeskError, ValidationFailure
from tradedesk.models import Position, Recommendation, RecommendationAction, SellReport
from tradedesk.portfolio.trader import TradeSubmitter

logger = logging.getLogger(__name__)


class SellState(Enum):
    IDLE = "idle"
    MODAL_OPEN = "modal_open"
    SUBMITTING = "submitting"
    MODAL_CLOSED = "modal_closed"


def selling_advice(recommendation: Recommendation | None) -> str:
    if recommendation is None:
        return "No recommendation available."
    if recommendation.action is RecommendationAction.SELL:
        return "Our analysis suggests this is a good time to sell this stock."
    if recommendation.action is RecommendationAction.BUY:
        return "Our analysis suggests this stock may continue to rise. Consider holding."
    if recommendation.action is RecommendationAction.HOLD:
        return "Our analysis suggests holding this stock for now."
    return recommendation.reason or "No specific recommendation available."


class SellSession:
    def __init__(
        self,
        submitter: TradeSubmitter,
        recommendations: RecommendationClient | None = None,
        horizon_days: int = 30,
        risk_tolerance: str = "medium",
    ) -> None:
        self._submitter = submitter
        self._recommendations = recommendations
        self._horizon_days = horizon_days
        self._risk_tolerance = risk_tolerance
        self._rec_task: asyncio.Task | None = None

        self.state = SellState.IDLE
        self.position: Position | None = None
        self.units: Any = None
        self.recommendation: Recommendation | None = None
        self.error: str = ""
        self.report: SellReport | None = None

    def open(self, position: Position) -> None:
        """Open the modal for ``position``; must be called inside a running loop."""
        if self.state in (SellState.MODAL_OPEN, SellState.SUBMITTING):
            raise RuntimeError(f"Cannot open sell modal while {self.state.value}")
        self.position = position
        self.units = position.quantity
        self.recommendation = None
        self.error = ""
        self.report = None
        if self._recommendations is not None:
            self._rec_task = asyncio.create_task(self._fetch_recommendation(position.ticker))
        self.state = SellState.MODAL_OPEN

    async def _fetch_recommendation(self, ticker: str) -> None:
        rec = await self._recommendations.get_recommendation(  # type: ignore[union-attr]
            ticker, self._horizon_days, self._risk_tolerance
        )
        # Only annotate the modal it was requested for
        if self.position is not None and self.position.ticker == ticker:
            self.recommendation = rec

    @property
    def recommendation_loading(self) -> bool:
        return self._rec_task is not None and not self._rec_task.done()

    @property
    def advice(self) -> str:
        return selling_advice(self.recommendation)

    def set_units(self, units: Any) -> None:
        if self.state is not SellState.MODAL_OPEN:
            raise RuntimeError("Sell modal is not open")
        self.units = units

    async def wait_for_recommendation(self, timeout: float | None = None) -> Recommendation | None:
        """Optionally let the advisory fetch finish (bounded); never required to sell."""
        if self._rec_task is None:
            return self.recommendation
        try:
            await asyncio.wait_for(asyncio.shield(self._rec_task), timeout)
        except asyncio.TimeoutError:
            logger.debug("Recommendation still loading after %ss", timeout)
        return self.recommendation

    async def confirm(self) -> SellReport | None:
        """Submit the sale with the current unit selection.

        Validation failures keep the modal open and propagate. Any other
        failure closes the modal and is kept in ``error``.
        """
        if self.state is not SellState.MODAL_OPEN or self.position is None:
            raise RuntimeError("Sell modal is not open")

        self._submitter.validate_sell(self.position, self.units)

        self.state = SellState.SUBMITTING
        try:
            report = await self._submitter.sell(self.position, self.units)
        except ValidationFailure:
            self.state = SellState.MODAL_OPEN
            raise
        except TradeDeskError as e:
            logger.warning("Sale of position %s failed: %s", self.position.id, e)
            self.error = str(e) or "Error selling stock. Please try again."
            self._finish(SellState.MODAL_CLOSED)
            return None

        self.report = report
        self._finish(SellState.IDLE)
        return report

    def cancel(self) -> None:
        self._finish(SellState.IDLE)

    def _finish(self, state: SellState) -> None:
        if self._rec_task is not None and not self._rec_task.done():
            self._rec_task.cancel()
        self._rec_task = None
        self.state = state
