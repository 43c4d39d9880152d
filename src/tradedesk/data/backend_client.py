"""Client for the trade-persistence backend.

Every call is gated by the user's opaque token, sent in the ``auth-token``
header. The backend owns positions, balances and all monetary totals.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import httpx

from tradedesk.data.http import ServiceClient, error_message
from tradedesk.errors import BackendUnavailable, TradeRejected, Unauthenticated
from tradedesk.formatting import to_decimal
from tradedesk.models import BOUGHT, BuyIntent, Position, SellIntent, TradeReceipt

logger = logging.getLogger(__name__)


class BackendClient(ServiceClient):
    BALANCE_PATH = "/api/auth/getamount"
    POSITIONS_PATH = "/api/stocks/fetchallstocks"
    BUY_PATH = "/api/stocks/addstock"
    SELL_PATH = "/api/stocks/updatestock/{position_id}"

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        if not token:
            raise Unauthenticated()
        return {"Content-Type": "application/json", "auth-token": token}

    async def _request(
        self,
        method: str,
        path: str,
        token: str | None,
        body: dict | None = None,
    ) -> Any:
        headers = self._headers(token)
        client = await self._http()
        try:
            response = await client.request(
                method,
                self._url(path),
                json=body,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise BackendUnavailable(f"Trade backend unreachable: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise Unauthenticated(error_message(response) or "Please log in to continue")
        if status >= 500:
            raise BackendUnavailable(f"Trade backend returned {status}")
        if status >= 400:
            raise TradeRejected(error_message(response) or f"Trade backend returned {status}")

        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailable("Trade backend returned a non-JSON body") from e

    async def get_balance(self, token: str | None) -> Decimal:
        """Return the user's available cash balance."""
        data = await self._request("GET", self.BALANCE_PATH, token)
        amount = to_decimal((data or {}).get("amount"))
        if amount is None:
            raise BackendUnavailable("Balance missing from backend response")
        return amount

    async def list_positions(self, token: str | None) -> list[Position]:
        """Return held positions. An empty list is a valid, empty portfolio."""
        rows = await self._request("GET", self.POSITIONS_PATH, token)
        if not isinstance(rows, list):
            raise BackendUnavailable("Positions response is not a list")

        positions: list[Position] = []
        for row in rows:
            if row.get("status") != BOUGHT:
                continue
            try:
                positions.append(Position.from_backend(row))
            except ValueError:
                logger.warning("Skipping malformed position row id=%s", row.get("_id"))
        return positions

    async def add_position(self, token: str | None, intent: BuyIntent) -> TradeReceipt:
        """Record a buy and return the position as the backend stored it."""
        data = await self._request("POST", self.BUY_PATH, token, intent.to_payload())
        try:
            position = Position.from_backend(data)
        except (ValueError, AttributeError, TypeError) as e:
            raise BackendUnavailable("Trade backend echoed an unusable position") from e
        logger.info(
            "Bought %s units of %s (position %s)", intent.units, intent.ticker, position.id
        )
        return TradeReceipt(position=position, raw=data)

    async def mark_sold(self, token: str | None, intent: SellIntent) -> dict:
        """Submit a (partial or full) sale; the backend computes the residual quantity."""
        path = self.SELL_PATH.format(position_id=intent.position_id)
        data = await self._request("PUT", path, token, intent.to_payload())
        logger.info("Sold %s units of position %s", intent.units, intent.position_id)
        return data if isinstance(data, dict) else {}
