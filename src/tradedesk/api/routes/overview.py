"""Portfolio overview: holdings, live prices, profit/loss and balance."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from tradedesk.api.deps import build_store, get_token
from tradedesk.api.routes.shared import portfolio_view
from tradedesk.errors import BackendUnavailable

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/overview")
async def get_overview(token: str | None = Depends(get_token)) -> dict:
    """Positions enriched with live quotes.

    Rows whose quote did not resolve show the loading placeholder and are
    left out of the totals. An empty list renders the empty-state message.
    """
    store = build_store(token)
    await store.load_positions()
    try:
        await store.load_balance()
    except BackendUnavailable:
        logger.warning("Balance unavailable for overview")
    await store.refresh_prices()
    return portfolio_view(store)
