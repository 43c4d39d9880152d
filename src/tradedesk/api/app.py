"""FastAPI application factory: the dashboard's JSON views."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradedesk.api.deps import app_state
from tradedesk.config import load_config
from tradedesk.data.backend_client import BackendClient
from tradedesk.data.prediction_client import PredictionClient, RecommendationClient
from tradedesk.data.quote_client import QuoteClient
from tradedesk.errors import (
    BackendUnavailable,
    QuoteUnavailable,
    ServiceUnavailable,
    TradeDeskError,
    TradeRejected,
    Unauthenticated,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/dashboard"

# Most specific first: the first matching class wins
ERROR_STATUS: tuple[tuple[type[TradeDeskError], int], ...] = (
    (Unauthenticated, 401),
    (ValidationFailure, 422),
    (TradeRejected, 400),
    (QuoteUnavailable, 503),
    (BackendUnavailable, 503),
    (ServiceUnavailable, 503),
)

GENERIC_RETRY = "Service temporarily unavailable. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the upstream clients on startup and close them on shutdown."""
    config = load_config()

    backend = BackendClient(config.backend_url, timeout=config.http_timeout)
    quotes = QuoteClient(config.quote_api_url, config.quote_api_key, timeout=config.http_timeout)
    predictions = PredictionClient(
        config.prediction_url,
        timeout=config.http_timeout,
        list_timeout=config.ticker_list_timeout,
    )
    for client in (backend, quotes, predictions):
        await client.start()

    app_state.config = config
    app_state.backend = backend
    app_state.quotes = quotes
    app_state.predictions = predictions
    app_state.recommendations = RecommendationClient(
        predictions, timeout=config.recommendation_timeout
    )
    logger.info("Dashboard API started: backend=%s", config.backend_url)
    yield

    for client in (backend, quotes, predictions):
        await client.close()
    logger.info("Dashboard API shutdown complete")


async def tradedesk_error_handler(request: Request, exc: TradeDeskError) -> JSONResponse:
    status = 500
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            status = code
            break
    detail = str(exc)
    if status == 503:
        logger.warning("%s %s degraded: %s", request.method, request.url.path, exc)
        detail = f"{GENERIC_RETRY} ({exc})"
    return JSONResponse(status_code=status, content={"detail": detail})


def create_app(*, use_lifespan: bool = True) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        use_lifespan: If False, skip the production lifespan (useful for testing
            where deps are injected via app_state directly).
    """
    app = FastAPI(
        title="TradeDesk Dashboard API",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    origins = list(load_config().cors_origins) or ["http://localhost:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TradeDeskError, tradedesk_error_handler)

    from tradedesk.api.routes import advisor, buy, overview, predictions, rebalance, sell, system

    app.include_router(overview.router, prefix=API_PREFIX, tags=["overview"])
    app.include_router(buy.router, prefix=API_PREFIX, tags=["buy"])
    app.include_router(sell.router, prefix=API_PREFIX, tags=["sell"])
    app.include_router(advisor.router, prefix=API_PREFIX, tags=["advisor"])
    app.include_router(predictions.router, prefix=API_PREFIX, tags=["predictions"])
    app.include_router(rebalance.router, prefix=API_PREFIX, tags=["rebalance"])
    app.include_router(system.router, prefix=API_PREFIX, tags=["system"])

    return app
