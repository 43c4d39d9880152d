"""Dependency injection for the FastAPI application."""

from __future__ import annotations

from fastapi import Header

from tradedesk.config import AppConfig
from tradedesk.data.backend_client import BackendClient
from tradedesk.data.prediction_client import PredictionClient, RecommendationClient
from tradedesk.data.quote_client import QuoteBook, QuoteClient
from tradedesk.portfolio.notices import NoticeBoard
from tradedesk.portfolio.store import PositionStore
from tradedesk.portfolio.trader import TradeSubmitter


class AppState:
    """Holds shared application state initialised during lifespan."""

    def __init__(self) -> None:
        self.config: AppConfig | None = None
        self.backend: BackendClient | None = None
        self.quotes: QuoteClient | None = None
        self.predictions: PredictionClient | None = None
        self.recommendations: RecommendationClient | None = None
        # Shared across requests so a slow response never overwrites a newer price
        self.quote_book: QuoteBook = QuoteBook()


# Singleton shared across the app
app_state = AppState()


def get_config() -> AppConfig:
    if app_state.config is None:
        raise RuntimeError("Config not initialised")
    return app_state.config


def get_backend() -> BackendClient:
    if app_state.backend is None:
        raise RuntimeError("BackendClient not initialised")
    return app_state.backend


def get_quotes() -> QuoteClient:
    if app_state.quotes is None:
        raise RuntimeError("QuoteClient not initialised")
    return app_state.quotes


def get_predictions() -> PredictionClient:
    if app_state.predictions is None:
        raise RuntimeError("PredictionClient not initialised")
    return app_state.predictions


def get_recommendations() -> RecommendationClient:
    if app_state.recommendations is None:
        raise RuntimeError("RecommendationClient not initialised")
    return app_state.recommendations


def get_token(auth_token: str | None = Header(default=None, alias="auth-token")) -> str | None:
    """The caller's opaque backend token, passed through untouched."""
    if auth_token:
        return auth_token
    config = app_state.config
    return config.auth_token if config and config.auth_token else None


def build_store(token: str | None) -> PositionStore:
    return PositionStore(get_backend(), get_quotes(), token, book=app_state.quote_book)


def build_submitter(store: PositionStore) -> TradeSubmitter:
    config = app_state.config
    duration = config.notice_seconds if config else 3.0
    return TradeSubmitter(store, NoticeBoard(duration=duration))
