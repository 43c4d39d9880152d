from __future__ import annotations

import os
from unittest.mock import patch

from tradedesk.config import AppConfig, load_config

_KEYS = (
    "TRADEDESK_BACKEND_URL",
    "TRADEDESK_PREDICTION_URL",
    "QUOTE_API_URL",
    "QUOTE_API_KEY",
    "TRADEDESK_AUTH_TOKEN",
    "HTTP_TIMEOUT",
    "TICKER_LIST_TIMEOUT",
    "RECOMMENDATION_TIMEOUT",
    "NOTICE_SECONDS",
    "DEFAULT_HORIZON_DAYS",
    "DEFAULT_RISK_TOLERANCE",
    "CORS_ORIGINS",
)


class TestAppConfig:
    def test_frozen(self) -> None:
        cfg = AppConfig(backend_url="http://b", prediction_url="http://p")
        try:
            cfg.backend_url = "other"  # type: ignore[misc]
            assert False, "Should be frozen"
        except AttributeError:
            pass

    def test_field_defaults(self) -> None:
        cfg = AppConfig(backend_url="http://b", prediction_url="http://p")
        assert cfg.http_timeout == 30.0
        assert cfg.ticker_list_timeout == 5.0
        assert cfg.recommendation_timeout == 10.0
        assert cfg.notice_seconds == 3.0
        assert cfg.cors_origins == ()


class TestLoadConfig:
    def test_loads_from_env(self) -> None:
        env = {
            "TRADEDESK_BACKEND_URL": "http://backend:5000/",
            "TRADEDESK_PREDICTION_URL": "http://predict:8000",
            "QUOTE_API_KEY": "av-123",
            "TRADEDESK_AUTH_TOKEN": "tok",
            "HTTP_TIMEOUT": "12.5",
            "RECOMMENDATION_TIMEOUT": "4",
            "NOTICE_SECONDS": "1.5",
            "DEFAULT_HORIZON_DAYS": "7",
            "DEFAULT_RISK_TOLERANCE": "HIGH",
            "CORS_ORIGINS": "http://a.test, http://b.test ,",
        }
        with patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.backend_url == "http://backend:5000"
        assert cfg.prediction_url == "http://predict:8000"
        assert cfg.quote_api_key == "av-123"
        assert cfg.auth_token == "tok"
        assert cfg.http_timeout == 12.5
        assert cfg.recommendation_timeout == 4.0
        assert cfg.notice_seconds == 1.5
        assert cfg.default_horizon_days == 7
        assert cfg.default_risk_tolerance == "high"
        assert cfg.cors_origins == ("http://a.test", "http://b.test")

    def test_defaults(self) -> None:
        clean_env = {k: v for k, v in os.environ.items() if k not in _KEYS}
        with patch.dict(os.environ, clean_env, clear=True):
            cfg = load_config()

        assert cfg.backend_url == "http://localhost:5000"
        assert cfg.prediction_url == "http://localhost:8000"
        assert cfg.quote_api_url == "https://www.alphavantage.co/query"
        assert cfg.quote_api_key == ""
        assert cfg.auth_token == ""
        assert cfg.http_timeout == 30.0
        assert cfg.ticker_list_timeout == 5.0
        assert cfg.default_horizon_days == 30
        assert cfg.default_risk_tolerance == "medium"
        assert cfg.cors_origins == ("http://localhost:3000",)
