from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class AppConfig:
    backend_url: str
    prediction_url: str
    quote_api_url: str = "https://www.alphavantage.co/query"
    quote_api_key: str = ""
    auth_token: str = ""
    http_timeout: float = 30.0
    ticker_list_timeout: float = 5.0
    recommendation_timeout: float = 10.0
    notice_seconds: float = 3.0
    default_horizon_days: int = 30
    default_risk_tolerance: str = "medium"
    cors_origins: tuple[str, ...] = field(default_factory=tuple)


def load_config() -> AppConfig:
    """Load application config from environment variables.

    Loads .env file if present in the current directory.
    """
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    origins = os.environ.get("CORS_ORIGINS", "http://localhost:3000")

    return AppConfig(
        backend_url=os.environ.get(
            "TRADEDESK_BACKEND_URL", "http://localhost:5000"
        ).rstrip("/"),
        prediction_url=os.environ.get(
            "TRADEDESK_PREDICTION_URL", "http://localhost:8000"
        ).rstrip("/"),
        quote_api_url=os.environ.get(
            "QUOTE_API_URL", "https://www.alphavantage.co/query"
        ),
        quote_api_key=os.environ.get("QUOTE_API_KEY", ""),
        auth_token=os.environ.get("TRADEDESK_AUTH_TOKEN", ""),
        http_timeout=float(os.environ.get("HTTP_TIMEOUT", "30")),
        ticker_list_timeout=float(os.environ.get("TICKER_LIST_TIMEOUT", "5")),
        recommendation_timeout=float(os.environ.get("RECOMMENDATION_TIMEOUT", "10")),
        notice_seconds=float(os.environ.get("NOTICE_SECONDS", "3")),
        default_horizon_days=int(os.environ.get("DEFAULT_HORIZON_DAYS", "30")),
        default_risk_tolerance=os.environ.get("DEFAULT_RISK_TOLERANCE", "medium").lower(),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
