"""System health endpoints."""

from __future__ import annotations

import time

from fastapi import APIRouter

from tradedesk.api.deps import app_state

router = APIRouter()

_start_time = time.time()


@router.get("/system/health")
def health() -> dict:
    config = app_state.config
    return {
        "status": "ok",
        "uptimeSeconds": int(time.time() - _start_time),
        "backendUrl": config.backend_url if config else None,
        "predictionUrl": config.prediction_url if config else None,
        "quoteApiConfigured": bool(config and config.quote_api_key),
    }
