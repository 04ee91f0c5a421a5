"""Health, readiness and metrics endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from sqlalchemy import text

from ..metrics import render_latest

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health")
def health():
    """Liveness probe: always returns ok if process is running."""
    return {"status": "ok"}


@router.get("/ready")
def ready(request: Request):
    """Readiness probe: checks DB connectivity."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="not ready")
    try:
        with store.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ready"}
    except Exception:
        logger.exception("[API] Readiness check failed")
        raise HTTPException(status_code=503, detail="not ready")


@router.get("/metrics")
def metrics():
    """Prometheus exposition of the ingestion counters."""
    payload, content_type = render_latest()
    return Response(content=payload, media_type=content_type)
