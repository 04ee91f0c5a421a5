"""Live view and ingestion diagnostics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..live.live_view import LiveView
from ..schemas import LiveSnapshotOut
from .deps import get_live_view

router = APIRouter(tags=["live"])


@router.get("/api/live", response_model=LiveSnapshotOut)
def live_snapshot(view: LiveView = Depends(get_live_view)):
    """Drain pending packets, then return what a front-end would draw."""
    view.refresh()
    return LiveSnapshotOut(**view.snapshot())


@router.post("/api/live/clear", response_model=LiveSnapshotOut)
def clear_live_view(view: LiveView = Depends(get_live_view)):
    """Clear series and log. The database is untouched."""
    view.clear()
    return LiveSnapshotOut(**view.snapshot())


@router.get("/api/ingestion/diagnostics")
def ingestion_diagnostics(request: Request):
    """Loop counters, persist backlog and live buffer occupancy."""
    state = request.app.state
    loop = getattr(state, "ingest_loop", None)
    dispatcher = getattr(state, "dispatcher", None)
    live_buffer = getattr(state, "live_buffer", None)
    return {
        "ingest": None if loop is None else {"running": loop.is_running, **loop.stats.to_dict()},
        "persist": None if dispatcher is None else dispatcher.metrics,
        "live_buffer": None if live_buffer is None else live_buffer.get_stats(),
    }
