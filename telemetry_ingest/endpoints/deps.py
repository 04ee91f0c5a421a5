"""Dependencies resolved from ``app.state`` (set by ``create_app``)."""

from __future__ import annotations

from fastapi import HTTPException, Request

from ..exports.exporter import PacketExporter
from ..infrastructure.persistence.packet_store import PacketStore
from ..live.live_view import LiveView


def get_store(request: Request) -> PacketStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="database not connected")
    return store


def get_exporter(request: Request) -> PacketExporter:
    exporter = getattr(request.app.state, "exporter", None)
    if exporter is None:
        raise HTTPException(status_code=503, detail="database not connected")
    return exporter


def get_live_view(request: Request) -> LiveView:
    return request.app.state.live_view
