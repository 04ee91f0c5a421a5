"""Endpoint de exportación CSV/JSON."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..errors import ExportError, StoreError
from ..exports.exporter import ExportFormat, PacketExporter
from ..live.live_view import LiveView
from ..schemas import ExportOut
from .deps import get_exporter, get_live_view

router = APIRouter(tags=["exports"])
logger = logging.getLogger(__name__)


@router.post("/api/exports/{fmt}", response_model=ExportOut)
def export_packets(
    fmt: ExportFormat,
    limit: int = Query(0, ge=0, description="0 = all packets"),
    exporter: PacketExporter = Depends(get_exporter),
    view: LiveView = Depends(get_live_view),
):
    """Write stored packets (newest first) to a timestamped file."""
    try:
        result = exporter.export(fmt, limit)
    except StoreError as e:
        view.notice(f"Export failed: {e}", level="ERROR")
        raise HTTPException(status_code=503, detail=f"export failed: {e}")
    except ExportError as e:
        view.notice(f"Export failed: {e}", level="ERROR")
        raise HTTPException(status_code=500, detail=str(e))

    view.notice(f"Data saved to: {result.path.name}", level="EXPORT")
    return ExportOut(filename=result.path.name, format=result.format.value, rows=result.rows)
