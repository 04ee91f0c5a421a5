"""Endpoints de la base de datos de paquetes.

Each operator action leaves a notice in the live view log ring, the same
``[DB]`` / ``[ERROR]`` lines a desktop front-end would show.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.domain.packet import make_test_packet
from ..errors import StoreError
from ..infrastructure.persistence.packet_store import PacketStore
from ..live.live_view import LiveView
from ..schemas import CountOut, DeleteOut, InsertOut, SeriesOut, StoredPacketOut
from .deps import get_live_view, get_store

router = APIRouter(tags=["packets"])
logger = logging.getLogger(__name__)

DEFAULT_READ_LIMIT = 5
DEFAULT_SERIES_LIMIT = 300


def _store_unavailable(view: LiveView, action: str, error: StoreError) -> HTTPException:
    logger.error("[API] %s failed: %s", action, error)
    view.notice(f"{action} failed: {error}", level="ERROR")
    return HTTPException(status_code=503, detail=f"{action} failed: {error}")


@router.get("/api/packets", response_model=List[StoredPacketOut])
def list_packets(
    limit: int = Query(DEFAULT_READ_LIMIT, ge=0, description="0 = all packets"),
    store: PacketStore = Depends(get_store),
    view: LiveView = Depends(get_live_view),
):
    """Packets newest first."""
    try:
        packets = store.list(limit)
    except StoreError as e:
        raise _store_unavailable(view, "Read", e)

    view.notice(f"Retrieved {len(packets)} packets from database", level="DB")
    for p in packets[:3]:
        view.notice(
            f"ID:{p.id} Lat:{p.latitude:.6f} Lon:{p.longitude:.6f} "
            f"Sat:{p.satellites} AccZ:{p.acceleration_z:.2f}",
            level="DB",
        )
    return [StoredPacketOut.from_domain(p) for p in packets]


@router.get("/api/packets/latest", response_model=Optional[StoredPacketOut])
def latest_packet(
    store: PacketStore = Depends(get_store),
    view: LiveView = Depends(get_live_view),
):
    try:
        packet = store.latest()
    except StoreError as e:
        raise _store_unavailable(view, "Latest", e)
    return None if packet is None else StoredPacketOut.from_domain(packet)


@router.get("/api/packets/count", response_model=CountOut)
def count_packets(
    store: PacketStore = Depends(get_store),
    view: LiveView = Depends(get_live_view),
):
    try:
        return CountOut(count=store.count())
    except StoreError as e:
        raise _store_unavailable(view, "Count", e)


@router.get("/api/packets/series", response_model=SeriesOut)
def packet_series(
    field: str = Query("acceleration_z"),
    limit: int = Query(DEFAULT_SERIES_LIMIT, ge=0, description="0 = all packets"),
    store: PacketStore = Depends(get_store),
    view: LiveView = Depends(get_live_view),
):
    """Historical series, oldest first. Also shown by the live view chart."""
    try:
        values = store.series_of(field, limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        raise _store_unavailable(view, "Load", e)

    view.load_history(values)
    view.notice(f"Loaded {len(values)} {field} values from database", level="DB")
    return SeriesOut(field=field, values=values)


@router.post("/api/packets/test", response_model=InsertOut)
def write_test_packet(
    store: PacketStore = Depends(get_store),
    view: LiveView = Depends(get_live_view),
):
    """Insert a synthetic packet near the reference coordinates."""
    packet = make_test_packet()
    try:
        packet_id = store.insert(packet)
    except StoreError as e:
        raise _store_unavailable(view, "Write", e)

    view.notice(f"Test packet written with ID: {packet_id}", level="DB")
    count: Optional[int] = None
    try:
        count = store.count()
        view.notice(f"Total packets in database: {count}", level="DB")
    except StoreError as e:
        logger.warning("[API] Count after test write failed: %s", e)
    return InsertOut(id=packet_id, count=count)


@router.delete("/api/packets", response_model=DeleteOut)
def clear_packets(
    confirm: bool = Query(False, description="Must be true; the delete is irreversible"),
    store: PacketStore = Depends(get_store),
    view: LiveView = Depends(get_live_view),
):
    if not confirm:
        raise HTTPException(status_code=400, detail="refusing to delete all packets without confirm=true")
    try:
        store.delete_all()
    except StoreError as e:
        raise _store_unavailable(view, "Clear", e)

    view.clear_history()
    view.notice("All packets cleared from database", level="DB")
    return DeleteOut(deleted=True)
