from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .core.domain.packet import StoredPacket


class StoredPacketOut(BaseModel):
    id: int
    time: str
    latitude: float
    longitude: float
    satellites: int
    acceleration_x: float
    acceleration_y: float
    acceleration_z: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, packet: StoredPacket) -> "StoredPacketOut":
        return cls(
            id=packet.id,
            time=packet.time,
            latitude=packet.latitude,
            longitude=packet.longitude,
            satellites=packet.satellites,
            acceleration_x=packet.acceleration_x,
            acceleration_y=packet.acceleration_y,
            acceleration_z=packet.acceleration_z,
            created_at=packet.created_at,
            updated_at=packet.updated_at,
        )


class CountOut(BaseModel):
    count: int


class InsertOut(BaseModel):
    id: int
    count: Optional[int] = None


class DeleteOut(BaseModel):
    deleted: bool


class SeriesOut(BaseModel):
    field: str
    values: List[float] = Field(default_factory=list)


class ExportOut(BaseModel):
    filename: str
    format: str
    rows: int


class LastPacketOut(BaseModel):
    time: str
    latitude: float
    longitude: float
    satellites: int
    acceleration: List[float]


class LiveSnapshotOut(BaseModel):
    last_packet: Optional[LastPacketOut] = None
    series: List[float] = Field(default_factory=list)
    history: List[float] = Field(default_factory=list)
    log_lines: List[str] = Field(default_factory=list)
    pending: int = 0
    refreshes: int = 0
