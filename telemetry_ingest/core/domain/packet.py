"""Modelo de dominio para paquetes de telemetría."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

# Reference site used by the bench device (Vilnius).
TEST_BASE_LATITUDE = 54.687157
TEST_BASE_LONGITUDE = 25.279652


@dataclass(frozen=True)
class Packet:
    """One decoded telemetry reading, before persistence.

    ``time`` is the device-local clock label and is never validated
    against the wall clock. ``acceleration`` is ordered x, y, z.
    """
    time: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    satellites: int = 0
    acceleration: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def acceleration_x(self) -> float:
        return self.acceleration[0]

    @property
    def acceleration_y(self) -> float:
        return self.acceleration[1]

    @property
    def acceleration_z(self) -> float:
        return self.acceleration[2]

    def to_insert_params(self) -> dict:
        """Convierte a parámetros para el INSERT."""
        return {
            "time": self.time,
            "latitude": float(self.latitude),
            "longitude": float(self.longitude),
            "satellites": int(self.satellites),
            "acceleration_x": float(self.acceleration[0]),
            "acceleration_y": float(self.acceleration[1]),
            "acceleration_z": float(self.acceleration[2]),
        }


@dataclass(frozen=True)
class StoredPacket:
    """A Packet after the store assigned its id and timestamps."""
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

    @property
    def acceleration(self) -> Tuple[float, float, float]:
        return (self.acceleration_x, self.acceleration_y, self.acceleration_z)

    def to_packet(self) -> Packet:
        return Packet(
            time=self.time,
            latitude=self.latitude,
            longitude=self.longitude,
            satellites=self.satellites,
            acceleration=self.acceleration,
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario serializable (timestamps ISO-8601)."""
        return {
            "id": self.id,
            "time": self.time,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "satellites": self.satellites,
            "acceleration_x": self.acceleration_x,
            "acceleration_y": self.acceleration_y,
            "acceleration_z": self.acceleration_z,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def make_test_packet(rng: Optional[random.Random] = None) -> Packet:
    """Genera un paquete de prueba con datos simulados.

    Coordinates jitter around the reference site, 8-12 satellites,
    each acceleration axis in [-1.0, 1.0].
    """
    rng = rng or random.Random()
    return Packet(
        time=time.strftime("%H:%M:%S"),
        latitude=TEST_BASE_LATITUDE + rng.randrange(1000) / 100000.0,
        longitude=TEST_BASE_LONGITUDE + rng.randrange(1000) / 100000.0,
        satellites=8 + rng.randrange(5),
        acceleration=(
            (rng.randrange(200) - 100) / 100.0,
            (rng.randrange(200) - 100) / 100.0,
            (rng.randrange(200) - 100) / 100.0,
        ),
    )
