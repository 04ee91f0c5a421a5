"""Decoder del protocolo de líneas del dispositivo serial.

Wire format (semicolon-delimited, first field ignored)::

    ignored;Time-<str>;Latitude-<float>;Longitude-<float>;Satellites-<int>;Acceleration:<x>,<y>,<z>[;...]

Each field after the first is tokenized as ``<Tag><sep><value>`` and
dispatched by tag into a single builder. Parsing is permissive on points
the device firmware has never documented as guarantees:

- unrecognized tags (and untagged tokens) are ignored;
- a repeated tag overwrites the earlier value (last one wins);
- a known tag with the other separator (``Latitude:9``, ``Acceleration-1,2,3``)
  is treated as unrecognized. Tags match exactly, so ``AccelerationX:...``
  is not acceleration.

Numbers are stricter than the firmware needs: ``nan`` and ``inf`` are rejected,
and counts must fit a signed 32-bit column.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..domain.packet import Packet
from ...errors import DecodeError, DecodeErrorKind

FIELD_SEPARATOR = ";"
MIN_FIELDS = 6
MAX_COUNT = 2**31 - 1

_TOKEN_RE = re.compile(r"([A-Za-z]+)([-:])(.*)", re.DOTALL)
_INT_RE = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


@dataclass
class _PacketBuilder:
    time: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    satellites: int = 0
    acceleration: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def build(self) -> Packet:
        return Packet(
            time=self.time,
            latitude=self.latitude,
            longitude=self.longitude,
            satellites=self.satellites,
            acceleration=self.acceleration,
        )


def _parse_float(raw: str, tag: str, line: str) -> float:
    if not _FLOAT_RE.fullmatch(raw):
        raise DecodeError(DecodeErrorKind.NUMBER, f"{tag}: not a number {raw!r}", line)
    value = float(raw)
    if not math.isfinite(value):
        raise DecodeError(DecodeErrorKind.NUMBER, f"{tag}: value out of range {raw!r}", line)
    return value


def _parse_count(raw: str, tag: str, line: str) -> int:
    if not _INT_RE.fullmatch(raw):
        raise DecodeError(DecodeErrorKind.NUMBER, f"{tag}: not an integer {raw!r}", line)
    try:
        value = int(raw)
    except ValueError:
        # interpreter cap on integer string length
        raise DecodeError(DecodeErrorKind.NUMBER, f"{tag}: integer too long", line) from None
    if value < 0:
        raise DecodeError(DecodeErrorKind.NUMBER, f"{tag}: negative count {raw!r}", line)
    if value > MAX_COUNT:
        raise DecodeError(DecodeErrorKind.NUMBER, f"{tag}: count out of range", line)
    return value


def _on_time(builder: _PacketBuilder, value: str, line: str) -> None:
    builder.time = value


def _on_latitude(builder: _PacketBuilder, value: str, line: str) -> None:
    builder.latitude = _parse_float(value, "Latitude", line)


def _on_longitude(builder: _PacketBuilder, value: str, line: str) -> None:
    builder.longitude = _parse_float(value, "Longitude", line)


def _on_satellites(builder: _PacketBuilder, value: str, line: str) -> None:
    builder.satellites = _parse_count(value, "Satellites", line)


def _on_acceleration(builder: _PacketBuilder, value: str, line: str) -> None:
    parts = value.split(",")
    if len(parts) != 3:
        raise DecodeError(
            DecodeErrorKind.ACCELERATION,
            f"expected 3 acceleration components, got {len(parts)}",
            line,
        )
    components: List[float] = []
    for raw in parts:
        if not _FLOAT_RE.fullmatch(raw) or not math.isfinite(float(raw)):
            raise DecodeError(
                DecodeErrorKind.ACCELERATION, f"bad acceleration component {raw!r}", line
            )
        components.append(float(raw))
    builder.acceleration = (components[0], components[1], components[2])


_Handler = Callable[[_PacketBuilder, str, str], None]

# tag -> (separator, handler)
_FIELD_HANDLERS: Dict[str, Tuple[str, _Handler]] = {
    "Time": ("-", _on_time),
    "Latitude": ("-", _on_latitude),
    "Longitude": ("-", _on_longitude),
    "Satellites": ("-", _on_satellites),
    "Acceleration": (":", _on_acceleration),
}


def tokenize(field: str) -> Optional[Tuple[str, str, str]]:
    """Split a field into ``(tag, separator, value)``; None if untagged."""
    match = _TOKEN_RE.fullmatch(field)
    if match is None:
        return None
    return match.group(1), match.group(2), match.group(3)


def decode_packet(line: str) -> Packet:
    """Decode one line into a Packet.

    Raises:
        DecodeError: empty line, fewer than 6 fields, a malformed numeric
            field or an acceleration vector without exactly 3 components.
    """
    stripped = line.strip()
    if not stripped:
        raise DecodeError(DecodeErrorKind.EMPTY, "empty line", line)

    fields = stripped.split(FIELD_SEPARATOR)
    if len(fields) < MIN_FIELDS:
        raise DecodeError(
            DecodeErrorKind.STRUCTURE,
            f"not enough fields: {len(fields)} < {MIN_FIELDS}",
            line,
        )

    builder = _PacketBuilder()
    for field in fields[1:]:
        token = tokenize(field)
        if token is None:
            continue
        tag, separator, value = token
        entry = _FIELD_HANDLERS.get(tag)
        if entry is None:
            continue
        expected_separator, handler = entry
        if separator != expected_separator:
            continue
        handler(builder, value, line)

    return builder.build()


def encode_packet(packet: Packet, prefix: str = "$") -> str:
    """Encode a Packet as a canonical wire line (no trailing newline)."""
    ax, ay, az = packet.acceleration
    return FIELD_SEPARATOR.join(
        [
            prefix,
            f"Time-{packet.time}",
            f"Latitude-{packet.latitude!r}",
            f"Longitude-{packet.longitude!r}",
            f"Satellites-{packet.satellites}",
            f"Acceleration:{ax!r},{ay!r},{az!r}",
        ]
    )
