"""Transportes de líneas de telemetría."""

from .base import LineTransport
from .replay.transport import StreamLineTransport
from .serial.transport import SerialConfig, SerialLineTransport, list_serial_ports

__all__ = [
    "LineTransport",
    "SerialConfig",
    "SerialLineTransport",
    "StreamLineTransport",
    "list_serial_ports",
]
