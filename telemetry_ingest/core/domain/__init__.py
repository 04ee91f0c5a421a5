"""Domain layer - Modelos de telemetría."""

from .packet import Packet, StoredPacket, make_test_packet

__all__ = ["Packet", "StoredPacket", "make_test_packet"]
