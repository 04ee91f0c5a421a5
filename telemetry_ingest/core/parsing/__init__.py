"""Line protocol decoding."""

from .packet_decoder import decode_packet, encode_packet

__all__ = ["decode_packet", "encode_packet"]
