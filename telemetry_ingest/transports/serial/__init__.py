from .transport import SerialConfig, SerialLineTransport, list_serial_ports

__all__ = ["SerialConfig", "SerialLineTransport", "list_serial_ports"]
