"""LineTransport - Interface base para las fuentes de líneas de telemetría.

Define el contrato común de la conexión serial y del replay de capturas.
Framing and read timeouts belong to the transport, never to the decoder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class LineTransport(ABC):
    """Byte stream that yields newline-terminated text lines."""

    @abstractmethod
    def open(self) -> None:
        """Abre el transporte.

        Raises:
            TransportError: si no se pudo abrir
        """

    @abstractmethod
    def close(self) -> None:
        """Cierra el transporte y libera recursos."""

    @abstractmethod
    def read_line(self) -> Optional[str]:
        """Read one complete line, without its terminator.

        Returns:
            The line, or None when the read timed out with no complete line.

        Raises:
            TransportError: the read failed; the next call may succeed.
            TransportClosedError: the stream ended and will not recover.
        """

    @property
    @abstractmethod
    def transport_name(self) -> str:
        """Nombre del transporte: serial, replay."""

    @property
    def stats(self) -> Dict[str, Any]:
        """Estadísticas del transporte."""
        return {}

    def __enter__(self) -> "LineTransport":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
