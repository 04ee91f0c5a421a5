"""Serial transport for the telemetry device.

Uses pyserial's ``serial_for_url`` so ``SERIAL_PORT`` may be a device
path (``/dev/ttyUSB0``, ``COM12``) or a pyserial URL (``loop://``,
``socket://host:port``). Line settings match the device firmware:
8 data bits, odd parity, 1 stop bit.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import serial
from serial.tools import list_ports

from ..base import LineTransport
from ...errors import TransportError

logger = logging.getLogger(__name__)

SUPPORTED_BAUD_RATES = (115200, 921600, 460800, 9600)
DEFAULT_PORT = "/dev/tty.usbserial-0001"
MAX_PENDING_BYTES = 64 * 1024


@dataclass(frozen=True)
class SerialConfig:
    """Parámetros de la conexión serial."""
    port: str = DEFAULT_PORT
    baud_rate: int = SUPPORTED_BAUD_RATES[0]
    timeout_seconds: float = 0.5
    encoding: str = "utf-8"

    @classmethod
    def from_env(cls) -> "SerialConfig":
        return cls(
            port=os.getenv("SERIAL_PORT", DEFAULT_PORT),
            baud_rate=int(os.getenv("SERIAL_BAUD", str(SUPPORTED_BAUD_RATES[0]))),
            timeout_seconds=float(os.getenv("SERIAL_TIMEOUT_SECONDS", "0.5")),
        )


def list_serial_ports() -> List[str]:
    """Candidate ports as ``"<device> - <description>"`` labels."""
    return [f"{p.device} - {p.description}" for p in list_ports.comports()]


class SerialLineTransport(LineTransport):
    """Line reader over a pyserial port.

    pyserial's ``readline`` returns whatever arrived when the timeout
    expires, so partial lines are kept until their newline shows up.
    """

    def __init__(self, config: Optional[SerialConfig] = None, port: Any = None):
        """
        Args:
            config: Parámetros de conexión
            port: Already-open pyserial object; ``config`` is then only
                used for decoding.
        """
        self._config = config or SerialConfig()
        self._port = port
        self._pending = bytearray()
        self._lines = 0
        self._errors = 0
        self._discarded_bytes = 0

    def open(self) -> None:
        if self._port is not None and self._port.is_open:
            return
        if self._config.baud_rate not in SUPPORTED_BAUD_RATES:
            logger.warning(
                "[SERIAL] Baud rate %d not in %s", self._config.baud_rate, SUPPORTED_BAUD_RATES
            )
        try:
            self._port = serial.serial_for_url(
                self._config.port,
                baudrate=self._config.baud_rate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_ODD,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._config.timeout_seconds,
            )
        except (serial.SerialException, ValueError) as e:
            raise TransportError(f"cannot open port {self._config.port}: {e}") from e
        logger.info("[SERIAL] Opened %s @ %d baud", self._config.port, self._config.baud_rate)

    def close(self) -> None:
        if self._port is not None:
            try:
                self._port.close()
            except serial.SerialException as e:
                logger.warning("[SERIAL] Close error: %s", e)
            logger.info("[SERIAL] Closed %s. %s", self._config.port, self.stats)
        self._port = None
        self._pending.clear()

    def read_line(self) -> Optional[str]:
        if self._port is None:
            raise TransportError("port is not open")

        try:
            chunk = self._port.readline()
        except (serial.SerialException, OSError) as e:
            self._errors += 1
            raise TransportError(f"read error: {e}") from e

        if chunk:
            self._pending.extend(chunk)
        if not self._pending.endswith(b"\n"):
            if len(self._pending) > MAX_PENDING_BYTES:
                self._discarded_bytes += len(self._pending)
                self._pending.clear()
                logger.warning("[SERIAL] No newline in %d bytes, discarding", MAX_PENDING_BYTES)
            return None

        raw = bytes(self._pending)
        self._pending.clear()
        self._lines += 1
        return raw.decode(self._config.encoding, errors="replace").rstrip("\r\n")

    @property
    def transport_name(self) -> str:
        return "serial"

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "port": self._config.port,
            "baud_rate": self._config.baud_rate,
            "open": self._port is not None,
            "lines": self._lines,
            "errors": self._errors,
            "discarded_bytes": self._discarded_bytes,
        }
