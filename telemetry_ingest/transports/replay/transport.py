"""Replay transport: reads telemetry lines from a capture file or stream."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Union

from ..base import LineTransport
from ...errors import TransportClosedError, TransportError

logger = logging.getLogger(__name__)


class StreamLineTransport(LineTransport):
    """Yields lines from a binary stream until EOF.

    EOF raises TransportClosedError so the ingestion loop ends instead
    of polling a finished capture forever.
    """

    def __init__(
        self,
        stream: Optional[BinaryIO] = None,
        path: Optional[Union[str, Path]] = None,
        interval_seconds: float = 0.0,
        encoding: str = "utf-8",
    ):
        if (stream is None) == (path is None):
            raise ValueError("pass exactly one of stream or path")
        self._stream = stream
        self._path = Path(path) if path is not None else None
        self._owns_stream = stream is None
        self._interval = interval_seconds
        self._encoding = encoding
        self._lines = 0

    @classmethod
    def from_path(cls, path: Union[str, Path], interval_seconds: float = 0.0) -> "StreamLineTransport":
        return cls(path=path, interval_seconds=interval_seconds)

    def open(self) -> None:
        if self._stream is not None:
            return
        try:
            self._stream = open(self._path, "rb")
        except OSError as e:
            raise TransportError(f"cannot open capture {self._path}: {e}") from e
        logger.info("[REPLAY] Opened %s", self._path)

    def close(self) -> None:
        if self._stream is not None and self._owns_stream:
            self._stream.close()
            self._stream = None
        logger.info("[REPLAY] Closed after %d lines", self._lines)

    def read_line(self) -> Optional[str]:
        if self._stream is None:
            raise TransportError("stream is not open")
        try:
            raw = self._stream.readline()
        except (OSError, ValueError) as e:
            raise TransportError(f"read error: {e}") from e
        if not raw:
            raise TransportClosedError("end of stream")

        if self._interval > 0:
            time.sleep(self._interval)
        self._lines += 1
        return raw.decode(self._encoding, errors="replace").rstrip("\r\n")

    @property
    def transport_name(self) -> str:
        return "replay"

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "source": str(self._path) if self._path else "stream",
            "lines": self._lines,
        }
