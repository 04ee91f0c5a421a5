"""Error taxonomy for the telemetry pipeline.

- DecodeError: malformed line, skip and continue.
- TransportError: read failure, retry on next read.
- StoreError: connection/query failure, caller decides.
- ExportError: file I/O or encoding failure, surfaced to the operator.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class TelemetryError(Exception):
    """Base class for every error raised by the pipeline."""


class DecodeErrorKind(str, Enum):
    EMPTY = "empty"
    STRUCTURE = "structure"
    NUMBER = "number"
    ACCELERATION = "acceleration"


class DecodeError(TelemetryError):
    """A line could not be decoded into a Packet."""

    def __init__(self, kind: DecodeErrorKind, message: str, line: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.line = line

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.args[0]}"


class TransportError(TelemetryError):
    """Reading from the device transport failed."""


class TransportClosedError(TransportError):
    """The transport reached a permanent end of stream."""


class StoreError(TelemetryError):
    """A persistence operation failed."""


class ExportError(TelemetryError):
    """Writing an export file failed."""
