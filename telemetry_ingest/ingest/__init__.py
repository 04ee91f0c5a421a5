"""Ingestion loop and background persistence."""

from .loop import IngestionLoop
from .persist_dispatcher import PersistDispatcher

__all__ = ["IngestionLoop", "PersistDispatcher"]
