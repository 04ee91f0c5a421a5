"""Fixed-capacity ring buffer with drop-oldest insertion.

Backs the live buffer between ingestion and presentation as well as the
live series and log ring caches. Storage is a preallocated slot list
indexed by ``head`` (oldest) and ``size``; inserting into a full buffer
evicts exactly one oldest item first, so ``offer`` never blocks.
"""

from __future__ import annotations

import logging
import threading
from typing import Generic, List, Optional, TypeVar

from .buffer_config import RingStats

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Thread-safe bounded FIFO that overwrites its oldest entry.

    Uso:
        buffer = RingBuffer[Packet](capacity=128)

        # Productor (nunca bloquea)
        buffer.offer(packet)

        # Consumidor
        pending = buffer.drain()
    """

    def __init__(self, capacity: int, name: str = "ring"):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._name = name
        self._capacity = capacity
        self._slots: List[Optional[T]] = [None] * capacity
        self._head = 0
        self._size = 0
        self._lock = threading.Lock()
        self._stats = RingStats(capacity=capacity)

    def offer(self, item: T) -> Optional[T]:
        """Insert ``item``, evicting the oldest entry when full.

        Returns:
            The evicted item, or None if nothing was evicted.
        """
        with self._lock:
            evicted: Optional[T] = None
            if self._size == self._capacity:
                evicted = self._slots[self._head]
                self._slots[self._head] = None
                self._head = (self._head + 1) % self._capacity
                self._size -= 1
                self._stats.evicted += 1
                logger.debug("[LIVE] %s full, evicted oldest entry", self._name)

            tail = (self._head + self._size) % self._capacity
            self._slots[tail] = item
            self._size += 1
            self._stats.offered += 1

            return evicted

    def drain(self) -> List[T]:
        """Remove and return all pending items, oldest first."""
        with self._lock:
            items: List[T] = []
            while self._size:
                items.append(self._take_locked())
            return items

    def snapshot(self) -> List[T]:
        """Copy of the current contents, oldest first, without removing."""
        with self._lock:
            return [
                self._slots[(self._head + i) % self._capacity]
                for i in range(self._size)
            ]

    def clear(self) -> int:
        """Limpia el buffer.

        Returns:
            Número de items eliminados
        """
        with self._lock:
            count = self._size
            self._slots = [None] * self._capacity
            self._head = 0
            self._size = 0
            return count

    def _take_locked(self) -> Optional[T]:
        if self._size == 0:
            return None
        item = self._slots[self._head]
        self._slots[self._head] = None
        self._head = (self._head + 1) % self._capacity
        self._size -= 1
        self._stats.taken += 1
        return item

    def __len__(self) -> int:
        with self._lock:
            return self._size

    def get_stats(self) -> dict:
        """Estadísticas del buffer."""
        with self._lock:
            return {
                "name": self._name,
                "offered": self._stats.offered,
                "taken": self._stats.taken,
                "evicted": self._stats.evicted,
                "current_size": self._size,
                "capacity": self._capacity,
                "utilization_pct": self._size / self._capacity * 100,
            }
