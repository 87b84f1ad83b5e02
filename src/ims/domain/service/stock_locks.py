"""Keyed mutual exclusion for stock movements and document transitions.

A movement reads batches, decides what to draw, writes the batches and
appends ledger entries.  Holding the item's lock for that whole sequence
means two movements on the same item can never interleave.  Document
repositories use the same mechanism keyed by document id.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class StockLocks:

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        """Hold the locks for every key, always acquired in sorted order."""
        ordered = sorted(set(keys))
        acquired: list[threading.RLock] = []
        try:
            for key in ordered:
                lock = self._lock_for(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
