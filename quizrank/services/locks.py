"""In-process mutual exclusion per leaderboard partition."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator


class PartitionLocks:
    """Registry handing out one lock per partition key.

    Locks are created on first use and kept for the process lifetime; the
    number of partitions is bounded by games times period-kinds.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def get(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self.get(key):
            yield

    def __len__(self) -> int:
        return len(self._locks)


__all__ = ["PartitionLocks"]
