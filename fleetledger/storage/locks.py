"""Mini README: Key-scoped mutual exclusion for write paths.

``KeyedLocks`` hands out one lock per natural key (a vehicle-day, a date, a
settlement month) so writers to the same key serialise while writers to
different keys proceed in parallel. Locks are dropped once nobody holds or
waits for them, keeping the table bounded by the number of in-flight keys.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List


class KeyedLocks:
    """Hand out re-entrant locks keyed by arbitrary hashable values."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.RLock] = {}
        self._users: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""

        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def active_keys(self) -> List[Hashable]:
        """Return keys currently held or awaited."""

        with self._guard:
            return list(self._locks.keys())
