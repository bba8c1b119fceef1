"""Per-identity mutual exclusion for submission writes."""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class IdentityLocks:
    """
    Named locks created on demand and dropped once nobody holds or waits on them.

    ``hold`` takes every requested name in sorted order, so two requests that
    share any identity serialize without deadlocking.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    @contextmanager
    def hold(self, *names: Optional[str]) -> Iterator[None]:
        ordered = sorted({name for name in names if name})
        acquired: List[str] = []
        try:
            for name in ordered:
                entry = self._checkout(name)
                entry.lock.acquire()
                acquired.append(name)
            yield
        finally:
            for name in reversed(acquired):
                self._release(name)

    def _checkout(self, name: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(name)
            if entry is None:
                entry = self._entries[name] = _Entry()
            entry.holders += 1
            return entry

    def _release(self, name: str) -> None:
        with self._guard:
            entry = self._entries[name]
            entry.lock.release()
            entry.holders -= 1
            if entry.holders == 0:
                del self._entries[name]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
