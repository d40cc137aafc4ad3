"""In-memory world state for tests and the local host.

No external dependencies.  Scans snapshot the matching key range when
they start, so writes made while a cursor is open are not observed by it.
"""

from __future__ import annotations

import logging
from typing import Iterator, Mapping

logger = logging.getLogger(__name__)


def in_range(key: str, start_key: str, end_key: str) -> bool:
    """True if *key* falls in ``[start_key, end_key)``; empty bounds are open."""
    if start_key and key < start_key:
        return False
    if end_key and key >= end_key:
        return False
    return True


class MemoryStateIterator:
    """Cursor over a snapshot of ``(key, value)`` pairs."""

    def __init__(self, items: list[tuple[str, bytes]]) -> None:
        self._items = items
        self._pos = 0
        self._closed = False

    def __iter__(self) -> Iterator[tuple[str, bytes]]:
        return self

    def __next__(self) -> tuple[str, bytes]:
        if self._closed or self._pos >= len(self._items):
            raise StopIteration
        item = self._items[self._pos]
        self._pos += 1
        return item

    def close(self) -> None:
        self._closed = True
        self._items = []

    @property
    def closed(self) -> bool:
        return self._closed


class MemoryStateStore:
    """Dict-backed implementation of ``IStateStore``."""

    def __init__(self, initial: Mapping[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})
        self._iterators: list[MemoryStateIterator] = []

    # -- IStateStore --------------------------------------------------------

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def scan(self, start_key: str, end_key: str) -> MemoryStateIterator:
        items = [
            (k, self._data[k])
            for k in sorted(self._data)
            if in_range(k, start_key, end_key)
        ]
        it = MemoryStateIterator(items)
        self._iterators = [i for i in self._iterators if not i.closed]
        self._iterators.append(it)
        return it

    # -- inspection (tests) -------------------------------------------------

    def keys(self) -> list[str]:
        return sorted(self._data)

    def snapshot(self) -> dict[str, bytes]:
        return dict(self._data)

    @property
    def open_iterators(self) -> int:
        """Number of cursors handed out by ``scan`` that were never closed."""
        return sum(1 for it in self._iterators if not it.closed)

    def __len__(self) -> int:
        return len(self._data)
