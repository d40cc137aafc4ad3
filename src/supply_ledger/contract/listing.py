"""Lazy product listing over a world-state range scan."""

from __future__ import annotations

from typing import Iterator

from supply_ledger.core.codec import decode_product
from supply_ledger.core.errors import store_errors
from supply_ledger.core.interfaces import IStateStore
from supply_ledger.core.models import Product


class ProductListing:
    """Finite, lazily decoded sequence of products.

    Each ``iter()`` opens a fresh scan, so the listing can be restarted from
    the first key.  A single pass sees only the keys present when its scan
    opened.  The cursor is closed when the pass is exhausted, when a record
    fails to decode (the :class:`DecodeError` aborts the pass), or when the
    caller closes the generator early.
    """

    def __init__(
        self,
        store: IStateStore,
        start_key: str = "",
        end_key: str = "",
    ) -> None:
        self._store = store
        self._start_key = start_key
        self._end_key = end_key

    def __iter__(self) -> Iterator[Product]:
        with store_errors("failed to scan products"):
            cursor = self._store.scan(self._start_key, self._end_key)
        try:
            while True:
                with store_errors("failed to read next product"):
                    entry = next(cursor, None)
                if entry is None:
                    return
                key, raw = entry
                yield decode_product(raw, key=key)
        finally:
            cursor.close()

    def to_list(self) -> list[Product]:
        return list(self)
