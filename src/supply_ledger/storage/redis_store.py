"""Redis-backed world state.

Layout under a configurable prefix (default ``ledger:``):
  - ``{prefix}state:{key}``   the value bytes for one world-state key
  - ``{prefix}keys``          sorted set of every key, all with score 0,
                              so ``ZRANGEBYLEX`` gives ordered range scans

Uses the synchronous ``redis`` client: a contract invocation never
suspends, so there is nothing to gain from ``redis.asyncio`` here.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Iterator

import redis

from supply_ledger.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Key builders
# ---------------------------------------------------------------------------

def _value_key(prefix: str, key: str) -> str:
    return f"{prefix}state:{key}"


def _index_key(prefix: str) -> str:
    return f"{prefix}keys"


def _lex_bounds(start_key: str, end_key: str) -> tuple[str, str]:
    """Translate a half-open ``[start, end)`` range to ZRANGEBYLEX bounds."""
    low = f"[{start_key}" if start_key else "-"
    high = f"({end_key}" if end_key else "+"
    return low, high


def _as_str(member: Any) -> str:
    if isinstance(member, bytes):
        return member.decode("utf-8")
    return str(member)


# ---------------------------------------------------------------------------
# Iterator
# ---------------------------------------------------------------------------

class RedisStateIterator:
    """Cursor over a key snapshot, fetching values in ``MGET`` batches."""

    def __init__(
        self,
        store: RedisStateStore,
        keys: list[str],
        *,
        batch_size: int,
    ) -> None:
        self._store = store
        self._keys = keys
        self._batch_size = batch_size
        self._buffer: deque[tuple[str, bytes]] = deque()
        self._pos = 0
        self._closed = False

    def __iter__(self) -> Iterator[tuple[str, bytes]]:
        return self

    def __next__(self) -> tuple[str, bytes]:
        while not self._buffer:
            if self._closed or self._pos >= len(self._keys):
                raise StopIteration
            self._fill()
        return self._buffer.popleft()

    def _fill(self) -> None:
        batch = self._keys[self._pos:self._pos + self._batch_size]
        self._pos += len(batch)
        values = self._store._mget(batch)
        self._buffer = deque(
            (key, value) for key, value in zip(batch, values) if value is not None
        )

    def close(self) -> None:
        self._closed = True
        self._buffer.clear()

    @property
    def closed(self) -> bool:
        return self._closed


# ---------------------------------------------------------------------------
# RedisStateStore
# ---------------------------------------------------------------------------

class RedisStateStore:
    """Redis implementation of ``IStateStore``.

    Args:
        redis_url: Redis connection URL (e.g. ``redis://localhost:6379/0``).
        prefix: Key namespace prefix.  Defaults to ``"ledger:"``.
        scan_batch_size: Values fetched per ``MGET`` during a range scan.
        client: Pre-built client, mainly for tests.  Skips ``connect()``.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        *,
        prefix: str = "ledger:",
        scan_batch_size: int = 100,
        client: redis.Redis | None = None,
    ) -> None:
        self._url = redis_url
        self._prefix = prefix
        self._batch_size = scan_batch_size
        self._redis: redis.Redis | None = client

    # -- lifecycle -----------------------------------------------------------

    def connect(self) -> None:
        """Establish the Redis connection."""
        if self._redis is not None:
            return
        client = redis.Redis.from_url(self._url, decode_responses=False)
        try:
            client.ping()
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"redis unreachable: {exc}") from exc
        self._redis = client
        logger.info("Redis connected: %s", self._url.split("@")[-1])

    def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            self._redis.close()
            self._redis = None
            logger.info("Redis connection closed.")

    @property
    def redis(self) -> redis.Redis:
        """Return the underlying Redis client, raising if not connected."""
        if self._redis is None:
            raise StoreUnavailableError(
                "RedisStateStore not connected. Call connect() first."
            )
        return self._redis

    # -- IStateStore ---------------------------------------------------------

    def get(self, key: str) -> bytes | None:
        try:
            return self.redis.get(_value_key(self._prefix, key))
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"failed to read key {key!r}: {exc}") from exc

    def put(self, key: str, value: bytes) -> None:
        try:
            pipe = self.redis.pipeline(transaction=True)
            pipe.set(_value_key(self._prefix, key), value)
            pipe.zadd(_index_key(self._prefix), {key: 0})
            pipe.execute()
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"failed to write key {key!r}: {exc}") from exc
        logger.debug("Put %d bytes at %s", len(value), key)

    def scan(self, start_key: str, end_key: str) -> RedisStateIterator:
        low, high = _lex_bounds(start_key, end_key)
        try:
            members = self.redis.zrangebylex(_index_key(self._prefix), low, high)
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"failed to scan key range: {exc}") from exc
        keys = [_as_str(m) for m in members]
        return RedisStateIterator(self, keys, batch_size=self._batch_size)

    def _mget(self, keys: list[str]) -> list[bytes | None]:
        try:
            return self.redis.mget([_value_key(self._prefix, k) for k in keys])
        except redis.RedisError as exc:
            raise StoreUnavailableError(f"failed to read key batch: {exc}") from exc
