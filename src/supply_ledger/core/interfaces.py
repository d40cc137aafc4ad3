"""Protocol interfaces for the supply ledger.

The contract only talks to the host through these protocols.  Storage
backends and transaction contexts can be swapped (memory/file/redis,
local simulator/real peer) without changing the contract.
"""

from __future__ import annotations

from typing import Iterator, Protocol, runtime_checkable

from .models import TxTimestamp


# ---------------------------------------------------------------------------
# World state
# ---------------------------------------------------------------------------

@runtime_checkable
class IStateIterator(Protocol):
    """Cursor over a key range.  Must be closed on every exit path."""

    def __iter__(self) -> Iterator[tuple[str, bytes]]: ...

    def __next__(self) -> tuple[str, bytes]: ...

    def close(self) -> None: ...


@runtime_checkable
class IStateStore(Protocol):
    """Deterministic key-value world state."""

    def get(self, key: str) -> bytes | None:
        """Return the value for *key*, or ``None`` if absent."""
        ...

    def put(self, key: str, value: bytes) -> None: ...

    def scan(self, start_key: str, end_key: str) -> IStateIterator:
        """Iterate ``[start_key, end_key)`` in ascending key order.

        An empty bound leaves that side of the range open.
        """
        ...


# ---------------------------------------------------------------------------
# Transaction context
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransactionContext(Protocol):
    """Per-transaction view supplied by the host."""

    @property
    def tx_id(self) -> str: ...

    @property
    def store(self) -> IStateStore: ...

    @property
    def client_identity(self) -> str | None: ...

    def get_tx_timestamp(self) -> TxTimestamp | None:
        """Host-stamped transaction time, or ``None`` if unavailable."""
        ...
