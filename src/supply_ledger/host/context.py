"""Transaction context for the local host.

Reads and scans go to committed state; writes are staged in a write set
and only reach the backing store on :meth:`WriteSetStore.commit`.  A
transaction therefore does not see its own writes, matching how a
validating peer simulates a proposal.
"""

from __future__ import annotations

import logging

from supply_ledger.core.ids import new_tx_id, write_set_digest
from supply_ledger.core.interfaces import IStateIterator, IStateStore
from supply_ledger.core.models import TxTimestamp

logger = logging.getLogger(__name__)


class WriteSetStore:
    """Staging view over a committed ``IStateStore``."""

    def __init__(self, committed: IStateStore) -> None:
        self._committed = committed
        self._writes: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._committed.get(key)

    def put(self, key: str, value: bytes) -> None:
        self._writes[key] = bytes(value)

    def scan(self, start_key: str, end_key: str) -> IStateIterator:
        return self._committed.scan(start_key, end_key)

    @property
    def writes(self) -> list[tuple[str, bytes]]:
        """Staged writes in key order (the order they are committed in)."""
        return sorted(self._writes.items())

    def commit(self) -> int:
        """Apply the staged writes to the committed store; returns the count."""
        writes = self.writes
        for key, value in writes:
            self._committed.put(key, value)
        self._writes.clear()
        return len(writes)

    def discard(self) -> None:
        self._writes.clear()


class TransactionContext:
    """``ITransactionContext`` backed by a :class:`WriteSetStore`.

    Args:
        committed: Committed world state.
        timestamp: Host-stamped transaction time; ``None`` simulates a host
            that cannot supply one.
        tx_id: Transaction id.  Generated when omitted.
        client_identity: Caller identity, carried for access-control layers.
    """

    def __init__(
        self,
        committed: IStateStore,
        timestamp: TxTimestamp | None,
        *,
        tx_id: str | None = None,
        client_identity: str | None = None,
    ) -> None:
        self._store = WriteSetStore(committed)
        self._timestamp = timestamp
        self._tx_id = tx_id or new_tx_id()
        self._client_identity = client_identity

    @property
    def tx_id(self) -> str:
        return self._tx_id

    @property
    def store(self) -> WriteSetStore:
        return self._store

    @property
    def client_identity(self) -> str | None:
        return self._client_identity

    def get_tx_timestamp(self) -> TxTimestamp | None:
        return self._timestamp

    def write_set_hash(self) -> str:
        """Digest of the staged writes, equal across identical executions."""
        return write_set_digest(self._store.writes)
