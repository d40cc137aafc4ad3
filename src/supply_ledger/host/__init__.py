"""Local ledger host -- transaction contexts and an all-or-nothing runner."""

from __future__ import annotations

from supply_ledger.host.context import TransactionContext, WriteSetStore
from supply_ledger.host.local_ledger import LocalLedger, TransactionResult

__all__ = [
    "LocalLedger",
    "TransactionContext",
    "TransactionResult",
    "WriteSetStore",
]
