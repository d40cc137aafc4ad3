"""Shared fixtures for the supply-ledger test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from supply_ledger.contract import SupplyChainContract
from supply_ledger.core.clock import SimClock
from supply_ledger.core.models import Product, TxTimestamp
from supply_ledger.host import LocalLedger
from supply_ledger.storage import MemoryStateStore

T0 = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class DirectContext:
    """Transaction context that writes straight through to the store.

    Lets contract tests observe their own writes and move time between
    calls without going through the host's commit cycle.
    """

    def __init__(
        self,
        store,
        timestamp: TxTimestamp | None,
        *,
        tx_id: str = "tx-test",
        client_identity: str | None = None,
    ) -> None:
        self._store = store
        self.timestamp = timestamp
        self._tx_id = tx_id
        self._client_identity = client_identity

    @property
    def tx_id(self) -> str:
        return self._tx_id

    @property
    def store(self):
        return self._store

    @property
    def client_identity(self) -> str | None:
        return self._client_identity

    def get_tx_timestamp(self) -> TxTimestamp | None:
        return self.timestamp

    def advance(self, seconds: int) -> None:
        self.timestamp = TxTimestamp(
            seconds=self.timestamp.seconds + seconds, nanos=self.timestamp.nanos
        )


# ---------------------------------------------------------------------------
# Clocks and stores
# ---------------------------------------------------------------------------

@pytest.fixture
def sim_clock() -> SimClock:
    """Return a SimClock starting at 2024-06-01 12:00 UTC."""
    return SimClock(start=T0)


@pytest.fixture
def memory_store() -> MemoryStateStore:
    return MemoryStateStore()


# ---------------------------------------------------------------------------
# Contract wiring
# ---------------------------------------------------------------------------

@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def make_ctx():
    """Factory: ``make_ctx(store, timestamp)`` -> DirectContext."""
    return DirectContext


@pytest.fixture
def direct_ctx(memory_store) -> DirectContext:
    return DirectContext(memory_store, TxTimestamp.from_datetime(T0))


@pytest.fixture
def contract(direct_ctx) -> SupplyChainContract:
    return SupplyChainContract(direct_ctx)


@pytest.fixture
def ledger(memory_store, sim_clock) -> LocalLedger:
    return LocalLedger(memory_store, clock=sim_clock)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_product() -> Product:
    """Return the reference laptop product at T0."""
    return Product(
        id="p1",
        name="Laptop",
        status="Manufactured",
        owner="CompanyA",
        created_at=T0,
        updated_at=T0,
        description="High-end gaming laptop",
        category="Electronics",
    )
