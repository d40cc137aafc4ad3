"""Unit tests for SupplyChainContract state transitions."""

from __future__ import annotations

from datetime import timedelta

import pytest

from supply_ledger.contract import SEED_PRODUCTS, SupplyChainContract
from supply_ledger.core.codec import encode_product
from supply_ledger.core.errors import (
    AlreadyExistsError,
    DecodeError,
    InvalidArgumentError,
    NotFoundError,
    StoreUnavailableError,
    TimestampUnavailableError,
)
from supply_ledger.core.models import ProductPatch, TxTimestamp
from supply_ledger.storage import MemoryStateStore


def _create_laptop(contract: SupplyChainContract):
    return contract.create_product(
        "p1", "Laptop", "CompanyA", "High-end gaming laptop", "Electronics"
    )


class _FailingStore:
    """Store whose every call fails like a dropped peer connection."""

    def get(self, key):
        raise ConnectionError("peer gone")

    def put(self, key, value):
        raise OSError("disk full")

    def scan(self, start_key, end_key):
        raise ConnectionError("peer gone")


class _ReadOnlyStore(MemoryStateStore):
    """Readable store whose writes fail."""

    def put(self, key, value):
        raise OSError("disk full")


class _BrokenClockContext:
    tx_id = "tx-broken"
    client_identity = None

    def __init__(self, store):
        self.store = store

    def get_tx_timestamp(self):
        raise RuntimeError("clock service crashed")


# ---------------------------------------------------------------------------
# Timestamp
# ---------------------------------------------------------------------------

class TestCurrentTimestamp:
    def test_uses_context_time(self, contract, t0):
        assert contract.get_current_timestamp() == t0

    def test_drops_sub_second_precision(self, make_ctx, memory_store, t0):
        ts = TxTimestamp(seconds=TxTimestamp.from_datetime(t0).seconds, nanos=750_000_000)
        contract = SupplyChainContract(make_ctx(memory_store, ts))
        assert contract.get_current_timestamp() == t0

    def test_missing_timestamp(self, make_ctx, memory_store):
        contract = SupplyChainContract(make_ctx(memory_store, None))
        with pytest.raises(TimestampUnavailableError, match="not supplied"):
            contract.get_current_timestamp()

    def test_context_failure_is_wrapped(self, memory_store):
        contract = SupplyChainContract(_BrokenClockContext(memory_store))
        with pytest.raises(TimestampUnavailableError, match="clock service crashed"):
            contract.get_current_timestamp()

    def test_out_of_range_seconds(self, make_ctx, memory_store):
        ts = TxTimestamp(seconds=10**15, nanos=0)
        contract = SupplyChainContract(make_ctx(memory_store, ts))
        with pytest.raises(TimestampUnavailableError, match="invalid"):
            contract.get_current_timestamp()


# ---------------------------------------------------------------------------
# Existence / query
# ---------------------------------------------------------------------------

class TestProductExists:
    def test_false_before_true_after_create(self, contract):
        assert contract.product_exists("p1") is False
        _create_laptop(contract)
        assert contract.product_exists("p1") is True

    def test_empty_value_counts_as_absent(self, contract, memory_store):
        memory_store.put("p1", b"")
        assert contract.product_exists("p1") is False

    def test_empty_id_rejected(self, contract):
        with pytest.raises(InvalidArgumentError):
            contract.product_exists("")

    def test_store_failure_is_wrapped(self, make_ctx, t0):
        contract = SupplyChainContract(
            make_ctx(_FailingStore(), TxTimestamp.from_datetime(t0))
        )
        with pytest.raises(StoreUnavailableError, match="peer gone") as exc_info:
            contract.product_exists("p1")
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert exc_info.value.kind == "STORE_UNAVAILABLE"


class TestQueryProduct:
    def test_reference_product(self, contract, t0):
        _create_laptop(contract)
        product = contract.query_product("p1")
        assert product.id == "p1"
        assert product.name == "Laptop"
        assert product.status == "Manufactured"
        assert product.owner == "CompanyA"
        assert product.description == "High-end gaming laptop"
        assert product.category == "Electronics"
        assert product.created_at == product.updated_at == t0

    def test_missing(self, contract):
        with pytest.raises(NotFoundError) as exc_info:
            contract.query_product("ghost")
        assert exc_info.value.product_id == "ghost"
        assert exc_info.value.kind == "NOT_FOUND"

    def test_corrupt_record(self, contract, memory_store):
        memory_store.put("p1", b'{"id": "p1"}')
        with pytest.raises(DecodeError) as exc_info:
            contract.query_product("p1")
        assert exc_info.value.key == "p1"

    def test_record_stored_under_another_key(self, contract, memory_store):
        other = contract.create_product("p2", "Smartphone", "CompanyB", "", "")
        memory_store.put("p1", encode_product(other))
        with pytest.raises(DecodeError, match="does not match") as exc_info:
            contract.query_product("p1")
        assert exc_info.value.key == "p1"

    def test_mismatched_record_is_never_rewritten(self, contract, memory_store):
        other = contract.create_product("p2", "Smartphone", "CompanyB", "", "")
        memory_store.put("p1", encode_product(other))
        before = memory_store.snapshot()
        with pytest.raises(DecodeError):
            contract.update_product("p1", ProductPatch(status="Shipped"))
        with pytest.raises(DecodeError):
            contract.transfer_ownership("p1", "CompanyC")
        assert memory_store.snapshot() == before

    def test_store_failure_is_wrapped(self, make_ctx, t0):
        contract = SupplyChainContract(
            make_ctx(_FailingStore(), TxTimestamp.from_datetime(t0))
        )
        with pytest.raises(StoreUnavailableError, match="failed to read key 'p1'"):
            contract.query_product("p1")

    def test_pre_1000_timestamp_reads_back(self, make_ctx, memory_store):
        ts = TxTimestamp(seconds=-30641990400)
        contract = SupplyChainContract(make_ctx(memory_store, ts))
        created = _create_laptop(contract)
        assert b'"created_at":"0998-12-29T08:00:00Z"' in memory_store.get("p1")
        assert contract.query_product("p1") == created


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreateProduct:
    def test_writes_full_record_under_id(self, contract, memory_store):
        product = _create_laptop(contract)
        assert memory_store.get("p1") == encode_product(product)

    def test_duplicate_rejected_and_original_kept(self, contract, direct_ctx, memory_store):
        _create_laptop(contract)
        before = memory_store.get("p1")
        direct_ctx.advance(60)

        with pytest.raises(AlreadyExistsError, match="p1"):
            contract.create_product("p1", "Other", "CompanyZ", "x", "y")

        assert memory_store.get("p1") == before

    def test_empty_id_rejected(self, contract, memory_store):
        with pytest.raises(InvalidArgumentError):
            contract.create_product("", "Laptop", "CompanyA", "", "")
        assert len(memory_store) == 0

    def test_empty_free_text_allowed(self, contract):
        product = contract.create_product("p1", "", "", "", "")
        assert product.name == ""
        assert product.owner == ""

    def test_timestamp_checked_before_existence(self, make_ctx, memory_store, contract):
        _create_laptop(contract)
        no_clock = SupplyChainContract(make_ctx(memory_store, None))
        with pytest.raises(TimestampUnavailableError):
            no_clock.create_product("p1", "Laptop", "CompanyA", "", "")

    def test_write_failure_is_wrapped(self, make_ctx, t0):
        contract = SupplyChainContract(
            make_ctx(_ReadOnlyStore(), TxTimestamp.from_datetime(t0))
        )
        with pytest.raises(StoreUnavailableError, match="disk full") as exc_info:
            _create_laptop(contract)
        assert isinstance(exc_info.value.__cause__, OSError)


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------

class TestUpdateProduct:
    def test_sparse_patch(self, contract, direct_ctx, t0):
        _create_laptop(contract)
        direct_ctx.advance(30)

        updated = contract.update_product("p1", ProductPatch(status="Shipped"))

        assert updated.status == "Shipped"
        assert updated.owner == "CompanyA"
        assert updated.description == "High-end gaming laptop"
        assert updated.category == "Electronics"
        assert updated.created_at == t0
        assert updated.updated_at == t0 + timedelta(seconds=30)
        assert contract.query_product("p1") == updated

    def test_empty_patch_advances_updated_at_only(self, contract, direct_ctx, t0):
        original = _create_laptop(contract)
        direct_ctx.advance(5)

        updated = contract.update_product("p1", ProductPatch())

        assert updated.updated_at == t0 + timedelta(seconds=5)
        for field in ("name", "status", "owner", "description", "category", "created_at"):
            assert getattr(updated, field) == getattr(original, field)

    def test_all_fields(self, contract):
        _create_laptop(contract)
        updated = contract.update_product(
            "p1",
            ProductPatch(
                status="Delivered",
                owner="Retailer",
                description="Refurbished",
                category="Computers",
            ),
        )
        assert (updated.status, updated.owner, updated.description, updated.category) == (
            "Delivered",
            "Retailer",
            "Refurbished",
            "Computers",
        )
        assert updated.name == "Laptop"

    def test_missing_product_writes_nothing(self, contract, memory_store):
        with pytest.raises(NotFoundError):
            contract.update_product("ghost", ProductPatch(status="Lost"))
        assert len(memory_store) == 0

    def test_empty_owner_rejected(self, contract, memory_store):
        _create_laptop(contract)
        before = memory_store.get("p1")
        with pytest.raises(InvalidArgumentError, match="owner"):
            contract.update_product("p1", ProductPatch(owner=""))
        assert memory_store.get("p1") == before

    def test_backwards_host_clock_does_not_rewind(self, make_ctx, memory_store, t0):
        later = SupplyChainContract(
            make_ctx(memory_store, TxTimestamp.from_datetime(t0 + timedelta(hours=1)))
        )
        _create_laptop(later)
        earlier = SupplyChainContract(make_ctx(memory_store, TxTimestamp.from_datetime(t0)))

        updated = earlier.update_product("p1", ProductPatch(status="Shipped"))

        assert updated.updated_at == t0 + timedelta(hours=1)
        assert updated.created_at <= updated.updated_at


# ---------------------------------------------------------------------------
# Transfer
# ---------------------------------------------------------------------------

class TestTransferOwnership:
    def test_changes_owner_and_time(self, contract, direct_ctx, t0):
        _create_laptop(contract)
        direct_ctx.advance(1)

        updated = contract.transfer_ownership("p1", "CompanyC")

        assert updated.owner == "CompanyC"
        assert updated.updated_at > t0
        assert contract.query_product("p1").owner == "CompanyC"

    def test_same_owner_still_rewrites(self, contract, direct_ctx, t0):
        _create_laptop(contract)
        direct_ctx.advance(10)
        updated = contract.transfer_ownership("p1", "CompanyA")
        assert updated.owner == "CompanyA"
        assert updated.updated_at == t0 + timedelta(seconds=10)

    def test_missing_product(self, contract, memory_store):
        with pytest.raises(NotFoundError):
            contract.transfer_ownership("ghost", "CompanyC")
        assert len(memory_store) == 0

    def test_empty_new_owner_rejected(self, contract, memory_store):
        _create_laptop(contract)
        before = memory_store.get("p1")
        with pytest.raises(InvalidArgumentError, match="new owner"):
            contract.transfer_ownership("p1", "")
        assert memory_store.get("p1") == before


# ---------------------------------------------------------------------------
# Init / list
# ---------------------------------------------------------------------------

class TestInitLedger:
    def test_seeds_examples_with_shared_timestamp(self, contract, t0):
        created = contract.init_ledger()
        assert [p.id for p in created] == [seed[0] for seed in SEED_PRODUCTS]
        assert all(p.created_at == t0 for p in created)
        assert contract.query_product("p2").name == "Smartphone"
        assert contract.query_product("p2").owner == "CompanyB"

    def test_fails_fast_without_rollback(self, contract, memory_store):
        contract.create_product("p2", "Existing", "Someone", "", "")
        with pytest.raises(AlreadyExistsError, match="p2"):
            contract.init_ledger()
        # p1 was written before the failure; the host decides whether to keep it.
        assert contract.product_exists("p1")
        assert contract.query_product("p2").name == "Existing"

    def test_second_run_fails(self, contract):
        contract.init_ledger()
        with pytest.raises(AlreadyExistsError):
            contract.init_ledger()


class TestGetAllProducts:
    def test_empty_ledger(self, contract):
        assert contract.get_all_products().to_list() == []

    def test_returns_exactly_created(self, contract):
        contract.create_product("p2", "Smartphone", "CompanyB", "", "Electronics")
        _create_laptop(contract)
        products = contract.get_all_products().to_list()
        assert sorted(p.id for p in products) == ["p1", "p2"]

    def test_key_order(self, contract):
        for pid in ("c", "a", "b"):
            contract.create_product(pid, pid, "o", "", "")
        assert [p.id for p in contract.get_all_products()] == ["a", "b", "c"]

    def test_scan_failure_is_wrapped(self, make_ctx, t0):
        contract = SupplyChainContract(
            make_ctx(_FailingStore(), TxTimestamp.from_datetime(t0))
        )
        with pytest.raises(StoreUnavailableError, match="failed to scan products"):
            contract.get_all_products().to_list()
