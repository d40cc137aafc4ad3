"""Supply chain ledger contract.

One ``SupplyChainContract`` is built per transaction around the host's
transaction context.  It keeps no state of its own: every answer comes
from the world state and the host-stamped transaction time, so every
party re-executing a transaction computes the same writes.
"""

from __future__ import annotations

from datetime import datetime

from supply_ledger.core.codec import decode_product, encode_product
from supply_ledger.core.errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
    TimestampUnavailableError,
    store_errors,
)
from supply_ledger.core.interfaces import ITransactionContext
from supply_ledger.core.models import MANUFACTURED, Product, ProductPatch
from supply_ledger.observability.logger import get_logger

from .listing import ProductListing

logger = get_logger(__name__)

# (id, name, owner, description, category)
SEED_PRODUCTS: tuple[tuple[str, str, str, str, str], ...] = (
    ("p1", "Laptop", "CompanyA", "High-end gaming laptop", "Electronics"),
    ("p2", "Smartphone", "CompanyB", "Latest model smartphone", "Electronics"),
)


def _require_id(product_id: str) -> None:
    if not product_id:
        raise InvalidArgumentError("product ID must be a non-empty string")


class SupplyChainContract:
    """State transitions for the product registry."""

    def __init__(self, ctx: ITransactionContext) -> None:
        self._ctx = ctx

    @property
    def _store(self):
        return self._ctx.store

    # -- helpers ------------------------------------------------------------

    def get_current_timestamp(self) -> datetime:
        """Transaction time as ledger time (UTC, whole seconds).

        Raises:
            TimestampUnavailableError: the context has no usable timestamp.
        """
        try:
            ts = self._ctx.get_tx_timestamp()
        except TimestampUnavailableError:
            raise
        except Exception as exc:
            raise TimestampUnavailableError(
                f"failed to get transaction timestamp: {exc}"
            ) from exc
        if ts is None:
            raise TimestampUnavailableError("transaction timestamp not supplied")
        try:
            return ts.to_ledger_time()
        except (ValueError, OverflowError, OSError) as exc:
            raise TimestampUnavailableError(
                f"invalid transaction timestamp: {exc}"
            ) from exc

    def _read(self, key: str) -> bytes | None:
        with store_errors(f"failed to read key {key!r}"):
            return self._store.get(key)

    def _put_product(self, product: Product) -> None:
        raw = encode_product(product)
        with store_errors(f"failed to write key {product.id!r}"):
            self._store.put(product.id, raw)

    # -- queries ------------------------------------------------------------

    def product_exists(self, product_id: str) -> bool:
        """True if *product_id* holds a value in the world state.

        Raises:
            StoreUnavailableError: the world state could not be read.
        """
        _require_id(product_id)
        return bool(self._read(product_id))

    def query_product(self, product_id: str) -> Product:
        """Read one product.

        Raises:
            NotFoundError: no value stored under *product_id*.
            DecodeError: the stored value is not a product record
                or carries a different id.
        """
        _require_id(product_id)
        raw = self._read(product_id)
        if not raw:
            raise NotFoundError(product_id)
        return decode_product(raw, key=product_id)

    def get_all_products(self) -> ProductListing:
        """Every product in the world state, in key order, decoded lazily."""
        return ProductListing(self._store)

    # -- transitions --------------------------------------------------------

    def init_ledger(self) -> list[Product]:
        """Seed the example products.

        Stops at the first failure.  Products already written by this call
        stay in the write set; discarding them is the host's job.
        """
        timestamp = self.get_current_timestamp()
        created = []
        for product_id, name, owner, description, category in SEED_PRODUCTS:
            created.append(
                self._create(product_id, name, owner, description, category, timestamp)
            )
        logger.info("ledger_initialized", products=[p.id for p in created])
        return created

    def create_product(
        self,
        product_id: str,
        name: str,
        owner: str,
        description: str,
        category: str,
    ) -> Product:
        """Register a new product with status ``Manufactured``.

        Raises:
            AlreadyExistsError: *product_id* is already taken.
        """
        timestamp = self.get_current_timestamp()
        return self._create(product_id, name, owner, description, category, timestamp)

    def _create(
        self,
        product_id: str,
        name: str,
        owner: str,
        description: str,
        category: str,
        timestamp: datetime,
    ) -> Product:
        if self.product_exists(product_id):
            raise AlreadyExistsError(product_id)
        product = Product(
            id=product_id,
            name=name,
            status=MANUFACTURED,
            owner=owner,
            created_at=timestamp,
            updated_at=timestamp,
            description=description,
            category=category,
        )
        self._put_product(product)
        logger.info("product_created", product_id=product_id, owner=owner)
        return product

    def update_product(self, product_id: str, patch: ProductPatch) -> Product:
        """Apply a sparse patch and refresh ``updated_at``.

        ``updated_at`` advances even when the patch is empty.

        Raises:
            NotFoundError: *product_id* does not exist.
            InvalidArgumentError: the patch sets ``owner`` to an empty string.
        """
        if patch.owner is not None and not patch.owner:
            raise InvalidArgumentError("owner cannot be set to an empty string")
        product = self.query_product(product_id)
        timestamp = self.get_current_timestamp()
        updated = patch.apply(product, timestamp)
        self._put_product(updated)
        logger.info(
            "product_updated",
            product_id=product_id,
            fields=sorted(patch.model_dump(exclude_none=True)),
        )
        return updated

    def transfer_ownership(self, product_id: str, new_owner: str) -> Product:
        """Hand the product to *new_owner*.

        The owner is overwritten even when it is unchanged.

        Raises:
            InvalidArgumentError: *new_owner* is empty.
            NotFoundError: *product_id* does not exist.
        """
        if not new_owner:
            raise InvalidArgumentError("new owner must be a non-empty string")
        product = self.query_product(product_id)
        previous_owner = product.owner
        timestamp = self.get_current_timestamp()
        updated = ProductPatch(owner=new_owner).apply(product, timestamp)
        self._put_product(updated)
        logger.info(
            "ownership_transferred",
            product_id=product_id,
            from_owner=previous_owner,
            to_owner=new_owner,
        )
        return updated
