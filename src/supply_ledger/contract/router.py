"""Entry-point router: ``(function, args)`` in, ``Response`` out.

This is the seam between a host runtime, which only knows function names
and string arguments, and the typed ``SupplyChainContract`` API.  Contract
errors become error responses; anything else propagates to the host.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Callable, Sequence

from pydantic import BaseModel

from supply_ledger.core.codec import encode_product, encode_product_list
from supply_ledger.core.errors import (
    InvalidArgumentError,
    LedgerError,
    UnknownFunctionError,
)
from supply_ledger.core.interfaces import ITransactionContext
from supply_ledger.core.models import ProductPatch
from supply_ledger.observability.logger import get_logger

from .supply_chain import SupplyChainContract

logger = get_logger(__name__)

STATUS_OK = 200
STATUS_ERROR = 500


class Response(BaseModel):
    """Result of one entry-point invocation."""

    status: int = STATUS_OK
    message: str = ""
    payload: bytes = b""
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def payload_json(self):
        """Decode the JSON payload (``None`` for an empty payload)."""
        if not self.payload:
            return None
        return json.loads(self.payload)


@dataclass(frozen=True)
class EntryPoint:
    name: str
    params: tuple[str, ...]
    handler: Callable[..., bytes]
    submits: bool = True
    doc: str = ""


# ---------------------------------------------------------------------------
# Handlers: typed contract call -> payload bytes
# ---------------------------------------------------------------------------

def _init_ledger(contract: SupplyChainContract) -> bytes:
    contract.init_ledger()
    return b""


def _create_product(
    contract: SupplyChainContract,
    product_id: str,
    name: str,
    owner: str,
    description: str,
    category: str,
) -> bytes:
    contract.create_product(product_id, name, owner, description, category)
    return b""


def _update_product(
    contract: SupplyChainContract,
    product_id: str,
    status: str,
    owner: str,
    description: str,
    category: str,
) -> bytes:
    patch = ProductPatch.from_entry_args(status, owner, description, category)
    contract.update_product(product_id, patch)
    return b""


def _transfer_ownership(
    contract: SupplyChainContract, product_id: str, new_owner: str
) -> bytes:
    contract.transfer_ownership(product_id, new_owner)
    return b""


def _query_product(contract: SupplyChainContract, product_id: str) -> bytes:
    return encode_product(contract.query_product(product_id))


def _product_exists(contract: SupplyChainContract, product_id: str) -> bytes:
    return json.dumps(contract.product_exists(product_id)).encode()


def _get_all_products(contract: SupplyChainContract) -> bytes:
    return encode_product_list(contract.get_all_products().to_list())


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

@dataclass
class ContractRouter:
    """Dispatch table for the contract's public entry points."""

    entry_points: dict[str, EntryPoint] = field(default_factory=dict)

    @classmethod
    def default(cls) -> ContractRouter:
        router = cls()
        router.register(EntryPoint(
            "InitLedger", (), _init_ledger,
            doc="Seed the ledger with example products.",
        ))
        router.register(EntryPoint(
            "CreateProduct",
            ("id", "name", "owner", "description", "category"),
            _create_product,
            doc="Register a new product.",
        ))
        router.register(EntryPoint(
            "UpdateProduct",
            ("id", "status", "owner", "description", "category"),
            _update_product,
            doc="Overwrite the non-empty fields of a product.",
        ))
        router.register(EntryPoint(
            "TransferOwnership", ("id", "newOwner"), _transfer_ownership,
            doc="Change the owner of a product.",
        ))
        router.register(EntryPoint(
            "QueryProduct", ("id",), _query_product, submits=False,
            doc="Read one product.",
        ))
        router.register(EntryPoint(
            "ProductExists", ("id",), _product_exists, submits=False,
            doc="Check whether a product id is taken.",
        ))
        router.register(EntryPoint(
            "GetAllProducts", (), _get_all_products, submits=False,
            doc="List every product.",
        ))
        return router

    def register(self, entry_point: EntryPoint) -> None:
        self.entry_points[entry_point.name] = entry_point

    def describe(self) -> list[dict[str, object]]:
        """Metadata for every registered entry point, sorted by name."""
        return [
            {
                "name": ep.name,
                "params": list(ep.params),
                "submits": ep.submits,
                "doc": ep.doc,
            }
            for ep in sorted(self.entry_points.values(), key=lambda e: e.name)
        ]

    def invoke(
        self,
        ctx: ITransactionContext,
        function: str,
        args: Sequence[str] = (),
    ) -> Response:
        """Run one entry point against *ctx*.

        Every :class:`LedgerError` becomes a ``500`` response carrying the
        error's ``kind``.
        """
        try:
            entry_point = self._resolve(function, args)
            payload = entry_point.handler(SupplyChainContract(ctx), *args)
        except LedgerError as exc:
            logger.warning(
                "invocation_failed",
                function=function,
                error_kind=exc.kind,
                error=str(exc),
            )
            return Response(
                status=STATUS_ERROR, message=str(exc), error_kind=exc.kind
            )
        logger.debug("invocation_succeeded", function=function)
        return Response(status=STATUS_OK, payload=payload)

    def _resolve(self, function: str, args: Sequence[str]) -> EntryPoint:
        entry_point = self.entry_points.get(function)
        if entry_point is None:
            raise UnknownFunctionError(function)
        if len(args) != len(entry_point.params):
            raise InvalidArgumentError(
                f"{function} expects {len(entry_point.params)} argument(s) "
                f"({', '.join(entry_point.params) or 'none'}), got {len(args)}"
            )
        for arg in args:
            if not isinstance(arg, str):
                raise InvalidArgumentError(
                    f"{function} arguments must be strings, got {type(arg).__name__}"
                )
        return entry_point
