"""Supply chain ledger contract.

Public API
----------
::

    from supply_ledger.contract import (
        SupplyChainContract,
        ProductListing,
        ContractRouter,
        Response,
    )
"""

from __future__ import annotations

from supply_ledger.contract.listing import ProductListing
from supply_ledger.contract.router import (
    STATUS_ERROR,
    STATUS_OK,
    ContractRouter,
    EntryPoint,
    Response,
)
from supply_ledger.contract.supply_chain import SEED_PRODUCTS, SupplyChainContract

__all__ = [
    # Contract
    "SupplyChainContract",
    "ProductListing",
    "SEED_PRODUCTS",
    # Router
    "ContractRouter",
    "EntryPoint",
    "Response",
    "STATUS_OK",
    "STATUS_ERROR",
]
