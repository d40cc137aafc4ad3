"""Single-process ledger host.

Plays the role of the peer runtime for development and tests: stamps each
transaction with a time from a clock, runs the contract through the
router, and commits the write set only if the invocation succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from supply_ledger.contract.router import ContractRouter, Response
from supply_ledger.core.clock import IClock, WallClock
from supply_ledger.core.interfaces import IStateStore
from supply_ledger.core.models import TxTimestamp
from supply_ledger.observability.logger import set_tx_id

from .context import TransactionContext

logger = logging.getLogger(__name__)


@dataclass
class TransactionResult:
    """Outcome of one submitted or evaluated transaction."""

    tx_id: str
    function: str
    response: Response
    committed: bool
    write_set_hash: str


class LocalLedger:
    """All-or-nothing transaction host over an ``IStateStore``.

    Args:
        store: Committed world state.
        clock: Source of transaction timestamps.  Defaults to wall time.
        router: Entry-point table.  Defaults to the supply chain contract.
    """

    def __init__(
        self,
        store: IStateStore,
        clock: IClock | None = None,
        router: ContractRouter | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or WallClock()
        self._router = router or ContractRouter.default()
        self._height = 0

    @property
    def store(self) -> IStateStore:
        return self._store

    @property
    def router(self) -> ContractRouter:
        return self._router

    @property
    def height(self) -> int:
        """Number of committed transactions."""
        return self._height

    def submit(
        self,
        function: str,
        *args: str,
        client_identity: str | None = None,
    ) -> TransactionResult:
        """Execute and, if successful, commit a transaction."""
        return self._execute(function, args, client_identity, commit=True)

    def evaluate(
        self,
        function: str,
        *args: str,
        client_identity: str | None = None,
    ) -> TransactionResult:
        """Execute a transaction without committing its writes."""
        return self._execute(function, args, client_identity, commit=False)

    def _execute(
        self,
        function: str,
        args: tuple[str, ...],
        client_identity: str | None,
        *,
        commit: bool,
    ) -> TransactionResult:
        ctx = TransactionContext(
            self._store,
            TxTimestamp.from_datetime(self._clock.now()),
            client_identity=client_identity,
        )
        set_tx_id(ctx.tx_id)
        try:
            response = self._router.invoke(ctx, function, args)
            digest = ctx.write_set_hash()
            committed = False
            if commit and response.ok:
                count = ctx.store.commit()
                self._height += 1
                committed = True
                logger.info(
                    "Committed tx %s (%s): %d write(s)", ctx.tx_id, function, count
                )
            else:
                ctx.store.discard()
        finally:
            set_tx_id("")
        return TransactionResult(
            tx_id=ctx.tx_id,
            function=function,
            response=response,
            committed=committed,
            write_set_hash=digest,
        )
