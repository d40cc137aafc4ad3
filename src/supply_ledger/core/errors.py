"""Custom exception hierarchy for the supply ledger contract.

Every error carries a stable ``kind`` code that the entry-point router
copies into the transaction response.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class LedgerError(Exception):
    """Base exception for all ledger contract errors."""

    kind = "LEDGER_ERROR"


# --- Lookup ---
class NotFoundError(LedgerError):
    """Product id is absent from the world state."""

    kind = "NOT_FOUND"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"product with ID {product_id} does not exist")


class AlreadyExistsError(LedgerError):
    """Product id is already occupied."""

    kind = "ALREADY_EXISTS"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"product with ID {product_id} already exists")


# --- Serialization ---
class DecodeError(LedgerError):
    """Stored bytes are not a valid product record."""

    kind = "DECODE_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"error decoding product data at key {key!r}: {reason}")


class EncodeError(LedgerError):
    """Product could not be serialized."""

    kind = "ENCODE_ERROR"


# --- Host collaborators ---
class StoreUnavailableError(LedgerError):
    """World-state read, write or scan failed for a reason other than absence."""

    kind = "STORE_UNAVAILABLE"


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Re-raise any non-ledger failure of a host store call as
    :class:`StoreUnavailableError`, prefixed with *action*.

    Advance cursors with ``next(cursor, None)`` inside the block: a bare
    ``StopIteration`` would be reported as a store failure.
    """
    try:
        yield
    except LedgerError:
        raise
    except Exception as exc:
        raise StoreUnavailableError(f"{action}: {exc}") from exc


class TimestampUnavailableError(LedgerError):
    """Transaction context could not supply a deterministic timestamp."""

    kind = "TIMESTAMP_UNAVAILABLE"


# --- Invocation ---
class InvalidArgumentError(LedgerError):
    """Caller supplied an argument the contract refuses."""

    kind = "INVALID_ARGUMENT"


class UnknownFunctionError(LedgerError):
    """Entry-point name is not registered with the router."""

    kind = "UNKNOWN_FUNCTION"

    def __init__(self, function: str):
        self.function = function
        super().__init__(f"function {function!r} is not defined by this contract")
