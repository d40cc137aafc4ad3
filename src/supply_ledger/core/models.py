"""Core domain models for the supply ledger.

``Product`` is the only entity stored on the ledger.  Its JSON form is the
world-state value for the key ``Product.id``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from .clock import format_timestamp, parse_timestamp, to_ledger_time

MANUFACTURED = "Manufactured"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Transaction timestamp
# ---------------------------------------------------------------------------

class TxTimestamp(BaseModel):
    """Host-supplied transaction time, identical for every validating party."""

    model_config = ConfigDict(frozen=True)

    seconds: int
    nanos: int = Field(default=0, ge=0, lt=1_000_000_000)

    @classmethod
    def from_datetime(cls, value: datetime) -> TxTimestamp:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - _EPOCH
        return cls(
            seconds=delta.days * 86_400 + delta.seconds,
            nanos=delta.microseconds * 1000,
        )

    def to_ledger_time(self) -> datetime:
        return to_ledger_time(self.seconds, self.nanos)


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------

class Product(BaseModel):
    """A tracked physical good.

    Field order is the serialized order.  Every field is required, so a
    record missing one fails validation instead of being defaulted.
    """

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str
    status: str
    owner: str
    created_at: datetime
    updated_at: datetime
    description: str
    category: str

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_time(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_timestamp(value)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                raise ValueError("timestamps must be timezone-aware")
            return value.astimezone(timezone.utc)
        return value

    @field_serializer("created_at", "updated_at")
    def _render_time(self, value: datetime) -> str:
        return format_timestamp(value)

    @model_validator(mode="after")
    def _check_clock_order(self) -> Product:
        if self.created_at > self.updated_at:
            raise ValueError(
                f"created_at {format_timestamp(self.created_at)} is after "
                f"updated_at {format_timestamp(self.updated_at)}"
            )
        return self


class ProductPatch(BaseModel):
    """Sparse update to a product's mutable fields.

    ``None`` leaves a field untouched; any other value overwrites it,
    including an empty string.  ``name`` is not patchable through the
    ``UpdateProduct`` entry point and is left out here.
    """

    model_config = ConfigDict(frozen=True)

    status: str | None = None
    owner: str | None = None
    description: str | None = None
    category: str | None = None

    @classmethod
    def from_entry_args(
        cls,
        status: str = "",
        owner: str = "",
        description: str = "",
        category: str = "",
    ) -> ProductPatch:
        """Build a patch from runtime string arguments, where empty means absent."""
        return cls(
            status=status or None,
            owner=owner or None,
            description=description or None,
            category=category or None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)

    def apply(self, product: Product, updated_at: datetime) -> Product:
        """Return *product* with the present fields overwritten.

        ``updated_at`` never moves backwards, so ``created_at <= updated_at``
        holds even when the host stamps an earlier time.
        """
        changes = self.model_dump(exclude_none=True)
        changes["updated_at"] = max(updated_at, product.updated_at)
        return product.model_copy(update=changes)
