"""World-state codec for product records.

Records are compact JSON with every field present, in model field order.
Encoding is a pure function of the product, so two parties encoding the
same product produce the same bytes.
"""

from __future__ import annotations

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError
from .models import Product

_PRODUCT_LIST = TypeAdapter(list[Product])


def encode_product(product: Product) -> bytes:
    """Serialize a product to its world-state value."""
    try:
        return product.model_dump_json().encode("utf-8")
    except PydanticSerializationError as exc:
        raise EncodeError(f"error encoding product {product.id!r}: {exc}") from exc


def decode_product(raw: bytes, *, key: str = "") -> Product:
    """Parse a world-state value back into a product.

    Raises :class:`DecodeError` for malformed JSON, missing fields, wrong
    field types or a record whose ``created_at`` is after ``updated_at``.
    When *key* is given the record must also carry it as its ``id``.
    """
    try:
        product = Product.model_validate_json(raw)
    except ValidationError as exc:
        reason = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<record>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise DecodeError(key, reason) from exc
    if key and product.id != key:
        raise DecodeError(key, f"record id {product.id!r} does not match its key")
    return product


def encode_product_list(products: list[Product]) -> bytes:
    """Serialize a list of products as a JSON array."""
    try:
        return _PRODUCT_LIST.dump_json(products)
    except PydanticSerializationError as exc:
        raise EncodeError(f"error encoding product list: {exc}") from exc
