"""Transaction ID and digest factories.

ID Categories
-------------
1. Transaction IDs: UUID v4 strings assigned by the host per submission.
2. Entity keys: caller-chosen product ids, used verbatim as store keys.
3. Content digests: SHA256 over canonical bytes (write sets, records).
"""

from __future__ import annotations

import hashlib
import uuid
from typing import Iterable


def new_tx_id() -> str:
    """Generate a new UUID v4 transaction id."""
    return str(uuid.uuid4())


def write_set_digest(writes: Iterable[tuple[str, bytes]], *, length: int = 64) -> str:
    """Deterministic SHA256 digest over an ordered sequence of key/value writes.

    Key and value lengths are folded in so that ``("ab", b"c")`` and
    ``("a", b"bc")`` hash differently.

    Parameters
    ----------
    writes:
        ``(key, value)`` pairs in the order they will be committed.
    length:
        Number of hex characters to return (default: the full digest).
    """
    h = hashlib.sha256()
    for key, value in writes:
        encoded = key.encode("utf-8")
        h.update(len(encoded).to_bytes(8, "big"))
        h.update(encoded)
        h.update(len(value).to_bytes(8, "big"))
        h.update(value)
    return h.hexdigest()[:length]
