"""JSON-file world state for the local CLI host.

The whole state lives in one JSON object ``{key: value}``.  Values are
stored as text; bytes that are not valid UTF-8 survive the round trip via
``surrogateescape``.  Nothing touches disk until :meth:`FileStateStore.flush`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from supply_ledger.core.errors import StoreUnavailableError
from supply_ledger.core.file_io import atomic_write_text

from .memory_store import MemoryStateStore

logger = logging.getLogger(__name__)

_ERRORS = "surrogateescape"


class FileStateStore(MemoryStateStore):
    """World state persisted to a JSON file.

    Args:
        path: State file location.  A missing file is an empty state.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self._path = Path(path)
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            logger.info("State file %s not found, starting empty", self._path)
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreUnavailableError(
                f"cannot load state file {self._path}: {exc}"
            ) from exc
        if not isinstance(raw, dict):
            raise StoreUnavailableError(
                f"state file {self._path} does not hold a JSON object"
            )
        for key, value in raw.items():
            self.put(key, str(value).encode("utf-8", _ERRORS))
        logger.info("Loaded %d keys from %s", len(self), self._path)

    def flush(self) -> None:
        """Write the current state to disk atomically."""
        data = {
            key: value.decode("utf-8", _ERRORS)
            for key, value in sorted(self.snapshot().items())
        }
        try:
            atomic_write_text(self._path, json.dumps(data, indent=2) + "\n")
        except OSError as exc:
            raise StoreUnavailableError(
                f"cannot write state file {self._path}: {exc}"
            ) from exc
