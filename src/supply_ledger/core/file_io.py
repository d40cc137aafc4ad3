"""Safe file I/O utilities.

Provides an atomic whole-file rewrite with file locking (``fcntl``) and
``fsync`` so a crash mid-write never leaves a truncated state file.
"""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, text: str) -> None:
    """Replace the contents of *path* with *text* atomically.

    * The new content is written to a sibling ``.tmp`` file under
      ``fcntl.LOCK_EX`` and ``fsync``-ed before the rename.
    * ``os.replace`` swaps it in, so readers see either the old or the
      new file, never a partial one.
    * Parent directories are created if missing.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX)
        try:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        finally:
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    os.replace(tmp, path)
    logger.debug("Wrote %d bytes to %s", len(text), path)
