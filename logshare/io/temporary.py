"""Per-job temporary directories for logshare.

Each export job writes into its own directory. ``remove()`` is idempotent and
thread-safe: the directory is deleted at most once, whichever cleanup path
(error, hand-off completion or supersession) reaches it first.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from config.defaults import TEMP_DIR_PREFIX

logger = logging.getLogger(__name__)


class TemporaryDirectory:
    """A uniquely named directory removed exactly once.

    Args:
        root: Parent directory (system temp dir when None).
        prefix: Directory name prefix.
    """

    def __init__(self, root: Optional[str | Path] = None, prefix: str = TEMP_DIR_PREFIX) -> None:
        if root is not None:
            Path(root).mkdir(parents=True, exist_ok=True)
        self.path = Path(tempfile.mkdtemp(prefix=prefix, dir=root))
        self._lock = threading.Lock()
        self._removed = False
        logger.debug("Created temporary directory %s", self.path)

    @property
    def is_removed(self) -> bool:
        return self._removed

    def remove(self) -> bool:
        """Delete the directory and all its contents.

        Returns:
            True if this call removed the directory, False if it was already removed.
        """
        with self._lock:
            if self._removed:
                return False
            self._removed = True

        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Failed to remove temporary directory %s: %s", self.path, exc)
            return True
        logger.debug("Removed temporary directory %s", self.path)
        return True

    def __enter__(self) -> "TemporaryDirectory":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.remove()

    def __repr__(self) -> str:
        state = "removed" if self._removed else "live"
        return f"TemporaryDirectory({str(self.path)!r}, {state})"
