"""Persisted sharing preferences for logshare.

Stores the last chosen time range, minimum level and output format in a small
JSON file so the next share starts from the user's previous choice. Writes go
to a sibling temp file that is renamed over the target, so a crash mid-write
never leaves a truncated settings file behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from logshare.models.options import ExportOptions

logger = logging.getLogger(__name__)


class SharingSettingsStore:
    """JSON-file backed load/save of ExportOptions.

    Args:
        path: Settings file location.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> ExportOptions:
        """Return the saved options, or the defaults if none are stored."""
        data = self._read()
        if not isinstance(data, dict):
            return ExportOptions()
        return ExportOptions.from_dict(data)

    def save(self, options: ExportOptions) -> None:
        """Persist ``options``. Failures are logged; sharing continues regardless."""
        try:
            self._write(options.to_dict())
        except OSError as exc:
            logger.warning("Could not save sharing settings to %s: %s", self.path, exc)

    def _read(self) -> Optional[Any]:
        if not self.path.exists():
            logger.debug("No sharing settings at %s", self.path)
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable sharing settings %s: %s", self.path, exc)
            return None

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=self.path.parent,
            delete=False,
            suffix=".tmp",
        ) as tmp:
            json.dump(data, tmp, indent=2)
            tmp_path = tmp.name
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            os.unlink(tmp_path)
            raise
        logger.debug("Saved sharing settings to %s", self.path)
