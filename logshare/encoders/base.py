"""BaseEncoder ABC for logshare export codecs.

Every codec implements ``encode(snapshot, predicate, directory)``; callers go
through ``run()``, which adds timing logs. Each codec writes a
single ``logs-<timestamp>.<ext>`` file into the job directory.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

from config.defaults import ARTIFACT_PREFIX, ARTIFACT_TIMESTAMP_FORMAT
from logshare.models.export import EncodedArtifact, Snapshot
from logshare.models.predicate import FilterPredicate
from logshare.utils.date_utils import make_current_date

logger = logging.getLogger(__name__)


class BaseEncoder(ABC):
    """Abstract base class for export codecs.

    Subclasses set ``name``, ``extension`` and ``requires_snapshot``; codecs
    that ask the store for a copy do not need the snapshot reader to run.
    """

    name: str = "BaseEncoder"
    extension: str = ""
    requires_snapshot: bool = True

    def __init__(
        self,
        prefix: str = ARTIFACT_PREFIX,
        timestamp_format: str = ARTIFACT_TIMESTAMP_FORMAT,
    ) -> None:
        self.prefix = prefix
        self.timestamp_format = timestamp_format

    @abstractmethod
    def encode(
        self,
        snapshot: Optional[Snapshot],
        predicate: FilterPredicate,
        directory: Path,
    ) -> EncodedArtifact:
        """Write the artifact into ``directory``.

        Args:
            snapshot: Records to encode (None when ``requires_snapshot`` is False).
            predicate: Filter the snapshot was read with.
            directory: Job-owned temporary directory.

        Returns:
            EncodedArtifact with the written path and optional store info.

        Raises:
            EncodeError: Copy or serialization failure.
            FilesystemError: Write failure.
        """

    def artifact_path(self, directory: Path, now: Optional[datetime] = None) -> Path:
        """Return ``<directory>/<prefix>-<timestamp>.<extension>``."""
        stamp = make_current_date(now, self.timestamp_format)
        return Path(directory) / f"{self.prefix}-{stamp}.{self.extension}"

    def run(
        self,
        snapshot: Optional[Snapshot],
        predicate: FilterPredicate,
        directory: Path,
    ) -> EncodedArtifact:
        """Run encode() and log elapsed time. Errors are logged and re-raised."""
        start = time.monotonic()
        try:
            artifact = self.encode(snapshot, predicate, directory)
        except Exception as exc:
            logger.error(
                "Encoder %s failed after %.2fs: %s",
                self.name,
                time.monotonic() - start,
                exc,
            )
            raise
        logger.info(
            "Encoder %s wrote %s in %.2fs",
            self.name,
            artifact.path.name,
            time.monotonic() - start,
        )
        return artifact
