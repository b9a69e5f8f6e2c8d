"""ContainerEncoder — filtered copy of the whole store as a portable archive.

The store itself produces the archive (database plus info block), so the
snapshot reader is not involved and the returned artifact carries StoreInfo.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from config.defaults import CONTAINER_EXTENSION
from logshare.clients.log_store import LogStore
from logshare.encoders.base import BaseEncoder
from logshare.errors import EncodeError, ShareError
from logshare.models.export import EncodedArtifact, Snapshot
from logshare.models.predicate import FilterPredicate

logger = logging.getLogger(__name__)


class ContainerEncoder(BaseEncoder):
    """Writes ``logs-<timestamp>.logarchive`` via ``store.copy``.

    Args:
        store: Store to copy from.
        extension: Container file extension.
    """

    name = "ContainerEncoder"
    extension = CONTAINER_EXTENSION
    requires_snapshot = False

    def __init__(self, store: LogStore, extension: str = CONTAINER_EXTENSION, **kwargs) -> None:
        super().__init__(**kwargs)
        self.store = store
        self.extension = extension

    def encode(
        self,
        snapshot: Optional[Snapshot],
        predicate: FilterPredicate,
        directory: Path,
    ) -> EncodedArtifact:
        path = self.artifact_path(directory)
        try:
            if predicate.is_universal:
                info = self.store.copy(path)
            else:
                info = self.store.copy(path, predicate=predicate)
        except ShareError:
            raise
        except Exception as exc:
            raise EncodeError(f"Failed to create log archive: {exc}") from exc
        return EncodedArtifact(path=path, info=info)
