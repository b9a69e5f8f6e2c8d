"""LogStore abstract interface for logshare.

The storage engine is an external collaborator. The export pipeline depends
only on this interface: the active session, an isolated background read
context, and a filtered copy of the persisted archive.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from logshare.models.predicate import FilterPredicate
from logshare.models.records import LogRecord, StoreInfo, TaskRecord


class ReadContext(ABC):
    """Read view over a consistent snapshot of the store.

    Implementations must not observe half-written records appended after the
    context was opened.
    """

    @abstractmethod
    def fetch_messages(self, predicate: FilterPredicate) -> List[LogRecord]:
        """Return matching records in creation order.

        Raises:
            StoreReadError: On query, I/O or decoding failure.
        """

    @abstractmethod
    def fetch_tasks(self, task_ids: Iterable[int]) -> Dict[int, TaskRecord]:
        """Return the tasks with the given ids, keyed by id.

        Raises:
            StoreReadError: On query, I/O or decoding failure.
        """


class LogStore(ABC):
    """Abstract log store consumed by the export pipeline."""

    @abstractmethod
    def current_session_id(self) -> Optional[str]:
        """Identifier of the session currently writing to the store."""

    @abstractmethod
    def background_context(self) -> AbstractContextManager:
        """Open an isolated read context (use as ``with store.background_context() as ctx``)."""

    @abstractmethod
    def copy(self, destination: Path, predicate: Optional[FilterPredicate] = None) -> StoreInfo:
        """Write a portable archive of the store, restricted by ``predicate``.

        Args:
            destination: Archive file path to create.
            predicate: Filter to apply; None or universal copies everything.

        Returns:
            StoreInfo describing the written archive.

        Raises:
            EncodeError: If the copy or packaging fails.
        """

    @abstractmethod
    def info(self) -> StoreInfo:
        """Return metadata for the store itself."""
