"""ArtifactHandle — the finished export file and its cleanup contract.

A handle owns the job's temporary directory. The directory is removed exactly
once: when a hand-off to a presenter completes (accepted or cancelled), or
when the coordinator releases the handle because a newer job superseded it.
A handle that is being handed off is owned by the hand-off; releasing it in
that state defers cleanup to the hand-off completion.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from logshare.errors import ArtifactUnavailableError
from logshare.io.temporary import TemporaryDirectory
from logshare.models.options import ExportFormat, ExportOptions
from logshare.models.records import StoreInfo
from logshare.utils.text import format_byte_count

if TYPE_CHECKING:
    from logshare.sharing.presenter import Presenter

logger = logging.getLogger(__name__)


class HandleState(str, Enum):
    AVAILABLE = "available"
    HANDED_OFF = "handedOff"
    RELEASED = "released"


class ArtifactHandle:
    """Finalized export file plus the directory that backs it.

    Args:
        path: Artifact file path (inside ``directory``).
        size: File size in bytes, probed after the write.
        directory: Job-owned temporary directory.
        info: Store metadata (container exports only).
        options: Options the artifact was produced with.
        generation: Job generation token.
    """

    def __init__(
        self,
        path: Path,
        size: int,
        directory: TemporaryDirectory,
        info: Optional[StoreInfo] = None,
        options: Optional[ExportOptions] = None,
        generation: int = 0,
    ) -> None:
        self.path = Path(path)
        self.size = size
        self.info = info
        self.options = options or ExportOptions()
        self.generation = generation
        self._directory = directory
        self._state = HandleState.AVAILABLE
        self._lock = threading.Lock()
        #: Invoked with this handle after a hand-off completes and cleanup ran
        self.on_released: Optional[Callable[["ArtifactHandle"], None]] = None

    @property
    def format(self) -> ExportFormat:
        return self.options.format

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def is_released(self) -> bool:
        return self._state is HandleState.RELEASED

    @property
    def formatted_file_size(self) -> str:
        return format_byte_count(self.size)

    def hand_off(self, presenter: "Presenter") -> None:
        """Present the artifact; cleanup runs when the presenter calls back.

        Raises:
            ArtifactUnavailableError: If the handle was already handed off or released.
        """
        with self._lock:
            if self._state is not HandleState.AVAILABLE:
                raise ArtifactUnavailableError(
                    f"{self.path.name} is no longer available ({self._state.value})"
                )
            self._state = HandleState.HANDED_OFF

        logger.info("Handing off %s (%s)", self.path.name, self.formatted_file_size)
        try:
            presenter.present(self, self._complete_hand_off)
        except Exception:
            self._complete_hand_off(False)
            raise

    def _complete_hand_off(self, completed: bool) -> None:
        with self._lock:
            if self._state is not HandleState.HANDED_OFF:
                return
            self._state = HandleState.RELEASED

        logger.info(
            "Hand-off of %s %s", self.path.name, "completed" if completed else "cancelled"
        )
        self._directory.remove()
        if self.on_released is not None:
            self.on_released(self)

    def release(self) -> bool:
        """Delete the backing directory unless a hand-off currently owns it.

        Returns:
            True if this call removed the directory.
        """
        with self._lock:
            if self._state is not HandleState.AVAILABLE:
                return False
            self._state = HandleState.RELEASED
        logger.debug("Released artifact %s", self.path.name)
        return self._directory.remove()

    def __repr__(self) -> str:
        return (
            f"ArtifactHandle({self.path.name!r}, size={self.size}, "
            f"format={self.format.value}, state={self._state.value})"
        )
