"""Hand-off presenters for logshare artifacts.

A presenter receives an ArtifactHandle and a completion callback. It must call
``completion(True)`` when the hand-off finished or ``completion(False)`` when
the user cancelled; either way the handle then removes its temporary files.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, runtime_checkable

from logshare.errors import FilesystemError

if TYPE_CHECKING:
    from logshare.sharing.artifact import ArtifactHandle

logger = logging.getLogger(__name__)

Completion = Callable[[bool], None]


@runtime_checkable
class Presenter(Protocol):
    """Hand-off capability (share sheet, direct platform callback, save dialog)."""

    def present(self, handle: "ArtifactHandle", completion: Completion) -> None:
        ...


class CallbackPresenter:
    """Passes the handle straight to a callback.

    The callback returning ``False`` counts as a cancelled hand-off; any other
    return value counts as completed.
    """

    def __init__(self, callback: Callable[["ArtifactHandle"], Optional[bool]]) -> None:
        self.callback = callback

    def present(self, handle: "ArtifactHandle", completion: Completion) -> None:
        accepted = self.callback(handle)
        completion(accepted is not False)


class SaveAsPresenter:
    """Copies the artifact into a destination directory before cleanup.

    Args:
        destination: Directory receiving the copy (created if missing).
        overwrite: Replace an existing file of the same name.
    """

    def __init__(self, destination: str | Path, overwrite: bool = False) -> None:
        self.destination = Path(destination)
        self.overwrite = overwrite
        self.saved_paths: List[Path] = []

    def present(self, handle: "ArtifactHandle", completion: Completion) -> None:
        target = self.destination / handle.path.name
        if target.exists() and not self.overwrite:
            logger.warning("Not overwriting existing file %s", target)
            completion(False)
            return
        try:
            self.destination.mkdir(parents=True, exist_ok=True)
            shutil.copy2(handle.path, target)
        except OSError as exc:
            logger.error("Saving %s to %s failed: %s", handle.path.name, self.destination, exc)
            completion(False)
            raise FilesystemError(f"Failed to save {handle.path.name}: {exc}") from exc
        self.saved_paths.append(target)
        logger.info("Saved %s", target)
        completion(True)
