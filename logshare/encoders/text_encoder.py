"""TextEncoder — human-readable text export of a snapshot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from config.defaults import TEXT_EXTENSION
from logshare.encoders.base import BaseEncoder
from logshare.errors import EncodeError, FilesystemError
from logshare.models.export import EncodedArtifact, Snapshot
from logshare.models.predicate import FilterPredicate
from logshare.models.records import TaskGroup
from logshare.rendering.text_renderer import TextRenderer

logger = logging.getLogger(__name__)


class TextEncoder(BaseEncoder):
    """Renders each snapshot entry to a block and writes the joined UTF-8 text.

    Task groups render as one block; standalone records render individually.

    Args:
        renderer: Text renderer (a default TextRenderer when None).
        extension: Text file extension.
    """

    name = "TextEncoder"
    extension = TEXT_EXTENSION
    requires_snapshot = True

    def __init__(
        self,
        renderer: Optional[TextRenderer] = None,
        extension: str = TEXT_EXTENSION,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.renderer = renderer or TextRenderer()
        self.extension = extension

    def encode(
        self,
        snapshot: Optional[Snapshot],
        predicate: FilterPredicate,
        directory: Path,
    ) -> EncodedArtifact:
        if snapshot is None:
            raise EncodeError("Text export requires a snapshot")

        try:
            blocks = [
                self.renderer.render_task(entry) if isinstance(entry, TaskGroup)
                else self.renderer.render(entry)
                for entry in snapshot.entries
            ]
            data = self.renderer.joined(blocks).encode("utf-8")
        except (UnicodeError, ValueError, TypeError) as exc:
            logger.error("Text rendering failed: %s", exc)
            raise EncodeError(f"Failed to render logs as text: {exc}") from exc

        path = self.artifact_path(directory)
        try:
            path.write_bytes(data)
        except OSError as exc:
            logger.error("Text export write to %s failed: %s", path, exc)
            # No half-written file may outlive the failure
            path.unlink(missing_ok=True)
            raise FilesystemError(f"Failed to write {path.name}: {exc}") from exc

        logger.debug("Rendered %d blocks (%d bytes) to %s", len(blocks), len(data), path)
        return EncodedArtifact(path=path, info=None)
