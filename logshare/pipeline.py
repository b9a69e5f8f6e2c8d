"""logshare export job runner.

Runs one ExportJob end to end inside a job-owned temporary directory:

  1. Snapshot — SnapshotReader executes the job's predicate (text exports only)
  2. Encode   — the codec for the job's format writes logs-<timestamp>.<ext>
  3. Probe    — the written file's size is read back from the filesystem

The caller owns the directory until this function returns a handle; on any
failure the caller removes it.

Usage:
    from logshare.pipeline import prepare_artifact

    handle = prepare_artifact(job, store, TemporaryDirectory())
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

from config.settings import ShareConfig
from logshare.clients.log_store import LogStore
from logshare.encoders import encoder_for
from logshare.errors import FilesystemError
from logshare.io.snapshot import SnapshotReader
from logshare.io.temporary import TemporaryDirectory
from logshare.models.export import ExportJob
from logshare.models.options import ExportFormat
from logshare.rendering.text_renderer import TextRenderer
from logshare.sharing.artifact import ArtifactHandle
from logshare.utils.logging_utils import get_job_logger


def probe_file_size(path: Path) -> int:
    """Return the size in bytes of ``path``.

    Raises:
        FilesystemError: If the file cannot be stat'ed.
    """
    try:
        return Path(path).stat().st_size
    except OSError as exc:
        raise FilesystemError(f"Failed to read size of {Path(path).name}: {exc}") from exc


def prepare_artifact(
    job: ExportJob,
    store: LogStore,
    directory: TemporaryDirectory,
    config: Optional[ShareConfig] = None,
    renderer: Optional[TextRenderer] = None,
) -> ArtifactHandle:
    """Execute ``job`` and return the resulting ArtifactHandle.

    Args:
        job: Job with options and the predicate captured at trigger time.
        store: Store to read from. Never mutated.
        directory: Job-owned temporary directory receiving the artifact.
        config: Naming and rendering configuration.
        renderer: Text renderer for text exports.

    Returns:
        ArtifactHandle owning ``directory``.

    Raises:
        StoreReadError, EncodeError, FilesystemError: On any step failure.
    """
    cfg = config or ShareConfig()
    log = get_job_logger(__name__, job.generation)
    start = time.monotonic()

    if job.options.format is ExportFormat.CONTAINER:
        extension = cfg.container_extension
    else:
        extension = cfg.text_extension
    encoder = encoder_for(
        job.options.format,
        store,
        renderer,
        prefix=cfg.artifact_prefix,
        timestamp_format=cfg.timestamp_format,
        extension=extension,
    )

    snapshot = None
    if encoder.requires_snapshot:
        snapshot = SnapshotReader(store).read(job.predicate)
        log.info("Snapshot holds %d records in %d blocks", snapshot.record_count, len(snapshot))

    artifact = encoder.run(snapshot, job.predicate, directory.path)
    size = probe_file_size(artifact.path)

    log.info(
        "Prepared %s (%d bytes, format=%s, filter=%s) in %.2fs",
        artifact.path.name,
        size,
        job.options.format.value,
        job.predicate,
        time.monotonic() - start,
    )
    return ArtifactHandle(
        path=artifact.path,
        size=size,
        directory=directory,
        info=artifact.info,
        options=job.options,
        generation=job.generation,
    )
