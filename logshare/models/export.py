"""Export job data models for logshare.

Defines the transient job value scheduled by the coordinator and the encoder
output record. The live artifact itself is ``logshare.sharing.artifact.ArtifactHandle``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from logshare.models.predicate import FilterPredicate
from logshare.models.options import ExportOptions
from logshare.models.records import SnapshotEntry, StoreInfo


@dataclass(frozen=True)
class ExportJob:
    """One scheduled export. The predicate is fixed at trigger time."""

    options: ExportOptions
    generation: int
    predicate: FilterPredicate


@dataclass
class Snapshot:
    """Ordered snapshot of store entries matching a predicate."""

    entries: List[SnapshotEntry] = field(default_factory=list)
    record_count: int = 0

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class EncodedArtifact:
    """File written by an encoder."""

    path: Path
    info: Optional[StoreInfo] = None
