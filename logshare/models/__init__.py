"""logshare data models package.

All pipeline values are typed dataclasses or enums defined here.
"""

from logshare.models.export import EncodedArtifact, ExportJob, Snapshot
from logshare.models.options import ExportFormat, ExportOptions, SeverityLevel, TimeRange
from logshare.models.predicate import Constraint, FilterPredicate
from logshare.models.records import LogRecord, SnapshotEntry, StoreInfo, TaskGroup, TaskRecord

__all__ = [
    # options
    "ExportFormat",
    "ExportOptions",
    "SeverityLevel",
    "TimeRange",
    # predicate
    "Constraint",
    "FilterPredicate",
    # records
    "LogRecord",
    "TaskRecord",
    "TaskGroup",
    "SnapshotEntry",
    "StoreInfo",
    # export
    "ExportJob",
    "Snapshot",
    "EncodedArtifact",
]
