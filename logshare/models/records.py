"""Log store record models for logshare.

These are read-only views of rows held by the log store. The export pipeline
never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from logshare.models.options import SeverityLevel


@dataclass(frozen=True)
class LogRecord:
    """A single logged message."""

    id: int
    created_at: datetime          # timezone-aware
    session_id: str
    level: SeverityLevel
    message: str
    label: str = "default"
    metadata: Dict[str, str] = field(default_factory=dict)
    file: str = ""
    function: str = ""
    line: int = 0
    task_id: Optional[int] = None


@dataclass(frozen=True)
class TaskRecord:
    """A network task (request/response pair) recorded alongside messages."""

    id: int
    created_at: datetime
    session_id: str
    url: str
    method: str = "GET"
    status_code: Optional[int] = None
    duration: Optional[float] = None   # seconds
    request_body: str = ""
    response_body: str = ""
    error_message: str = ""

    @property
    def is_failure(self) -> bool:
        if self.error_message:
            return True
        return self.status_code is not None and self.status_code >= 400


@dataclass
class TaskGroup:
    """A task together with every snapshot record attached to it."""

    task: TaskRecord
    records: List[LogRecord] = field(default_factory=list)


SnapshotEntry = Union[LogRecord, TaskGroup]


@dataclass
class StoreInfo:
    """Metadata block describing a store or an exported container."""

    store_id: str
    store_version: str
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    message_count: int = 0
    task_count: int = 0
    total_store_size: int = 0   # bytes
    app_info: Dict[str, Any] = field(default_factory=dict)
    device_info: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "store_id": self.store_id,
            "store_version": self.store_version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "modified_at": self.modified_at.isoformat() if self.modified_at else None,
            "message_count": self.message_count,
            "task_count": self.task_count,
            "total_store_size": self.total_store_size,
            "app_info": dict(self.app_info),
            "device_info": dict(self.device_info),
        }
