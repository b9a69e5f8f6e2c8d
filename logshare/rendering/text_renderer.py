"""Plain-text rendering of log records and network tasks for logshare.

One block per standalone record, one block per task group. Blocks are joined
with the configured separator to form a text export.
"""

from __future__ import annotations

from typing import Iterable

from config.defaults import TEXT_BLOCK_SEPARATOR, TEXT_BODY_LIMIT
from logshare.models.options import SeverityLevel
from logshare.models.records import LogRecord, TaskGroup
from logshare.utils.date_utils import format_record_time
from logshare.utils.text import indent, truncate


class TextRenderer:
    """Renders records and task groups into human-readable text blocks.

    Args:
        separator: Joiner placed between blocks.
        body_limit: Maximum characters of a request/response body to include.
    """

    def __init__(
        self,
        separator: str = TEXT_BLOCK_SEPARATOR,
        body_limit: int = TEXT_BODY_LIMIT,
    ) -> None:
        self.separator = separator
        self.body_limit = body_limit

    def render(self, record: LogRecord) -> str:
        """Render a standalone record: header line plus sorted metadata lines."""
        header = f"{format_record_time(record.created_at)} [{record.level.name}]"
        if record.label and record.label != "default":
            header += f" [{record.label}]"
        lines = [f"{header} {record.message}"]
        for key in sorted(record.metadata):
            lines.append(f"  {key}: {record.metadata[key]}")
        return "\n".join(lines)

    def render_task(self, group: TaskGroup) -> str:
        """Render a network task and its attached records as a single block."""
        task = group.task
        if group.records:
            level = max(r.level for r in group.records)
        else:
            level = SeverityLevel.ERROR if task.is_failure else SeverityLevel.DEBUG

        if task.status_code is not None:
            status = str(task.status_code)
        elif task.error_message:
            status = "FAILED"
        else:
            status = "PENDING"

        header = f"{format_record_time(task.created_at)} [{level.name}] {task.method} {task.url} {status}"
        if task.duration is not None:
            header += f" ({task.duration:.3f}s)"
        lines = [header]

        if task.error_message:
            lines.append(f"  Error: {task.error_message}")
        if task.request_body:
            lines.append("  Request Body:")
            lines.append(indent(truncate(task.request_body, self.body_limit), "    "))
        if task.response_body:
            lines.append("  Response Body:")
            lines.append(indent(truncate(task.response_body, self.body_limit), "    "))
        return "\n".join(lines)

    def joined(self, blocks: Iterable[str]) -> str:
        return self.separator.join(blocks)
