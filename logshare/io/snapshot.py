"""Snapshot reader for logshare.

Executes a FilterPredicate against the store's background read context and
returns an ordered Snapshot. Records attached to a network task are folded
into one TaskGroup, positioned where the task's first record appears, so the
task renders once as a unit.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List

from logshare.clients.log_store import LogStore
from logshare.errors import StoreReadError
from logshare.models.export import Snapshot
from logshare.models.predicate import FilterPredicate
from logshare.models.records import LogRecord, SnapshotEntry, TaskGroup

logger = logging.getLogger(__name__)


class SnapshotReader:
    """Reads consistent, grouped snapshots from a LogStore.

    Args:
        store: The log store to read from. Never mutated.
    """

    def __init__(self, store: LogStore) -> None:
        self.store = store

    def read(self, predicate: FilterPredicate) -> Snapshot:
        """Fetch every record matching ``predicate`` in creation order.

        Args:
            predicate: Filter built at trigger time.

        Returns:
            Snapshot of standalone records and task groups.

        Raises:
            StoreReadError: If the store query fails.
        """
        start = time.monotonic()
        if predicate.match_none:
            return Snapshot()

        with self.store.background_context() as context:
            records = context.fetch_messages(predicate)
            task_ids = {r.task_id for r in records if r.task_id is not None}
            tasks = context.fetch_tasks(task_ids) if task_ids else {}

        missing = task_ids - set(tasks)
        if missing:
            # Task rows are written before their messages; a gap means corruption
            raise StoreReadError(f"Store is missing {len(missing)} referenced network task(s)")

        snapshot = Snapshot(entries=_group_by_task(records, tasks), record_count=len(records))
        logger.debug(
            "Read snapshot: %d records, %d entries (%s) in %.3fs",
            snapshot.record_count,
            len(snapshot),
            predicate,
            time.monotonic() - start,
        )
        return snapshot


def _group_by_task(records: List[LogRecord], tasks: Dict) -> List[SnapshotEntry]:
    entries: List[SnapshotEntry] = []
    groups: Dict[int, TaskGroup] = {}
    for record in records:
        if record.task_id is None:
            entries.append(record)
            continue
        group = groups.get(record.task_id)
        if group is None:
            group = TaskGroup(task=tasks[record.task_id])
            groups[record.task_id] = group
            entries.append(group)
        group.records.append(record)
    return entries
