"""SQLite-backed log store for logshare.

A compact persistent store: messages and network tasks in one SQLite database
running in WAL mode, so background readers see a consistent snapshot while
producers keep appending. Filtered copies are packaged as a zip container
holding the database and an ``info.json`` metadata block.

No export logic lives here; the pipeline talks to this class only through
the LogStore interface.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import tempfile
import threading
import uuid
import zipfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from dateutil import parser as dateutil_parser

from config.defaults import ARCHIVE_DATABASE_NAME, ARCHIVE_INFO_NAME, STORE_VERSION
from logshare.clients.log_store import LogStore, ReadContext
from logshare.errors import EncodeError, StoreReadError
from logshare.models.options import SeverityLevel
from logshare.models.predicate import FilterPredicate
from logshare.models.records import LogRecord, StoreInfo, TaskRecord

logger = logging.getLogger(__name__)

# SQLite's default host-parameter limit is 999; stay well below it
_ID_CHUNK_SIZE = 500

_SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at REAL NOT NULL,
    session_id TEXT NOT NULL,
    url TEXT NOT NULL,
    method TEXT NOT NULL DEFAULT 'GET',
    status_code INTEGER,
    duration REAL,
    request_body TEXT NOT NULL DEFAULT '',
    response_body TEXT NOT NULL DEFAULT '',
    error_message TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at REAL NOT NULL,
    session_id TEXT NOT NULL,
    level INTEGER NOT NULL,
    label TEXT NOT NULL DEFAULT 'default',
    text TEXT NOT NULL,
    metadata TEXT NOT NULL DEFAULT '{}',
    file TEXT NOT NULL DEFAULT '',
    function TEXT NOT NULL DEFAULT '',
    line INTEGER NOT NULL DEFAULT 0,
    task_id INTEGER REFERENCES tasks(id)
);
CREATE INDEX IF NOT EXISTS idx_messages_created_at ON messages(created_at);
CREATE INDEX IF NOT EXISTS idx_messages_session_id ON messages(session_id);
CREATE INDEX IF NOT EXISTS idx_messages_level ON messages(level);
CREATE TABLE IF NOT EXISTS store_info (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_MESSAGE_COLUMNS = (
    "id, created_at, session_id, level, label, text, metadata, file, function, line, task_id"
)
_TASK_COLUMNS = (
    "id, created_at, session_id, url, method, status_code, duration, "
    "request_body, response_body, error_message"
)


def _to_timestamp(moment: Optional[datetime]) -> float:
    if moment is None:
        moment = datetime.now(timezone.utc)
    return moment.timestamp()


def _from_timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return dateutil_parser.isoparse(value)
    except (ValueError, OverflowError):
        logger.warning("Unparseable store timestamp: %r", value)
        return None


def _row_to_record(row: sqlite3.Row) -> LogRecord:
    return LogRecord(
        id=row["id"],
        created_at=_from_timestamp(row["created_at"]),
        session_id=row["session_id"],
        level=SeverityLevel(row["level"]),
        label=row["label"],
        message=row["text"],
        metadata=json.loads(row["metadata"] or "{}"),
        file=row["file"],
        function=row["function"],
        line=row["line"],
        task_id=row["task_id"],
    )


def _row_to_task(row: sqlite3.Row) -> TaskRecord:
    return TaskRecord(
        id=row["id"],
        created_at=_from_timestamp(row["created_at"]),
        session_id=row["session_id"],
        url=row["url"],
        method=row["method"],
        status_code=row["status_code"],
        duration=row["duration"],
        request_body=row["request_body"],
        response_body=row["response_body"],
        error_message=row["error_message"],
    )


def _read_info(conn: sqlite3.Connection) -> StoreInfo:
    """Assemble a StoreInfo from the store_info table and row counts."""
    values = dict(conn.execute("SELECT key, value FROM store_info").fetchall())
    message_count = conn.execute("SELECT COUNT(*) FROM messages").fetchone()[0]
    task_count = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()[0]
    return StoreInfo(
        store_id=values.get("store_id", ""),
        store_version=values.get("store_version", STORE_VERSION),
        created_at=_parse_iso(values.get("created_at")),
        modified_at=datetime.now(timezone.utc),
        message_count=message_count,
        task_count=task_count,
        app_info=json.loads(values.get("app_info", "{}")),
        device_info=json.loads(values.get("device_info", "{}")),
    )


class _SQLiteReadContext(ReadContext):
    """Read context bound to one connection inside one read transaction."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def fetch_messages(self, predicate: FilterPredicate) -> List[LogRecord]:
        clause, params = predicate.to_sql()
        sql = f"SELECT {_MESSAGE_COLUMNS} FROM messages WHERE {clause} ORDER BY created_at, id"
        try:
            rows = self._conn.execute(sql, params).fetchall()
            return [_row_to_record(row) for row in rows]
        except (sqlite3.Error, ValueError) as exc:
            logger.error("Message fetch failed (%s): %s", predicate, exc)
            raise StoreReadError(f"Failed to read logs: {exc}") from exc

    def fetch_tasks(self, task_ids: Iterable[int]) -> Dict[int, TaskRecord]:
        ids = sorted(set(task_ids))
        tasks: Dict[int, TaskRecord] = {}
        try:
            for start in range(0, len(ids), _ID_CHUNK_SIZE):
                chunk = ids[start:start + _ID_CHUNK_SIZE]
                placeholders = ",".join("?" for _ in chunk)
                rows = self._conn.execute(
                    f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id IN ({placeholders})", chunk
                ).fetchall()
                for row in rows:
                    task = _row_to_task(row)
                    tasks[task.id] = task
        except sqlite3.Error as exc:
            logger.error("Task fetch failed: %s", exc)
            raise StoreReadError(f"Failed to read network tasks: {exc}") from exc
        return tasks


class SQLiteLogStore(LogStore):
    """Persistent log store on a single SQLite database file.

    Args:
        path: Database file path (created if missing).
        session_id: Identifier of the current session (random UUID by default).
        app_info: Optional application metadata stored in the info block.
        device_info: Optional device metadata stored in the info block.
    """

    def __init__(
        self,
        path: str | Path,
        session_id: Optional[str] = None,
        app_info: Optional[Dict[str, Any]] = None,
        device_info: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._session_id = session_id or str(uuid.uuid4())
        self._write_lock = threading.Lock()

        self._conn = sqlite3.connect(str(self.path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        self._initialise_info(app_info or {}, device_info or {})
        logger.debug("Opened log store %s (session %s)", self.path, self._session_id)

    def __enter__(self) -> "SQLiteLogStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _initialise_info(self, app_info: Dict[str, Any], device_info: Dict[str, Any]) -> None:
        defaults = {
            "store_id": str(uuid.uuid4()),
            "store_version": STORE_VERSION,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "app_info": json.dumps(app_info),
            "device_info": json.dumps(device_info),
        }
        with self._write_lock, self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO store_info (key, value) VALUES (?, ?)",
                list(defaults.items()),
            )

    # ── Producer API ──────────────────────────────────────────────────────────

    def store_message(
        self,
        message: str,
        level: SeverityLevel = SeverityLevel.DEBUG,
        label: str = "default",
        metadata: Optional[Dict[str, str]] = None,
        file: str = "",
        function: str = "",
        line: int = 0,
        task_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
        session_id: Optional[str] = None,
    ) -> int:
        """Append a message and return its id."""
        with self._write_lock, self._conn:
            cursor = self._conn.execute(
                "INSERT INTO messages (created_at, session_id, level, label, text, metadata, "
                "file, function, line, task_id) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    _to_timestamp(created_at),
                    session_id or self._session_id,
                    int(level),
                    label,
                    message,
                    json.dumps(metadata or {}),
                    file,
                    function,
                    line,
                    task_id,
                ),
            )
        return cursor.lastrowid

    def store_task(
        self,
        url: str,
        method: str = "GET",
        status_code: Optional[int] = None,
        duration: Optional[float] = None,
        request_body: str = "",
        response_body: str = "",
        error_message: str = "",
        created_at: Optional[datetime] = None,
        session_id: Optional[str] = None,
        level: Optional[SeverityLevel] = None,
    ) -> int:
        """Append a network task plus its summary message; return the task id.

        The summary message carries the task's level (error for failed tasks,
        debug otherwise unless ``level`` is given) so level filters apply to
        tasks the same way they apply to plain messages.
        """
        created_at = created_at or datetime.now(timezone.utc)
        session_id = session_id or self._session_id
        with self._write_lock, self._conn:
            cursor = self._conn.execute(
                "INSERT INTO tasks (created_at, session_id, url, method, status_code, duration, "
                "request_body, response_body, error_message) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    _to_timestamp(created_at),
                    session_id,
                    url,
                    method,
                    status_code,
                    duration,
                    request_body,
                    response_body,
                    error_message,
                ),
            )
            task_id = cursor.lastrowid
            failed = bool(error_message) or (status_code is not None and status_code >= 400)
            if level is None:
                level = SeverityLevel.ERROR if failed else SeverityLevel.DEBUG
            self._conn.execute(
                "INSERT INTO messages (created_at, session_id, level, label, text, task_id) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (_to_timestamp(created_at), session_id, int(level), "network",
                 f"{method} {url}", task_id),
            )
        return task_id

    # ── LogStore interface ────────────────────────────────────────────────────

    def current_session_id(self) -> Optional[str]:
        return self._session_id

    def resume_latest_session(self) -> Optional[str]:
        """Adopt the session of the newest stored message as the current session.

        Used when reading a store written by an earlier process. Keeps the
        current session when the store is empty.
        """
        with self._write_lock:
            row = self._conn.execute(
                "SELECT session_id FROM messages ORDER BY created_at DESC, id DESC LIMIT 1"
            ).fetchone()
        if row is not None:
            self._session_id = row[0]
            logger.debug("Resumed session %s on %s", self._session_id, self.path)
        return self._session_id

    @contextmanager
    def background_context(self) -> Iterator[ReadContext]:
        """Open a dedicated connection inside a deferred read transaction.

        In WAL mode the snapshot is fixed at the first read, so every fetch
        made through the yielded context sees the same committed state.
        """
        try:
            conn = sqlite3.connect(str(self.path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("BEGIN")
        except sqlite3.Error as exc:
            logger.error("Could not open read context on %s: %s", self.path, exc)
            raise StoreReadError(f"Failed to open log store: {exc}") from exc
        try:
            yield _SQLiteReadContext(conn)
        finally:
            conn.rollback()
            conn.close()

    def copy(self, destination: Path, predicate: Optional[FilterPredicate] = None) -> StoreInfo:
        """Write a filtered container archive to ``destination``.

        The database is snapshotted with the SQLite backup API into a staging
        directory next to ``destination``, rows outside ``predicate`` are
        deleted (tasks are kept only while a remaining message references
        them), and the result is zipped with its info block.

        Raises:
            EncodeError: If the copy, filtering or packaging fails.
        """
        destination = Path(destination)
        predicate = predicate or FilterPredicate.universal()
        try:
            with tempfile.TemporaryDirectory(dir=destination.parent, prefix=".staging-") as staging:
                db_path = Path(staging) / ARCHIVE_DATABASE_NAME
                source = sqlite3.connect(str(self.path))
                target = sqlite3.connect(str(db_path))
                try:
                    source.backup(target)
                    if not predicate.is_universal:
                        clause, params = predicate.to_sql()
                        with target:
                            target.execute(f"DELETE FROM messages WHERE NOT ({clause})", params)
                            target.execute(
                                "DELETE FROM tasks WHERE id NOT IN "
                                "(SELECT task_id FROM messages WHERE task_id IS NOT NULL)"
                            )
                    target.execute("PRAGMA journal_mode=DELETE")
                    target.execute("VACUUM")
                    info = _read_info(target)
                finally:
                    target.close()
                    source.close()

                info.total_store_size = db_path.stat().st_size
                with zipfile.ZipFile(destination, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                    archive.write(db_path, ARCHIVE_DATABASE_NAME)
                    archive.writestr(ARCHIVE_INFO_NAME, json.dumps(info.to_dict(), indent=2))
        except (sqlite3.Error, OSError, zipfile.BadZipFile, ValueError) as exc:
            logger.error("Store copy to %s failed: %s", destination, exc)
            raise EncodeError(f"Failed to copy log store: {exc}") from exc

        logger.debug(
            "Copied store to %s (%d messages, %d tasks)",
            destination,
            info.message_count,
            info.task_count,
        )
        return info

    def info(self) -> StoreInfo:
        try:
            with self._write_lock:
                info = _read_info(self._conn)
            info.total_store_size = self.path.stat().st_size
        except (sqlite3.Error, OSError) as exc:
            raise StoreReadError(f"Failed to read store info: {exc}") from exc
        return info

    def close(self) -> None:
        with self._write_lock:
            self._conn.close()
