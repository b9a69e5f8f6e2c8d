"""logshare log store clients package."""

from logshare.clients.log_store import LogStore, ReadContext
from logshare.clients.sqlite_store import SQLiteLogStore

__all__ = [
    "LogStore",
    "ReadContext",
    "SQLiteLogStore",
]
