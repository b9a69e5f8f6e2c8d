"""logshare — Debounced, single-flight log export pipeline.

Public API surface:
    - ShareConfig: Runtime configuration
    - ExportOptions: Time range / minimum level / format selection
    - ExportCoordinator: Observable export state machine
    - SQLiteLogStore: Bundled persistent log store
"""

__version__ = "1.0.0"
__author__ = "logshare Contributors"

from config.settings import ShareConfig
from logshare.clients.sqlite_store import SQLiteLogStore
from logshare.models.options import ExportFormat, ExportOptions, SeverityLevel, TimeRange
from logshare.sharing.coordinator import CoordinatorState, ExportCoordinator, ShareState

__all__ = [
    "__version__",
    "ShareConfig",
    "ExportOptions",
    "ExportFormat",
    "SeverityLevel",
    "TimeRange",
    "ExportCoordinator",
    "CoordinatorState",
    "ShareState",
    "SQLiteLogStore",
]
