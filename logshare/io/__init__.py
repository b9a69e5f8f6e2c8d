"""logshare I/O package.

File, snapshot and temporary-storage operations. No export policy in this layer.
"""

from logshare.io.settings_store import SharingSettingsStore
from logshare.io.snapshot import SnapshotReader
from logshare.io.temporary import TemporaryDirectory

__all__ = [
    "SharingSettingsStore",
    "SnapshotReader",
    "TemporaryDirectory",
]
