"""Exception types raised by the logshare export pipeline.

Every failure that can end an export job derives from ShareError. The
coordinator catches these, publishes ``str(exc)`` as the user-facing message
and returns to idle.
"""

from __future__ import annotations


class ShareError(Exception):
    """Base class for export job failures."""


class StoreReadError(ShareError):
    """Querying or reading records from the log store failed."""


class EncodeError(ShareError):
    """Copying the store or serializing the snapshot failed."""


class FilesystemError(ShareError):
    """Writing the artifact or probing its size failed."""


class ArtifactUnavailableError(ShareError):
    """The artifact was already released and can no longer be handed off."""
