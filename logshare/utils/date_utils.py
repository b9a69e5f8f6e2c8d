"""Date formatting utilities for logshare.

Timestamps are stored as aware UTC datetimes and shown in local time.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from dateutil import tz

from config.defaults import ARTIFACT_TIMESTAMP_FORMAT


def make_current_date(
    now: Optional[datetime] = None,
    fmt: str = ARTIFACT_TIMESTAMP_FORMAT,
) -> str:
    """Format the artifact-name timestamp in local time.

    Args:
        now: Moment to format (defaults to the current time).
        fmt: strftime pattern.

    Returns:
        Filesystem-safe timestamp such as ``2024-01-15-12-00-00``.
    """
    moment = now or datetime.now(timezone.utc)
    return moment.astimezone(tz.tzlocal()).strftime(fmt)


def format_record_time(moment: datetime) -> str:
    """Render a record timestamp as local ``YYYY-MM-DD HH:MM:SS.mmm``."""
    local = moment.astimezone(tz.tzlocal())
    return local.strftime("%Y-%m-%d %H:%M:%S.") + f"{local.microsecond // 1000:03d}"
