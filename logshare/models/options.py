"""Sharing option data models for logshare.

Defines the time range, severity level and output format enumerations and the
immutable ExportOptions value that selects them for a single export job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping

from config.defaults import (
    CONTAINER_EXTENSION,
    DEFAULT_FORMAT,
    DEFAULT_MIN_LEVEL,
    DEFAULT_TIME_RANGE,
    TEXT_EXTENSION,
)

logger = logging.getLogger(__name__)


class TimeRange(str, Enum):
    """Lower bound on record creation time, or a session identity match."""

    CURRENT_SESSION = "currentSession"
    LAST_HOUR = "lastHour"
    TODAY = "today"
    ALL = "all"

    @property
    def label(self) -> str:
        return _TIME_RANGE_LABELS[self]


_TIME_RANGE_LABELS = {
    TimeRange.CURRENT_SESSION: "This Session",
    TimeRange.LAST_HOUR: "Last Hour",
    TimeRange.TODAY: "Today",
    TimeRange.ALL: "All Messages",
}


class SeverityLevel(IntEnum):
    """Ordered log severity. ``TRACE`` as a minimum means no level filter."""

    TRACE = 1
    DEBUG = 2
    INFO = 3
    NOTICE = 4
    WARNING = 5
    ERROR = 6
    CRITICAL = 7

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_name(cls, name: str) -> "SeverityLevel":
        """Parse a level from its case-insensitive name (e.g. ``"error"``).

        Raises:
            ValueError: If the name is not a known level.
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown severity level: {name!r}") from None


class ExportFormat(str, Enum):
    """Output codec selector."""

    CONTAINER = "container"
    TEXT = "text"

    @property
    def label(self) -> str:
        if self is ExportFormat.CONTAINER:
            return f"File (.{CONTAINER_EXTENSION})"
        return f"Text (.{TEXT_EXTENSION})"


@dataclass(frozen=True)
class ExportOptions:
    """Immutable option snapshot for one export job."""

    time_range: TimeRange = TimeRange(DEFAULT_TIME_RANGE)
    min_level: SeverityLevel = SeverityLevel.from_name(DEFAULT_MIN_LEVEL)
    format: ExportFormat = ExportFormat(DEFAULT_FORMAT)

    def with_changes(self, **changes: Any) -> "ExportOptions":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, str]:
        return {
            "time_range": self.time_range.value,
            "min_level": self.min_level.name.lower(),
            "format": self.format.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExportOptions":
        """Build options from a persisted dict.

        Missing or unrecognised values fall back to the defaults field by field,
        so a partially corrupt settings file never blocks sharing.
        """
        defaults = cls()
        time_range = defaults.time_range
        min_level = defaults.min_level
        fmt = defaults.format

        try:
            time_range = TimeRange(data.get("time_range", time_range.value))
        except ValueError:
            logger.warning("Ignoring unknown time range in settings: %r", data.get("time_range"))
        try:
            min_level = SeverityLevel.from_name(str(data.get("min_level", min_level.name)))
        except ValueError:
            logger.warning("Ignoring unknown level in settings: %r", data.get("min_level"))
        try:
            fmt = ExportFormat(data.get("format", fmt.value))
        except ValueError:
            logger.warning("Ignoring unknown format in settings: %r", data.get("format"))

        return cls(time_range=time_range, min_level=min_level, format=fmt)
