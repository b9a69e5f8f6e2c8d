"""Filter predicate construction for logshare.

Translates the user's sharing options into a FilterPredicate against the log
store. Constraints are additive and combined with logical AND:

- currentSession: session_id must equal the store's active session.
- lastHour: created_at >= now - 3600 s.
- today: created_at >= start of the current local calendar day.
- all: no time constraint.
- min_level other than trace: level >= min_level.

When no constraint applies the universal predicate is returned.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional

from dateutil import tz

from config.defaults import LAST_HOUR_SECONDS
from logshare.models.options import ExportOptions, SeverityLevel, TimeRange
from logshare.models.predicate import Constraint, FilterPredicate

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(moment: datetime, zone: tzinfo) -> datetime:
    """Return local midnight of the calendar day containing ``moment``.

    Args:
        moment: Timezone-aware instant.
        zone: Zone whose calendar defines the day boundary.

    Returns:
        Timezone-aware datetime at 00:00 local time.
    """
    local = moment.astimezone(zone)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    # Midnight falls inside a DST gap in a few zones
    return tz.resolve_imaginary(midnight)


class FilterBuilder:
    """Builds FilterPredicates from ExportOptions.

    Args:
        clock: Callable returning the current aware datetime (injectable for tests).
        zone: Local zone for the ``today`` boundary (defaults to the system zone).
        last_hour_seconds: Lookback window for ``lastHour``.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        zone: Optional[tzinfo] = None,
        last_hour_seconds: int = LAST_HOUR_SECONDS,
    ) -> None:
        self.clock = clock or _utc_now
        self.zone = zone or tz.tzlocal()
        self.last_hour_seconds = last_hour_seconds

    def build(self, options: ExportOptions, current_session_id: Optional[str]) -> FilterPredicate:
        """Build the predicate for ``options``.

        Args:
            options: Sharing options captured at trigger time.
            current_session_id: Identifier of the store's active session. Only
                consulted for ``TimeRange.CURRENT_SESSION``.

        Returns:
            FilterPredicate; universal when time_range=all and min_level=trace.
        """
        if options.time_range is TimeRange.ALL and options.min_level is SeverityLevel.TRACE:
            return FilterPredicate.universal()

        predicate = FilterPredicate.universal()

        if options.time_range is TimeRange.CURRENT_SESSION:
            if current_session_id is None:
                logger.warning("No active session on store; current-session filter matches nothing")
                return FilterPredicate.nothing()
            predicate = predicate.and_(Constraint("session_id", "==", current_session_id))
        elif options.time_range is TimeRange.LAST_HOUR:
            cutoff = self.clock() - timedelta(seconds=self.last_hour_seconds)
            predicate = predicate.and_(Constraint("created_at", ">=", cutoff))
        elif options.time_range is TimeRange.TODAY:
            cutoff = start_of_day(self.clock(), self.zone)
            predicate = predicate.and_(Constraint("created_at", ">=", cutoff))

        if options.min_level is not SeverityLevel.TRACE:
            predicate = predicate.and_(Constraint("level", ">=", options.min_level))

        logger.debug("Built filter predicate for %s: %s", options.to_dict(), predicate)
        return predicate


def build_predicate(
    options: ExportOptions,
    current_session_id: Optional[str],
    now: Optional[datetime] = None,
    zone: Optional[tzinfo] = None,
) -> FilterPredicate:
    """Convenience wrapper around FilterBuilder for one-off builds."""
    clock = (lambda: now) if now is not None else None
    return FilterBuilder(clock=clock, zone=zone).build(options, current_session_id)
