"""Unit tests for logshare.analysis.filter_builder and logshare.models.predicate."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from dateutil import tz

from logshare.analysis.filter_builder import build_predicate, start_of_day
from logshare.models.options import ExportOptions, SeverityLevel, TimeRange
from logshare.models.predicate import Constraint, FilterPredicate

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _record(**overrides):
    values = {
        "session_id": "session-current",
        "created_at": FIXED_NOW,
        "level": SeverityLevel.INFO,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


# ── Predicate construction ───────────────────────────────────────────────────────

class TestFilterBuilder:
    def test_all_and_trace_is_universal(self, fixed_builder):
        """No time constraint and no level constraint yields the universal predicate."""
        options = ExportOptions(TimeRange.ALL, SeverityLevel.TRACE)
        predicate = fixed_builder.build(options, "session-current")

        assert predicate.is_universal
        assert predicate.to_sql() == ("1", [])

    def test_current_session_constrains_session_id(self, fixed_builder):
        options = ExportOptions(TimeRange.CURRENT_SESSION, SeverityLevel.TRACE)
        predicate = fixed_builder.build(options, "session-current")

        assert predicate.constraints == (Constraint("session_id", "==", "session-current"),)
        assert predicate.matches(_record())
        assert not predicate.matches(_record(session_id="session-previous"))

    def test_current_session_without_active_session_matches_nothing(self, fixed_builder):
        options = ExportOptions(TimeRange.CURRENT_SESSION, SeverityLevel.TRACE)
        predicate = fixed_builder.build(options, None)

        assert predicate.match_none
        assert not predicate.is_universal
        assert predicate.to_sql() == ("0", [])
        assert not predicate.matches(_record())

    def test_last_hour_cutoff(self, fixed_builder):
        options = ExportOptions(TimeRange.LAST_HOUR, SeverityLevel.TRACE)
        predicate = fixed_builder.build(options, "session-current")

        cutoff = FIXED_NOW - timedelta(hours=1)
        assert predicate.constraints == (Constraint("created_at", ">=", cutoff),)
        assert predicate.matches(_record(created_at=cutoff))
        assert not predicate.matches(_record(created_at=cutoff - timedelta(seconds=1)))

    def test_today_uses_local_midnight(self, fixed_builder):
        options = ExportOptions(TimeRange.TODAY, SeverityLevel.TRACE)
        predicate = fixed_builder.build(options, "session-current")

        midnight = datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert predicate.constraints[0].value == midnight
        assert predicate.matches(_record(created_at=midnight))
        assert not predicate.matches(_record(created_at=midnight - timedelta(microseconds=1)))

    def test_level_constraint_added_above_trace(self, fixed_builder):
        options = ExportOptions(TimeRange.ALL, SeverityLevel.ERROR)
        predicate = fixed_builder.build(options, "session-current")

        assert predicate.constraints == (Constraint("level", ">=", SeverityLevel.ERROR),)
        assert predicate.matches(_record(level=SeverityLevel.CRITICAL))
        assert not predicate.matches(_record(level=SeverityLevel.WARNING))

    def test_constraints_are_combined_with_and(self, fixed_builder):
        options = ExportOptions(TimeRange.TODAY, SeverityLevel.ERROR)
        predicate = fixed_builder.build(options, "session-current")

        clause, params = predicate.to_sql()
        assert clause == "created_at >= ? AND level >= ?"
        assert params == [datetime(2024, 1, 15, tzinfo=timezone.utc).timestamp(), 6]

    def test_session_id_ignored_for_other_ranges(self, fixed_builder):
        options = ExportOptions(TimeRange.LAST_HOUR, SeverityLevel.TRACE)
        predicate = fixed_builder.build(options, None)

        assert not predicate.match_none
        assert len(predicate.constraints) == 1

    def test_build_predicate_wrapper(self):
        options = ExportOptions(TimeRange.LAST_HOUR, SeverityLevel.TRACE)
        predicate = build_predicate(options, None, now=FIXED_NOW, zone=timezone.utc)

        assert predicate.constraints[0].value == FIXED_NOW - timedelta(hours=1)


# ── start_of_day ──────────────────────────────────────────────────────────────────

class TestStartOfDay:
    def test_converts_to_zone_before_truncating(self):
        zone = tz.gettz("America/New_York")
        # 03:00 UTC on Jan 15 is still Jan 14 in New York
        moment = datetime(2024, 1, 15, 3, 0, tzinfo=timezone.utc)

        midnight = start_of_day(moment, zone)

        assert (midnight.year, midnight.month, midnight.day) == (2024, 1, 14)
        assert (midnight.hour, midnight.minute) == (0, 0)
        assert midnight.utcoffset() == timedelta(hours=-5)

    def test_midnight_dst_gap_is_resolved(self):
        # Sao Paulo skipped 00:00-01:00 on 2018-11-04
        zone = tz.gettz("America/Sao_Paulo")
        moment = datetime(2018, 11, 4, 15, 0, tzinfo=timezone.utc)

        result = start_of_day(moment, zone)

        assert tz.datetime_exists(result)
        assert result.hour == 1


# ── FilterPredicate ───────────────────────────────────────────────────────────────

class TestFilterPredicate:
    def test_universal_and_nothing_are_distinct(self):
        assert FilterPredicate.universal() != FilterPredicate.nothing()
        assert FilterPredicate.universal().is_universal
        assert not FilterPredicate.nothing().is_universal

    def test_invalid_constraint_rejected(self):
        with pytest.raises(ValueError, match="Unsupported filter field"):
            Constraint("message", "==", "x")
        with pytest.raises(ValueError, match="Unsupported filter operator"):
            Constraint("level", "<", 1)

    def test_str_descriptions(self):
        assert str(FilterPredicate.universal()) == "<all>"
        assert str(FilterPredicate.nothing()) == "<nothing>"
        predicate = FilterPredicate.universal().and_(Constraint("level", ">=", 6))
        assert str(predicate) == "level >= 6"
