"""Filter predicate model for logshare.

A FilterPredicate is a conjunction of simple constraints over log record
columns. It evaluates in memory and compiles to a parameterised SQL clause.
The universal predicate (no constraints) is distinct from the predicate that
matches nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Tuple

# Columns a constraint may reference, mapped to their SQL column names
_COLUMNS = {
    "session_id": "session_id",
    "created_at": "created_at",
    "level": "level",
}

_OPERATORS = ("==", ">=")


@dataclass(frozen=True)
class Constraint:
    """Single ``<field> <operator> <value>`` comparison."""

    field: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if self.field not in _COLUMNS:
            raise ValueError(f"Unsupported filter field: {self.field!r}")
        if self.operator not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.operator!r}")

    def matches(self, record: Any) -> bool:
        actual = getattr(record, self.field)
        if self.operator == "==":
            return actual == self.value
        return actual >= self.value

    def to_sql(self) -> Tuple[str, Any]:
        op = "=" if self.operator == "==" else ">="
        value = self.value
        if isinstance(value, datetime):
            value = value.timestamp()
        elif self.field == "level":
            value = int(value)
        return f"{_COLUMNS[self.field]} {op} ?", value

    def __str__(self) -> str:
        value = self.value.isoformat() if isinstance(self.value, datetime) else self.value
        return f"{self.field} {self.operator} {value!r}"


@dataclass(frozen=True)
class FilterPredicate:
    """Conjunction of constraints; empty means "no filter applied"."""

    constraints: Tuple[Constraint, ...] = ()
    match_none: bool = False

    @classmethod
    def universal(cls) -> "FilterPredicate":
        return cls()

    @classmethod
    def nothing(cls) -> "FilterPredicate":
        return cls(match_none=True)

    @property
    def is_universal(self) -> bool:
        return not self.constraints and not self.match_none

    def and_(self, constraint: Constraint) -> "FilterPredicate":
        return FilterPredicate(self.constraints + (constraint,), self.match_none)

    def matches(self, record: Any) -> bool:
        if self.match_none:
            return False
        return all(c.matches(record) for c in self.constraints)

    def to_sql(self) -> Tuple[str, List[Any]]:
        """Compile to a ``WHERE`` clause body and its parameters."""
        if self.match_none:
            return "0", []
        if not self.constraints:
            return "1", []
        clauses: List[str] = []
        params: List[Any] = []
        for c in self.constraints:
            clause, param = c.to_sql()
            clauses.append(clause)
            params.append(param)
        return " AND ".join(clauses), params

    def __str__(self) -> str:
        if self.match_none:
            return "<nothing>"
        if not self.constraints:
            return "<all>"
        return " AND ".join(str(c) for c in self.constraints)
