"""
Row Filters — column-scoped predicates ANDed over a row set.

  equals     string forms equal
  contains   case-insensitive substring; missing never matches
  range      [min, max] inclusive on the numeric reading
  in         string form is one of the allowed values
  dateRange  [start, end] inclusive on the parsed date
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from datalaser.core.analysis.models import Row
from datalaser.core.analysis.values import is_missing, parse_date, parse_numeric
from datalaser.core.exceptions import InvalidFilterError

logger = logging.getLogger(__name__)


class FilterKind(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    RANGE = "range"
    IN = "in"
    DATE_RANGE = "dateRange"


def _string_form(value: Any) -> str:
    return "" if value is None else str(value)


def _as_pair(value: Any, kind: FilterKind) -> Tuple[Any, Any]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise InvalidFilterError(f"{kind.value} filter needs a [start, end] pair", {"value": value})
    return value[0], value[1]


@dataclass(frozen=True)
class ActiveFilter:
    column: str
    kind: FilterKind
    value: Any

    def __post_init__(self):
        try:
            kind = FilterKind(self.kind)
        except ValueError:
            raise InvalidFilterError(f"Unknown filter kind: {self.kind}", {"column": self.column})
        object.__setattr__(self, "kind", kind)

        if kind == FilterKind.RANGE:
            low, high = _as_pair(self.value, kind)
            if parse_numeric(low) is None or parse_numeric(high) is None:
                raise InvalidFilterError("range filter bounds must be numeric", {"value": self.value})
        elif kind == FilterKind.DATE_RANGE:
            start, end = _as_pair(self.value, kind)
            if parse_date(start) is None or parse_date(end) is None:
                raise InvalidFilterError("dateRange filter bounds must be dates", {"value": self.value})
        elif kind == FilterKind.IN and not isinstance(self.value, (list, tuple, set)):
            raise InvalidFilterError("in filter needs a list of allowed values", {"value": self.value})

    def to_dict(self) -> Dict[str, Any]:
        value = list(self.value) if isinstance(self.value, (tuple, set)) else self.value
        return {"column": self.column, "kind": self.kind.value, "value": value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActiveFilter":
        return cls(column=data["column"], kind=data.get("kind") or data.get("type"), value=data.get("value"))


def apply_filter(row: Row, active: ActiveFilter) -> bool:
    value = row.get(active.column)
    kind = active.kind

    if kind == FilterKind.EQUALS:
        return _string_form(value) == _string_form(active.value)

    if kind == FilterKind.CONTAINS:
        if value is None:
            return False
        return _string_form(active.value).lower() in str(value).lower()

    if kind == FilterKind.RANGE:
        number = parse_numeric(value)
        if number is None:
            return False
        low, high = active.value
        return parse_numeric(low) <= number <= parse_numeric(high)

    if kind == FilterKind.IN:
        allowed = {_string_form(v) for v in active.value}
        return _string_form(value) in allowed

    if kind == FilterKind.DATE_RANGE:
        if is_missing(value):
            return False
        when = parse_date(value)
        if when is None:
            return False
        start, end = active.value
        return parse_date(start) <= when <= parse_date(end)

    return True


# ═══════════════════════════════════════════════════════════════
# FILTER SET
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FilterSet:
    """At most one filter per column; every mutation returns a new set."""
    filters: Tuple[ActiveFilter, ...] = field(default_factory=tuple)

    def set(self, active: ActiveFilter) -> "FilterSet":
        kept = tuple(f for f in self.filters if f.column != active.column)
        return FilterSet(kept + (active,))

    def remove(self, column: str) -> "FilterSet":
        return FilterSet(tuple(f for f in self.filters if f.column != column))

    def clear(self) -> "FilterSet":
        return FilterSet()

    def apply(self, rows: Sequence[Row]) -> List[Row]:
        if not self.filters:
            return list(rows)
        kept = [row for row in rows if all(apply_filter(row, f) for f in self.filters)]
        logger.debug(f"Filters kept {len(kept)} of {len(rows)} rows")
        return kept

    def __len__(self) -> int:
        return len(self.filters)

    @classmethod
    def from_list(cls, items: Sequence[Mapping[str, Any]]) -> "FilterSet":
        result = cls()
        for item in items:
            result = result.set(ActiveFilter.from_dict(item))
        return result
