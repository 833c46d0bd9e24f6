"""
Analysis Models — Immutable Value Objects
===========================================
Plain frozen dataclasses handed from the analysis core to the API layer and
the tool dispatcher. Each is derived fresh per call and never mutated.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

Row = Mapping[str, Any]


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATE = "date"
    TEXT = "text"
    PERCENTAGE = "percentage"
    LIKERT_SCALE = "likert_scale"
    DEMOGRAPHIC = "demographic"


NUMERIC_TYPES = (ColumnType.NUMERIC, ColumnType.PERCENTAGE)
CATEGORICAL_TYPES = (ColumnType.CATEGORICAL, ColumnType.DEMOGRAPHIC, ColumnType.LIKERT_SCALE)


# ═══════════════════════════════════════════════════════════════
# COLUMN METADATA
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ColumnMeta:
    name: str
    detected_type: ColumnType
    overridden_type: Optional[ColumnType] = None
    unique_values: int = 0
    missing_count: int = 0
    missing_percent: float = 0.0
    sample_values: List[Any] = field(default_factory=list)

    @property
    def effective_type(self) -> ColumnType:
        return self.overridden_type or self.detected_type

    def with_override(self, column_type: Optional[ColumnType]) -> "ColumnMeta":
        return replace(self, overridden_type=column_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "detected_type": self.detected_type.value,
            "overridden_type": self.overridden_type.value if self.overridden_type else None,
            "effective_type": self.effective_type.value,
            "unique_values": self.unique_values,
            "missing_count": self.missing_count,
            "missing_percent": self.missing_percent,
            "sample_values": list(self.sample_values),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColumnMeta":
        overridden = data.get("overridden_type")
        return cls(
            name=data["name"],
            detected_type=ColumnType(data.get("detected_type", ColumnType.TEXT)),
            overridden_type=ColumnType(overridden) if overridden else None,
            unique_values=int(data.get("unique_values", 0) or 0),
            missing_count=int(data.get("missing_count", 0) or 0),
            missing_percent=float(data.get("missing_percent", 0.0) or 0.0),
            sample_values=list(data.get("sample_values", []) or []),
        )


def columns_of_type(columns: Sequence[ColumnMeta], types: Sequence[ColumnType]) -> List[ColumnMeta]:
    """Columns whose effective type is one of ``types``, in dataset order."""
    return [col for col in columns if col.effective_type in types]


def override_column_type(
    columns: Sequence[ColumnMeta], column_name: str, column_type: Optional[ColumnType]
) -> List[ColumnMeta]:
    """Return a new column list with one column's type overridden."""
    return [
        col.with_override(column_type) if col.name == column_name else col
        for col in columns
    ]


# ═══════════════════════════════════════════════════════════════
# STATISTICS
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ColumnStats:
    column: str
    count: int = 0
    mean: float = 0.0
    median: float = 0.0
    mode: Optional[float] = None
    std_dev: float = 0.0
    min: float = 0.0
    max: float = 0.0
    q1: float = 0.0
    q3: float = 0.0

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.column,
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "mode": self.mode,
            "std_dev": self.std_dev,
            "min": self.min,
            "max": self.max,
            "q1": self.q1,
            "q3": self.q3,
        }


@dataclass(frozen=True)
class CorrelationPair:
    col_a: str
    col_b: str
    r: float

    def to_dict(self, digits: Optional[int] = None) -> Dict[str, Any]:
        return {
            "col_a": self.col_a,
            "col_b": self.col_b,
            "r": round(self.r, digits) if digits is not None else self.r,
        }


@dataclass(frozen=True)
class CorrelationMatrix:
    columns: List[str]
    matrix: List[List[float]]

    def to_dict(self) -> Dict[str, Any]:
        return {"columns": list(self.columns), "matrix": [list(r) for r in self.matrix]}


# ═══════════════════════════════════════════════════════════════
# CROSS-TAB / GROUP-BY
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CrossTabResult:
    row_variable: str
    col_variable: str
    row_labels: List[str] = field(default_factory=list)
    col_labels: List[str] = field(default_factory=list)
    counts: List[List[int]] = field(default_factory=list)
    row_totals: List[int] = field(default_factory=list)
    col_totals: List[int] = field(default_factory=list)
    grand_total: int = 0

    def row_percentages(self) -> List[List[float]]:
        """Each cell as a percentage of its row total."""
        return [
            [(c / total * 100) if total else 0.0 for c in row]
            for row, total in zip(self.counts, self.row_totals)
        ]

    def col_percentages(self) -> List[List[float]]:
        """Each cell as a percentage of its column total."""
        return [
            [(c / self.col_totals[j] * 100) if self.col_totals[j] else 0.0 for j, c in enumerate(row)]
            for row in self.counts
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_variable": self.row_variable,
            "col_variable": self.col_variable,
            "row_labels": list(self.row_labels),
            "col_labels": list(self.col_labels),
            "counts": [list(r) for r in self.counts],
            "row_totals": list(self.row_totals),
            "col_totals": list(self.col_totals),
            "grand_total": self.grand_total,
        }


@dataclass(frozen=True)
class GroupStats:
    label: str
    count: int = 0
    mean: float = 0.0
    median: float = 0.0
    min: float = 0.0
    max: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "min": self.min,
            "max": self.max,
        }


@dataclass(frozen=True)
class GroupByResult:
    group_column: str
    value_column: str
    groups: List[GroupStats] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_column": self.group_column,
            "value_column": self.value_column,
            "groups": [g.to_dict() for g in self.groups],
        }


# ═══════════════════════════════════════════════════════════════
# INSIGHTS
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Insight:
    type: str           # correlation | distribution | outlier | pattern | quality
    title: str          # Short headline
    description: str    # Detailed explanation
    severity: str       # info | warning | notable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "severity": self.severity,
        }
