"""
Dataset Summary — compact dataset overview and data quality report
=====================================================================
The summary is the context block an external conversational analyst reads
before calling tools; the quality helpers back the dashboard overview.

Capabilities:
  1. build_dataset_summary   — per-column type, cardinality, stats / top values, sample rows
  2. compute_quality_score   — share of non-missing cells (0-100)
  3. count_column_types      — effective-type histogram
  4. build_quality_warnings  — missing-data, sample-size and parse warnings
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from datalaser.core.analysis.models import (
    CATEGORICAL_TYPES,
    NUMERIC_TYPES,
    ColumnMeta,
    ColumnType,
    Row,
)
from datalaser.core.analysis.statistics import compute_column_stats
from datalaser.core.analysis.thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds
from datalaser.core.analysis.values import is_missing, to_label

logger = logging.getLogger(__name__)

TOP_VALUES_LIMIT = 10
SAMPLE_ROWS_LIMIT = 5


def value_frequencies(rows: Sequence[Row], column: str) -> Dict[str, int]:
    """Counts of trimmed non-empty labels, in first-seen order."""
    freq: Dict[str, int] = {}
    for row in rows:
        raw = row.get(column)
        if is_missing(raw):
            continue
        label = to_label(raw)
        if label:
            freq[label] = freq.get(label, 0) + 1
    return freq


def top_values(rows: Sequence[Row], column: str, limit: int = TOP_VALUES_LIMIT) -> List[Dict[str, Any]]:
    ranked = sorted(value_frequencies(rows, column).items(), key=lambda kv: kv[1], reverse=True)
    return [{"value": label, "count": count} for label, count in ranked[:limit]]


# ═══════════════════════════════════════════════════════════════
# DATASET SUMMARY
# ═══════════════════════════════════════════════════════════════

def summarize_column(rows: Sequence[Row], col: ColumnMeta) -> Dict[str, Any]:
    effective = col.effective_type
    summary: Dict[str, Any] = {
        "name": col.name,
        "type": effective.value,
        "unique_values": col.unique_values,
        "missing_percent": round(col.missing_percent, 1),
    }

    if effective in NUMERIC_TYPES:
        stats = compute_column_stats(rows, col.name)
        summary["stats"] = {
            "mean": round(stats.mean, 2),
            "median": round(stats.median, 2),
            "min": stats.min,
            "max": stats.max,
            "std_dev": round(stats.std_dev, 2),
        }

    if effective in CATEGORICAL_TYPES:
        summary["top_values"] = top_values(rows, col.name)

    return summary


def build_dataset_summary(file_name: str, rows: Sequence[Row], columns: Sequence[ColumnMeta]) -> Dict[str, Any]:
    summary = {
        "file_name": file_name,
        "row_count": len(rows),
        "columns": [summarize_column(rows, col) for col in columns],
        "sample_rows": [dict(row) for row in rows[:SAMPLE_ROWS_LIMIT]],
    }
    logger.debug(f"Summary built for '{file_name}': {len(rows)} rows, {len(columns)} columns")
    return summary


# ═══════════════════════════════════════════════════════════════
# OVERVIEW & QUALITY
# ═══════════════════════════════════════════════════════════════

def compute_quality_score(columns: Sequence[ColumnMeta], row_count: int) -> int:
    total_cells = row_count * len(columns)
    if total_cells == 0:
        return 0
    missing = sum(col.missing_count for col in columns)
    return round((total_cells - missing) / total_cells * 100)


def count_column_types(columns: Sequence[ColumnMeta]) -> Dict[str, int]:
    counts = {t.value: 0 for t in ColumnType}
    for col in columns:
        counts[col.effective_type.value] += 1
    return counts


@dataclass(frozen=True)
class QualityWarning:
    type: str                      # missing | sample | parse
    severity: str                  # error | warning | info
    message: str
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "severity": self.severity, "message": self.message, "detail": self.detail}


def build_quality_warnings(
    columns: Sequence[ColumnMeta],
    row_count: int,
    parse_warnings: Sequence[str] = (),
    thresholds: Optional[AnalysisThresholds] = None,
) -> List[QualityWarning]:
    t = thresholds or DEFAULT_THRESHOLDS
    warnings: List[QualityWarning] = []

    for col in columns:
        if col.missing_percent <= t.quality_missing_pct_warning:
            continue
        warnings.append(QualityWarning(
            type="missing",
            severity="error" if col.missing_percent > t.quality_missing_pct_error else "warning",
            message=f'"{col.name}" has {col.missing_percent:.1f}% missing data',
            detail=f"{col.missing_count:,} of {row_count:,} values are empty",
        ))

    if 0 < row_count < t.min_reliable_sample:
        warnings.append(QualityWarning(
            type="sample",
            severity="warning",
            message=f"Small sample size: only {row_count} rows",
            detail=(
                f"Results may not be statistically reliable with fewer than "
                f"{t.min_reliable_sample} observations"
            ),
        ))

    for message in parse_warnings:
        warnings.append(QualityWarning(type="parse", severity="info", message=message))

    return warnings
