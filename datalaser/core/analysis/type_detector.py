"""
Column Type Detector — Semantic Column Classification
=======================================================
Infers one ColumnType per column from a bounded sample of its values and
computes the column's missing / cardinality metadata over the full row set.

Precedence (first rule that fires wins):
  1. No non-missing sampled values        -> text
  2. >= 90% percentage-shaped              -> percentage
  3. >= 90% date-like                      -> date
  4. >= 90% numeric                        -> likert_scale if a 1..5 / 1..7 scale, else numeric
  5. Likert labels ("agree", "satisfied")  -> likert_scale
  6. Demographic keyword in column name    -> demographic
  7. Few distinct values (<=20, <=50%)     -> categorical
  8. Everything else                       -> text
"""

import logging
from typing import Any, List, Optional, Sequence

from datalaser.core.analysis.models import ColumnMeta, ColumnType, Row
from datalaser.core.analysis.thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds
from datalaser.core.analysis.values import (
    is_date_value,
    is_missing,
    is_number,
    is_numeric_value,
    is_percentage_value,
    to_label,
)

logger = logging.getLogger(__name__)

SAMPLE_VALUE_COUNT = 5


# ═══════════════════════════════════════════════════════════════
# SAMPLING
# ═══════════════════════════════════════════════════════════════

def sample_rows(rows: Sequence[Row], max_sample: int) -> List[Row]:
    """
    Bounded, deterministic sample: every row when the set is small enough,
    otherwise every ``len // max_sample``-th row starting at row 0.
    """
    max_sample = max(1, max_sample)
    if len(rows) <= max_sample:
        return list(rows)

    step = len(rows) // max_sample
    sampled: List[Row] = []
    i = 0
    while i < len(rows) and len(sampled) < max_sample:
        sampled.append(rows[i])
        i += step
    return sampled


# ═══════════════════════════════════════════════════════════════
# HEURISTICS
# ═══════════════════════════════════════════════════════════════

def _matches_likert_labels(values: Sequence[Any], t: AnalysisThresholds) -> bool:
    distinct = {to_label(v).lower() for v in values if isinstance(v, str)}
    distinct.discard("")
    if not distinct:
        return False

    for pattern in t.likert_patterns:
        matches = sum(1 for v in distinct if any(label in v for label in pattern))
        if matches >= t.likert_min_label_matches:
            return True
    return False


def _matches_likert_scale(values: Sequence[Any], t: AnalysisThresholds) -> bool:
    numbers = sorted({v for v in values if is_number(v)})
    if not (t.likert_min_scale_points <= len(numbers) <= t.likert_max_scale_points):
        return False
    return numbers[0] == t.likert_scale_min and numbers[-1] in t.likert_scale_max_values


def is_likert_column(values: Sequence[Any], thresholds: Optional[AnalysisThresholds] = None) -> bool:
    """Likert by label vocabulary, or by a small integer 1..5 / 1..7 scale."""
    t = thresholds or DEFAULT_THRESHOLDS
    return _matches_likert_labels(values, t) or _matches_likert_scale(values, t)


def is_demographic_name(column_name: str, thresholds: Optional[AnalysisThresholds] = None) -> bool:
    t = thresholds or DEFAULT_THRESHOLDS
    lowered = column_name.lower()
    return any(keyword in lowered for keyword in t.demographic_keywords)


def _ratio(values: Sequence[Any], predicate) -> float:
    if not values:
        return 0.0
    return sum(1 for v in values if predicate(v)) / len(values)


# ═══════════════════════════════════════════════════════════════
# DETECTION
# ═══════════════════════════════════════════════════════════════

def detect_column_type(
    column_name: str,
    values: Sequence[Any],
    total_rows: int,
    thresholds: Optional[AnalysisThresholds] = None,
    distinct_count: Optional[int] = None,
) -> ColumnType:
    """
    Classify one column from its sampled values.

    ``distinct_count`` is the number of distinct trimmed values over the full
    row set; when omitted it is derived from ``values``.
    """
    t = thresholds or DEFAULT_THRESHOLDS
    present = [v for v in values if not is_missing(v)]

    if not present:
        return ColumnType.TEXT

    if _ratio(present, is_percentage_value) >= t.structural_match_ratio:
        return ColumnType.PERCENTAGE

    if _ratio(present, is_date_value) >= t.structural_match_ratio:
        return ColumnType.DATE

    if _ratio(present, is_numeric_value) >= t.structural_match_ratio:
        if _matches_likert_scale(present, t):
            return ColumnType.LIKERT_SCALE
        return ColumnType.NUMERIC

    if _matches_likert_labels(present, t):
        return ColumnType.LIKERT_SCALE

    if is_demographic_name(column_name, t):
        return ColumnType.DEMOGRAPHIC

    if distinct_count is None:
        distinct = {to_label(v) for v in present}
        distinct.discard("")
        distinct_count = len(distinct)

    ratio = distinct_count / total_rows if total_rows else 1.0
    if distinct_count <= t.categorical_max_unique and ratio <= t.categorical_max_ratio:
        return ColumnType.CATEGORICAL

    return ColumnType.TEXT


def detect_column_types(
    rows: Sequence[Row],
    column_names: Sequence[str],
    thresholds: Optional[AnalysisThresholds] = None,
) -> List[ColumnMeta]:
    """Detect every column's type and compute its metadata, in column order."""
    t = thresholds or DEFAULT_THRESHOLDS
    total = len(rows)
    sampled = sample_rows(rows, t.type_detection_sample_size)

    columns: List[ColumnMeta] = []
    for name in column_names:
        missing = 0
        distinct = set()
        samples: List[Any] = []
        for row in rows:
            value = row.get(name)
            if is_missing(value):
                missing += 1
                continue
            label = to_label(value)
            if label:
                distinct.add(label)
            if len(samples) < SAMPLE_VALUE_COUNT:
                samples.append(value)

        detected = detect_column_type(
            name,
            [row.get(name) for row in sampled],
            total,
            thresholds=t,
            distinct_count=len(distinct),
        )
        logger.debug(f"Column '{name}': {detected.value} ({len(distinct)} distinct, {missing}/{total} missing)")

        columns.append(ColumnMeta(
            name=name,
            detected_type=detected,
            unique_values=len(distinct),
            missing_count=missing,
            missing_percent=(missing / total * 100) if total else 0.0,
            sample_values=samples,
        ))

    return columns


def get_effective_type(column: ColumnMeta) -> ColumnType:
    return column.effective_type
