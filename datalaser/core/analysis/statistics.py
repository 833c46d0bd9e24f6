"""
Descriptive Statistics Engine — Per-Column Numeric Summaries
==============================================================
Pure-Python descriptive statistics over the parseable numeric values of a
column. Missing or unparseable cells are skipped, never coerced to zero.

Capabilities:
  1. Numeric extraction      — get_numeric_values (percentages keep magnitude)
  2. Column summary          — count, mean, median, mode, population std, min/max, Q1/Q3
  3. Pairwise correlation    — Pearson r over rows where both columns parse
"""

import logging
import math
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from datalaser.core.analysis.models import NUMERIC_TYPES, ColumnMeta, ColumnStats, Row
from datalaser.core.analysis.values import parse_numeric

logger = logging.getLogger(__name__)


def get_numeric_values(rows: Sequence[Row], column: str) -> List[float]:
    """Parseable numbers of ``column`` in row order."""
    values = []
    for row in rows:
        parsed = parse_numeric(row.get(column))
        if parsed is not None:
            values.append(parsed)
    return values


# ── Order statistics ──

def median_of_sorted(values: Sequence[float]) -> float:
    n = len(values)
    if n == 0:
        return 0.0
    mid = n // 2
    if n % 2 == 0:
        return (values[mid - 1] + values[mid]) / 2
    return values[mid]


def quartiles_of_sorted(values: Sequence[float]) -> Tuple[float, float]:
    """Q1/Q3 as medians of the lower and upper halves (middle excluded when odd)."""
    n = len(values)
    if n == 0:
        return 0.0, 0.0
    if n == 1:
        return values[0], values[0]
    half = n // 2
    lower = values[:half]
    upper = values[half + 1:] if n % 2 else values[half:]
    return median_of_sorted(lower), median_of_sorted(upper)


def mode_of(values: Sequence[float]) -> Optional[float]:
    """Most frequent value; smallest on ties; None when every value is unique."""
    if not values:
        return None
    counts = Counter(values)
    top = max(counts.values())
    if top == 1:
        return None
    return min(v for v, c in counts.items() if c == top)


def mean_of(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def population_std(values: Sequence[float], mean: Optional[float] = None) -> float:
    if not values:
        return 0.0
    m = mean_of(values) if mean is None else mean
    return math.sqrt(sum((v - m) ** 2 for v in values) / len(values))


# ═══════════════════════════════════════════════════════════════
# COLUMN STATISTICS
# ═══════════════════════════════════════════════════════════════

def compute_column_stats(rows: Sequence[Row], column: str) -> ColumnStats:
    values = get_numeric_values(rows, column)
    if not values:
        return ColumnStats(column=column)

    ordered = sorted(values)
    mean = mean_of(ordered)
    q1, q3 = quartiles_of_sorted(ordered)

    return ColumnStats(
        column=column,
        count=len(ordered),
        mean=mean,
        median=median_of_sorted(ordered),
        mode=mode_of(ordered),
        std_dev=population_std(ordered, mean),
        min=ordered[0],
        max=ordered[-1],
        q1=q1,
        q3=q3,
    )


def compute_all_stats(rows: Sequence[Row], columns: Sequence[ColumnMeta]) -> Dict[str, ColumnStats]:
    """Stats for every numeric/percentage column, keyed by column name."""
    return {
        col.name: compute_column_stats(rows, col.name)
        for col in columns
        if col.effective_type in NUMERIC_TYPES
    }


# ═══════════════════════════════════════════════════════════════
# CORRELATION
# ═══════════════════════════════════════════════════════════════

def paired_values(rows: Sequence[Row], col_a: str, col_b: str) -> Tuple[List[float], List[float]]:
    xs, ys = [], []
    for row in rows:
        a = parse_numeric(row.get(col_a))
        b = parse_numeric(row.get(col_b))
        if a is None or b is None:
            continue
        xs.append(a)
        ys.append(b)
    return xs, ys


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    n = len(xs)
    if n < 2:
        return 0.0
    mx, my = mean_of(xs), mean_of(ys)
    cov = sum((x - mx) * (y - my) for x, y in zip(xs, ys))
    var_x = sum((x - mx) ** 2 for x in xs)
    var_y = sum((y - my) ** 2 for y in ys)
    denom = math.sqrt(var_x * var_y)
    if denom == 0:
        return 0.0
    r = cov / denom
    # Rounding noise can push |r| past 1 for perfectly linear data.
    return max(-1.0, min(1.0, r))


def compute_correlation(rows: Sequence[Row], col_a: str, col_b: str) -> float:
    """Pearson r over rows where both columns parse; 0 when undefined."""
    xs, ys = paired_values(rows, col_a, col_b)
    return pearson(xs, ys)
