"""
Insight Generator — Deterministic Data Quality & Pattern Rules
================================================================
Scans a whole dataset snapshot and emits human-readable Insight records.
Every insight is derived from a fixed rule and a computed statistic; there is
no randomness and no model in the loop.

Rule categories (evaluated in this order):
  1. Empty Dataset     — short-circuits everything else
  2. Sample Size       — fewer than 50 rows
  3. Missing Data      — per-column missing share above 10%
  4. Correlation       — strong linear pairs among numeric/percentage columns
  5. Distribution      — Pearson skewness 3(mean - median)/std beyond ±1
  6. Outliers          — values outside the 1.5 x IQR fences
  7. Dominance         — one category holding over 60% of valid values

Severity Levels:
  warning  — likely to compromise analysis reliability
  notable  — worth a look before drawing conclusions
  info     — context for interpretation
"""

import logging
from typing import Dict, List, Optional, Sequence

from datalaser.core.analysis.correlations import (
    compute_correlation_matrix,
    get_strongest_correlations,
)
from datalaser.core.analysis.models import (
    CATEGORICAL_TYPES,
    NUMERIC_TYPES,
    ColumnMeta,
    Insight,
    Row,
    columns_of_type,
)
from datalaser.core.analysis.statistics import compute_column_stats, get_numeric_values
from datalaser.core.analysis.thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds
from datalaser.core.analysis.values import is_missing, to_label

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
# INSIGHT GENERATOR
# ═══════════════════════════════════════════════════════════════════

class InsightGenerator:
    """Evaluates every insight rule against one (rows, columns) snapshot."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.t = thresholds or DEFAULT_THRESHOLDS

    def evaluate(self, rows: Sequence[Row], columns: Sequence[ColumnMeta]) -> List[Insight]:
        insights: List[Insight] = []

        if not rows:
            insights.append(Insight(
                type="quality",
                title="No data available",
                description="The dataset contains no rows. Analysis cannot be performed.",
                severity="warning",
            ))
            return insights

        numeric_columns = columns_of_type(columns, NUMERIC_TYPES)

        self._rules_sample_size(rows, insights)
        self._rules_missing_data(rows, columns, insights)
        self._rules_correlation(rows, numeric_columns, insights)
        self._rules_distribution(rows, numeric_columns, insights)
        self._rules_outliers(rows, numeric_columns, insights)
        self._rules_dominance(rows, columns_of_type(columns, CATEGORICAL_TYPES), insights)

        logger.debug(f"Generated {len(insights)} insights for {len(rows)} rows x {len(columns)} columns")
        return insights

    # ══════════════════════════════════════════════════════════════
    # DATA QUALITY
    # ══════════════════════════════════════════════════════════════

    def _rules_sample_size(self, rows: Sequence[Row], out: List[Insight]):
        n = len(rows)
        if n >= self.t.small_sample_rows:
            return
        out.append(Insight(
            type="quality",
            title="Small sample size",
            description=(
                f"The dataset contains only {n} rows. Statistical results may not be "
                f"reliable with fewer than {self.t.small_sample_rows} observations."
            ),
            severity="warning",
        ))

    def _rules_missing_data(self, rows: Sequence[Row], columns: Sequence[ColumnMeta], out: List[Insight]):
        for col in columns:
            if col.missing_percent <= self.t.missing_pct_notable:
                continue
            out.append(Insight(
                type="quality",
                title=f"High missing data: {col.name}",
                description=(
                    f'Column "{col.name}" has {col.missing_percent:.1f}% missing values '
                    f"({col.missing_count} of {len(rows)} rows). This may affect analysis reliability."
                ),
                severity="warning" if col.missing_percent > self.t.missing_pct_warning else "notable",
            ))

    # ══════════════════════════════════════════════════════════════
    # NUMERIC RELATIONSHIPS & SHAPE
    # ══════════════════════════════════════════════════════════════

    def _rules_correlation(self, rows: Sequence[Row], numeric: Sequence[ColumnMeta], out: List[Insight]):
        if len(numeric) < 2:
            return

        names = [c.name for c in numeric]
        matrix = compute_correlation_matrix(rows, names)
        pairs = get_strongest_correlations(matrix, names, self.t.correlation_scan_top_n)

        for pair in pairs:
            strength_abs = abs(pair.r)
            if strength_abs <= self.t.correlation_strong:
                continue
            very_strong = strength_abs > self.t.correlation_very_strong
            direction = "positive" if pair.r > 0 else "negative"
            strength = "very strong" if very_strong else "strong"
            out.append(Insight(
                type="correlation",
                title=f"{strength} {direction} correlation",
                description=(
                    f'"{pair.col_a}" and "{pair.col_b}" have a {strength} {direction} correlation '
                    f"(r = {pair.r:.3f}). Changes in one variable are closely associated with "
                    f"changes in the other."
                ),
                severity="notable" if very_strong else "info",
            ))

    def _rules_distribution(self, rows: Sequence[Row], numeric: Sequence[ColumnMeta], out: List[Insight]):
        for col in numeric:
            stats = compute_column_stats(rows, col.name)
            if stats.count < self.t.skew_min_count or stats.std_dev == 0:
                continue

            skewness = 3 * (stats.mean - stats.median) / stats.std_dev
            if abs(skewness) <= self.t.skew_threshold:
                continue

            direction = "right (positively)" if skewness > 0 else "left (negatively)"
            out.append(Insight(
                type="distribution",
                title=f"Skewed distribution: {col.name}",
                description=(
                    f'Column "{col.name}" is skewed {direction} (skewness coefficient: {skewness:.2f}). '
                    f"The mean ({stats.mean:.2f}) differs notably from the median ({stats.median:.2f}). "
                    f"Consider using the median for central tendency."
                ),
                severity="info",
            ))

    def _rules_outliers(self, rows: Sequence[Row], numeric: Sequence[ColumnMeta], out: List[Insight]):
        for col in numeric:
            stats = compute_column_stats(rows, col.name)
            if stats.count < self.t.outlier_min_count or stats.iqr == 0:
                continue

            lower = stats.q1 - self.t.outlier_iqr_multiplier * stats.iqr
            upper = stats.q3 + self.t.outlier_iqr_multiplier * stats.iqr
            values = get_numeric_values(rows, col.name)
            outliers = sum(1 for v in values if v < lower or v > upper)
            if outliers == 0:
                continue

            pct = round(outliers / len(values) * 100, 1)
            plural = "" if outliers == 1 else "s"
            out.append(Insight(
                type="outlier",
                title=f"Outliers detected: {col.name}",
                description=(
                    f'Column "{col.name}" has {outliers} potential outlier{plural} ({pct:.1f}% of values) '
                    f"outside the interquartile range [{lower:.2f}, {upper:.2f}]."
                ),
                severity="warning" if pct > self.t.outlier_pct_warning else "info",
            ))

    # ══════════════════════════════════════════════════════════════
    # CATEGORICAL DOMINANCE
    # ══════════════════════════════════════════════════════════════

    def _rules_dominance(self, rows: Sequence[Row], categorical: Sequence[ColumnMeta], out: List[Insight]):
        for col in categorical:
            freq: Dict[str, int] = {}
            total_valid = 0
            for row in rows:
                raw = row.get(col.name)
                if is_missing(raw):
                    continue
                label = to_label(raw)
                if not label:
                    continue
                freq[label] = freq.get(label, 0) + 1
                total_valid += 1

            if total_valid == 0:
                continue

            # Strict ">" keeps the first-seen label on ties.
            top_label, top_count = "", 0
            for label, count in freq.items():
                if count > top_count:
                    top_label, top_count = label, count

            share = top_count / total_valid * 100
            if share <= self.t.dominance_pct_notable:
                continue
            out.append(Insight(
                type="pattern",
                title=f"Dominant value: {col.name}",
                description=(
                    f'In column "{col.name}", the value "{top_label}" accounts for {share:.1f}% of '
                    f"responses ({top_count} of {total_valid}). This low variability may limit "
                    f"analytical usefulness."
                ),
                severity="warning" if share > self.t.dominance_pct_warning else "notable",
            ))


def generate_insights(
    rows: Sequence[Row],
    columns: Sequence[ColumnMeta],
    thresholds: Optional[AnalysisThresholds] = None,
) -> List[Insight]:
    return InsightGenerator(thresholds).evaluate(rows, columns)
