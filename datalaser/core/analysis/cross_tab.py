"""
Cross-Tabulation Engine — contingency table of two categorical columns.
"""

import logging
from collections import defaultdict
from typing import Dict, Sequence

from datalaser.core.analysis.models import CrossTabResult, Row
from datalaser.core.analysis.values import is_missing, to_label

logger = logging.getLogger(__name__)


def compute_cross_tab(rows: Sequence[Row], row_column: str, col_column: str) -> CrossTabResult:
    """
    Count co-occurrences of the trimmed labels of two columns.

    Rows where either value is missing or blank after trimming are skipped.
    Labels on both axes are sorted lexicographically.
    """
    cells: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    row_set, col_set = set(), set()

    for row in rows:
        raw_r, raw_c = row.get(row_column), row.get(col_column)
        if is_missing(raw_r) or is_missing(raw_c):
            continue
        r_label, c_label = to_label(raw_r), to_label(raw_c)
        if not r_label or not c_label:
            continue
        row_set.add(r_label)
        col_set.add(c_label)
        cells[r_label][c_label] += 1

    row_labels = sorted(row_set)
    col_labels = sorted(col_set)
    counts = [[cells[r][c] if r in cells else 0 for c in col_labels] for r in row_labels]
    row_totals = [sum(line) for line in counts]
    col_totals = [sum(counts[i][j] for i in range(len(row_labels))) for j in range(len(col_labels))]

    logger.debug(f"Cross-tab {row_column} x {col_column}: {len(row_labels)}x{len(col_labels)}")

    return CrossTabResult(
        row_variable=row_column,
        col_variable=col_column,
        row_labels=row_labels,
        col_labels=col_labels,
        counts=counts,
        row_totals=row_totals,
        col_totals=col_totals,
        grand_total=sum(row_totals),
    )
