"""
Correlation matrix and strongest-pair ranking over numeric columns.
"""

import logging
from typing import List, Sequence

from datalaser.core.analysis.models import CorrelationMatrix, CorrelationPair, Row
from datalaser.core.analysis.statistics import compute_correlation

logger = logging.getLogger(__name__)


def compute_correlation_matrix(rows: Sequence[Row], columns: Sequence[str]) -> List[List[float]]:
    """Symmetric n x n Pearson matrix with a unit diagonal."""
    n = len(columns)
    matrix = [[0.0] * n for _ in range(n)]
    for i in range(n):
        matrix[i][i] = 1.0
        for j in range(i + 1, n):
            r = compute_correlation(rows, columns[i], columns[j])
            matrix[i][j] = r
            matrix[j][i] = r
    logger.debug(f"Correlation matrix computed for {n} columns")
    return matrix


def build_correlation_matrix(rows: Sequence[Row], columns: Sequence[str]) -> CorrelationMatrix:
    return CorrelationMatrix(columns=list(columns), matrix=compute_correlation_matrix(rows, columns))


def get_strongest_correlations(
    matrix: Sequence[Sequence[float]],
    columns: Sequence[str],
    top_n: int = 10,
) -> List[CorrelationPair]:
    """Upper-triangle pairs ordered by |r| descending, first ``top_n``."""
    pairs = [
        CorrelationPair(col_a=columns[i], col_b=columns[j], r=matrix[i][j])
        for i in range(len(columns))
        for j in range(i + 1, len(columns))
    ]
    pairs.sort(key=lambda p: abs(p.r), reverse=True)
    return pairs[:top_n]
