"""
Group-By Aggregation Engine — numeric summaries of one column per category of another.
"""

import logging
from typing import Dict, List, Sequence

from datalaser.core.analysis.models import GroupByResult, GroupStats, Row
from datalaser.core.analysis.statistics import mean_of, median_of_sorted
from datalaser.core.analysis.values import is_missing, parse_numeric, to_label

logger = logging.getLogger(__name__)


def compute_group_by(rows: Sequence[Row], group_column: str, value_column: str) -> GroupByResult:
    """
    Partition rows by the trimmed label of ``group_column`` and summarise the
    numeric values of ``value_column`` in each partition.

    A group whose rows carry no parseable numbers is still reported, with
    zeroed stats.
    """
    partitions: Dict[str, List[float]] = {}
    for row in rows:
        raw = row.get(group_column)
        if is_missing(raw):
            continue
        label = to_label(raw)
        if not label:
            continue
        bucket = partitions.setdefault(label, [])
        value = parse_numeric(row.get(value_column))
        if value is not None:
            bucket.append(value)

    groups = []
    for label in sorted(partitions):
        values = sorted(partitions[label])
        if not values:
            groups.append(GroupStats(label=label))
            continue
        groups.append(GroupStats(
            label=label,
            count=len(values),
            mean=mean_of(values),
            median=median_of_sorted(values),
            min=values[0],
            max=values[-1],
        ))

    logger.debug(f"Group-by {value_column} by {group_column}: {len(groups)} groups")
    return GroupByResult(group_column=group_column, value_column=value_column, groups=groups)
