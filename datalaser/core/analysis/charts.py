"""
Chart Series — label/dataset aggregation for an external renderer
===================================================================
Builds renderer-agnostic chart payloads. Drawing, colours and export are the
renderer's concern; this module only decides labels and numbers.

Usage:
  series = build_chart_series(rows, "region", "score", group_by="gender")
  spec = build_chart_spec("groupedBar", series["labels"], series["datasets"], "Score by region")
"""

import logging
import math
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from datalaser.core.analysis.models import Row
from datalaser.core.analysis.statistics import mean_of
from datalaser.core.analysis.values import is_number, parse_numeric
from datalaser.core.exceptions import ChartSpecError

logger = logging.getLogger(__name__)

COUNT_SENTINEL = "__count__"


class ChartType(str, Enum):
    BAR = "bar"
    HORIZONTAL_BAR = "horizontalBar"
    GROUPED_BAR = "groupedBar"
    STACKED_BAR = "stackedBar"
    LINE = "line"
    PIE = "pie"
    DOUGHNUT = "doughnut"
    SCATTER = "scatter"


def _axis_label(value: Any) -> str:
    return "" if value is None else str(value)


def _aggregate(buckets: Dict[str, List[float]], label: str, is_count: bool) -> float:
    values = buckets.get(label)
    if not values:
        return 0
    if is_count:
        return len(values)
    return mean_of(values)


def build_chart_series(
    rows: Sequence[Row],
    x_column: str,
    y_column: Optional[str] = None,
    group_by: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Aggregate rows into ``{"labels": [...], "datasets": [{"label", "data"}]}``.

    Without ``y_column`` (or with "__count__") each x label is counted;
    otherwise the mean of the parseable y values per x label is taken.
    Labels keep first-seen order.
    """
    is_count = not y_column or y_column == COUNT_SENTINEL

    if group_by:
        x_labels: Dict[str, None] = {}
        groups: Dict[str, Dict[str, List[float]]] = {}
        for row in rows:
            x = _axis_label(row.get(x_column))
            g = _axis_label(row.get(group_by))
            x_labels.setdefault(x, None)
            bucket = groups.setdefault(g, {})
            if is_count:
                bucket.setdefault(x, []).append(1.0)
                continue
            y = parse_numeric(row.get(y_column))
            if y is not None:
                bucket.setdefault(x, []).append(y)

        labels = list(x_labels)
        datasets = [
            {"label": g, "data": [_aggregate(bucket, x, is_count) for x in labels]}
            for g, bucket in groups.items()
        ]
        return {"labels": labels, "datasets": datasets}

    buckets: Dict[str, List[float]] = {}
    for row in rows:
        x = _axis_label(row.get(x_column))
        if is_count:
            buckets.setdefault(x, []).append(1.0)
            continue
        y = parse_numeric(row.get(y_column))
        if y is not None:
            buckets.setdefault(x, []).append(y)

    labels = list(buckets)
    return {
        "labels": labels,
        "datasets": [{
            "label": "Count" if is_count else y_column,
            "data": [_aggregate(buckets, x, is_count) for x in labels],
        }],
    }


def build_chart_spec(
    chart_type: str,
    labels: Sequence[Any],
    datasets: Sequence[Dict[str, Any]],
    title: str = "",
) -> Dict[str, Any]:
    """Validate a chart payload and return it in the renderer's shape."""
    try:
        kind = ChartType(chart_type)
    except ValueError:
        raise ChartSpecError(f"Unknown chart type: {chart_type}", {"chart_type": chart_type})

    label_list = [str(label) for label in labels]
    clean_datasets = []
    for i, ds in enumerate(datasets):
        if not isinstance(ds, dict) or "label" not in ds or "data" not in ds:
            raise ChartSpecError(f"Dataset {i} needs 'label' and 'data'", {"dataset": i})
        data = list(ds["data"])
        if len(data) != len(label_list):
            raise ChartSpecError(
                f"Dataset {i} has {len(data)} values for {len(label_list)} labels",
                {"dataset": i},
            )
        if not all(is_number(v) and math.isfinite(v) for v in data):
            raise ChartSpecError(f"Dataset {i} contains non-numeric values", {"dataset": i})
        clean_datasets.append({"label": str(ds["label"]), "data": data})

    logger.debug(f"Chart spec built: {kind.value} with {len(clean_datasets)} datasets")
    return {
        "_type": "chart",
        "chart_type": kind.value,
        "title": title,
        "labels": label_list,
        "datasets": clean_datasets,
    }
