"""
DataLaser Analysis — Core Module
==================================
Column type inference and exploratory statistics over parsed tabular rows.
Every function is pure: it takes the whole (rows, columns) snapshot and
returns fresh value objects, never mutating its inputs.

Components:
  ┌──────────────────────────────────────────────────────┐
  │ values          — Cell normalisation (missing/num/%) │
  │ type_detector   — Semantic column classification     │
  │ statistics      — Descriptive stats, Pearson r       │
  │ correlations    — Matrix + strongest pairs           │
  │ cross_tab       — Contingency tables                 │
  │ group_by        — Numeric stats per category         │
  │ insights        — Deterministic insight rules        │
  │ filters         — Column-scoped row predicates       │
  │ charts          — Chart series and chart specs       │
  │ summary         — Dataset summary and quality report │
  │ tools           — Tool dispatcher for an LLM analyst │
  └──────────────────────────────────────────────────────┘

Usage:
  from datalaser.core.analysis import detect_column_types, generate_insights
  columns = detect_column_types(rows, ["age", "region", "score"])
  insights = generate_insights(rows, columns)
"""

from .models import (
    CATEGORICAL_TYPES,
    NUMERIC_TYPES,
    ColumnMeta,
    ColumnStats,
    ColumnType,
    CorrelationMatrix,
    CorrelationPair,
    CrossTabResult,
    GroupByResult,
    GroupStats,
    Insight,
    columns_of_type,
    override_column_type,
)
from .thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds
from .values import (
    is_date_value,
    is_missing,
    is_numeric_value,
    is_percentage_value,
    parse_date,
    parse_numeric,
    to_label,
)
from .type_detector import detect_column_type, detect_column_types, get_effective_type, sample_rows
from .statistics import compute_all_stats, compute_column_stats, compute_correlation, get_numeric_values
from .correlations import build_correlation_matrix, compute_correlation_matrix, get_strongest_correlations
from .cross_tab import compute_cross_tab
from .group_by import compute_group_by
from .insights import InsightGenerator, generate_insights
from .filters import ActiveFilter, FilterKind, FilterSet, apply_filter
from .charts import ChartType, build_chart_series, build_chart_spec
from .summary import (
    build_dataset_summary,
    build_quality_warnings,
    compute_quality_score,
    count_column_types,
)
from .tools import TOOL_DEFINITIONS, ToolDispatcher, execute_tool

__all__ = [
    "CATEGORICAL_TYPES",
    "NUMERIC_TYPES",
    "ColumnMeta",
    "ColumnStats",
    "ColumnType",
    "CorrelationMatrix",
    "CorrelationPair",
    "CrossTabResult",
    "GroupByResult",
    "GroupStats",
    "Insight",
    "columns_of_type",
    "override_column_type",
    "DEFAULT_THRESHOLDS",
    "AnalysisThresholds",
    "is_date_value",
    "is_missing",
    "is_numeric_value",
    "is_percentage_value",
    "parse_date",
    "parse_numeric",
    "to_label",
    "detect_column_type",
    "detect_column_types",
    "get_effective_type",
    "sample_rows",
    "compute_all_stats",
    "compute_column_stats",
    "compute_correlation",
    "get_numeric_values",
    "build_correlation_matrix",
    "compute_correlation_matrix",
    "get_strongest_correlations",
    "compute_cross_tab",
    "compute_group_by",
    "InsightGenerator",
    "generate_insights",
    "ActiveFilter",
    "FilterKind",
    "FilterSet",
    "apply_filter",
    "ChartType",
    "build_chart_series",
    "build_chart_spec",
    "build_dataset_summary",
    "build_quality_warnings",
    "compute_quality_score",
    "count_column_types",
    "TOOL_DEFINITIONS",
    "ToolDispatcher",
    "execute_tool",
]
