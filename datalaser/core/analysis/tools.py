"""
Analyst Tool Dispatcher — Callable Capabilities for a Conversational Analyst
==============================================================================
A fixed registry of named operations an external LLM-driven agent may call
over the currently loaded dataset. Each call takes structured input and
returns a JSON string; nothing ever raises across this boundary.

Tools:
  compute_stats        per-column descriptive statistics
  compute_correlation  Pearson r between two columns (3 dp)
  correlation_matrix   numeric/percentage matrix + strongest pairs
  cross_tab            contingency table of two categorical columns
  group_by             numeric stats per category
  get_value_counts     frequency table with percentages (1 dp)
  filter_data          conjunctive conditions -> counts, percent, 5-row sample
  get_sample_rows      first N rows (default 5, max 20), optional projection
  create_chart         validated chart spec for the presentation layer

Usage:
  dispatcher = ToolDispatcher(rows, columns)
  dispatcher.dispatch({"tool_name": "group_by", "input": {...}})
  execute_tool("compute_stats", {"columns": ["age"]}, rows, columns)
"""

import json
import logging
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Sequence, Set, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from datalaser.core.analysis.charts import ChartType, build_chart_spec
from datalaser.core.analysis.correlations import compute_correlation_matrix, get_strongest_correlations
from datalaser.core.analysis.cross_tab import compute_cross_tab
from datalaser.core.analysis.group_by import compute_group_by
from datalaser.core.analysis.models import NUMERIC_TYPES, ColumnMeta, Row, columns_of_type
from datalaser.core.analysis.statistics import compute_column_stats, compute_correlation
from datalaser.core.analysis.summary import value_frequencies
from datalaser.core.analysis.values import is_missing, parse_numeric, to_label
from datalaser.core.exceptions import ColumnNotFoundError, DataLaserError, InvalidToolInputError

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_ROWS = 5
MAX_SAMPLE_ROWS = 20
FILTER_SAMPLE_ROWS = 5
DEFAULT_TOP_N = 10
CORRELATION_DIGITS = 3


# ═══════════════════════════════════════════════════════════════
# TOOL DEFINITIONS (advertised to the agent)
# ═══════════════════════════════════════════════════════════════

FILTER_OPERATORS = (
    "equals", "not_equals", "greater_than", "less_than",
    "greater_or_equal", "less_or_equal", "contains", "in",
)

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": "compute_stats",
        "description": (
            "Compute descriptive statistics (count, mean, median, mode, std dev, min, max, Q1, Q3) "
            "for one or more numeric columns."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "columns": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Column names to compute statistics for.",
                },
            },
            "required": ["columns"],
        },
    },
    {
        "name": "compute_correlation",
        "description": (
            "Compute the Pearson correlation coefficient between two numeric columns. "
            "Returns a value from -1 to 1."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "column_a": {"type": "string", "description": "First numeric column name."},
                "column_b": {"type": "string", "description": "Second numeric column name."},
            },
            "required": ["column_a", "column_b"],
        },
    },
    {
        "name": "correlation_matrix",
        "description": (
            "Compute a full Pearson correlation matrix for all numeric columns, "
            "and return the strongest correlations."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "top_n": {
                    "type": "number",
                    "description": "Number of strongest correlations to return. Default 10.",
                },
            },
            "required": [],
        },
    },
    {
        "name": "cross_tab",
        "description": (
            "Compute a cross-tabulation (contingency table) between two categorical columns. "
            "Shows frequency counts for each combination."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "row_column": {"type": "string", "description": "Categorical column for rows."},
                "col_column": {"type": "string", "description": "Categorical column for columns."},
            },
            "required": ["row_column", "col_column"],
        },
    },
    {
        "name": "group_by",
        "description": (
            "Group data by a categorical column and compute statistics (count, mean, median, "
            "min, max) for a numeric column within each group."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "group_column": {"type": "string", "description": "Categorical column to group by."},
                "value_column": {"type": "string", "description": "Numeric column to compute statistics for."},
            },
            "required": ["group_column", "value_column"],
        },
    },
    {
        "name": "get_value_counts",
        "description": (
            "Get the frequency distribution (value counts) for a categorical column. "
            "Returns each unique value and its count, sorted by frequency."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "column": {"type": "string", "description": "Column name."},
                "top_n": {"type": "number", "description": "Max number of values to return. Default all."},
            },
            "required": ["column"],
        },
    },
    {
        "name": "filter_data",
        "description": (
            "Filter the dataset by conditions and return a summary of the filtered subset. "
            "Use for questions like 'How many rows have age > 30?'"
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "conditions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "column": {"type": "string"},
                            "operator": {"type": "string", "enum": list(FILTER_OPERATORS)},
                            "value": {
                                "description": (
                                    "The value to compare against. For 'in' operator, "
                                    "provide an array of strings."
                                ),
                            },
                        },
                        "required": ["column", "operator", "value"],
                    },
                    "description": "Array of filter conditions. All conditions are ANDed together.",
                },
            },
            "required": ["conditions"],
        },
    },
    {
        "name": "get_sample_rows",
        "description": "Return a sample of rows from the dataset. Useful for inspecting actual values.",
        "input_schema": {
            "type": "object",
            "properties": {
                "count": {"type": "number", "description": "Number of rows to return. Default 5, max 20."},
                "columns": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Specific columns to include. Default all.",
                },
            },
            "required": [],
        },
    },
    {
        "name": "create_chart",
        "description": (
            "Create an inline chart that will be rendered in the chat. Use this when a visual "
            "representation would help the user understand the data."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "chart_type": {
                    "type": "string",
                    "enum": [t.value for t in ChartType],
                    "description": "Type of chart to create.",
                },
                "title": {"type": "string", "description": "Chart title."},
                "labels": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "X-axis labels or category names.",
                },
                "datasets": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "label": {"type": "string"},
                            "data": {"type": "array", "items": {"type": "number"}},
                        },
                        "required": ["label", "data"],
                    },
                    "description": "One or more datasets to plot.",
                },
            },
            "required": ["chart_type", "labels", "datasets"],
        },
    },
]


# ═══════════════════════════════════════════════════════════════
# INPUT SCHEMAS (validation)
# ═══════════════════════════════════════════════════════════════

class _ToolInput(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ComputeStatsInput(_ToolInput):
    columns: List[str]


class CorrelationInput(_ToolInput):
    column_a: str
    column_b: str


class CorrelationMatrixInput(_ToolInput):
    top_n: Optional[int] = None


class CrossTabInput(_ToolInput):
    row_column: str
    col_column: str


class GroupByInput(_ToolInput):
    group_column: str
    value_column: str


class ValueCountsInput(_ToolInput):
    column: str
    top_n: Optional[int] = None


class FilterCondition(_ToolInput):
    column: str
    operator: Literal[
        "equals", "not_equals", "greater_than", "less_than",
        "greater_or_equal", "less_or_equal", "contains", "in",
    ]
    value: Any = Field(...)


class FilterDataInput(_ToolInput):
    conditions: List[FilterCondition]


class SampleRowsInput(_ToolInput):
    count: Optional[int] = None
    columns: Optional[List[str]] = None


class ChartDatasetInput(_ToolInput):
    label: str
    data: List[float]


class CreateChartInput(_ToolInput):
    chart_type: str
    title: str = ""
    labels: List[Union[str, int, float]]
    datasets: List[ChartDatasetInput]


def _describe_validation_error(tool_name: str, error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "input"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return f"Invalid input for {tool_name}: " + "; ".join(parts)


# ═══════════════════════════════════════════════════════════════
# FILTER CONDITIONS
# ═══════════════════════════════════════════════════════════════

_NUMERIC_COMPARISONS: Dict[str, Callable[[float, float], bool]] = {
    "greater_than": lambda a, b: a > b,
    "less_than": lambda a, b: a < b,
    "greater_or_equal": lambda a, b: a >= b,
    "less_or_equal": lambda a, b: a <= b,
}


def _lower_string(value: Any) -> str:
    return "" if value is None else str(value).lower()


def _check_condition(cond: FilterCondition) -> None:
    if cond.operator in _NUMERIC_COMPARISONS and parse_numeric(cond.value) is None:
        raise InvalidToolInputError(
            f"Condition on '{cond.column}' needs a numeric value for {cond.operator}",
            {"value": cond.value},
        )
    if cond.operator == "in" and not isinstance(cond.value, list):
        raise InvalidToolInputError(
            f"Condition on '{cond.column}' needs a list value for 'in'",
            {"value": cond.value},
        )


def evaluate_condition(row: Row, cond: FilterCondition) -> bool:
    value = row.get(cond.column)

    if cond.operator in _NUMERIC_COMPARISONS:
        number = parse_numeric(value)
        if number is None:
            return False
        return _NUMERIC_COMPARISONS[cond.operator](number, parse_numeric(cond.value))

    text = _lower_string(value)
    if cond.operator == "equals":
        return text == _lower_string(cond.value)
    if cond.operator == "not_equals":
        return text != _lower_string(cond.value)
    if cond.operator == "contains":
        return _lower_string(cond.value) in text
    if cond.operator == "in":
        return text in {_lower_string(v) for v in cond.value}
    return True


# ═══════════════════════════════════════════════════════════════
# DISPATCHER
# ═══════════════════════════════════════════════════════════════

class ToolDispatcher:
    """
    Routes named tool calls onto the analysis core for one immutable
    (rows, columns) snapshot and serialises every result to JSON text.
    """

    def __init__(
        self,
        rows: Sequence[Row],
        columns: Sequence[ColumnMeta],
        max_sample_rows: int = MAX_SAMPLE_ROWS,
    ):
        self.rows = rows
        self.columns = columns
        self.max_sample_rows = max_sample_rows
        self._handlers: Dict[str, Tuple[Type[_ToolInput], Callable[[Any], Any]]] = {
            "compute_stats": (ComputeStatsInput, self._compute_stats),
            "compute_correlation": (CorrelationInput, self._compute_correlation),
            "correlation_matrix": (CorrelationMatrixInput, self._correlation_matrix),
            "cross_tab": (CrossTabInput, self._cross_tab),
            "group_by": (GroupByInput, self._group_by),
            "get_value_counts": (ValueCountsInput, self._value_counts),
            "filter_data": (FilterDataInput, self._filter_data),
            "get_sample_rows": (SampleRowsInput, self._sample_rows),
            "create_chart": (CreateChartInput, self._create_chart),
        }

    @staticmethod
    def list_tools() -> List[Dict[str, Any]]:
        return [dict(tool) for tool in TOOL_DEFINITIONS]

    def dispatch(self, request: Mapping[str, Any]) -> str:
        """Execute a ``{"tool_name", "input"}`` request."""
        if not isinstance(request, Mapping):
            return self._serialize({"error": "Tool request must be an object"})
        tool_name = request.get("tool_name") or request.get("name") or ""
        tool_input = request.get("input")
        if tool_input is None:
            tool_input = request.get("structured_input") or {}
        return self.execute(str(tool_name), tool_input)

    def execute(self, tool_name: str, tool_input: Optional[Mapping[str, Any]]) -> str:
        handler = self._handlers.get(tool_name)
        if handler is None:
            logger.info(f"Unknown tool requested: {tool_name}")
            return self._serialize({"error": f"Unknown tool: {tool_name}"})

        schema, fn = handler
        try:
            try:
                params = schema.model_validate(tool_input or {})
            except ValidationError as e:
                raise InvalidToolInputError(_describe_validation_error(tool_name, e))
            return self._serialize(fn(params))
        except DataLaserError as e:
            logger.info(f"Tool {tool_name} rejected input: {e.message}")
            return self._serialize(e.to_dict())
        except Exception as e:
            logger.warning(f"Tool {tool_name} failed: {e}", exc_info=True)
            return self._serialize({"error": f"Tool execution failed: {e}"})

    # ── Helpers ──

    @staticmethod
    def _serialize(payload: Any) -> str:
        return json.dumps(payload, indent=2, default=str)

    def _known_columns(self) -> Set[str]:
        if self.columns:
            return {col.name for col in self.columns}
        known: Set[str] = set()
        for row in self.rows:
            known.update(row.keys())
        return known

    def _require_columns(self, *names: str) -> None:
        known = self._known_columns()
        missing = [n for n in names if n not in known]
        if missing:
            raise ColumnNotFoundError(
                f"Unknown column: {', '.join(missing)}",
                {"available_columns": sorted(known)},
            )

    # ── Tools ──

    def _compute_stats(self, params: ComputeStatsInput):
        self._require_columns(*params.columns)
        return [compute_column_stats(self.rows, col).to_dict() for col in params.columns]

    def _compute_correlation(self, params: CorrelationInput):
        self._require_columns(params.column_a, params.column_b)
        r = compute_correlation(self.rows, params.column_a, params.column_b)
        return {
            "column_a": params.column_a,
            "column_b": params.column_b,
            "correlation": round(r, CORRELATION_DIGITS),
        }

    def _correlation_matrix(self, params: CorrelationMatrixInput):
        names = [col.name for col in columns_of_type(self.columns, NUMERIC_TYPES)]
        matrix = compute_correlation_matrix(self.rows, names)
        strongest = get_strongest_correlations(matrix, names, params.top_n or DEFAULT_TOP_N)
        return {
            "columns": names,
            "strongest_correlations": [p.to_dict(CORRELATION_DIGITS) for p in strongest],
        }

    def _cross_tab(self, params: CrossTabInput):
        self._require_columns(params.row_column, params.col_column)
        return compute_cross_tab(self.rows, params.row_column, params.col_column).to_dict()

    def _group_by(self, params: GroupByInput):
        self._require_columns(params.group_column, params.value_column)
        return compute_group_by(self.rows, params.group_column, params.value_column).to_dict()

    def _value_counts(self, params: ValueCountsInput):
        self._require_columns(params.column)
        freq = value_frequencies(self.rows, params.column)
        total = sum(freq.values())
        missing = sum(
            1 for row in self.rows
            if is_missing(row.get(params.column)) or not to_label(row.get(params.column))
        )
        ranked = sorted(freq.items(), key=lambda kv: kv[1], reverse=True)
        entries = [
            {"value": label, "count": count, "percent": round(count / total * 100, 1)}
            for label, count in ranked
        ]
        if params.top_n:
            entries = entries[:params.top_n]
        return {
            "column": params.column,
            "total_valid": total,
            "missing": missing,
            "unique_values": len(freq),
            "values": entries,
        }

    def _filter_data(self, params: FilterDataInput):
        for cond in params.conditions:
            _check_condition(cond)
        self._require_columns(*[c.column for c in params.conditions])

        kept = [
            row for row in self.rows
            if all(evaluate_condition(row, cond) for cond in params.conditions)
        ]
        total = len(self.rows)
        return {
            "original_count": total,
            "filtered_count": len(kept),
            "percent": round(len(kept) / total * 100, 1) if total else 0.0,
            "sample_rows": [dict(row) for row in kept[:FILTER_SAMPLE_ROWS]],
        }

    def _sample_rows(self, params: SampleRowsInput):
        count = min(params.count or DEFAULT_SAMPLE_ROWS, self.max_sample_rows)
        sample = self.rows[:max(count, 0)]
        if params.columns:
            self._require_columns(*params.columns)
            return [{col: row.get(col) for col in params.columns} for row in sample]
        return [dict(row) for row in sample]

    def _create_chart(self, params: CreateChartInput):
        return build_chart_spec(
            params.chart_type,
            params.labels,
            [ds.model_dump() for ds in params.datasets],
            params.title,
        )


def execute_tool(
    tool_name: str,
    tool_input: Optional[Mapping[str, Any]],
    rows: Sequence[Row],
    columns: Sequence[ColumnMeta],
) -> str:
    """Run one tool call against a snapshot; always returns JSON text."""
    return ToolDispatcher(rows, columns).execute(tool_name, tool_input)
