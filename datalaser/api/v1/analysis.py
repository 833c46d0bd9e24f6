"""
DataLaser Analysis — API Endpoints
=====================================
FastAPI router exposing the analysis core over HTTP. Every request carries
its own dataset snapshot (rows + columns + active filters); the server keeps
no state between calls.

Endpoints:
  POST /detect-types    — Column type inference + metadata
  POST /stats           — Descriptive statistics for numeric columns
  POST /correlations    — Correlation matrix + strongest pairs
  POST /cross-tab       — Contingency table of two columns
  POST /group-by        — Numeric stats per category
  POST /insights        — Automated insights
  POST /summary         — Dataset summary, quality score, warnings
  POST /chart-series    — Aggregated chart series (+ optional chart spec)
  GET  /tools           — Tool definitions for a conversational analyst
  POST /tools/execute   — Run one tool call
  GET  /health          — Component health check

Integration (in main.py):
  from datalaser.api.router import api_router
  app.include_router(api_router, prefix="/api/v1")
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from fastapi import APIRouter
from pydantic import BaseModel, Field

from datalaser import __version__
from datalaser.config import settings
from datalaser.core.analysis.charts import build_chart_series, build_chart_spec
from datalaser.core.analysis.correlations import build_correlation_matrix, get_strongest_correlations
from datalaser.core.analysis.cross_tab import compute_cross_tab
from datalaser.core.analysis.filters import FilterSet
from datalaser.core.analysis.group_by import compute_group_by
from datalaser.core.analysis.insights import generate_insights
from datalaser.core.analysis.models import (
    NUMERIC_TYPES,
    ColumnMeta,
    ColumnType,
    columns_of_type,
    override_column_type,
)
from datalaser.core.analysis.statistics import compute_all_stats, compute_column_stats
from datalaser.core.analysis.summary import (
    build_dataset_summary,
    build_quality_warnings,
    compute_quality_score,
    count_column_types,
)
from datalaser.core.analysis.thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds
from datalaser.core.analysis.tools import ToolDispatcher
from datalaser.core.analysis.type_detector import detect_column_types
from datalaser.core.exceptions import ColumnNotFoundError, DataLaserError

logger = logging.getLogger(__name__)
router = APIRouter()

_start_time = time.time()


# ═══════════════════════════════════════════════════════════════
# REQUEST SCHEMAS
# ═══════════════════════════════════════════════════════════════

class DatasetRequest(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Parsed rows in file order")
    columns: List[Union[str, Dict[str, Any]]] = Field(
        default_factory=list,
        description="Column names, or column metadata from /detect-types (keeps overrides)",
    )
    filters: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Active filters: {column, kind, value}; kind = equals|contains|range|in|dateRange",
    )
    thresholds: Optional[Dict[str, Any]] = Field(default=None, description="Threshold overrides")


class DetectTypesRequest(DatasetRequest):
    overrides: Dict[str, ColumnType] = Field(default_factory=dict, description="Column name -> forced type")


class StatsRequest(DatasetRequest):
    target_columns: Optional[List[str]] = None


class CorrelationRequest(DatasetRequest):
    top_n: int = Field(default=10, ge=1)


class CrossTabRequest(DatasetRequest):
    row_column: str
    col_column: str


class GroupByRequest(DatasetRequest):
    group_column: str
    value_column: str


class SummaryRequest(DatasetRequest):
    file_name: str = "dataset"
    parse_warnings: List[str] = Field(default_factory=list)


class ChartSeriesRequest(DatasetRequest):
    x_column: str
    y_column: Optional[str] = None
    group_by: Optional[str] = None
    chart_type: Optional[str] = None
    title: str = ""


class ToolExecuteRequest(DatasetRequest):
    tool_name: str
    input: Dict[str, Any] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════

def _thresholds(request: DatasetRequest) -> AnalysisThresholds:
    if request.thresholds:
        return DEFAULT_THRESHOLDS.override(request.thresholds)
    return DEFAULT_THRESHOLDS


def _column_names(request: DatasetRequest) -> List[str]:
    if request.columns:
        return [c if isinstance(c, str) else c["name"] for c in request.columns]
    names: Dict[str, None] = {}
    for row in request.rows:
        for key in row:
            names.setdefault(key, None)
    return list(names)


def _snapshot(request: DatasetRequest) -> Tuple[List[Dict[str, Any]], List[ColumnMeta]]:
    """
    Resolve a request into (filtered rows, column metadata).

    Column metadata sent by the client is trusted as-is; plain names are
    detected over the unfiltered rows.
    """
    if request.columns and all(isinstance(c, dict) for c in request.columns):
        columns = [ColumnMeta.from_dict(c) for c in request.columns]
    else:
        columns = detect_column_types(request.rows, _column_names(request), _thresholds(request))

    rows = FilterSet.from_list(request.filters).apply(request.rows)
    return rows, columns


def _require(columns: Sequence[ColumnMeta], *names: Optional[str]) -> None:
    known = {c.name for c in columns}
    missing = [n for n in names if n and n not in known]
    if missing:
        raise ColumnNotFoundError(f"Unknown column: {', '.join(missing)}", {"available_columns": sorted(known)})


# ═══════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════

@router.post("/detect-types")
async def detect_types(request: DetectTypesRequest):
    """Detect column types over the full row set and apply any manual overrides."""
    try:
        columns = detect_column_types(request.rows, _column_names(request), _thresholds(request))
        _require(columns, *request.overrides.keys())
        for name, column_type in request.overrides.items():
            columns = override_column_type(columns, name, column_type)
        return {
            "row_count": len(request.rows),
            "columns": [c.to_dict() for c in columns],
        }
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Type detection error: {e}", exc_info=True)
        return {"error": str(e)}


@router.post("/stats")
async def column_stats(request: StatsRequest):
    try:
        rows, columns = _snapshot(request)
        if request.target_columns:
            _require(columns, *request.target_columns)
            stats = {name: compute_column_stats(rows, name) for name in request.target_columns}
        else:
            stats = compute_all_stats(rows, columns)
        return {
            "row_count": len(rows),
            "stats": {name: s.to_dict() for name, s in stats.items()},
        }
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Stats error: {e}", exc_info=True)
        return {"error": str(e)}


@router.post("/correlations")
async def correlations(request: CorrelationRequest):
    try:
        rows, columns = _snapshot(request)
        names = [c.name for c in columns_of_type(columns, NUMERIC_TYPES)]
        matrix = build_correlation_matrix(rows, names)
        strongest = get_strongest_correlations(matrix.matrix, names, request.top_n)
        return {
            **matrix.to_dict(),
            "strongest": [p.to_dict() for p in strongest],
        }
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Correlation error: {e}", exc_info=True)
        return {"error": str(e)}


@router.post("/cross-tab")
async def cross_tab(request: CrossTabRequest):
    try:
        rows, columns = _snapshot(request)
        _require(columns, request.row_column, request.col_column)
        result = compute_cross_tab(rows, request.row_column, request.col_column)
        return {
            **result.to_dict(),
            "row_percentages": result.row_percentages(),
            "col_percentages": result.col_percentages(),
        }
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Cross-tab error: {e}", exc_info=True)
        return {"error": str(e)}


@router.post("/group-by")
async def group_by(request: GroupByRequest):
    try:
        rows, columns = _snapshot(request)
        _require(columns, request.group_column, request.value_column)
        return compute_group_by(rows, request.group_column, request.value_column).to_dict()
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Group-by error: {e}", exc_info=True)
        return {"error": str(e)}


@router.post("/insights")
async def insights(request: DatasetRequest):
    try:
        rows, columns = _snapshot(request)
        found = generate_insights(rows, columns, _thresholds(request))
        return {
            "row_count": len(rows),
            "insights": [i.to_dict() for i in found],
        }
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Insights error: {e}", exc_info=True)
        return {"error": str(e)}


@router.post("/summary")
async def summary(request: SummaryRequest):
    """Dataset summary plus the overview figures (quality score, type counts, warnings)."""
    try:
        rows, columns = _snapshot(request)
        thresholds = _thresholds(request)
        return {
            "summary": build_dataset_summary(request.file_name, rows, columns),
            "quality_score": compute_quality_score(columns, len(request.rows)),
            "type_counts": count_column_types(columns),
            "warnings": [
                w.to_dict()
                for w in build_quality_warnings(columns, len(request.rows), request.parse_warnings, thresholds)
            ],
        }
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Summary error: {e}", exc_info=True)
        return {"error": str(e)}


@router.post("/chart-series")
async def chart_series(request: ChartSeriesRequest):
    try:
        rows, columns = _snapshot(request)
        y_column = request.y_column if request.y_column != "__count__" else None
        _require(columns, request.x_column, y_column, request.group_by)
        series = build_chart_series(rows, request.x_column, request.y_column, request.group_by)
        if request.chart_type:
            return build_chart_spec(request.chart_type, series["labels"], series["datasets"], request.title)
        return series
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Chart series error: {e}", exc_info=True)
        return {"error": str(e)}


@router.get("/tools")
async def list_tools():
    return {"tools": ToolDispatcher.list_tools()}


@router.post("/tools/execute")
async def execute(request: ToolExecuteRequest):
    """
    Run one analyst tool call. The result is the dispatcher's JSON payload;
    tool failures come back as ``{"error": ...}`` in ``result``.
    """
    try:
        rows, columns = _snapshot(request)
        if len(rows) > settings.MAX_TOOL_ROWS:
            logger.warning(f"Tool payload truncated from {len(rows)} to {settings.MAX_TOOL_ROWS} rows")
            rows = rows[:settings.MAX_TOOL_ROWS]
        dispatcher = ToolDispatcher(rows, columns, max_sample_rows=settings.MAX_SAMPLE_ROWS)
        text = dispatcher.dispatch({"tool_name": request.tool_name, "input": request.input})
        return {"tool_name": request.tool_name, "result": json.loads(text)}
    except DataLaserError as e:
        return e.to_dict()
    except Exception as e:
        logger.error(f"Tool execute error: {e}", exc_info=True)
        return {"error": str(e)}


@router.get("/health")
async def health():
    components = {
        "type_detector": "active",
        "statistics": "active",
        "cross_tab": "active",
        "group_by": "active",
        "insights": "active",
        "tool_dispatcher": "active",
    }
    return {
        "status": "healthy",
        "components": components,
        "version": __version__,
        "uptime_seconds": round(time.time() - _start_time, 1),
    }
