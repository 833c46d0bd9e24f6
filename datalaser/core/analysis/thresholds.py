"""
Analysis Thresholds — Tunable Constants for Detection & Insights
==================================================================
Every magic number the type detector and insight generator rely on lives
here, so callers (and tests) can probe behaviour exactly at a boundary.

Usage:
  from datalaser.core.analysis.thresholds import DEFAULT_THRESHOLDS
  strict = DEFAULT_THRESHOLDS.override({"structural_match_ratio": 0.95})
  columns = detect_column_types(rows, headers, thresholds=strict)
"""

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Tuple

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# KEYWORD & LABEL TABLES
# ═══════════════════════════════════════════════════════════════

DEMOGRAPHIC_KEYWORDS: Tuple[str, ...] = (
    "age",
    "gender",
    "sex",
    "income",
    "education",
    "region",
    "ethnicity",
    "race",
    "occupation",
    "employment",
    "marital",
    "religion",
    "social_grade",
    "social grade",
    "socioeconomic",
    "class",
    "constituency",
    "country",
    "county",
    "city",
    "postcode",
    "zip",
)

LIKERT_PATTERNS: Tuple[Tuple[str, ...], ...] = (
    ("strongly agree", "agree", "neutral", "disagree", "strongly disagree"),
    ("strongly agree", "agree", "neither agree nor disagree", "disagree", "strongly disagree"),
    ("very satisfied", "satisfied", "neutral", "dissatisfied", "very dissatisfied"),
    ("very likely", "likely", "neutral", "unlikely", "very unlikely"),
    ("very good", "good", "fair", "poor", "very poor"),
    ("excellent", "good", "fair", "poor", "terrible"),
)


# ═══════════════════════════════════════════════════════════════
# THRESHOLD DEFINITIONS
# ═══════════════════════════════════════════════════════════════

@dataclass
class AnalysisThresholds:
    """All configurable thresholds used by detection and insight rules."""

    # ── Type Detection ──
    type_detection_sample_size: int = 1000
    structural_match_ratio: float = 0.9
    categorical_max_unique: int = 20
    categorical_max_ratio: float = 0.5
    likert_min_label_matches: int = 3
    likert_min_scale_points: int = 3
    likert_max_scale_points: int = 7
    likert_scale_min: int = 1
    likert_scale_max_values: Tuple[int, ...] = (5, 7)
    demographic_keywords: Tuple[str, ...] = DEMOGRAPHIC_KEYWORDS
    likert_patterns: Tuple[Tuple[str, ...], ...] = LIKERT_PATTERNS

    # ── Insights: Sample Size ──
    small_sample_rows: int = 50

    # ── Insights: Missing Data ──
    missing_pct_notable: float = 10.0
    missing_pct_warning: float = 30.0

    # ── Insights: Correlation ──
    correlation_scan_top_n: int = 20
    correlation_strong: float = 0.7
    correlation_very_strong: float = 0.9

    # ── Insights: Distribution ──
    skew_min_count: int = 3
    skew_threshold: float = 1.0

    # ── Insights: Outliers ──
    outlier_min_count: int = 4
    outlier_iqr_multiplier: float = 1.5
    outlier_pct_warning: float = 10.0

    # ── Insights: Dominance ──
    dominance_pct_notable: float = 60.0
    dominance_pct_warning: float = 80.0

    # ── Overview / Quality Warnings ──
    min_reliable_sample: int = 30
    quality_missing_pct_warning: float = 5.0
    quality_missing_pct_error: float = 25.0

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in self.__dict__.items()}

    def override(self, overrides: Dict[str, Any]) -> "AnalysisThresholds":
        """Return a new AnalysisThresholds with overrides applied."""
        new = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(new, k):
                setattr(new, k, v)
            else:
                logger.debug(f"Ignoring unknown threshold override: {k}")
        return new


DEFAULT_THRESHOLDS = AnalysisThresholds()

