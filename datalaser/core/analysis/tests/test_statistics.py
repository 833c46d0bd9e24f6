"""
Statistics, correlation, cross-tab and group-by tests.
"""

import math

import pytest

from datalaser.core.analysis.correlations import (
    build_correlation_matrix,
    compute_correlation_matrix,
    get_strongest_correlations,
)
from datalaser.core.analysis.cross_tab import compute_cross_tab
from datalaser.core.analysis.group_by import compute_group_by
from datalaser.core.analysis.models import ColumnMeta, ColumnType
from datalaser.core.analysis.statistics import (
    compute_all_stats,
    compute_column_stats,
    compute_correlation,
    get_numeric_values,
)


# ═══════════════════════════════════════════════════════════════
# TEST FIXTURES
# ═══════════════════════════════════════════════════════════════

def make_rows(column, values):
    return [{column: v} for v in values]


def make_linear_rows():
    return [
        {"x": 1, "up": 2, "down": 40, "noise": 5, "flat": 3},
        {"x": 2, "up": 4, "down": 30, "noise": 1, "flat": 3},
        {"x": 3, "up": 6, "down": 20, "noise": 4, "flat": 3},
        {"x": 4, "up": 8, "down": 10, "noise": 2, "flat": 3},
    ]


# ═══════════════════════════════════════════════════════════════
# 1. DESCRIPTIVE STATISTICS
# ═══════════════════════════════════════════════════════════════

class TestColumnStats:

    def test_odd_count_excludes_middle_from_halves(self):
        stats = compute_column_stats(make_rows("v", range(1, 10)), "v")
        assert stats.count == 9
        assert stats.mean == 5
        assert stats.median == 5
        assert stats.q1 == 2.5
        assert stats.q3 == 7.5
        assert stats.min == 1
        assert stats.max == 9
        assert stats.mode is None
        assert stats.std_dev == pytest.approx(math.sqrt(60 / 9))

    def test_even_count(self):
        stats = compute_column_stats(make_rows("v", [4, 1, 3, 2]), "v")
        assert stats.median == 2.5
        assert stats.q1 == 1.5
        assert stats.q3 == 3.5
        assert stats.iqr == 2.0

    def test_single_value(self):
        stats = compute_column_stats(make_rows("v", [7]), "v")
        assert stats.count == 1
        assert stats.median == 7
        assert stats.q1 == 7
        assert stats.q3 == 7
        assert stats.std_dev == 0

    def test_mode_smallest_on_ties(self):
        stats = compute_column_stats(make_rows("v", [3, 1, 1, 3, 2]), "v")
        assert stats.mode == 1

    def test_empty_selection_never_raises(self):
        stats = compute_column_stats(make_rows("v", [None, "", "n/a"]), "v")
        assert stats.count == 0
        assert stats.mode is None
        assert stats.mean == 0
        assert stats.std_dev == 0

    def test_missing_column_is_empty(self):
        stats = compute_column_stats([{"a": 1}], "b")
        assert stats.count == 0

    def test_percent_strings_keep_magnitude(self):
        rows = make_rows("p", ["45%", "  -3.5 %", "10 %", ""])
        assert get_numeric_values(rows, "p") == [45.0, -3.5, 10.0]

    def test_quartile_ordering(self):
        for values in ([5], [2, 9], [1, 100, 3, 7, 7], [0.5, -2, 8, 8, 8, 1, 3]):
            stats = compute_column_stats(make_rows("v", values), "v")
            assert stats.q1 <= stats.median <= stats.q3

    def test_compute_all_stats_uses_effective_type(self):
        rows = [{"n": 1, "p": "10%", "c": "a"}, {"n": 3, "p": "20%", "c": "b"}]
        columns = [
            ColumnMeta(name="n", detected_type=ColumnType.NUMERIC),
            ColumnMeta(name="p", detected_type=ColumnType.PERCENTAGE),
            ColumnMeta(name="c", detected_type=ColumnType.NUMERIC, overridden_type=ColumnType.CATEGORICAL),
        ]
        all_stats = compute_all_stats(rows, columns)
        assert list(all_stats) == ["n", "p"]
        assert all_stats["p"].mean == 15

    def test_to_dict_shape(self):
        data = compute_column_stats(make_rows("v", [1, 2]), "v").to_dict()
        assert set(data) == {"column", "count", "mean", "median", "mode", "std_dev", "min", "max", "q1", "q3"}


# ═══════════════════════════════════════════════════════════════
# 2. CORRELATION
# ═══════════════════════════════════════════════════════════════

class TestCorrelation:

    def test_perfect_linear(self):
        rows = make_linear_rows()
        assert compute_correlation(rows, "x", "up") == pytest.approx(1.0)
        assert compute_correlation(rows, "x", "down") == pytest.approx(-1.0)

    def test_zero_variance_is_zero(self):
        assert compute_correlation(make_linear_rows(), "x", "flat") == 0

    def test_fewer_than_two_pairs_is_zero(self):
        rows = [{"a": 1, "b": 2}, {"a": None, "b": 3}, {"a": 4, "b": ""}]
        assert compute_correlation(rows, "a", "b") == 0

    def test_symmetric(self):
        rows = make_linear_rows()
        assert compute_correlation(rows, "x", "noise") == compute_correlation(rows, "noise", "x")

    def test_matrix_shape_and_symmetry(self):
        rows = make_linear_rows()
        names = ["x", "up", "down", "noise"]
        matrix = compute_correlation_matrix(rows, names)
        assert len(matrix) == 4
        for i in range(4):
            assert matrix[i][i] == 1
            for j in range(4):
                assert matrix[i][j] == matrix[j][i]

    def test_matrix_degenerate_sizes(self):
        assert compute_correlation_matrix([], []) == []
        assert compute_correlation_matrix(make_linear_rows(), ["x"]) == [[1.0]]

    def test_strongest_pairs_sorted_by_magnitude(self):
        rows = make_linear_rows()
        names = ["x", "noise", "down"]
        matrix = compute_correlation_matrix(rows, names)
        pairs = get_strongest_correlations(matrix, names, top_n=2)
        assert len(pairs) == 2
        assert {pairs[0].col_a, pairs[0].col_b} == {"x", "down"}
        assert abs(pairs[0].r) >= abs(pairs[1].r)

    def test_matrix_value_object(self):
        result = build_correlation_matrix(make_linear_rows(), ["x", "up"])
        data = result.to_dict()
        assert data["columns"] == ["x", "up"]
        assert data["matrix"][0][1] == pytest.approx(1.0)


# ═══════════════════════════════════════════════════════════════
# 3. CROSS-TAB
# ═══════════════════════════════════════════════════════════════

class TestCrossTab:

    def test_basic_scenario(self):
        rows = [{"a": "X", "b": "P"}, {"a": "X", "b": "Q"}, {"a": "Y", "b": "P"}]
        result = compute_cross_tab(rows, "a", "b")
        assert result.row_labels == ["X", "Y"]
        assert result.col_labels == ["P", "Q"]
        assert result.counts == [[1, 1], [1, 0]]
        assert result.row_totals == [2, 1]
        assert result.col_totals == [2, 1]
        assert result.grand_total == 3

    def test_skips_missing_and_blank(self):
        rows = [
            {"a": " X ", "b": "P"},
            {"a": "X", "b": None},
            {"a": "   ", "b": "P"},
            {"b": "Q"},
        ]
        result = compute_cross_tab(rows, "a", "b")
        assert result.row_labels == ["X"]
        assert result.col_labels == ["P"]
        assert result.grand_total == 1

    def test_empty_result(self):
        result = compute_cross_tab([{"a": None, "b": None}], "a", "b")
        assert result.row_labels == []
        assert result.col_labels == []
        assert result.counts == []
        assert result.grand_total == 0

    def test_marginals(self):
        rows = [{"g": g, "r": r} for g in ("m", "f", "m", "x") for r in ("n", "s", "s")]
        result = compute_cross_tab(rows, "g", "r")
        for line, total in zip(result.counts, result.row_totals):
            assert sum(line) == total
        assert sum(result.col_totals) == result.grand_total == sum(result.row_totals)

    def test_percentages(self):
        rows = [{"a": "X", "b": "P"}, {"a": "X", "b": "Q"}, {"a": "Y", "b": "P"}]
        result = compute_cross_tab(rows, "a", "b")
        assert result.row_percentages() == [[50.0, 50.0], [100.0, 0.0]]
        assert result.col_percentages() == [[50.0, 100.0], [50.0, 0.0]]

    def test_numeric_labels_sorted_as_strings(self):
        rows = [{"a": 10, "b": "P"}, {"a": 9, "b": "P"}]
        assert compute_cross_tab(rows, "a", "b").row_labels == ["10", "9"]

    def test_integral_floats_share_a_label_with_ints(self):
        rows = [{"a": 2.0, "b": "P"}, {"a": 2, "b": "P"}, {"a": 2.5, "b": "P"}]
        result = compute_cross_tab(rows, "a", "b")
        assert result.row_labels == ["2", "2.5"]
        assert result.counts == [[2], [1]]


# ═══════════════════════════════════════════════════════════════
# 4. GROUP-BY
# ═══════════════════════════════════════════════════════════════

class TestGroupBy:

    def test_basic_scenario(self):
        rows = [
            {"region": "North", "sales": 100},
            {"region": "North", "sales": 200},
            {"region": "South", "sales": 50},
        ]
        result = compute_group_by(rows, "region", "sales")
        assert [g.to_dict() for g in result.groups] == [
            {"label": "North", "count": 2, "mean": 150, "median": 150, "min": 100, "max": 200},
            {"label": "South", "count": 1, "mean": 50, "median": 50, "min": 50, "max": 50},
        ]

    def test_group_without_numbers_is_kept_zeroed(self):
        rows = [{"g": "A", "v": 1}, {"g": "B", "v": "n/a"}, {"g": "B", "v": None}]
        result = compute_group_by(rows, "g", "v")
        assert [g.label for g in result.groups] == ["A", "B"]
        empty = result.groups[1]
        assert (empty.count, empty.mean, empty.median, empty.min, empty.max) == (0, 0, 0, 0, 0)

    def test_skips_missing_group_labels(self):
        rows = [{"g": None, "v": 1}, {"g": "", "v": 2}, {"g": "  ", "v": 3}, {"g": " A ", "v": 4}]
        result = compute_group_by(rows, "g", "v")
        assert [(g.label, g.count) for g in result.groups] == [("A", 1)]

    def test_counts_bounded_by_rows(self):
        rows = [{"g": g, "v": v} for g, v in [("a", 1), ("b", None), (None, 3), ("a", "4%")]]
        result = compute_group_by(rows, "g", "v")
        assert sum(g.count for g in result.groups) <= len(rows)

    def test_counts_equal_rows_when_complete(self):
        rows = [{"g": g, "v": i} for i, g in enumerate("abcabca")]
        result = compute_group_by(rows, "g", "v")
        assert sum(g.count for g in result.groups) == len(rows)

    def test_float_and_int_groups_merge(self):
        rows = [{"rating": 3.0, "v": 10}, {"rating": 3, "v": 20}, {"rating": 4.0, "v": 5}]
        result = compute_group_by(rows, "rating", "v")
        assert [(g.label, g.count, g.mean) for g in result.groups] == [("3", 2, 15), ("4", 1, 5)]
