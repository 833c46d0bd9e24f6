"""
Insight generator tests: one class per rule category.
"""

from datalaser.core.analysis.insights import InsightGenerator, generate_insights
from datalaser.core.analysis.models import ColumnMeta, ColumnType
from datalaser.core.analysis.thresholds import DEFAULT_THRESHOLDS


# ═══════════════════════════════════════════════════════════════
# TEST FIXTURES
# ═══════════════════════════════════════════════════════════════

def numeric(name, **kwargs):
    return ColumnMeta(name=name, detected_type=ColumnType.NUMERIC, **kwargs)


def categorical(name, **kwargs):
    return ColumnMeta(name=name, detected_type=ColumnType.CATEGORICAL, **kwargs)


def make_rows(column, values):
    return [{column: v} for v in values]


def of_type(insights, kind):
    return [i for i in insights if i.type == kind]


# ═══════════════════════════════════════════════════════════════
# 1. DATA QUALITY
# ═══════════════════════════════════════════════════════════════

class TestQualityRules:

    def test_empty_dataset_short_circuits(self):
        insights = generate_insights([], [numeric("a", missing_percent=90.0)])
        assert len(insights) == 1
        assert insights[0].title == "No data available"
        assert insights[0].severity == "warning"
        assert insights[0].description == "The dataset contains no rows. Analysis cannot be performed."

    def test_small_sample_warning(self):
        insights = generate_insights(make_rows("a", range(10)), [])
        (small,) = of_type(insights, "quality")
        assert small.title == "Small sample size"
        assert small.description == (
            "The dataset contains only 10 rows. Statistical results may not be "
            "reliable with fewer than 50 observations."
        )

    def test_no_small_sample_warning_at_fifty(self):
        insights = generate_insights(make_rows("a", range(50)), [])
        assert insights == []

    def test_missing_data_severity(self):
        rows = make_rows("a", range(60))
        columns = [
            numeric("exactly_ten", missing_count=6, missing_percent=10.0),
            numeric("twenty", missing_count=12, missing_percent=20.0),
            numeric("forty", missing_count=24, missing_percent=40.0),
        ]
        quality = of_type(generate_insights(rows, columns), "quality")
        assert [(i.title, i.severity) for i in quality] == [
            ("High missing data: twenty", "notable"),
            ("High missing data: forty", "warning"),
        ]
        assert quality[0].description == (
            'Column "twenty" has 20.0% missing values (12 of 60 rows). '
            "This may affect analysis reliability."
        )


# ═══════════════════════════════════════════════════════════════
# 2. CORRELATION
# ═══════════════════════════════════════════════════════════════

class TestCorrelationRules:

    def test_very_strong_pairs(self):
        rows = [{"x": i, "y": 2 * i + 1, "z": -i} for i in range(60)]
        columns = [numeric("x"), numeric("y"), numeric("z")]
        found = of_type(generate_insights(rows, columns), "correlation")
        assert len(found) == 3
        titles = sorted(i.title for i in found)
        assert titles == [
            "very strong negative correlation",
            "very strong negative correlation",
            "very strong positive correlation",
        ]
        assert all(i.severity == "notable" for i in found)
        positive = next(i for i in found if "positive" in i.title)
        assert positive.description.startswith('"x" and "y" have a very strong positive correlation (r = 1.000).')

    def test_strong_pair_is_info(self):
        rows = [{"x": x, "y": y} for x, y in zip([1, 2, 3, 4, 5], [1, 3, 2, 5, 4])]
        found = of_type(generate_insights(rows, [numeric("x"), numeric("y")]), "correlation")
        assert [(i.title, i.severity) for i in found] == [("strong positive correlation", "info")]
        assert "(r = 0.800)" in found[0].description

    def test_needs_two_numeric_columns(self):
        rows = [{"x": i, "c": "a"} for i in range(60)]
        found = generate_insights(rows, [numeric("x"), categorical("c")])
        assert of_type(found, "correlation") == []

    def test_percentage_columns_participate(self):
        rows = [{"x": i, "p": f"{i}%"} for i in range(60)]
        columns = [numeric("x"), ColumnMeta(name="p", detected_type=ColumnType.PERCENTAGE)]
        assert len(of_type(generate_insights(rows, columns), "correlation")) == 1


# ═══════════════════════════════════════════════════════════════
# 3. DISTRIBUTION & OUTLIERS
# ═══════════════════════════════════════════════════════════════

class TestDistributionRules:

    def test_right_skew(self):
        rows = make_rows("v", [1, 1, 1, 1, 10])
        (skew,) = of_type(generate_insights(rows, [numeric("v")]), "distribution")
        assert skew.title == "Skewed distribution: v"
        assert skew.severity == "info"
        assert skew.description == (
            'Column "v" is skewed right (positively) (skewness coefficient: 1.50). '
            "The mean (2.80) differs notably from the median (1.00). "
            "Consider using the median for central tendency."
        )

    def test_constant_column_has_no_skew(self):
        rows = make_rows("v", [4, 4, 4, 4])
        assert of_type(generate_insights(rows, [numeric("v")]), "distribution") == []

    def test_single_outlier_is_info(self):
        rows = make_rows("v", [10, 11, 12, 13, 14, 15, 16, 17, 18, 100])
        (outlier,) = of_type(generate_insights(rows, [numeric("v")]), "outlier")
        assert outlier.severity == "info"
        assert outlier.description == (
            'Column "v" has 1 potential outlier (10.0% of values) '
            "outside the interquartile range [4.50, 24.50]."
        )

    def test_many_outliers_warn(self):
        rows = make_rows("v", [10, 11, 12, 13, 14, 15, 16, 17, 100, 200])
        (outlier,) = of_type(generate_insights(rows, [numeric("v")]), "outlier")
        assert outlier.severity == "warning"
        assert "2 potential outliers (20.0% of values)" in outlier.description

    def test_outliers_need_four_values(self):
        rows = make_rows("v", [1, 2, 1000])
        assert of_type(generate_insights(rows, [numeric("v")]), "outlier") == []


# ═══════════════════════════════════════════════════════════════
# 4. DOMINANCE
# ═══════════════════════════════════════════════════════════════

class TestDominanceRules:

    def test_dominant_value_notable(self):
        rows = make_rows("colour", ["red"] * 7 + ["blue"] * 3)
        (pattern,) = of_type(generate_insights(rows, [categorical("colour")]), "pattern")
        assert pattern.title == "Dominant value: colour"
        assert pattern.severity == "notable"
        assert pattern.description == (
            'In column "colour", the value "red" accounts for 70.0% of responses (7 of 10). '
            "This low variability may limit analytical usefulness."
        )

    def test_dominant_value_warning(self):
        rows = make_rows("colour", ["red"] * 9 + [" blue "])
        (pattern,) = of_type(generate_insights(rows, [categorical("colour")]), "pattern")
        assert pattern.severity == "warning"

    def test_exactly_sixty_percent_is_quiet(self):
        rows = make_rows("colour", ["red"] * 6 + ["blue"] * 4)
        assert of_type(generate_insights(rows, [categorical("colour")]), "pattern") == []

    def test_missing_values_excluded_from_share(self):
        rows = make_rows("colour", ["red"] * 7 + [None, "", "  "] * 5 + ["blue"] * 3)
        (pattern,) = of_type(generate_insights(rows, [categorical("colour")]), "pattern")
        assert "(7 of 10)" in pattern.description

    def test_demographic_and_likert_columns_checked(self):
        rows = [{"g": "Male", "l": 1} for _ in range(9)] + [{"g": "Female", "l": 5}]
        columns = [
            ColumnMeta(name="g", detected_type=ColumnType.DEMOGRAPHIC),
            ColumnMeta(name="l", detected_type=ColumnType.LIKERT_SCALE),
        ]
        found = of_type(generate_insights(rows, columns), "pattern")
        assert [i.title for i in found] == ["Dominant value: g", "Dominant value: l"]


# ═══════════════════════════════════════════════════════════════
# 5. THRESHOLDS
# ═══════════════════════════════════════════════════════════════

class TestInsightThresholds:

    def test_custom_small_sample_threshold(self):
        stricter = DEFAULT_THRESHOLDS.override({"small_sample_rows": 5})
        insights = InsightGenerator(stricter).evaluate(make_rows("a", range(10)), [])
        assert insights == []

    def test_rule_order(self):
        rows = [{"x": i, "y": i, "c": "same"} for i in range(10)]
        columns = [
            numeric("x", missing_count=0, missing_percent=50.0),
            numeric("y"),
            categorical("c"),
        ]
        kinds = [i.type for i in generate_insights(rows, columns)]
        assert kinds == ["quality", "quality", "correlation", "pattern"]
