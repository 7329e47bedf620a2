"""
Unit tests for the column type classifier.
"""
import math

import numpy as np
import pytest

from analyst.services import classifier
from analyst.services.classifier import (
    classify_column_type,
    classify_columns,
    column_values,
    describe_column,
    distinct_count,
    is_date_value,
    is_missing,
    is_numeric_value,
)


@pytest.mark.unit
def test_empty_column_is_text():
    assert classify_column_type([]) == "text"
    assert classify_column_type([None, "", float("nan")]) == "text"


@pytest.mark.unit
def test_numbers_and_numeric_strings_are_numerical():
    assert classify_column_type([1, 2, 3]) == "numerical"
    assert classify_column_type(["1.5", " 2 ", "-3e2"]) == "numerical"
    assert classify_column_type([True, False, True]) == "numerical"


@pytest.mark.unit
def test_numerical_threshold_is_inclusive():
    """Four numbers out of five non-missing values is exactly 80%."""
    assert classify_column_type([1, 2, 3, 4, "x"]) == "numerical"
    assert classify_column_type([1, 2, 3, "x", "y"]) == "text"


@pytest.mark.unit
def test_missing_values_are_ignored_for_ratios():
    assert classify_column_type([1, None, 2, "", 3]) == "numerical"


@pytest.mark.unit
def test_date_strings_are_datetime():
    assert classify_column_type(["2024-01-01", "2024-02-01", "2024-03-01"]) == "datetime"
    assert classify_column_type(["01/15/2024", "02/15/2024", "03/15/2024"]) == "datetime"
    assert classify_column_type(["2024-01-15T10:30:00", "2024-01-16T11:00:00"]) == "datetime"


@pytest.mark.unit
def test_datetime_threshold_is_inclusive():
    values = ["2024-01-0%d" % day for day in range(1, 8)] + ["n/a", "unknown", "tbd"]
    assert classify_column_type(values) == "datetime"


@pytest.mark.unit
def test_date_pattern_must_also_parse():
    assert is_date_value("2024-01-15") is True
    assert is_date_value("2024-13-45") is False
    assert is_date_value("January 5") is False
    assert is_date_value(20240115) is False


@pytest.mark.unit
def test_short_repeated_strings_are_categorical():
    assert classify_column_type(["North", "South", "North", "East"]) == "categorical"
    assert classify_column_type(["A", "B", "A", "C", "B", "A"]) == "categorical"


@pytest.mark.unit
def test_single_short_string_is_categorical():
    assert classify_column_type(["Yes"]) == "categorical"


@pytest.mark.unit
def test_long_strings_are_text():
    values = [
        "This is the first fairly long customer comment",
        "Another long free text comment about the product",
        "Delivery was late but the support team was helpful",
    ]
    assert classify_column_type(values) == "text"


@pytest.mark.unit
def test_mixed_value_kinds_are_text():
    assert classify_column_type(["a", 1, "b", 2, "c"]) == "text"


@pytest.mark.unit
def test_classification_is_deterministic():
    values = ["North", "2024-01-01", 3, None, "South", "South"]
    assert classify_column_type(values) == classify_column_type(list(values))


@pytest.mark.unit
def test_is_numeric_value_rejects_non_finite_and_underscores():
    assert is_numeric_value(float("inf")) is False
    assert is_numeric_value("nan") is False
    assert is_numeric_value("Infinity") is False
    assert is_numeric_value("1_000") is False
    assert is_numeric_value("") is False
    assert is_numeric_value("42") is True
    assert is_numeric_value(3.14) is True


@pytest.mark.unit
def test_is_missing():
    assert is_missing(None)
    assert is_missing("")
    assert is_missing(math.nan)
    assert not is_missing(0)
    assert not is_missing(" ")
    assert not is_missing(False)


@pytest.mark.unit
def test_describe_column_counts_and_samples():
    info = describe_column("Region", ["North", None, "South", "North", "", "East", "West"])

    assert info.name == "Region"
    assert info.type == "categorical"
    assert info.unique_values == 4
    assert info.has_nulls is True
    assert info.sample_values == ["North", None, "South", "North", ""]


@pytest.mark.unit
def test_distinct_count_keeps_types_apart():
    info = describe_column("Code", [1, "1", 1])
    assert info.unique_values == 2


@pytest.mark.unit
def test_distinct_count_treats_equal_numbers_as_one_value():
    assert distinct_count([1, 1.0, 2, np.int64(2), np.float64(3.0)]) == 3
    assert distinct_count([True, 1, "1"]) == 3


@pytest.mark.unit
def test_column_values_pads_short_rows():
    assert column_values([[1, 2], [3]], 1) == [2, None]


@pytest.mark.unit
def test_classify_columns_preserves_header_order():
    headers = ["Date", "Region", "Revenue"]
    rows = [
        ["2024-01-01", "North", 100],
        ["2024-01-02", "South", 200],
        ["2024-01-03", "North", 150],
    ]

    columns = classify_columns(headers, rows)

    assert [c.name for c in columns] == headers
    assert [c.type for c in columns] == ["datetime", "categorical", "numerical"]


@pytest.mark.unit
def test_classify_columns_recovers_from_column_failure(monkeypatch):
    """A column whose analysis raises is reported as text with nulls."""
    original = classifier.describe_column

    def flaky(name, values):
        if name == "Broken":
            raise ValueError("cannot analyze")
        return original(name, values)

    monkeypatch.setattr(classifier, "describe_column", flaky)

    columns = classify_columns(["Broken", "Amount"], [["x", 1], ["y", 2]])

    assert columns[0].name == "Broken"
    assert columns[0].type == "text"
    assert columns[0].has_nulls is True
    assert columns[0].unique_values == 0
    assert columns[1].type == "numerical"
