"""
Unit tests for the bar, line and scatter candidate generators.
"""
import pytest

from analyst.services.categorizer import categorize_columns
from analyst.services.diversity import chart_key
from analyst.services.generators import (
    generate_bar_charts,
    generate_candidates,
    generate_line_charts,
    generate_scatter_plots,
)


def titles(charts):
    return [chart.title for chart in charts]


@pytest.mark.unit
def test_bar_charts_comparisons_then_distributions(column):
    buckets = categorize_columns([
        column("Region", "categorical"),
        column("Segment", "categorical"),
        column("Revenue", "numerical"),
    ])

    charts = generate_bar_charts(buckets)

    assert titles(charts) == [
        "Revenue by Region",
        "Revenue by Segment",
        "Distribution of Region",
        "Distribution of Segment",
    ]
    assert charts[0].x_axis == "Region"
    assert charts[0].y_axis == "Revenue"
    assert charts[2].y_axis == "Count"


@pytest.mark.unit
def test_bar_charts_for_limited_text(column):
    buckets = categorize_columns([
        column("Status", "text", 4),
        column("Amount", "numerical"),
    ])

    charts = generate_bar_charts(buckets)

    assert titles(charts) == ["Distribution of Status", "Amount by Status"]


@pytest.mark.unit
def test_line_charts_over_dates_with_cumulative(sales_columns):
    charts = generate_line_charts(categorize_columns(sales_columns))

    assert titles(charts) == ["Sales over Date", "Cumulative Sales over Date"]
    assert charts[1].x_axis == "Date"
    assert charts[1].y_axis == "Cumulative Sales"


@pytest.mark.unit
def test_cumulative_lines_use_first_date_column(column):
    buckets = categorize_columns([
        column("Ordered", "datetime"),
        column("Shipped", "datetime"),
        column("Amount", "numerical"),
    ])

    charts = generate_line_charts(buckets)

    assert titles(charts) == [
        "Amount over Ordered",
        "Amount over Shipped",
        "Cumulative Amount over Ordered",
    ]


@pytest.mark.unit
def test_line_charts_over_sequential_column(column):
    buckets = categorize_columns([
        column("Rank", "numerical"),
        column("Score", "numerical"),
    ])

    charts = generate_line_charts(buckets)

    assert titles(charts) == ["Score trend over Rank"]


@pytest.mark.unit
def test_first_numerical_column_stands_in_as_index(body_columns):
    charts = generate_line_charts(categorize_columns(body_columns))

    assert titles(charts) == ["Weight trend over Height", "Age trend over Height"]


@pytest.mark.unit
def test_no_line_charts_without_an_x_axis(column):
    buckets = categorize_columns([column("Region", "categorical"), column("Revenue", "numerical")])
    assert generate_line_charts(buckets) == []


@pytest.mark.unit
def test_scatter_plots_for_three_measurements(body_columns):
    charts = generate_scatter_plots(categorize_columns(body_columns))

    assert titles(charts) == [
        "Weight vs Height",
        "Age vs Height",
        "Age vs Weight",
        "Weight vs Height (sized by Age)",
    ]
    assert all(chart.type == "scatter" for chart in charts)


@pytest.mark.unit
def test_sized_scatter_triples_are_capped(column):
    columns = [column(f"M{i}", "numerical") for i in range(6)]

    charts = generate_scatter_plots(categorize_columns(columns))
    sized = [chart for chart in charts if "sized by" in chart.title]

    assert len(charts) - len(sized) == 15
    assert len(sized) == 10
    # The sixth column never takes part in a sized triple
    assert not any("M5" in chart.title for chart in sized)


@pytest.mark.unit
def test_scatter_needs_two_numerical_columns(column):
    assert generate_scatter_plots(categorize_columns([column("Only", "numerical")])) == []


@pytest.mark.unit
def test_each_generator_returns_unique_keys(sales_columns, body_columns, column):
    columns = sales_columns + body_columns + [column("Status", "text", 4)]
    buckets = categorize_columns(columns)

    for generate in (generate_bar_charts, generate_line_charts, generate_scatter_plots):
        keys = [chart_key(chart) for chart in generate(buckets)]
        assert len(keys) == len(set(keys))


@pytest.mark.unit
def test_candidates_are_bar_then_line_then_scatter(sales_columns, column):
    buckets = categorize_columns(sales_columns + [column("Profit", "numerical")])

    types = [chart.type for chart in generate_candidates(buckets)]

    assert types == sorted(types, key=["bar", "line", "scatter"].index)
    assert types[-1] == "scatter"
