"""
Unit tests for chart keys, aspects and the diversity filter.
"""
import pytest

from analyst.core.schemas import ChartRecommendation
from analyst.services.diversity import (
    AnalyticalAspect,
    GenerationContext,
    chart_key,
    determine_aspect,
    filter_candidates,
    is_enhanced,
    resolve_axis,
)


def chart(title, chart_type, x_axis, y_axis):
    return ChartRecommendation(title=title, type=chart_type, x_axis=x_axis, y_axis=y_axis)


@pytest.mark.unit
def test_scatter_key_ignores_axis_order():
    first = chart("B vs A", "scatter", "A", "B")
    second = chart("A vs B", "scatter", "B", "A")
    assert chart_key(first) == chart_key(second) == "scatter:A:B"


@pytest.mark.unit
def test_bar_and_line_keys_keep_axis_order():
    assert chart_key(chart("t", "bar", "A", "B")) != chart_key(chart("t", "bar", "B", "A"))
    assert chart_key(chart("t", "line", "Date", "Sales")) == "line:Date:Sales"


@pytest.mark.unit
def test_enhanced_variants_never_collide_with_base_chart():
    base = chart("Weight vs Height", "scatter", "Height", "Weight")
    sized = chart("Weight vs Height (sized by Age)", "scatter", "Height", "Weight")

    assert is_enhanced(sized)
    assert not is_enhanced(base)
    assert chart_key(base) != chart_key(sized)


@pytest.mark.unit
def test_resolve_axis(column):
    sales = column("Sales", "numerical")
    lookup = {"Sales": sales}

    assert resolve_axis("Sales", lookup) is sales
    assert resolve_axis("Cumulative Sales", lookup) is sales
    assert resolve_axis("Count", lookup) is None
    assert resolve_axis("Profit", lookup) is None


@pytest.mark.unit
def test_aspects(column):
    region = column("Region", "categorical")
    status = column("Status", "text", 4)
    revenue = column("Revenue", "numerical")
    date = column("Date", "datetime")
    rank = column("Rank", "numerical")

    assert determine_aspect(chart("d", "bar", "Region", "Count"), region, None) == AnalyticalAspect.DISTRIBUTION
    assert determine_aspect(chart("c", "bar", "Region", "Revenue"), region, revenue) == AnalyticalAspect.COMPARISON
    assert determine_aspect(chart("c", "bar", "Status", "Revenue"), status, revenue) == AnalyticalAspect.COMPOSITION
    assert determine_aspect(chart("t", "line", "Date", "Revenue"), date, revenue) == AnalyticalAspect.TREND
    assert determine_aspect(chart("t", "line", "Rank", "Revenue"), rank, revenue) == AnalyticalAspect.TREND
    assert determine_aspect(chart("t", "line", "Revenue", "Rank"), revenue, rank) == AnalyticalAspect.COMPARISON
    assert determine_aspect(chart("s", "scatter", "Revenue", "Rank"), revenue, rank) == AnalyticalAspect.CORRELATION


@pytest.mark.unit
def test_filter_rejects_repeated_aspect_and_combination(column):
    columns = [column("Region", "categorical"), column("Segment", "categorical"), column("Revenue", "numerical")]
    candidates = [
        chart("Revenue by Region", "bar", "Region", "Revenue"),
        chart("Revenue by Segment", "bar", "Segment", "Revenue"),
    ]

    accepted = filter_candidates(candidates, columns, GenerationContext())

    assert [c.title for c in accepted] == ["Revenue by Region"]


@pytest.mark.unit
def test_filter_drops_duplicate_keys_and_unknown_axes(column):
    columns = [column("Region", "categorical"), column("Revenue", "numerical")]
    candidates = [
        chart("Distribution of Region", "bar", "Region", "Count"),
        chart("Region counts", "bar", "Region", "Count"),
        chart("Profit by Region", "bar", "Region", "Profit"),
    ]

    accepted = filter_candidates(candidates, columns, GenerationContext())

    assert [c.title for c in accepted] == ["Distribution of Region"]


@pytest.mark.unit
def test_enhanced_variant_passes_within_an_existing_aspect(column):
    columns = [column("Date", "datetime"), column("Sales", "numerical")]
    candidates = [
        chart("Sales over Date", "line", "Date", "Sales"),
        chart("Cumulative Sales over Date", "line", "Date", "Cumulative Sales"),
    ]

    accepted = filter_candidates(candidates, columns, GenerationContext())

    assert len(accepted) == 2


@pytest.mark.unit
def test_context_statistics(column):
    columns = [column("Region", "categorical"), column("Revenue", "numerical"), column("Date", "datetime")]
    context = GenerationContext()
    filter_candidates([
        chart("Revenue by Region", "bar", "Region", "Revenue"),
        chart("Distribution of Region", "bar", "Region", "Count"),
        chart("Revenue over Date", "line", "Date", "Revenue"),
    ], columns, context)

    stats = context.statistics()

    assert stats.total_charts == 3
    assert stats.aspect_coverage == {"comparison": 1, "distribution": 1, "trend": 1}
    assert stats.unique_column_combinations == 3
    assert stats.diversity_score == pytest.approx(0.6)


@pytest.mark.unit
def test_empty_context_statistics():
    stats = GenerationContext().statistics()
    assert stats.total_charts == 0
    assert stats.diversity_score == 0.0
