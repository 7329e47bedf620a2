"""
Unit tests for the chart recommendation engine.
"""
import pytest

from analyst.core.errors import InsufficientDataError
from analyst.services import engine as engine_module
from analyst.services.diversity import COUNT_AXIS, CUMULATIVE_PREFIX, chart_key
from analyst.services.engine import ChartEngine, generate_charts, get_run_statistics


@pytest.fixture
def engine():
    return ChartEngine()


def titles(charts):
    return [chart.title for chart in charts]


@pytest.mark.unit
def test_sales_by_category_over_time(engine, sales_columns):
    charts, stats = engine.generate(sales_columns)

    assert titles(charts) == [
        "Sales by Category",
        "Distribution of Category",
        "Sales over Date",
        "Cumulative Sales over Date",
    ]
    assert stats.total_charts == 4
    assert stats.aspect_coverage == {"comparison": 1, "distribution": 1, "trend": 2}
    assert stats.diversity_score == pytest.approx(0.6)


@pytest.mark.unit
def test_category_and_value_only(engine, column):
    charts, _ = engine.generate([column("Region", "categorical"), column("Revenue", "numerical")])

    assert titles(charts) == ["Revenue by Region", "Distribution of Region"]


@pytest.mark.unit
def test_measurements_without_natural_axis(engine, body_columns):
    charts, stats = engine.generate(body_columns)

    assert titles(charts) == [
        "Weight trend over Height",
        "Weight vs Height",
        "Weight vs Height (sized by Age)",
    ]
    assert stats.diversity_score == pytest.approx(0.4)


@pytest.mark.unit
def test_single_numerical_column_uses_fallback(engine, column):
    charts, stats = engine.generate([column("Revenue", "numerical")])

    assert titles(charts) == ["Distribution of Revenue"]
    assert stats.total_charts == 1
    assert stats.aspect_coverage == {"distribution": 1}


@pytest.mark.unit
def test_free_text_only_is_insufficient(engine, column):
    with pytest.raises(InsufficientDataError):
        engine.generate([column("Comments", "text", 50)])


@pytest.mark.unit
def test_no_columns_is_insufficient(engine):
    with pytest.raises(InsufficientDataError) as exc_info:
        engine.generate([])
    assert exc_info.value.code == "INSUFFICIENT_DATA"


@pytest.mark.unit
def test_all_empty_columns_is_insufficient(engine, column):
    with pytest.raises(InsufficientDataError):
        engine.generate([column("A", "numerical", 0), column("B", "categorical", 0)])


@pytest.mark.unit
def test_pipeline_failure_falls_back(engine, sales_columns, monkeypatch):
    def broken(buckets):
        raise RuntimeError("generator exploded")

    monkeypatch.setattr(engine_module, "generate_candidates", broken)

    charts, stats = engine.generate(sales_columns)

    assert titles(charts) == ["Distribution of Category", "Sales by Category"]
    assert stats.total_charts == 2
    assert stats.diversity_score == pytest.approx(0.4)


@pytest.mark.unit
def test_empty_pipeline_falls_back(engine, sales_columns, monkeypatch):
    monkeypatch.setattr(engine_module, "generate_candidates", lambda buckets: [])

    charts, _ = engine.generate(sales_columns)

    assert titles(charts) == ["Distribution of Category", "Sales by Category"]


@pytest.mark.unit
def test_runs_are_independent(engine, sales_columns, body_columns):
    first, _ = engine.generate(sales_columns)
    engine.generate(body_columns)
    again, _ = engine.generate(sales_columns)

    assert first == again


@pytest.mark.unit
def test_last_run_statistics_track_latest_run(engine, sales_columns, body_columns):
    engine.generate(sales_columns)
    assert engine.last_run_statistics.total_charts == 4

    engine.generate(body_columns)
    assert engine.last_run_statistics.total_charts == 3


@pytest.mark.unit
def test_generated_charts_reference_known_columns(engine, sales_columns, body_columns, column):
    columns = sales_columns + body_columns + [column("Status", "text", 4), column("Order ID", "numerical", 6)]
    names = {c.name for c in columns}

    charts, stats = engine.generate(columns)

    keys = [chart_key(c) for c in charts]
    assert len(keys) == len(set(keys))
    for c in charts:
        assert c.x_axis in names
        y_axis = c.y_axis[len(CUMULATIVE_PREFIX):] if c.y_axis.startswith(CUMULATIVE_PREFIX) else c.y_axis
        assert y_axis in names or y_axis == COUNT_AXIS
    assert 0.0 <= stats.diversity_score <= 1.0
    assert stats.total_charts == len(charts)


@pytest.mark.unit
def test_no_mirrored_scatter_plots(engine, body_columns):
    charts, _ = engine.generate(body_columns)
    pairs = [frozenset((c.x_axis, c.y_axis)) for c in charts if c.type == "scatter" and "sized by" not in c.title]
    assert len(pairs) == len(set(pairs))


@pytest.mark.unit
def test_module_level_helpers_share_one_engine(sales_columns):
    charts = generate_charts(sales_columns)

    assert len(charts) == 4
    assert get_run_statistics().total_charts == 4


@pytest.mark.unit
def test_free_text_column_is_never_an_axis(engine, column):
    columns = [
        column("Notes", "text", 50),
        column("Amount", "numerical", 50),
        column("Price", "numerical", 50),
        column("Region", "categorical", 4),
    ]

    charts, _ = engine.generate(columns)

    assert charts
    for chart in charts:
        assert "Notes" not in (chart.x_axis, chart.y_axis)
        assert "Notes" not in chart.title
