"""
Unit tests for time budgets and the end-to-end analysis service.
"""
import asyncio
import time

import pytest

from analyst.core.errors import (
    AnalysisError,
    AnalysisTimeoutError,
    InputValidationError,
    InsufficientDataError,
)
from analyst.core.timeouts import run_with_timeout, with_timeout
from analyst.services import analysis
from analyst.services.analysis import analyze_dataset, require_charts


class SlowEngine:
    def generate(self, columns):
        time.sleep(0.5)
        return [], None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_with_timeout_returns_result():
    async def quick():
        return 42

    assert await with_timeout(quick(), 1, "Quick step") == 42


@pytest.mark.unit
@pytest.mark.asyncio
async def test_with_timeout_raises_analysis_timeout():
    with pytest.raises(AnalysisTimeoutError) as exc_info:
        await with_timeout(asyncio.sleep(1), 0.01, "Slow step")

    assert exc_info.value.operation == "Slow step"
    assert exc_info.value.code == "ANALYSIS_TIMEOUT"
    assert exc_info.value.message == "Slow step timed out after 0.01s"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_run_with_timeout_runs_in_thread():
    assert await run_with_timeout(sum, 1, "Summing", [1, 2, 3]) == 6


@pytest.mark.unit
@pytest.mark.asyncio
async def test_analyze_dataset(sales_payload):
    output = await analyze_dataset(sales_payload)

    titles = [chart.title for chart in output.charts_to_generate]
    assert "Revenue by Region" in titles
    assert "Distribution of Region" in titles
    assert "Revenue over Date" in titles
    assert output.full_analysis_report_markdown.startswith("# Executive Summary")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_analyze_dataset_propagates_validation_errors():
    with pytest.raises(InputValidationError) as exc_info:
        await analyze_dataset({"headers": ["A", "A"], "sampleData": [[1, 2], [3, 4]]})
    assert exc_info.value.code == "DUPLICATE_HEADERS"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_chart_generation_budget(sales_payload, fresh_settings, monkeypatch):
    fresh_settings(CHART_GENERATION_TIMEOUT_SECONDS="0.05")
    monkeypatch.setattr(analysis, "ChartEngine", SlowEngine)

    with pytest.raises(AnalysisTimeoutError) as exc_info:
        await analyze_dataset(sales_payload)
    assert exc_info.value.operation == "Chart generation"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_overall_budget(sales_payload, fresh_settings, monkeypatch):
    fresh_settings(ANALYSIS_TIMEOUT_SECONDS="0.05")
    monkeypatch.setattr(analysis, "ChartEngine", SlowEngine)

    with pytest.raises(AnalysisTimeoutError) as exc_info:
        await analyze_dataset(sales_payload)
    assert exc_info.value.operation == "Dataset analysis"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unexpected_errors_are_wrapped(sales_payload, monkeypatch):
    def broken(columns):
        raise RuntimeError("insights offline")

    monkeypatch.setattr(analysis, "generate_business_insights", broken)

    with pytest.raises(AnalysisError) as exc_info:
        await analyze_dataset(sales_payload)
    assert exc_info.value.code == "UNEXPECTED_ERROR"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_zero_charts_is_insufficient_data(free_text_payload):
    with pytest.raises(InsufficientDataError) as exc_info:
        await analyze_dataset(free_text_payload)

    assert exc_info.value.code == "INSUFFICIENT_DATA"
    assert "Reduce the number of distinct values in text columns" in exc_info.value.suggestions


@pytest.mark.unit
def test_require_charts():
    with pytest.raises(InsufficientDataError):
        require_charts([])
