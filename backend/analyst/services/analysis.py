"""
End-to-end dataset analysis.

Runs input processing, chart recommendation, business insights, the
Markdown report and output formatting in order. Column analysis and chart
generation each have their own time budget and the whole run has an
overall one (see Settings).
"""
import logging
from typing import Any, List, Mapping, Union

from analyst.core.config import get_settings
from analyst.core.errors import AnalysisError, InsufficientDataError, to_analysis_error
from analyst.core.performance import track_performance
from analyst.core.schemas import AnalysisOutput, AnalysisRequest, ChartRecommendation
from analyst.core.timeouts import run_with_timeout, with_timeout
from analyst.services.engine import ChartEngine
from analyst.services.formatter import JsonOutputFormatter
from analyst.services.input_processor import process_input
from analyst.services.insights import generate_business_insights
from analyst.services.report import generate_analysis_report

logger = logging.getLogger(__name__)

formatter = JsonOutputFormatter()


def require_charts(charts: List[ChartRecommendation]) -> List[ChartRecommendation]:
    """Treat an empty recommendation list as insufficient data."""
    if not charts:
        logger.warning("No charts could be recommended for this dataset")
        raise InsufficientDataError(
            "No charts could be recommended for this dataset",
            suggestions=[
                "Include numerical, categorical or date columns",
                "Reduce the number of distinct values in text columns",
            ],
        )
    return charts


async def _run_pipeline(request: Union[AnalysisRequest, Mapping[str, Any]]) -> AnalysisOutput:
    settings = get_settings()

    processed = await run_with_timeout(
        process_input, settings.column_analysis_timeout_seconds, "Column analysis", request
    )
    columns = processed.columns

    # A fresh engine per run; a timed-out worker thread keeps its own state
    engine = ChartEngine()
    charts, statistics = await run_with_timeout(
        engine.generate, settings.chart_generation_timeout_seconds, "Chart generation", columns
    )
    require_charts(charts)

    insights = generate_business_insights(columns)
    report = generate_analysis_report(columns, insights, processed.data_quality)
    output = formatter.format_output(charts, report)

    logger.info(
        f"Analysis complete: {len(columns)} columns, {len(output.charts_to_generate)} charts, "
        f"diversity {statistics.diversity_score:.2f}, report {len(output.full_analysis_report_markdown)} chars"
    )
    return output


@track_performance("analyze_dataset")
async def analyze_dataset(request: Union[AnalysisRequest, Mapping[str, Any]]) -> AnalysisOutput:
    """
    Analyze a dataset and return chart recommendations plus the report.

    Raises:
        AnalysisError: any validation, data or timeout failure; unexpected
            exceptions are wrapped with code UNEXPECTED_ERROR
    """
    settings = get_settings()
    try:
        return await with_timeout(_run_pipeline(request), settings.analysis_timeout_seconds, "Dataset analysis")
    except AnalysisError:
        raise
    except Exception as e:
        logger.error(f"Unexpected analysis failure: {e}", exc_info=True)
        raise to_analysis_error(e) from e
