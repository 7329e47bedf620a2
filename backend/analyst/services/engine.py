"""
Chart recommendation engine.

Ties the categorizer, the three generators, the diversity filter and the
fallback producer together. Every call works on its own GenerationContext,
so concurrent or timed-out runs never share dedup state.
"""
import logging
from typing import List, Optional, Tuple

from analyst.core.errors import ChartGenerationError, InsufficientDataError
from analyst.core.performance import track_performance
from analyst.core.schemas import ChartRecommendation, ColumnInfo, RunStatistics
from analyst.services.categorizer import ColumnBuckets, categorize_columns
from analyst.services.diversity import GenerationContext, filter_candidates, record_accepted
from analyst.services.fallback import generate_fallback_charts
from analyst.services.generators import generate_candidates

logger = logging.getLogger(__name__)


def validate_columns(columns: List[ColumnInfo]) -> None:
    """Raise InsufficientDataError when nothing in the column list can be charted."""
    if not columns:
        raise InsufficientDataError(
            "No columns available for chart generation",
            suggestions=["Provide a dataset with at least one column"],
        )
    if not any(col.unique_values > 0 for col in columns):
        raise InsufficientDataError(
            "No columns contain sufficient data for visualization",
            suggestions=[
                "Ensure columns contain actual data values",
                "Remove empty columns from the dataset",
            ],
            context={"column_count": len(columns)},
        )


class ChartEngine:
    """
    Produces deduplicated, diversity-balanced chart recommendations.

    The engine keeps no state between runs apart from the statistics of
    the last completed run, which is replaced as a whole when a run ends.
    """

    def __init__(self):
        self._last_statistics: RunStatistics = RunStatistics()

    @property
    def last_run_statistics(self) -> RunStatistics:
        return self._last_statistics

    @track_performance("generate_charts")
    def generate(self, columns: List[ColumnInfo]) -> Tuple[List[ChartRecommendation], RunStatistics]:
        """Run the pipeline and return the charts with this run's statistics."""
        validate_columns(columns)

        context = GenerationContext()
        buckets = categorize_columns(columns)
        charts: List[ChartRecommendation] = []

        if buckets.is_empty():
            logger.warning("No chartable column types found, using fallback charts")
        else:
            try:
                charts = self._run_pipeline(buckets, columns, context)
            except ChartGenerationError as e:
                logger.warning(f"Chart generation failed, attempting fallback: {e.message}")
            else:
                if not charts:
                    logger.warning("Chart pipeline produced no charts, using fallback charts")

        if not charts:
            # A failed pipeline may have left partial bookkeeping behind
            context = GenerationContext()
            charts = generate_fallback_charts(columns)
            record_accepted(context, charts, columns)
            if not charts and buckets.is_empty():
                raise InsufficientDataError(
                    "Dataset contains no column types that can be visualized",
                    suggestions=[
                        "Include numerical, categorical or date columns",
                        "Reduce the number of distinct values in text columns",
                    ],
                )

        return self._finish(charts, context)

    def generate_charts(self, columns: List[ColumnInfo]) -> List[ChartRecommendation]:
        charts, _ = self.generate(columns)
        return charts

    def _run_pipeline(self, buckets: ColumnBuckets, columns: List[ColumnInfo],
                      context: GenerationContext) -> List[ChartRecommendation]:
        try:
            candidates = generate_candidates(buckets)
            return filter_candidates(candidates, columns, context)
        except Exception as e:
            raise ChartGenerationError(f"Chart pipeline failed: {e}") from e

    def _finish(self, charts: List[ChartRecommendation],
                context: GenerationContext) -> Tuple[List[ChartRecommendation], RunStatistics]:
        statistics = context.statistics()
        self._last_statistics = statistics
        logger.info(
            f"Generated {len(charts)} charts (diversity score {statistics.diversity_score:.2f})"
        )
        return charts, statistics


_default_engine: Optional[ChartEngine] = None


def get_engine() -> ChartEngine:
    """Shared engine instance (singleton pattern)."""
    global _default_engine
    if _default_engine is None:
        _default_engine = ChartEngine()
    return _default_engine


def generate_charts(columns: List[ColumnInfo]) -> List[ChartRecommendation]:
    """Chart recommendations for a classified column list."""
    return get_engine().generate_charts(columns)


def get_run_statistics() -> RunStatistics:
    """Statistics of the most recently completed run of the shared engine."""
    return get_engine().last_run_statistics
