"""
Chart deduplication and diversity filtering.

Candidates are filtered in generation order against a GenerationContext
that lives for exactly one engine run. A candidate survives when its
canonical key is new and it either opens a new analytical aspect, brings a
new column-type combination to an existing aspect, or is an enhanced
variant (sized scatter, cumulative line).
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from analyst.core.schemas import ChartRecommendation, ColumnInfo, RunStatistics
from analyst.services.categorizer import is_sequential_column

logger = logging.getLogger(__name__)

COUNT_AXIS = "Count"
CUMULATIVE_PREFIX = "Cumulative "
ENHANCED_MARKERS = ("sized by", "Cumulative")


class AnalyticalAspect(str, Enum):
    DISTRIBUTION = "distribution"
    COMPARISON = "comparison"
    CORRELATION = "correlation"
    TREND = "trend"
    COMPOSITION = "composition"


@dataclass(frozen=True)
class ChartMetadata:
    chart: ChartRecommendation
    aspect: AnalyticalAspect
    column_types: List[str]

    @property
    def combination(self) -> str:
        return "-".join(self.column_types)


@dataclass
class GenerationContext:
    """Dedup keys and accepted-chart bookkeeping for a single run."""

    used_keys: Set[str] = field(default_factory=set)
    metadata: List[ChartMetadata] = field(default_factory=list)

    def has_key(self, key: str) -> bool:
        return key in self.used_keys

    def record(self, key: str, entry: ChartMetadata) -> None:
        self.used_keys.add(key)
        self.metadata.append(entry)

    def statistics(self) -> RunStatistics:
        aspect_counts: Dict[str, int] = {}
        combinations = set()
        for entry in self.metadata:
            aspect_counts[entry.aspect.value] = aspect_counts.get(entry.aspect.value, 0) + 1
            combinations.add(entry.combination)

        return RunStatistics(
            total_charts=len(self.metadata),
            aspect_coverage=aspect_counts,
            unique_column_combinations=len(combinations),
            diversity_score=len(aspect_counts) / len(AnalyticalAspect),
        )


def is_enhanced(chart: ChartRecommendation) -> bool:
    return any(marker in chart.title for marker in ENHANCED_MARKERS)


def chart_key(chart: ChartRecommendation) -> str:
    """
    Canonical identity of a chart.

    Enhanced variants fold the title in so they never collide with their
    base chart; scatter axes are order-independent; bar and line axes are not.
    """
    if is_enhanced(chart):
        return f"{chart.type}:{chart.x_axis}:{chart.y_axis}:{chart.title}"
    if chart.type == "scatter":
        first, second = sorted((chart.x_axis, chart.y_axis))
        return f"scatter:{first}:{second}"
    return f"{chart.type}:{chart.x_axis}:{chart.y_axis}"


def resolve_axis(axis: str, lookup: Dict[str, ColumnInfo]) -> Optional[ColumnInfo]:
    """Column feeding an axis label, or None for Count and unknown names."""
    if axis == COUNT_AXIS:
        return None
    if axis in lookup:
        return lookup[axis]
    if axis.startswith(CUMULATIVE_PREFIX):
        return lookup.get(axis[len(CUMULATIVE_PREFIX):])
    return None


def determine_aspect(chart: ChartRecommendation, x_column: ColumnInfo,
                     y_column: Optional[ColumnInfo]) -> AnalyticalAspect:
    if chart.type == "bar":
        if chart.y_axis == COUNT_AXIS:
            return AnalyticalAspect.DISTRIBUTION
        if x_column.type == "categorical" and y_column is not None and y_column.type == "numerical":
            return AnalyticalAspect.COMPARISON
        return AnalyticalAspect.COMPOSITION
    if chart.type == "line":
        if x_column.type == "datetime" or is_sequential_column(x_column):
            return AnalyticalAspect.TREND
        return AnalyticalAspect.COMPARISON
    return AnalyticalAspect.CORRELATION


def column_types_for(chart: ChartRecommendation, x_column: ColumnInfo,
                     y_column: Optional[ColumnInfo]) -> List[str]:
    types = [x_column.type]
    if y_column is not None and chart.y_axis != COUNT_AXIS:
        types.append(y_column.type)
    return sorted(types)


def adds_diverse_value(context: GenerationContext, chart: ChartRecommendation,
                       aspect: AnalyticalAspect, column_types: List[str]) -> bool:
    existing = [entry for entry in context.metadata if entry.aspect == aspect]
    if not existing:
        return True
    if is_enhanced(chart):
        return True
    return "-".join(column_types) not in {entry.combination for entry in existing}


def evaluate_candidate(context: GenerationContext, chart: ChartRecommendation,
                       lookup: Dict[str, ColumnInfo]) -> bool:
    """Accept or reject one candidate, recording it in the context on acceptance."""
    key = chart_key(chart)
    if context.has_key(key):
        return False

    x_column = resolve_axis(chart.x_axis, lookup)
    y_column = resolve_axis(chart.y_axis, lookup)
    if x_column is None or (y_column is None and chart.y_axis != COUNT_AXIS):
        return False

    aspect = determine_aspect(chart, x_column, y_column)
    column_types = column_types_for(chart, x_column, y_column)
    if not adds_diverse_value(context, chart, aspect, column_types):
        return False

    context.record(key, ChartMetadata(chart=chart, aspect=aspect, column_types=column_types))
    return True


def filter_candidates(candidates: Iterable[ChartRecommendation], columns: List[ColumnInfo],
                      context: GenerationContext) -> List[ChartRecommendation]:
    """Run the candidate stream through the filter, preserving order."""
    lookup = {column.name: column for column in columns}
    accepted = []
    for chart in candidates:
        try:
            if evaluate_candidate(context, chart, lookup):
                accepted.append(chart)
        except Exception as e:
            logger.warning(f"Failed to evaluate chart '{chart.title}': {e}")
    return accepted


def record_accepted(context: GenerationContext, charts: Iterable[ChartRecommendation],
                    columns: List[ColumnInfo]) -> None:
    """Record charts accepted outside the filter (fallback output) so run statistics cover them."""
    lookup = {column.name: column for column in columns}
    for chart in charts:
        x_column = resolve_axis(chart.x_axis, lookup)
        if x_column is None:
            continue
        y_column = resolve_axis(chart.y_axis, lookup)
        context.record(
            chart_key(chart),
            ChartMetadata(
                chart=chart,
                aspect=determine_aspect(chart, x_column, y_column),
                column_types=column_types_for(chart, x_column, y_column),
            ),
        )
