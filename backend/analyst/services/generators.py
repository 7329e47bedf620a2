"""
Candidate chart enumeration.

Three independent generators turn bucketed columns into bar, line and
scatter candidates. Each returns its candidates in a fixed enumeration
order and never returns two candidates with the same canonical key.
"""
import logging
from typing import List

from analyst.core.schemas import ChartRecommendation
from analyst.services.categorizer import ColumnBuckets, is_sequential_column
from analyst.services.diversity import COUNT_AXIS, CUMULATIVE_PREFIX, chart_key

logger = logging.getLogger(__name__)

# Exclusive upper bounds on (i, j, k) for sized scatter triples
SCATTER_SIZE_CAPS = (3, 4, 5)


class _CandidateList:
    """Ordered candidate list that drops canonical-key duplicates."""

    def __init__(self):
        self.charts: List[ChartRecommendation] = []
        self._keys = set()

    def add(self, title: str, chart_type: str, x_axis: str, y_axis: str) -> None:
        chart = ChartRecommendation(title=title, type=chart_type, x_axis=x_axis, y_axis=y_axis)
        key = chart_key(chart)
        if key not in self._keys:
            self._keys.add(key)
            self.charts.append(chart)


def generate_bar_charts(buckets: ColumnBuckets) -> List[ChartRecommendation]:
    """
    Bar charts for category/value comparisons and category distributions.

    Categorical columns yield every "<num> by <cat>" chart first, then their
    distributions; each limited-text column then yields its distribution
    followed by its "<num> by <text>" charts.
    """
    candidates = _CandidateList()

    for cat_col in buckets.categorical:
        for num_col in buckets.numerical:
            candidates.add(f"{num_col.name} by {cat_col.name}", "bar", cat_col.name, num_col.name)

    for cat_col in buckets.categorical:
        candidates.add(f"Distribution of {cat_col.name}", "bar", cat_col.name, COUNT_AXIS)

    for text_col in buckets.text_limited:
        candidates.add(f"Distribution of {text_col.name}", "bar", text_col.name, COUNT_AXIS)
        for num_col in buckets.numerical:
            candidates.add(f"{num_col.name} by {text_col.name}", "bar", text_col.name, num_col.name)

    return candidates.charts


def generate_line_charts(buckets: ColumnBuckets) -> List[ChartRecommendation]:
    """Time series, sequential trends, implicit-index trends and cumulative series."""
    candidates = _CandidateList()
    numerical = buckets.numerical
    datetime_cols = buckets.datetime

    for date_col in datetime_cols:
        for num_col in numerical:
            candidates.add(f"{num_col.name} over {date_col.name}", "line", date_col.name, num_col.name)

    sequential = [col for col in numerical if is_sequential_column(col)]
    for seq_col in sequential:
        for num_col in numerical:
            if num_col.name != seq_col.name:
                candidates.add(f"{num_col.name} trend over {seq_col.name}", "line", seq_col.name, num_col.name)

    # No natural x-axis: the first numerical column stands in as the index
    if not datetime_cols and not sequential and len(numerical) >= 2:
        index_col = numerical[0]
        for num_col in numerical[1:]:
            candidates.add(f"{num_col.name} trend over {index_col.name}", "line", index_col.name, num_col.name)

    if datetime_cols:
        date_col = datetime_cols[0]
        for num_col in numerical:
            candidates.add(
                f"Cumulative {num_col.name} over {date_col.name}",
                "line",
                date_col.name,
                f"{CUMULATIVE_PREFIX}{num_col.name}",
            )

    return candidates.charts


def generate_scatter_plots(buckets: ColumnBuckets) -> List[ChartRecommendation]:
    """Pairwise scatter plots plus bounded sized-by variants."""
    numerical = buckets.numerical
    if len(numerical) < 2:
        return []

    candidates = _CandidateList()
    for i in range(len(numerical)):
        for j in range(i + 1, len(numerical)):
            x_col, y_col = numerical[i], numerical[j]
            candidates.add(f"{y_col.name} vs {x_col.name}", "scatter", x_col.name, y_col.name)

    if len(numerical) >= 3:
        i_cap, j_cap, k_cap = SCATTER_SIZE_CAPS
        for i in range(min(i_cap, len(numerical))):
            for j in range(i + 1, min(j_cap, len(numerical))):
                for k in range(j + 1, min(k_cap, len(numerical))):
                    x_col, y_col, size_col = numerical[i], numerical[j], numerical[k]
                    candidates.add(
                        f"{y_col.name} vs {x_col.name} (sized by {size_col.name})",
                        "scatter",
                        x_col.name,
                        y_col.name,
                    )

    return candidates.charts


def generate_candidates(buckets: ColumnBuckets) -> List[ChartRecommendation]:
    """All candidates in pipeline order: bar, then line, then scatter."""
    bar = generate_bar_charts(buckets)
    line = generate_line_charts(buckets)
    scatter = generate_scatter_plots(buckets)
    logger.debug(f"Generated candidates: {len(bar)} bar, {len(line)} line, {len(scatter)} scatter")
    return bar + line + scatter
