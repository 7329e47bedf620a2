"""
Last-resort chart recommendations.

Used when the regular pipeline yields nothing or fails. Produces at most a
distribution bar for the first usable column and one pairing chart.
"""
import logging
from typing import List, Optional

from analyst.core.schemas import ChartRecommendation, ColumnInfo
from analyst.services.categorizer import is_text_limited
from analyst.services.diversity import COUNT_AXIS

logger = logging.getLogger(__name__)


def _is_category_like(column: ColumnInfo) -> bool:
    return column.type == "categorical" or is_text_limited(column)


def _first_usable(columns: List[ColumnInfo]) -> Optional[ColumnInfo]:
    return next((col for col in columns if col.unique_values > 0), None)


def _second_usable(columns: List[ColumnInfo], first: ColumnInfo) -> Optional[ColumnInfo]:
    return next(
        (col for index, col in enumerate(columns)
         if index > 0 and col.unique_values > 0 and col is not first),
        None,
    )


def generate_fallback_charts(columns: List[ColumnInfo]) -> List[ChartRecommendation]:
    charts: List[ChartRecommendation] = []
    try:
        first = _first_usable(columns)
        if first is None:
            return charts

        if first.type == "numerical" or _is_category_like(first):
            charts.append(ChartRecommendation(
                title=f"Distribution of {first.name}", type="bar", x_axis=first.name, y_axis=COUNT_AXIS
            ))

        second = _second_usable(columns, first)
        if second is None:
            return charts

        if first.type == "numerical" and second.type == "numerical":
            charts.append(ChartRecommendation(
                title=f"{second.name} vs {first.name}", type="scatter", x_axis=first.name, y_axis=second.name
            ))
            return charts

        # Category role prefers the first column, value role likewise
        category = first if _is_category_like(first) else (second if _is_category_like(second) else None)
        value = first if first.type == "numerical" else (second if second.type == "numerical" else None)
        if category is not None and value is not None and category is not value:
            charts.append(ChartRecommendation(
                title=f"{value.name} by {category.name}", type="bar", x_axis=category.name, y_axis=value.name
            ))
    except Exception as e:
        logger.warning(f"Fallback chart generation failed: {e}")

    return charts
