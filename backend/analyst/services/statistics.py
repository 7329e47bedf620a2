"""
Column statistics and dataset quality metrics.
"""
import logging
from collections import Counter
from typing import Any, List, Sequence

import pandas as pd

from analyst.core.schemas import ColumnStatistics, DataQualityMetrics
from analyst.core.sanitization import sanitize_for_logging
from analyst.services.classifier import (
    column_values, distinct_count, is_missing, is_numeric_value, non_missing, value_kind
)

logger = logging.getLogger(__name__)

HIGH_MISSING_RATIO = 0.5
LOW_COMPLETENESS = 0.9
ISSUE_PENALTY = 0.1
MAX_ISSUE_PENALTY = 0.8
ROW_MISMATCH_PENALTY = 0.3


def _numeric_series(values: Sequence[Any]) -> pd.Series:
    return pd.Series([float(v) for v in values if is_numeric_value(v)], dtype="float64")


def calculate_mode(values: Sequence[Any]) -> Any:
    """Most frequent value; ties go to the value seen first."""
    if not values:
        return None
    return Counter(values).most_common(1)[0][0]


def calculate_column_statistics(values: Sequence[Any], column_type: str) -> ColumnStatistics:
    """
    Basic statistics for one column.

    Numerical columns get min/max/mean/median (mean and median rounded to two
    decimals); every other type gets the mode.
    """
    present = non_missing(values)
    null_count = len(values) - len(present)
    unique_count = distinct_count(present)

    if column_type == "numerical":
        numbers = _numeric_series(present)
        if numbers.empty:
            return ColumnStatistics(null_count=null_count, unique_count=unique_count)
        return ColumnStatistics(
            min=float(numbers.min()),
            max=float(numbers.max()),
            mean=round(float(numbers.mean()), 2),
            median=round(float(numbers.median()), 2),
            null_count=null_count,
            unique_count=unique_count,
        )

    return ColumnStatistics(mode=calculate_mode(present), null_count=null_count, unique_count=unique_count)


def _has_inconsistent_casing(strings: List[str]) -> bool:
    if len(strings) < 2:
        return False
    return len({s.lower() for s in strings}) < len(set(strings))


def column_quality_issues(header: str, values: Sequence[Any]) -> List[str]:
    """Human-readable quality problems found in one column."""
    issues = []
    present = non_missing(values)
    if not present:
        return [f'Column "{header}" contains no valid data']

    missing_ratio = (len(values) - len(present)) / len(values)
    if missing_ratio > HIGH_MISSING_RATIO:
        issues.append(f'Column "{header}" has {round(missing_ratio * 100)}% missing values')

    kinds = sorted({value_kind(v) for v in present})
    if len(kinds) > 1:
        issues.append(f'Column "{header}" contains mixed data types: {", ".join(kinds)}')

    if "string" in kinds and _has_inconsistent_casing([v for v in present if isinstance(v, str)]):
        issues.append(f'Column "{header}" has inconsistent text casing')

    return issues


def calculate_data_quality(sample_data: Sequence[Sequence[Any]], headers: Sequence[str]) -> DataQualityMetrics:
    """
    Completeness, consistency and the list of issues behind them.

    completeness is the share of non-missing cells; consistency starts at 1
    and loses 0.1 per issue (at most 0.8) plus up to 0.3 for rows whose
    length differs from the header count.
    """
    total_cells = len(sample_data) * len(headers)
    missing_cells = 0
    issues: List[str] = []

    for index, header in enumerate(headers):
        try:
            values = column_values(sample_data, index)
            missing_cells += sum(1 for v in values if is_missing(v))
            issues.extend(column_quality_issues(header, values))
        except Exception as e:
            logger.warning(f"Failed to analyze quality for column '{sanitize_for_logging(str(header))}': {e}")
            issues.append(f'Column "{header}" could not be analyzed for quality issues')

    completeness = (total_cells - missing_cells) / total_cells if total_cells else 0.0

    consistency = 1.0 - min(len(issues) * ISSUE_PENALTY, MAX_ISSUE_PENALTY)
    mismatched_rows = sum(1 for row in sample_data if len(row) != len(headers))
    if sample_data and mismatched_rows:
        consistency -= (mismatched_rows / len(sample_data)) * ROW_MISMATCH_PENALTY

    if completeness < LOW_COMPLETENESS:
        issues.append(
            f"Data completeness is {round(completeness * 100)}% - consider providing more complete sample data"
        )

    return DataQualityMetrics(
        completeness=max(0.0, min(1.0, completeness)),
        consistency=max(0.0, min(1.0, consistency)),
        issues=issues,
    )
