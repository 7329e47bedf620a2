"""
Column type classification.

Infers a semantic type (numerical, categorical, datetime or text) for each
column from its raw sample values using deterministic threshold rules.
"""
import logging
import re
import warnings
from collections import Counter
from typing import Any, List, Sequence

import numpy as np
import pandas as pd

from analyst.core.performance import track_performance
from analyst.core.sanitization import sanitize_for_logging
from analyst.core.schemas import ColumnInfo

logger = logging.getLogger(__name__)

NUMERIC_THRESHOLD = 0.8
DATETIME_THRESHOLD = 0.7
CATEGORICAL_UNIQUE_RATIO = 0.7
CATEGORICAL_MAX_AVG_LENGTH = 20
CATEGORICAL_MIN_UNIQUE_CAP = 10
CATEGORICAL_UNIQUE_FRACTION = 0.8
SAMPLE_VALUE_COUNT = 5

# Matched as prefixes, so "2024-01-15T10:00:00" still counts
DATE_PATTERNS = [
    re.compile(r"^\d{4}-\d{2}-\d{2}"),        # YYYY-MM-DD
    re.compile(r"^\d{2}/\d{2}/\d{4}"),        # MM/DD/YYYY
    re.compile(r"^\d{2}-\d{2}-\d{4}"),        # MM-DD-YYYY
    re.compile(r"^\d{4}/\d{2}/\d{2}"),        # YYYY/MM/DD
    re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4}"),  # M/D/YY
]


def is_missing(value: Any) -> bool:
    """None, NaN and the empty string all count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, float):
        return bool(np.isnan(value))
    return False


def non_missing(values: Sequence[Any]) -> List[Any]:
    return [v for v in values if not is_missing(v)]


def _hashable(value: Any) -> Any:
    try:
        hash(value)
        return value
    except TypeError:
        return repr(value)


def _distinct_key(value: Any) -> Any:
    if isinstance(value, (bool, np.bool_)):
        return ("bool", bool(value))
    if isinstance(value, (int, float, np.integer, np.floating)):
        return ("number", float(value))
    return (type(value).__name__, _hashable(value))


def distinct_count(values: Sequence[Any]) -> int:
    """Number of distinct values; 1 and 1.0 are equal, 1, "1" and True are not."""
    return len({_distinct_key(v) for v in values})


def is_numeric_value(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return True
    if isinstance(value, (int, float, np.integer, np.floating)):
        return bool(np.isfinite(value))
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return False
        try:
            return bool(np.isfinite(float(text)))
        except ValueError:
            return False
    return False


def is_date_value(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if not any(pattern.match(value) for pattern in DATE_PATTERNS):
        return False
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(value, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return False
    return not pd.isna(parsed)


def _is_categorical(values: List[Any]) -> bool:
    kinds = {value_kind(v) for v in values}
    if len(kinds) > 1:
        return False

    # Only string columns can be categorical; homogeneous numbers were already numerical
    if kinds != {"string"}:
        return False

    if len(values) == 1:
        return len(values[0]) <= CATEGORICAL_MAX_AVG_LENGTH

    unique = distinct_count(values)
    unique_ratio = unique / len(values)
    avg_length = float(np.mean([len(v) for v in values]))

    has_repeated_values = unique_ratio <= CATEGORICAL_UNIQUE_RATIO
    has_reasonable_unique_count = unique <= max(CATEGORICAL_MIN_UNIQUE_CAP, len(values) * CATEGORICAL_UNIQUE_FRACTION)
    return avg_length <= CATEGORICAL_MAX_AVG_LENGTH and (has_repeated_values or has_reasonable_unique_count)


def value_kind(value: Any) -> str:
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bool, np.bool_)):
        return "boolean"
    if isinstance(value, (int, float, np.integer, np.floating)):
        return "number"
    return "object"


def classify_column_type(values: Sequence[Any]) -> str:
    """
    Classify a column from its raw values.

    Rules are evaluated in order on the non-missing values:
    1. Empty column -> text
    2. >= 80% finite numbers -> numerical
    3. >= 70% date-patterned strings that parse to a real date -> datetime
    4. Homogeneous short strings with repeats or bounded cardinality -> categorical
    5. Otherwise -> text
    """
    present = non_missing(values)
    if not present:
        return "text"

    numeric_count = sum(1 for v in present if is_numeric_value(v))
    if numeric_count / len(present) >= NUMERIC_THRESHOLD:
        return "numerical"

    date_count = sum(1 for v in present if is_date_value(v))
    if date_count / len(present) >= DATETIME_THRESHOLD:
        return "datetime"

    if _is_categorical(present):
        return "categorical"

    return "text"


def describe_column(name: str, values: Sequence[Any]) -> ColumnInfo:
    """Build the ColumnInfo for one column."""
    return ColumnInfo(
        name=name,
        type=classify_column_type(values),
        unique_values=distinct_count(non_missing(values)),
        has_nulls=any(is_missing(v) for v in values),
        sample_values=list(values[:SAMPLE_VALUE_COUNT]),
    )


def column_values(sample_data: Sequence[Sequence[Any]], index: int) -> List[Any]:
    """Values of one column; short rows yield None."""
    return [row[index] if index < len(row) else None for row in sample_data]


@track_performance("classify_columns")
def classify_columns(headers: Sequence[str], sample_data: Sequence[Sequence[Any]]) -> List[ColumnInfo]:
    """
    Classify every column of a dataset.

    One ColumnInfo per header, in header order. A column whose analysis
    fails is reported as text with hasNulls set and no samples.
    """
    columns = []
    for index, header in enumerate(headers):
        try:
            columns.append(describe_column(header, column_values(sample_data, index)))
        except Exception as e:
            logger.warning(f"Failed to analyze column '{sanitize_for_logging(str(header))}': {e}")
            columns.append(ColumnInfo(name=header, type="text", unique_values=0, has_nulls=True, sample_values=[]))

    type_counts = Counter(c.type for c in columns)
    logger.info(f"Classified {len(columns)} columns: {dict(type_counts)}")
    return columns
