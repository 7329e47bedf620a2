"""
Groups classified columns into the type buckets the chart generators read from.
"""
from dataclasses import dataclass, field
from typing import List

from analyst.core.schemas import ColumnInfo

# Non-empty text columns with at most this many distinct values chart like categories
TEXT_LIMITED_MAX_UNIQUE = 20


@dataclass(frozen=True)
class ColumnBuckets:
    numerical: List[ColumnInfo] = field(default_factory=list)
    categorical: List[ColumnInfo] = field(default_factory=list)
    datetime: List[ColumnInfo] = field(default_factory=list)
    text: List[ColumnInfo] = field(default_factory=list)
    text_limited: List[ColumnInfo] = field(default_factory=list)

    def is_empty(self) -> bool:
        """True when no bucket can feed a chart."""
        return not (self.numerical or self.categorical or self.datetime or self.text_limited)


def is_text_limited(column: ColumnInfo) -> bool:
    return column.type == "text" and 0 < column.unique_values <= TEXT_LIMITED_MAX_UNIQUE


def categorize_columns(columns: List[ColumnInfo]) -> ColumnBuckets:
    """Partition columns by type, preserving input order within each bucket."""
    buckets = ColumnBuckets()
    for column in columns:
        if column.type == "numerical":
            buckets.numerical.append(column)
        elif column.type == "categorical":
            buckets.categorical.append(column)
        elif column.type == "datetime":
            buckets.datetime.append(column)
        elif column.type == "text":
            buckets.text.append(column)
            if is_text_limited(column):
                buckets.text_limited.append(column)
    return buckets


SEQUENTIAL_NAME_TOKENS = ("index", "id", "sequence", "order", "rank", "position")


def is_sequential_column(column: ColumnInfo) -> bool:
    """Numerical columns whose name suggests an ordering (row index, rank, ...)."""
    if column.type != "numerical":
        return False
    name = column.name.lower()
    return any(token in name for token in SEQUENTIAL_NAME_TOKENS)
