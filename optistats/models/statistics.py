from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ColumnRef:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class ColumnStatistic:
    average_row_size: float
    min_value: float = float("-inf")
    max_value: float = float("inf")
    nulls_fraction: float = 0.0
    distinct_values_count: float = 1.0


@dataclass(slots=True)
class Statistics:
    """Cardinality estimate of an operator's output plus per-column statistics."""

    output_row_count: float
    column_statistics: dict[ColumnRef, ColumnStatistic] = field(default_factory=dict)

    def get_column_statistic(self, column: ColumnRef) -> ColumnStatistic:
        return self.column_statistics[column]

    def contains_column(self, column: ColumnRef) -> bool:
        return column in self.column_statistics

    def get_output_size(self, output_columns: Iterable[ColumnRef]) -> float:
        columns = set(output_columns)
        total_size = 0.0
        matched = False
        for column, statistic in self.column_statistics.items():
            if column in columns:
                total_size += statistic.average_row_size
                matched = True
        if not matched:
            total_size = 1.0
        return total_size * self.output_row_count


@dataclass(frozen=True, slots=True)
class EqualityPredicate:
    """An equi-join condition ``left = right``."""

    left: ColumnRef
    right: ColumnRef
