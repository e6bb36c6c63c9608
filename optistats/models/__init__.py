from optistats.models.catalog import Column, Database, LogicalType, Table, TableKind
from optistats.models.histogram import (
    Bucket,
    ColumnStatsCacheKey,
    Histogram,
    HistogramPayload,
    RawHistogramRow,
)
from optistats.models.properties import DistributionKind, DistributionProperty, PhysicalPropertySet
from optistats.models.statistics import ColumnRef, ColumnStatistic, EqualityPredicate, Statistics

__all__ = [
    "Bucket",
    "Column",
    "ColumnRef",
    "ColumnStatistic",
    "ColumnStatsCacheKey",
    "Database",
    "DistributionKind",
    "DistributionProperty",
    "EqualityPredicate",
    "Histogram",
    "HistogramPayload",
    "LogicalType",
    "PhysicalPropertySet",
    "RawHistogramRow",
    "Statistics",
    "Table",
    "TableKind",
]
