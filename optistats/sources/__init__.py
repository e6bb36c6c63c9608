from optistats.sources.arrow import HISTOGRAM_ROW_SCHEMA, ArrowHistogramStatsSource
from optistats.sources.base import HistogramStatsSource
from optistats.sources.sql import QueryResult, SqlHistogramStatsSource, StatementExecutor

__all__ = [
    "HISTOGRAM_ROW_SCHEMA",
    "ArrowHistogramStatsSource",
    "HistogramStatsSource",
    "QueryResult",
    "SqlHistogramStatsSource",
    "StatementExecutor",
]
