from optistats.cost import HashJoinCostModel, JoinCostContext, JoinExecMode, RuntimeContext, use_runtime_context
from optistats.models import ColumnStatsCacheKey, Histogram, RawHistogramRow
from optistats.statistics import (
    AsyncLoadingCache,
    ColumnHistogramStatsCacheLoader,
    HistogramDecoder,
    HistogramStatisticsStorage,
    ValueCodec,
)

__all__ = [
    "AsyncLoadingCache",
    "ColumnHistogramStatsCacheLoader",
    "ColumnStatsCacheKey",
    "HashJoinCostModel",
    "Histogram",
    "HistogramDecoder",
    "HistogramStatisticsStorage",
    "JoinCostContext",
    "JoinExecMode",
    "RawHistogramRow",
    "RuntimeContext",
    "ValueCodec",
    "use_runtime_context",
]
