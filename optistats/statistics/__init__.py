from optistats.statistics.async_cache import AsyncCacheLoader, AsyncLoadingCache, CacheStats
from optistats.statistics.histogram_decoder import HistogramDecoder
from optistats.statistics.loader import ColumnHistogramStatsCacheLoader
from optistats.statistics.storage import HistogramStatisticsStorage
from optistats.statistics.value_codec import ValueCodec, get_long_from_datetime

__all__ = [
    "AsyncCacheLoader",
    "AsyncLoadingCache",
    "CacheStats",
    "ColumnHistogramStatsCacheLoader",
    "HistogramDecoder",
    "HistogramStatisticsStorage",
    "ValueCodec",
    "get_long_from_datetime",
]
