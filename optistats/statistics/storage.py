from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import Executor

from optistats.catalog.base import Catalog
from optistats.config import Settings, settings
from optistats.models.histogram import ColumnStatsCacheKey, Histogram
from optistats.sources.base import HistogramStatsSource
from optistats.statistics.async_cache import AsyncLoadingCache, CacheStats
from optistats.statistics.histogram_decoder import HistogramDecoder
from optistats.statistics.loader import ColumnHistogramStatsCacheLoader
from optistats.statistics.value_codec import ValueCodec


class HistogramStatisticsStorage:
    """Column histogram lookups for the optimizer, backed by a single-flight cache."""

    def __init__(
        self,
        *,
        cache: AsyncLoadingCache[ColumnStatsCacheKey, Histogram | None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._cache = cache
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        *,
        source: HistogramStatsSource,
        catalog: Catalog,
        config: Settings = settings,
        executor: Executor | None = None,
    ) -> "HistogramStatisticsStorage":
        decoder = HistogramDecoder(catalog=catalog, codec=ValueCodec.from_settings(config))
        loader = ColumnHistogramStatsCacheLoader(source=source, decoder=decoder, executor=executor)
        cache: AsyncLoadingCache[ColumnStatsCacheKey, Histogram | None] = AsyncLoadingCache(
            loader=loader,
            max_size=config.STATS_HISTOGRAM_CACHE_MAX_SIZE,
            expire_after_write_s=config.STATS_HISTOGRAM_CACHE_EXPIRE_AFTER_WRITE_S,
            refresh_after_write_s=config.STATS_HISTOGRAM_CACHE_REFRESH_AFTER_WRITE_S,
        )
        return cls(cache=cache)

    @property
    def cache(self) -> AsyncLoadingCache[ColumnStatsCacheKey, Histogram | None]:
        return self._cache

    async def get_histogram(self, table_id: int, column: str) -> Histogram | None:
        return await self._cache.get(ColumnStatsCacheKey(table_id, column))

    async def get_histograms(self, table_id: int, columns: Iterable[str]) -> dict[str, Histogram | None]:
        keys = [ColumnStatsCacheKey(table_id, column) for column in columns]
        if not keys:
            return {}
        loaded = await self._cache.get_all(keys)
        return {key.column_name: loaded.get(key) for key in keys}

    def expire_histograms(self, table_id: int, columns: Iterable[str]) -> None:
        for column in columns:
            self._cache.invalidate(ColumnStatsCacheKey(table_id, column))
        self._logger.debug("Expired histogram statistics for table_id=%s", table_id)

    def add_histogram(self, table_id: int, column: str, histogram: Histogram | None) -> None:
        self._cache.put(ColumnStatsCacheKey(table_id, column), histogram)

    def stats(self) -> CacheStats:
        return self._cache.stats()

    async def close(self) -> None:
        await self._cache.aclose()
