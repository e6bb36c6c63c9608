from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from concurrent.futures import Executor

from optistats.errors import StatisticsError, UpstreamFetchError
from optistats.models.histogram import ColumnStatsCacheKey, Histogram, RawHistogramRow
from optistats.sources.base import HistogramStatsSource
from optistats.statistics.async_cache import AsyncCacheLoader
from optistats.statistics.histogram_decoder import HistogramDecoder


class ColumnHistogramStatsCacheLoader(AsyncCacheLoader[ColumnStatsCacheKey, Histogram | None]):
    """
    Loads column histograms from a statistics source for the histogram cache.

    A column without a histogram row loads as ``None``, which the cache keeps like any
    other value. Errors from the statistics source are wrapped in ``UpstreamFetchError``;
    catalog and decoding errors propagate unchanged. When an executor is supplied,
    payload decoding runs on it instead of the event loop.
    """

    def __init__(
        self,
        *,
        source: HistogramStatsSource,
        decoder: HistogramDecoder,
        executor: Executor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._source = source
        self._decoder = decoder
        self._executor = executor
        self._logger = logger or logging.getLogger(__name__)

    async def load(self, key: ColumnStatsCacheKey) -> Histogram | None:
        rows = await self.query_histogram_statistics(key.table_id, [key.column_name])
        # The source may have no statistics for this column yet.
        if not rows:
            self._logger.debug("No histogram for table_id=%s column=%s", key.table_id, key.column_name)
            return None
        return await self._decode(rows[0])

    async def load_all(self, keys: list[ColumnStatsCacheKey]) -> dict[ColumnStatsCacheKey, Histogram | None]:
        columns_by_table: dict[int, list[str]] = {}
        for key in keys:
            columns_by_table.setdefault(key.table_id, []).append(key.column_name)

        requested = set(keys)
        result: dict[ColumnStatsCacheKey, Histogram | None] = {}
        for table_id, columns in columns_by_table.items():
            rows = await self.query_histogram_statistics(table_id, columns)
            for row in rows:
                key = ColumnStatsCacheKey(row.table_id, row.column_name)
                if key in requested and key not in result:
                    result[key] = await self._decode(row)
        return result

    async def reload(self, key: ColumnStatsCacheKey, old_value: Histogram | None) -> Histogram | None:
        return await self.load(key)

    async def query_histogram_statistics(self, table_id: int, columns: Sequence[str]) -> list[RawHistogramRow]:
        try:
            return await self._source.query_histogram(table_id, list(columns))
        except StatisticsError:
            raise
        except Exception as exc:
            raise UpstreamFetchError(
                f"Histogram query failed for table_id={table_id} columns={list(columns)}: {exc}"
            ) from exc

    async def _decode(self, row: RawHistogramRow) -> Histogram:
        if self._executor is None:
            return self._decoder.decode(row)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._decoder.decode, row)
