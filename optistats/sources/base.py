from __future__ import annotations

from collections.abc import Sequence

from optistats.models.histogram import RawHistogramRow


class HistogramStatsSource:
    """Backend that returns raw histogram rows for columns of one table."""

    async def query_histogram(self, table_id: int, columns: Sequence[str]) -> list[RawHistogramRow]:
        raise NotImplementedError
