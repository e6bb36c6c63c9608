from __future__ import annotations

from collections.abc import Iterable, Sequence

import pyarrow as pa
import pyarrow.compute as pc

from optistats.models.histogram import RawHistogramRow
from optistats.sources.base import HistogramStatsSource

HISTOGRAM_ROW_SCHEMA = pa.schema(
    [
        pa.field("db_id", pa.int64(), nullable=False),
        pa.field("table_id", pa.int64(), nullable=False),
        pa.field("column_name", pa.string(), nullable=False),
        pa.field("histogram", pa.string(), nullable=False),
    ]
)


class ArrowHistogramStatsSource(HistogramStatsSource):
    """Serves histogram rows from an in-memory Arrow table, e.g. a parquet export of the stats table."""

    def __init__(self, *, table: pa.Table) -> None:
        missing = [name for name in HISTOGRAM_ROW_SCHEMA.names if name not in table.column_names]
        if missing:
            raise ValueError(f"Histogram table is missing columns: {', '.join(missing)}.")
        self._table = table.select(HISTOGRAM_ROW_SCHEMA.names)

    @classmethod
    def from_rows(cls, rows: Iterable[RawHistogramRow]) -> "ArrowHistogramStatsSource":
        table = pa.Table.from_pylist([row.model_dump() for row in rows], schema=HISTOGRAM_ROW_SCHEMA)
        return cls(table=table)

    @property
    def table(self) -> pa.Table:
        return self._table

    async def query_histogram(self, table_id: int, columns: Sequence[str]) -> list[RawHistogramRow]:
        if not columns:
            return []
        mask = pc.and_(
            pc.equal(self._table["table_id"], table_id),
            pc.is_in(self._table["column_name"], value_set=pa.array(list(columns), type=pa.string())),
        )
        filtered = self._table.filter(mask)
        return [RawHistogramRow.model_validate(row) for row in filtered.to_pylist()]
