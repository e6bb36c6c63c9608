from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from sqlglot import exp

from optistats.config import settings
from optistats.models.histogram import RawHistogramRow
from optistats.sources.base import HistogramStatsSource

HISTOGRAM_COLUMNS = ("db_id", "table_id", "column_name", "histogram")


@dataclass(slots=True)
class QueryResult:
    """
    Normalised SQL execution result.
    """

    columns: list[str]
    rows: list[list[Any]]
    rowcount: int
    elapsed_ms: int
    sql: str


class StatementExecutor(Protocol):
    async def execute(self, sql: str, *, timeout_s: int | None = None) -> QueryResult: ...


class SqlHistogramStatsSource(HistogramStatsSource):
    """Reads histogram rows from the statistics table through a SQL statement executor."""

    def __init__(
        self,
        *,
        executor: StatementExecutor,
        histogram_table: str | None = None,
        dialect: str | None = None,
        timeout_s: int | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._executor = executor
        self._histogram_table = histogram_table or settings.STATS_HISTOGRAM_TABLE
        self._dialect = dialect or settings.STATS_SQL_DIALECT
        self._timeout_s = timeout_s if timeout_s is not None else settings.STATS_QUERY_TIMEOUT_S
        self._logger = logger or logging.getLogger(__name__)

    def dialect(self) -> str:
        return self._dialect

    def build_query(self, table_id: int, columns: Sequence[str]) -> str:
        predicate = exp.and_(
            exp.column("table_id").eq(exp.Literal.number(table_id)),
            exp.column("column_name").isin(*columns),
        )
        select_expr = (
            exp.select(*HISTOGRAM_COLUMNS)
            .from_(exp.to_table(self._histogram_table))
            .where(predicate)
        )
        return select_expr.sql(dialect=self._dialect)

    async def query_histogram(self, table_id: int, columns: Sequence[str]) -> list[RawHistogramRow]:
        if not columns:
            return []
        sql = self.build_query(table_id, columns)
        self._logger.debug("Querying histogram statistics table_id=%s columns=%s", table_id, list(columns))
        result = await self._executor.execute(sql, timeout_s=self._timeout_s)
        return [_row_to_histogram(result.columns, row) for row in result.rows]


def _row_to_histogram(columns: list[str], row: list[Any]) -> RawHistogramRow:
    record = {column: row[index] for index, column in enumerate(columns) if index < len(row)}
    return RawHistogramRow.model_validate(record)
