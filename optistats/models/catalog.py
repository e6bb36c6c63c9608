from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class LogicalType(str, Enum):
    BOOLEAN = "boolean"
    TINYINT = "tinyint"
    SMALLINT = "smallint"
    INT = "int"
    BIGINT = "bigint"
    LARGEINT = "largeint"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATE = "date"
    DATETIME = "datetime"
    CHAR = "char"
    VARCHAR = "varchar"

    @property
    def is_date(self) -> bool:
        return self is LogicalType.DATE

    @property
    def is_datetime(self) -> bool:
        return self is LogicalType.DATETIME

    @property
    def is_numeric(self) -> bool:
        return self in _NUMERIC_TYPES


_NUMERIC_TYPES = frozenset(
    {
        LogicalType.BOOLEAN,
        LogicalType.TINYINT,
        LogicalType.SMALLINT,
        LogicalType.INT,
        LogicalType.BIGINT,
        LogicalType.LARGEINT,
        LogicalType.FLOAT,
        LogicalType.DOUBLE,
        LogicalType.DECIMAL,
    }
)


class TableKind(str, Enum):
    OLAP = "olap"
    EXTERNAL = "external"
    VIEW = "view"
    MATERIALIZED_VIEW = "materialized_view"


class Column(BaseModel):
    name: str
    type: LogicalType


class Table(BaseModel):
    id: int
    name: str
    kind: TableKind = TableKind.OLAP
    columns: dict[str, Column] = Field(default_factory=dict)

    def get_column(self, name: str) -> Column | None:
        return self.columns.get(name)


class Database(BaseModel):
    id: int
    name: str
    tables: dict[int, Table] = Field(default_factory=dict)

    def get_table(self, table_id: int) -> Table | None:
        return self.tables.get(table_id)
