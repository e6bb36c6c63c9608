from __future__ import annotations

from optistats.catalog.base import Catalog
from optistats.errors import UnknownDatabaseError, UnknownFieldError, UnknownTableError
from optistats.models.catalog import Database, LogicalType, TableKind


class InMemoryCatalog(Catalog):
    """Catalog over in-process database definitions; only OLAP tables carry histograms."""

    def __init__(self, databases: list[Database] | None = None) -> None:
        self._databases: dict[int, Database] = {}
        for database in databases or []:
            self.register(database)

    def register(self, database: Database) -> None:
        self._databases[database.id] = database

    def get_database(self, db_id: int) -> Database | None:
        return self._databases.get(db_id)

    def resolve_column_type(self, db_id: int, table_id: int, column_name: str) -> LogicalType:
        database = self._databases.get(db_id)
        if database is None:
            raise UnknownDatabaseError(db_id)
        table = database.get_table(table_id)
        if table is None:
            raise UnknownTableError(table_id)
        if table.kind is not TableKind.OLAP:
            raise UnknownTableError(table_id, reason=f"Table kind '{table.kind.value}' has no histogram statistics.")
        column = table.get_column(column_name)
        if column is None:
            raise UnknownFieldError(column_name, table_id=table_id)
        return column.type
