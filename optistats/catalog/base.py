from __future__ import annotations

from optistats.models.catalog import LogicalType


class Catalog:
    """Resolves the logical type of a column identified by database, table and column name."""

    def resolve_column_type(self, db_id: int, table_id: int, column_name: str) -> LogicalType:
        raise NotImplementedError
