"""
Error taxonomy for statistics loading.

Every error raised while loading or decoding histogram statistics derives from
``StatisticsError`` and carries a ``kind`` from the closed ``StatisticsErrorKind``
enumeration, so a failed cache load can be inspected uniformly by every waiter.

StatisticsError
 ├── CatalogResolutionError
 │   ├── UnknownDatabaseError
 │   ├── UnknownTableError
 │   └── UnknownFieldError
 ├── MalformedHistogramError
 ├── MalformedValueError
 ├── UpstreamFetchError
 └── AsyncLoadError
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class StatisticsErrorKind(str, Enum):
    UNKNOWN_DATABASE = "unknown_database"
    UNKNOWN_TABLE = "unknown_table"
    UNKNOWN_FIELD = "unknown_field"
    MALFORMED_HISTOGRAM = "malformed_histogram"
    MALFORMED_VALUE = "malformed_value"
    UPSTREAM_FETCH_FAILURE = "upstream_fetch_failure"
    ASYNC_LOAD_FAILURE = "async_load_failure"


class StatisticsError(RuntimeError):
    """Base error for statistics loading issues."""

    kind: StatisticsErrorKind = StatisticsErrorKind.ASYNC_LOAD_FAILURE


class CatalogResolutionError(StatisticsError):
    """Raised when identifiers carried by a statistics row cannot be resolved."""

    def __init__(self, message: str, identifier: Any = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class UnknownDatabaseError(CatalogResolutionError):
    kind = StatisticsErrorKind.UNKNOWN_DATABASE

    def __init__(self, db_id: int) -> None:
        super().__init__(f"Unknown database '{db_id}'.", identifier=db_id)


class UnknownTableError(CatalogResolutionError):
    kind = StatisticsErrorKind.UNKNOWN_TABLE

    def __init__(self, table_id: int, reason: str | None = None) -> None:
        message = f"Unknown table '{table_id}'."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message, identifier=table_id)


class UnknownFieldError(CatalogResolutionError):
    kind = StatisticsErrorKind.UNKNOWN_FIELD

    def __init__(self, column_name: str, table_id: int | None = None) -> None:
        location = f" in table '{table_id}'" if table_id is not None else ""
        super().__init__(f"Unknown column '{column_name}'{location}.", identifier=column_name)


UnknownColumnError = UnknownFieldError


class MalformedHistogramError(StatisticsError):
    """Raised when a histogram payload is structurally invalid."""

    kind = StatisticsErrorKind.MALFORMED_HISTOGRAM


class MalformedValueError(StatisticsError):
    """Raised when a bucket or top-n value cannot be decoded under the column type."""

    kind = StatisticsErrorKind.MALFORMED_VALUE

    def __init__(self, value: str, type_name: str, detail: str | None = None) -> None:
        message = f"Cannot decode value {value!r} as {type_name}."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
        self.value = value
        self.type_name = type_name


class UpstreamFetchError(StatisticsError):
    """Wraps any failure raised by the statistics source."""

    kind = StatisticsErrorKind.UPSTREAM_FETCH_FAILURE


class AsyncLoadError(StatisticsError):
    """Uniform envelope for unexpected failures escaping a cache loader."""

    kind = StatisticsErrorKind.ASYNC_LOAD_FAILURE


__all__ = [
    "AsyncLoadError",
    "CatalogResolutionError",
    "MalformedHistogramError",
    "MalformedValueError",
    "StatisticsError",
    "StatisticsErrorKind",
    "UnknownColumnError",
    "UnknownDatabaseError",
    "UnknownFieldError",
    "UnknownTableError",
    "UpstreamFetchError",
]
