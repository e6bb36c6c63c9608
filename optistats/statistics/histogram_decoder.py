from __future__ import annotations

import re

from pydantic import ValidationError

from optistats.catalog.base import Catalog
from optistats.errors import MalformedHistogramError
from optistats.models.catalog import LogicalType
from optistats.models.histogram import Bucket, Histogram, HistogramPayload, RawHistogramRow
from optistats.statistics.value_codec import ValueCodec

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


class HistogramDecoder:
    """Turns raw statistics rows into ``Histogram`` instances using the column's catalog type."""

    def __init__(self, *, catalog: Catalog, codec: ValueCodec | None = None) -> None:
        self._catalog = catalog
        self._codec = codec or ValueCodec.from_settings()

    def decode(self, row: RawHistogramRow) -> Histogram:
        # The logical type drives value decoding, so resolution failures stop here.
        logical_type = self._catalog.resolve_column_type(row.db_id, row.table_id, row.column_name)
        return self.decode_payload(row.histogram, logical_type)

    def decode_payload(self, payload: str, logical_type: LogicalType) -> Histogram:
        try:
            parsed = HistogramPayload.model_validate_json(payload)
        except ValidationError as exc:
            raise MalformedHistogramError(f"Invalid histogram payload: {exc.error_count()} error(s).") from exc

        buckets: list[Bucket] = []
        for low, high, row_count, repeat_count in parsed.buckets:
            try:
                bucket = Bucket(
                    lower=self._codec.encode(low, logical_type),
                    upper=self._codec.encode(high, logical_type),
                    row_count=_parse_int64(row_count),
                    upper_bound_repeat_count=_parse_int64(repeat_count),
                )
            except ValidationError as exc:
                raise MalformedHistogramError(f"Invalid bucket [{low!r}, {high!r}].") from exc
            buckets.append(bucket)

        top_n: dict[float, int] = {}
        for value, frequency in parsed.top_n:
            top_n[self._codec.encode(value, logical_type)] = _parse_int64(frequency)

        return Histogram(buckets=tuple(buckets), top_n=top_n)


def _parse_int64(text: str) -> int:
    if not _INTEGER_TEXT.fullmatch(text):
        raise MalformedHistogramError(f"Expected an integer count, got {text!r}.")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise MalformedHistogramError(f"Count {text!r} is out of 64-bit range.")
    return value
