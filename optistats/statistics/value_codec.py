"""
Maps textual statistics values onto the ordered ``float`` domain histograms use.

Numbers are parsed as floating point literals. Dates (``yyyyMMdd``) and datetimes
(``yyyyMMddHHmmss``) are turned into epoch seconds, so chronological order and numeric
order agree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from optistats.config import Settings, settings
from optistats.errors import MalformedValueError
from optistats.models.catalog import LogicalType

DATE_PATTERN = "%Y%m%d"
DATETIME_PATTERN = "%Y%m%d%H%M%S"
DATE_TEXT_LENGTH = 8
DATETIME_TEXT_LENGTH = 14


def get_long_from_datetime(value: datetime, tz: tzinfo = timezone.utc) -> int:
    """Encode a naive datetime as whole seconds since the epoch in ``tz``."""
    return int(value.replace(tzinfo=tz).timestamp())


@dataclass(frozen=True, slots=True)
class ValueCodec:
    timezone: tzinfo = timezone.utc
    date_pattern: str = DATE_PATTERN
    datetime_pattern: str = DATETIME_PATTERN

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "ValueCodec":
        if config.STATS_TIMEZONE.upper() == "UTC":
            return cls()
        return cls(timezone=ZoneInfo(config.STATS_TIMEZONE))

    def encode(self, text: str, logical_type: LogicalType) -> float:
        if logical_type.is_date:
            return self.encode_date(text)
        if logical_type.is_datetime:
            return self.encode_datetime(text)
        return self.encode_number(text, type_name=logical_type.value)

    def encode_date(self, text: str) -> float:
        parsed = self._parse(text, self.date_pattern, DATE_TEXT_LENGTH, type_name="date")
        midnight = datetime.combine(parsed.date(), datetime.min.time())
        return float(get_long_from_datetime(midnight, self.timezone))

    def encode_datetime(self, text: str) -> float:
        parsed = self._parse(text, self.datetime_pattern, DATETIME_TEXT_LENGTH, type_name="datetime")
        return float(get_long_from_datetime(parsed, self.timezone))

    def encode_number(self, text: str, *, type_name: str = "number") -> float:
        if "_" in text:
            raise MalformedValueError(text, type_name)
        try:
            value = float(text)
        except ValueError as exc:
            raise MalformedValueError(text, type_name) from exc
        if math.isnan(value):
            raise MalformedValueError(text, type_name, detail="NaN has no ordering.")
        return value

    @staticmethod
    def _parse(text: str, pattern: str, length: int, *, type_name: str) -> datetime:
        if len(text) != length or not (text.isascii() and text.isdigit()):
            raise MalformedValueError(text, type_name, detail=f"Expected {length} digits.")
        try:
            return datetime.strptime(text, pattern)
        except ValueError as exc:
            raise MalformedValueError(text, type_name) from exc
