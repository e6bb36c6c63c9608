from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from optistats.config import Settings
from optistats.errors import MalformedValueError, StatisticsErrorKind
from optistats.models import LogicalType
from optistats.statistics import ValueCodec, get_long_from_datetime


def test_date_encodes_to_midnight_epoch_seconds() -> None:
    codec = ValueCodec()

    assert codec.encode("20240101", LogicalType.DATE) == 1_704_067_200.0
    assert codec.encode("19700101", LogicalType.DATE) == 0.0


def test_datetime_keeps_second_resolution() -> None:
    codec = ValueCodec()

    assert codec.encode("20240101000001", LogicalType.DATETIME) == 1_704_067_201.0
    assert codec.encode("20240101235959", LogicalType.DATETIME) == 1_704_067_200.0 + 86_399


@pytest.mark.parametrize(
    ("logical_type", "ordered_values"),
    [
        (LogicalType.DATE, ["19991231", "20000101", "20000102", "20240229"]),
        (LogicalType.DATETIME, ["20000101000000", "20000101000001", "20000101235959", "20000102000000"]),
        (LogicalType.INT, ["-12", "0", "7", "1000"]),
        (LogicalType.DOUBLE, ["-1.5e3", "-0.25", "3.14", "2e10"]),
    ],
)
def test_encoding_preserves_natural_order(logical_type: LogicalType, ordered_values: list[str]) -> None:
    codec = ValueCodec()
    encoded = [codec.encode(value, logical_type) for value in ordered_values]

    assert encoded == sorted(encoded)
    assert len(set(encoded)) == len(encoded)


@pytest.mark.parametrize(
    ("text", "logical_type"),
    [
        ("2024-01-01", LogicalType.DATE),
        ("20241301", LogicalType.DATE),
        ("2024010", LogicalType.DATE),
        ("20240101", LogicalType.DATETIME),
        ("2024010112000x", LogicalType.DATETIME),
        ("twelve", LogicalType.BIGINT),
        ("nan", LogicalType.DOUBLE),
        ("1_000", LogicalType.INT),
    ],
)
def test_malformed_values_are_rejected(text: str, logical_type: LogicalType) -> None:
    with pytest.raises(MalformedValueError) as excinfo:
        ValueCodec().encode(text, logical_type)

    assert excinfo.value.kind is StatisticsErrorKind.MALFORMED_VALUE
    assert excinfo.value.value == text


def test_codec_honours_configured_timezone() -> None:
    codec = ValueCodec.from_settings(Settings(STATS_TIMEZONE="Asia/Shanghai"))

    assert codec.timezone == ZoneInfo("Asia/Shanghai")
    assert codec.encode("19700101", LogicalType.DATE) == -8 * 3600.0


def test_get_long_from_datetime_defaults_to_utc() -> None:
    value = datetime(2001, 9, 9, 1, 46, 40)

    assert get_long_from_datetime(value) == 1_000_000_000
    assert get_long_from_datetime(value, timezone.utc) == 1_000_000_000
