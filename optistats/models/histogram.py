from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


@dataclass(frozen=True, slots=True)
class ColumnStatsCacheKey:
    table_id: int
    column_name: str


class Bucket(BaseModel):
    """One histogram bucket covering ``[lower, upper]``."""

    model_config = ConfigDict(frozen=True)

    lower: float
    upper: float
    row_count: int
    upper_bound_repeat_count: int

    @model_validator(mode="after")
    def _validate_bounds(self) -> "Bucket":
        if self.lower > self.upper:
            raise ValueError(f"Bucket lower bound {self.lower} exceeds upper bound {self.upper}.")
        return self


class Histogram(BaseModel):
    """
    Decoded column distribution: ordered buckets plus heavy-hitter values.

    Buckets keep the order the statistics source produced them in. ``top_n`` maps values
    that were excluded from bucket smoothing to their exact frequency.
    """

    model_config = ConfigDict(frozen=True)

    buckets: tuple[Bucket, ...] = ()
    top_n: Mapping[float, int] = Field(default_factory=dict)

    @field_validator("top_n", mode="after")
    @classmethod
    def _freeze_top_n(cls, value: Mapping[float, int]) -> Mapping[float, int]:
        # Histograms are shared through the cache; the map must be read-only.
        return MappingProxyType(dict(value))

    @field_serializer("top_n")
    def _serialize_top_n(self, value: Mapping[float, int]) -> dict[float, int]:
        return dict(value)

    @property
    def total_rows(self) -> int:
        return sum(bucket.row_count for bucket in self.buckets) + sum(self.top_n.values())

    @property
    def min_value(self) -> float | None:
        candidates = [bucket.lower for bucket in self.buckets] + list(self.top_n)
        return min(candidates) if candidates else None

    @property
    def max_value(self) -> float | None:
        candidates = [bucket.upper for bucket in self.buckets] + list(self.top_n)
        return max(candidates) if candidates else None

    def top_n_frequency(self, value: float) -> int | None:
        return self.top_n.get(value)


class RawHistogramRow(BaseModel):
    """A histogram statistics row as returned by a statistics source."""

    db_id: int
    table_id: int
    column_name: str
    histogram: str


class HistogramPayload(BaseModel):
    """Wire shape of the ``histogram`` column: string-serialized buckets and top-n pairs."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")

    buckets: list[tuple[str, str, str, str]]
    top_n: list[tuple[str, str]] = Field(alias="top-n")
