from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DistributionKind(str, Enum):
    ANY = "any"
    BROADCAST = "broadcast"
    SHUFFLE = "shuffle"
    BUCKET_SHUFFLE = "bucket_shuffle"
    COLOCATE = "colocate"
    GATHER = "gather"


@dataclass(frozen=True, slots=True)
class DistributionProperty:
    kind: DistributionKind = DistributionKind.ANY

    @property
    def is_broadcast(self) -> bool:
        return self.kind is DistributionKind.BROADCAST


@dataclass(frozen=True, slots=True)
class PhysicalPropertySet:
    distribution: DistributionProperty = field(default_factory=DistributionProperty)

    @classmethod
    def broadcast(cls) -> "PhysicalPropertySet":
        return cls(distribution=DistributionProperty(kind=DistributionKind.BROADCAST))

    @classmethod
    def shuffle(cls, kind: DistributionKind = DistributionKind.SHUFFLE) -> "PhysicalPropertySet":
        return cls(distribution=DistributionProperty(kind=kind))
