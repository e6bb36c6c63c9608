"""
Hash join cost model.

Distributed hash joins run either as a broadcast join or as one of the shuffle-family
joins (shuffle, bucket shuffle, colocate). The shuffle family is priced identically. The
two differ in ways the model accounts for:

1. A broadcast join builds its hash table with a parallelism of 1, while shuffle joins
   build in parallel.
2. A broadcast join holds a full copy of the right side on every backend.
3. Each shuffle hash table holds 1/parallelism of the right side, and smaller hash tables
   probe faster.

The central term is the average probe cost per row. Once the right side exceeds
``bottom_number`` map entries, probes pay a cache-miss penalty that grows with the log of
the map size. Shuffle joins subtract a parallelism discount from that penalty. Both
penalties are capped so that huge tables do not distort the comparison.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from optistats.cost.runtime import RuntimeContext, get_runtime_context
from optistats.models.properties import PhysicalPropertySet
from optistats.models.statistics import ColumnRef, EqualityPredicate, Statistics

logger = logging.getLogger(__name__)


class JoinExecMode(str, Enum):
    # No child input property info, price as plain build plus probe.
    EMPTY = "empty"
    # Right child is broadcast.
    BROADCAST = "broadcast"
    # Right child is not broadcast: shuffle, bucket shuffle or colocate.
    SHUFFLE = "shuffle"


@dataclass(frozen=True, slots=True)
class HashJoinCostConstants:
    bottom_number: int = 100_000
    shuffle_max_ratio: float = 3.0
    broadcast_max_ratio: float = 12.0


@dataclass(slots=True)
class JoinCostContext:
    """Statistics and required output columns of the join's two children."""

    child_statistics: Sequence[Statistics]
    child_output_columns: Sequence[frozenset[ColumnRef]] = field(default_factory=tuple)

    def get_child_statistics(self, index: int) -> Statistics:
        return self.child_statistics[index]

    def get_child_output_columns(self, index: int) -> frozenset[ColumnRef]:
        if index < len(self.child_output_columns):
            return self.child_output_columns[index]
        return frozenset()


@dataclass(frozen=True, slots=True)
class JoinCostEstimate:
    cpu_cost: float
    mem_cost: float
    exec_mode: JoinExecMode


class HashJoinCostModel:
    def __init__(
        self,
        context: JoinCostContext,
        input_properties: Sequence[PhysicalPropertySet] | None,
        eq_on_predicates: Sequence[EqualityPredicate],
        *,
        runtime: RuntimeContext | None = None,
        constants: HashJoinCostConstants = HashJoinCostConstants(),
    ) -> None:
        self._context = context
        self._left_statistics = context.get_child_statistics(0)
        self._right_statistics = context.get_child_statistics(1)
        self._input_properties = list(input_properties or [])
        self._eq_on_predicates = list(eq_on_predicates)
        self._runtime = runtime
        self._constants = constants

    def estimate(self) -> JoinCostEstimate:
        return JoinCostEstimate(
            cpu_cost=self.get_cpu_cost(),
            mem_cost=self.get_mem_cost(),
            exec_mode=self.derive_join_exec_mode(),
        )

    def get_cpu_cost(self) -> float:
        exec_mode = self.derive_join_exec_mode()
        left_output = self._left_statistics.get_output_size(self._context.get_child_output_columns(0))
        right_output = self._right_statistics.get_output_size(self._context.get_child_output_columns(1))
        parallel_factor = self._parallel_factor()

        if exec_mode is JoinExecMode.BROADCAST:
            build_cost = right_output
            probe_cost = left_output * self.get_avg_probe_cost()
        elif exec_mode is JoinExecMode.SHUFFLE:
            build_cost = right_output / parallel_factor
            probe_cost = left_output * self.get_avg_probe_cost()
        else:
            build_cost = right_output
            probe_cost = left_output
        return build_cost + probe_cost

    def get_mem_cost(self) -> float:
        exec_mode = self.derive_join_exec_mode()
        right_output = self._right_statistics.get_output_size(self._context.get_child_output_columns(1))
        be_num = max(1, self._runtime_context().alive_backend_number)

        if exec_mode is JoinExecMode.BROADCAST:
            return right_output * be_num
        return right_output

    def get_avg_probe_cost(self) -> float:
        exec_mode = self.derive_join_exec_mode()
        right_statistics = self._right_statistics
        key_size = 0.0
        for predicate in self._eq_on_predicates:
            if right_statistics.contains_column(predicate.left):
                key_size += right_statistics.get_column_statistic(predicate.left).average_row_size
            elif right_statistics.contains_column(predicate.right):
                key_size += right_statistics.get_column_statistic(predicate.right).average_row_size

        parallel_factor = self._parallel_factor() * 2
        # Key size multiplier is capped at 1.
        map_size = min(1.0, key_size) * right_statistics.output_row_count
        size_penalty = _log(map_size / self._constants.bottom_number)

        if exec_mode is JoinExecMode.BROADCAST:
            cache_penalty_factor = max(1.0, size_penalty)
            cache_penalty_factor = min(self._constants.broadcast_max_ratio, cache_penalty_factor)
        else:
            cache_penalty_factor = max(1.0, size_penalty - _log(parallel_factor) / math.log(2))
            cache_penalty_factor = min(self._constants.shuffle_max_ratio, cache_penalty_factor)

        logger.debug("exec_mode=%s cache_penalty_factor=%s", exec_mode.value, cache_penalty_factor)
        return cache_penalty_factor

    def derive_join_exec_mode(self) -> JoinExecMode:
        if not self._input_properties:
            return JoinExecMode.EMPTY
        if len(self._input_properties) < 2:
            raise ValueError("Hash join input properties must describe both children.")
        if self._input_properties[1].distribution.is_broadcast:
            return JoinExecMode.BROADCAST
        return JoinExecMode.SHUFFLE

    def _parallel_factor(self) -> int:
        runtime = self._runtime_context()
        return max(runtime.alive_backend_number, runtime.degree_of_parallelism)

    def _runtime_context(self) -> RuntimeContext:
        return self._runtime if self._runtime is not None else get_runtime_context()


def _log(value: float) -> float:
    if value <= 0:
        return -math.inf
    return math.log(value)
