from __future__ import annotations

import math

import pytest

from optistats.cost import (
    HashJoinCostModel,
    JoinCostContext,
    JoinCostEstimate,
    JoinExecMode,
    RuntimeContext,
    use_runtime_context,
)
from optistats.models import (
    ColumnRef,
    ColumnStatistic,
    DistributionKind,
    EqualityPredicate,
    PhysicalPropertySet,
    Statistics,
)

LEFT_KEY = ColumnRef(id=1, name="o.customer_id")
RIGHT_KEY = ColumnRef(id=2, name="c.id")
RIGHT_NAME = ColumnRef(id=3, name="c.name")

BROADCAST = [PhysicalPropertySet.shuffle(), PhysicalPropertySet.broadcast()]
SHUFFLE = [PhysicalPropertySet.shuffle(), PhysicalPropertySet.shuffle()]


def _context(
    *,
    left_rows: float = 1000,
    right_rows: float = 100,
    right_key_size: float = 1.0,
) -> JoinCostContext:
    left = Statistics(
        output_row_count=left_rows,
        column_statistics={LEFT_KEY: ColumnStatistic(average_row_size=1.0)},
    )
    right = Statistics(
        output_row_count=right_rows,
        column_statistics={RIGHT_KEY: ColumnStatistic(average_row_size=right_key_size)},
    )
    return JoinCostContext(
        child_statistics=[left, right],
        child_output_columns=[frozenset({LEFT_KEY}), frozenset({RIGHT_KEY})],
    )


def _model(
    context: JoinCostContext,
    properties,
    *,
    runtime: RuntimeContext | None = RuntimeContext(alive_backend_number=1, degree_of_parallelism=1),
    predicates: list[EqualityPredicate] | None = None,
) -> HashJoinCostModel:
    if predicates is None:
        predicates = [EqualityPredicate(left=LEFT_KEY, right=RIGHT_KEY)]
    return HashJoinCostModel(context, properties, predicates, runtime=runtime)


@pytest.mark.parametrize(
    ("properties", "expected"),
    [
        (None, JoinExecMode.EMPTY),
        ([], JoinExecMode.EMPTY),
        (BROADCAST, JoinExecMode.BROADCAST),
        (SHUFFLE, JoinExecMode.SHUFFLE),
        ([PhysicalPropertySet(), PhysicalPropertySet.shuffle(DistributionKind.COLOCATE)], JoinExecMode.SHUFFLE),
        ([PhysicalPropertySet.broadcast(), PhysicalPropertySet.shuffle(DistributionKind.BUCKET_SHUFFLE)], JoinExecMode.SHUFFLE),
    ],
)
def test_exec_mode_follows_right_child_distribution(properties, expected: JoinExecMode) -> None:
    assert _model(_context(), properties).derive_join_exec_mode() is expected


def test_exec_mode_requires_both_children_properties() -> None:
    with pytest.raises(ValueError):
        _model(_context(), [PhysicalPropertySet.broadcast()]).derive_join_exec_mode()


def test_broadcast_small_table_has_no_penalty() -> None:
    assert _model(_context(right_rows=100), BROADCAST).get_avg_probe_cost() == 1.0


def test_broadcast_huge_table_is_capped() -> None:
    assert _model(_context(right_rows=1e12), BROADCAST).get_avg_probe_cost() == 12.0


def test_broadcast_penalty_grows_with_log_of_map_size() -> None:
    model = _model(_context(right_rows=100_000 * math.exp(5)), BROADCAST)

    assert model.get_avg_probe_cost() == pytest.approx(5.0)


def test_shuffle_penalty_subtracts_parallelism() -> None:
    runtime = RuntimeContext(alive_backend_number=4, degree_of_parallelism=1)
    model = _model(_context(right_rows=100_000 * math.exp(5)), SHUFFLE, runtime=runtime)

    # ln(e^5) - log2(4 * 2)
    assert model.get_avg_probe_cost() == pytest.approx(2.0)


def test_shuffle_penalty_is_capped() -> None:
    runtime = RuntimeContext(alive_backend_number=2, degree_of_parallelism=1)

    assert _model(_context(right_rows=1e12), SHUFFLE, runtime=runtime).get_avg_probe_cost() == 3.0


def test_key_size_above_one_does_not_scale_map_size() -> None:
    small_key = _model(_context(right_rows=100_000 * math.exp(5), right_key_size=1.0), BROADCAST)
    wide_key = _model(_context(right_rows=100_000 * math.exp(5), right_key_size=64.0), BROADCAST)

    assert wide_key.get_avg_probe_cost() == pytest.approx(small_key.get_avg_probe_cost())


def test_key_size_below_one_shrinks_map_size() -> None:
    model = _model(_context(right_rows=2 * 100_000 * math.exp(5), right_key_size=0.5), BROADCAST)

    assert model.get_avg_probe_cost() == pytest.approx(5.0)


def test_key_column_may_appear_on_either_side_of_predicate() -> None:
    swapped = [EqualityPredicate(left=RIGHT_KEY, right=LEFT_KEY)]
    model = _model(_context(right_rows=100_000 * math.exp(5)), BROADCAST, predicates=swapped)

    assert model.get_avg_probe_cost() == pytest.approx(5.0)


@pytest.mark.parametrize("properties", [BROADCAST, SHUFFLE])
def test_missing_key_statistics_fall_back_to_minimum_penalty(properties) -> None:
    unrelated = [EqualityPredicate(left=ColumnRef(id=9, name="x"), right=ColumnRef(id=10, name="y"))]
    model = _model(_context(right_rows=1e12), properties, predicates=unrelated)

    assert model.get_avg_probe_cost() == 1.0


def test_cpu_cost_without_properties_is_plain_sum() -> None:
    assert _model(_context(left_rows=1000, right_rows=1e12), []).get_cpu_cost() == 1e12 + 1000


def test_cpu_cost_broadcast() -> None:
    model = _model(_context(left_rows=1000, right_rows=1e12), BROADCAST)

    assert model.get_cpu_cost() == 1e12 + 1000 * 12.0


def test_cpu_cost_shuffle_divides_build_by_parallelism() -> None:
    runtime = RuntimeContext(alive_backend_number=2, degree_of_parallelism=4)
    model = _model(_context(left_rows=1000, right_rows=100), SHUFFLE, runtime=runtime)

    assert model.get_cpu_cost() == 100 / 4 + 1000 * 1.0


def test_memory_cost_broadcast_replicates_right_side() -> None:
    runtime = RuntimeContext(alive_backend_number=4, degree_of_parallelism=1)

    broadcast = _model(_context(right_rows=50), BROADCAST, runtime=runtime)
    shuffle = _model(_context(right_rows=50), SHUFFLE, runtime=runtime)

    assert broadcast.get_mem_cost() == 200
    assert shuffle.get_mem_cost() == 50


def test_memory_cost_counts_at_least_one_backend() -> None:
    runtime = RuntimeContext(alive_backend_number=0, degree_of_parallelism=1)

    assert _model(_context(right_rows=50), BROADCAST, runtime=runtime).get_mem_cost() == 50


def test_output_size_uses_required_column_widths() -> None:
    right = Statistics(
        output_row_count=50,
        column_statistics={
            RIGHT_KEY: ColumnStatistic(average_row_size=8.0),
            RIGHT_NAME: ColumnStatistic(average_row_size=24.0),
        },
    )

    assert right.get_output_size({RIGHT_KEY}) == 400
    assert right.get_output_size({RIGHT_KEY, RIGHT_NAME}) == 1600
    assert right.get_output_size(set()) == 50
    assert right.get_output_size({LEFT_KEY}) == 50


def test_runtime_context_can_come_from_context_var() -> None:
    model = _model(_context(right_rows=50), BROADCAST, runtime=None)

    with use_runtime_context(RuntimeContext(alive_backend_number=4, degree_of_parallelism=2)):
        assert model.get_mem_cost() == 200


def test_missing_runtime_context_fails_fast() -> None:
    model = _model(_context(), SHUFFLE, runtime=None)

    with pytest.raises(RuntimeError):
        model.get_cpu_cost()


@pytest.mark.parametrize(("alive", "dop"), [(-1, 1), (1, 0)])
def test_runtime_context_rejects_invalid_parallelism(alive: int, dop: int) -> None:
    with pytest.raises(ValueError):
        RuntimeContext(alive_backend_number=alive, degree_of_parallelism=dop)


def test_estimate_bundles_costs_and_mode() -> None:
    runtime = RuntimeContext(alive_backend_number=4, degree_of_parallelism=1)

    estimate = _model(_context(left_rows=1000, right_rows=50), BROADCAST, runtime=runtime).estimate()

    assert estimate == JoinCostEstimate(cpu_cost=50 + 1000.0, mem_cost=200, exec_mode=JoinExecMode.BROADCAST)
