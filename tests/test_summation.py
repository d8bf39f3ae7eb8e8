"""Tests for imagestats.metrics.summation module."""

from __future__ import annotations

import math
import tracemalloc

import numpy as np
import pytest

from imagestats.metrics.summation import BLOCK_SIZE, CompensatedAccumulator, _neumaier_step


def _naive_sum(values) -> float:
    total = 0.0
    for value in values:
        total += value
    return total


class TestNeumaierStep:
    """Tests for the _neumaier_step helper."""

    def test_recovers_lost_low_order_bits(self) -> None:
        total, compensation = _neumaier_step(1e16, 0.0, 1.0)
        assert total == 1e16
        assert compensation == 1.0

    def test_large_value_into_small_total(self) -> None:
        total, compensation = _neumaier_step(1.0, 0.0, 1e100)
        assert total == 1e100
        assert compensation == 1.0

    def test_infinite_total_leaves_compensation_untouched(self) -> None:
        total, compensation = _neumaier_step(1.0, 0.5, math.inf)
        assert total == math.inf
        assert compensation == 0.5


class TestCompensatedAccumulator:
    """Tests for CompensatedAccumulator.add and value."""

    def test_starts_at_zero(self) -> None:
        acc = CompensatedAccumulator()
        assert acc.value == 0.0
        assert float(acc) == 0.0

    def test_small_values_after_huge_value(self) -> None:
        values = [1e16] + [1.0] * 10_000
        acc = CompensatedAccumulator()
        for value in values:
            acc.add(value)

        reference = math.fsum(values)
        assert acc.value == reference
        # Plain summation drops every single 1.0
        assert abs(_naive_sum(values) - reference) == 10_000.0

    def test_cancellation(self) -> None:
        acc = CompensatedAccumulator()
        for value in (1.0, 1e100, 1.0, -1e100):
            acc.add(value)
        assert acc.value == 2.0
        assert _naive_sum((1.0, 1e100, 1.0, -1e100)) == 0.0

    def test_error_much_smaller_than_naive(self) -> None:
        rng = np.random.default_rng(42)
        values = (rng.standard_normal(100_000) * 10.0 ** rng.integers(-8, 8, size=100_000)).tolist()
        acc = CompensatedAccumulator()
        for value in values:
            acc.add(value)

        reference = math.fsum(values)
        assert abs(acc.value - reference) <= abs(_naive_sum(values) - reference)
        assert acc.value == pytest.approx(reference, rel=1e-15, abs=1e-12)

    def test_infinity_propagates(self) -> None:
        acc = CompensatedAccumulator()
        acc.add(1.0)
        acc.add(math.inf)
        assert acc.value == math.inf
        acc.add(2.0)
        assert acc.value == math.inf

    def test_opposite_infinities_give_nan(self) -> None:
        acc = CompensatedAccumulator()
        acc.add(math.inf)
        acc.add(-math.inf)
        assert math.isnan(acc.value)

    def test_nan_propagates(self) -> None:
        acc = CompensatedAccumulator()
        acc.add(1.0)
        acc.add(math.nan)
        acc.add(1.0)
        assert math.isnan(acc.value)


class TestExtend:
    """Tests for CompensatedAccumulator.extend."""

    def test_matches_exact_sum(self) -> None:
        values = np.array([1e16] + [1.0] * 1000)
        acc = CompensatedAccumulator()
        acc.extend(values)
        assert acc.value == math.fsum(values.tolist())

    def test_empty_array_is_noop(self) -> None:
        acc = CompensatedAccumulator(3.0)
        acc.extend(np.array([]))
        assert acc.value == 3.0

    def test_multidimensional_input(self) -> None:
        acc = CompensatedAccumulator()
        acc.extend(np.arange(24, dtype=np.int32).reshape(2, 3, 4))
        assert acc.value == 276.0

    def test_non_finite_values_propagate(self) -> None:
        acc = CompensatedAccumulator()
        acc.extend(np.array([1.0, np.inf, 2.0]))
        assert acc.value == math.inf

        acc = CompensatedAccumulator()
        acc.extend(np.array([1.0, np.nan]))
        assert math.isnan(acc.value)

    def test_overflowing_partial_sums_do_not_raise(self) -> None:
        acc = CompensatedAccumulator()
        acc.extend(np.array([1e308, 1e308]))
        assert acc.value == math.inf

    def test_spans_several_blocks(self) -> None:
        values = np.full(3 * BLOCK_SIZE + 5, 0.1)
        values[0] = 1e16
        acc = CompensatedAccumulator()
        acc.extend(values)
        assert acc.value == pytest.approx(math.fsum(values.tolist()), rel=1e-15)

    def test_non_finite_value_in_a_later_block(self) -> None:
        values = np.ones(2 * BLOCK_SIZE)
        values[-1] = -np.inf
        acc = CompensatedAccumulator()
        acc.extend(values)
        assert acc.value == -math.inf

    def test_memory_does_not_grow_with_input(self) -> None:
        values = np.random.default_rng(0).random(4_000_000)
        acc = CompensatedAccumulator()
        tracemalloc.start()
        try:
            acc.extend(values)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()
        assert peak < values.nbytes // 4


class TestMerge:
    """Tests for CompensatedAccumulator.merge."""

    def test_keeps_both_correction_terms(self) -> None:
        left = CompensatedAccumulator()
        for value in (1e100, 1.0):
            left.add(value)
        right = CompensatedAccumulator()
        for value in (1.0, -1e100):
            right.add(value)

        assert left.compensation == 1.0
        assert right.compensation == 1.0
        assert left.merge(right).value == 2.0
        assert right.merge(left).value == 2.0
        # Adding the two values() throws the corrections away
        assert left._total + right._total == 0.0

    def test_operands_are_not_modified(self) -> None:
        left = CompensatedAccumulator(1.0, 0.25)
        right = CompensatedAccumulator(2.0, 0.5)
        merged = left.merge(right)

        assert merged is not left
        assert merged is not right
        assert (left._total, left.compensation) == (1.0, 0.25)
        assert (right._total, right.compensation) == (2.0, 0.5)

    def test_merge_order_does_not_matter(self) -> None:
        rng = np.random.default_rng(7)
        values = rng.uniform(-1e6, 1e6, size=5000)
        chunks = np.array_split(values, 9)
        accumulators = []
        for chunk in chunks:
            acc = CompensatedAccumulator()
            for value in chunk.tolist():
                acc.add(value)
            accumulators.append(acc)

        reference = math.fsum(values.tolist())
        for order in (range(9), reversed(range(9)), rng.permutation(9)):
            merged = CompensatedAccumulator()
            for index in order:
                merged = merged.merge(accumulators[index])
            assert merged.value == pytest.approx(reference, rel=1e-14)

    def test_merge_with_infinite_operand(self) -> None:
        finite = CompensatedAccumulator(1.0)
        infinite = CompensatedAccumulator(math.inf)
        assert finite.merge(infinite).value == math.inf
        assert infinite.merge(finite).value == math.inf

    def test_copy_is_independent(self) -> None:
        acc = CompensatedAccumulator(1.0, 0.5)
        clone = acc.copy()
        clone.add(1.0)
        assert acc.value == 1.5
        assert clone.value == 2.5
