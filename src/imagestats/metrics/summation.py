"""
Compensated summation of real-valued samples.
"""

from __future__ import annotations

import math

import numpy as np

#: Number of values converted and summed together by bulk accumulation.
BLOCK_SIZE = 1 << 16


def _neumaier_step(total: float, compensation: float, value: float) -> tuple[float, float]:
    """Return the updated running total and correction term.

    Parameters
    ----------
    total : float
        Current running total.
    compensation : float
        Accumulated rounding error not yet folded into ``total``.
    value : float
        Value to add.

    Returns
    -------
    tuple[float, float]
        The new ``(total, compensation)`` pair.
    """
    t = total + value
    if not math.isfinite(t):
        # Inf/NaN propagate through the total; the correction is meaningless there
        return t, compensation
    if abs(total) >= abs(value):
        compensation += (total - t) + value
    else:
        compensation += (value - t) + total
    return t, compensation


class CompensatedAccumulator:
    """Running sum with Neumaier error compensation.

    The accumulator keeps a running total together with a correction term
    holding the low-order bits lost by each addition. The error of the sum of
    ``N`` values therefore stays close to a single rounding instead of growing
    with ``N``.
    """

    __slots__ = ("_compensation", "_total")

    def __init__(self, total: float = 0.0, compensation: float = 0.0) -> None:
        self._total = float(total)
        self._compensation = float(compensation)

    def add(self, value: float) -> None:
        """Add a single value to the running sum."""
        self._total, self._compensation = _neumaier_step(self._total, self._compensation, float(value))

    def extend(self, values: np.ndarray) -> None:
        """Add every value of an array to the running sum.

        Values are consumed in blocks of ``BLOCK_SIZE`` elements so the extra
        memory held at any time does not depend on the size of ``values``.
        Finite blocks are summed with :func:`math.fsum` (correctly rounded) and
        folded in as a single term. Blocks holding non-finite values, or whose
        partial sums overflow, are added value by value so that Inf and NaN
        propagate exactly as with :meth:`add`.

        Parameters
        ----------
        values : np.ndarray
            Values to add, cast to ``float64`` one block at a time.
        """
        flat = np.ravel(np.asanyarray(values), order="K")
        for start in range(0, flat.size, BLOCK_SIZE):
            block = flat[start : start + BLOCK_SIZE].astype(np.float64, copy=False)
            self._extend_block(block)

    def _extend_block(self, block: np.ndarray) -> None:
        if np.isfinite(block).all():
            try:
                self.add(math.fsum(block.tolist()))
            except OverflowError:
                pass
            else:
                return
        for value in block.tolist():
            self.add(value)

    @property
    def value(self) -> float:
        """Best estimate of the sum."""
        if not math.isfinite(self._total):
            return self._total
        return self._total + self._compensation

    @property
    def compensation(self) -> float:
        """Current correction term."""
        return self._compensation

    def merge(self, other: CompensatedAccumulator) -> CompensatedAccumulator:
        """Combine two accumulators into a new one.

        The other accumulator's correction term is folded into this one's
        correction, and its running total is added with one compensated step,
        so the rounding error recovered by both operands is kept.

        Parameters
        ----------
        other : CompensatedAccumulator
            Accumulator to combine with. Neither operand is modified.

        Returns
        -------
        CompensatedAccumulator
            Accumulator representing the union of both inputs.
        """
        total, compensation = _neumaier_step(
            self._total,
            self._compensation + other._compensation,
            other._total,
        )
        return CompensatedAccumulator(total, compensation)

    def copy(self) -> CompensatedAccumulator:
        return CompensatedAccumulator(self._total, self._compensation)

    def __float__(self) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"CompensatedAccumulator(total={self._total!r}, compensation={self._compensation!r})"
