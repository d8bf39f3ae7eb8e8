"""
Per-partition accumulation of image statistics.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import DTypeLike

from imagestats.metrics.summation import BLOCK_SIZE, CompensatedAccumulator


class UnsupportedSampleTypeError(TypeError):
    """Raised when a sample type cannot be ordered or converted to a real value."""

    def __init__(self, dtype: np.dtype):
        """Initialize the error."""
        super().__init__(f"Unsupported sample type for statistics: {dtype}")


def sample_limits(dtype: DTypeLike) -> tuple[Any, Any]:
    """Return the ``(lowest, highest)`` representable values of a sample type.

    These seed the running maximum and minimum respectively, so that the first
    visited sample replaces them.

    Parameters
    ----------
    dtype : DTypeLike
        Numpy sample type. Booleans, integers and floating-point kinds are
        supported.

    Returns
    -------
    tuple[Any, Any]
        Lowest and highest value as scalars of ``dtype``.

    Raises
    ------
    UnsupportedSampleTypeError
        If ``dtype`` is not an orderable real kind (e.g. complex or object).
    """
    dtype = np.dtype(dtype)
    if dtype.kind == "b":
        return dtype.type(False), dtype.type(True)
    if dtype.kind in "iu":
        info = np.iinfo(dtype)
        return dtype.type(info.min), dtype.type(info.max)
    if dtype.kind == "f":
        return dtype.type(-np.inf), dtype.type(np.inf)
    raise UnsupportedSampleTypeError(dtype)


class PartialStatistics:
    """Statistics accumulated over a single partition of an image.

    An instance is owned by exactly one worker while it accumulates; nothing in
    it is shared with other partitions. Sums are taken in double precision
    whatever the sample type, so integer images cannot overflow them.

    Parameters
    ----------
    dtype : DTypeLike
        Sample type of the image being reduced.
    """

    def __init__(self, dtype: DTypeLike = np.float64) -> None:
        self.dtype = np.dtype(dtype)
        lowest, highest = sample_limits(self.dtype)
        self.count = 0
        self.minimum = highest
        self.maximum = lowest
        self.sum = CompensatedAccumulator()
        self.sum_of_squares = CompensatedAccumulator()
        self.extrema_defined = False

    def visit(self, sample: Any) -> None:
        """Accumulate one sample."""
        sample = self.dtype.type(sample)
        self.count += 1
        # NaN fails both comparisons and never becomes an extremum
        if sample < self.minimum:
            self.minimum = sample
            self.extrema_defined = True
        if sample > self.maximum:
            self.maximum = sample
            self.extrema_defined = True
        real = float(sample)
        self.sum.add(real)
        self.sum_of_squares.add(real * real)

    def visit_array(self, values: np.ndarray) -> None:
        """Accumulate every sample of an array, in any shape.

        Equivalent to calling :meth:`visit` on each element: ties keep the
        first-seen value. Samples are processed in blocks of ``BLOCK_SIZE``, so
        the temporaries are bounded whatever the size of the array.
        """
        values = np.ravel(np.asarray(values, dtype=self.dtype), order="K")
        self.count += int(values.size)
        for start in range(0, values.size, BLOCK_SIZE):
            self._visit_block(values[start : start + BLOCK_SIZE])

    def _visit_block(self, block: np.ndarray) -> None:
        orderable = block[~np.isnan(block)] if self.dtype.kind == "f" else block
        if orderable.size:
            # argmin/argmax return the first occurrence among equal values
            lowest = orderable[np.argmin(orderable)]
            highest = orderable[np.argmax(orderable)]
            if lowest < self.minimum:
                self.minimum = lowest
            if highest > self.maximum:
                self.maximum = highest
            self.extrema_defined = True

        real = block.astype(np.float64)
        self.sum.extend(real)
        np.multiply(real, real, out=real)
        self.sum_of_squares.extend(real)

    def merge(self, other: PartialStatistics) -> PartialStatistics:
        """Return new statistics covering the samples of both partials.

        Neither operand is modified.
        """
        if other.dtype != self.dtype:
            raise ValueError(f"Cannot merge statistics of {self.dtype} samples with {other.dtype} samples.")
        merged = PartialStatistics(self.dtype)
        merged.count = self.count + other.count
        merged.minimum = other.minimum if other.minimum < self.minimum else self.minimum
        merged.maximum = other.maximum if other.maximum > self.maximum else self.maximum
        merged.sum = self.sum.merge(other.sum)
        merged.sum_of_squares = self.sum_of_squares.merge(other.sum_of_squares)
        merged.extrema_defined = self.extrema_defined or other.extrema_defined
        return merged

    def __repr__(self) -> str:
        return (
            f"PartialStatistics(dtype={self.dtype}, count={self.count}, "
            f"minimum={self.minimum!r}, maximum={self.maximum!r}, sum={self.sum.value!r})"
        )
