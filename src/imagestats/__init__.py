"""Parallel, numerically stable statistics of N-dimensional images.

This package computes the minimum, maximum, count, sum, sum of squares, mean,
variance and standard deviation of every sample of an image in one pass. The
image is split into independent regions that are accumulated concurrently
with compensated summation, and the partial results are merged so that the
statistics do not depend on how the image was partitioned.
"""

from imagestats.filters import StatisticsImageFilter
from imagestats.metrics import CompensatedAccumulator, GlobalStatistics, PartialStatistics, StatisticsResult
from imagestats.reduction import ReductionDriver, reduce_array

__all__ = [
    "CompensatedAccumulator",
    "GlobalStatistics",
    "PartialStatistics",
    "ReductionDriver",
    "StatisticsImageFilter",
    "StatisticsResult",
    "reduce_array",
]
