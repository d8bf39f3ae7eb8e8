"""Accumulators and derived statistics for image reductions.

Provides the compensated running sum, the per-partition accumulator, and the
immutable global totals and statistics produced once all partitions merged.
"""

from imagestats.metrics.partial import PartialStatistics, UnsupportedSampleTypeError, sample_limits
from imagestats.metrics.result import GlobalStatistics, StatisticsResult
from imagestats.metrics.summation import CompensatedAccumulator

__all__ = [
    "CompensatedAccumulator",
    "GlobalStatistics",
    "PartialStatistics",
    "StatisticsResult",
    "UnsupportedSampleTypeError",
    "sample_limits",
]
