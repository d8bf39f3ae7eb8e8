"""Partitioning and parallel reduction of image samples."""

from imagestats.reduction.driver import PartitionCoverageError, ReductionDriver, accumulate_region, reduce_array
from imagestats.reduction.regions import STRATEGIES, PartitionStrategy, get_strategy, split_flat, split_slowest_axis

__all__ = [
    "STRATEGIES",
    "PartitionCoverageError",
    "PartitionStrategy",
    "ReductionDriver",
    "accumulate_region",
    "get_strategy",
    "reduce_array",
    "split_flat",
    "split_slowest_axis",
]
