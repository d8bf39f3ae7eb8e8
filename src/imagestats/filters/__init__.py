"""Image filters built on the parallel statistics reduction."""

from imagestats.filters.statistics import StatisticsImageFilter, StatisticsNotComputedError

__all__ = ["StatisticsImageFilter", "StatisticsNotComputedError"]
