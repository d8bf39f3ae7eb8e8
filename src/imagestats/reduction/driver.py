"""Parallel reduction of an image into global statistics.

Each region is accumulated by its own :class:`PartialStatistics`, possibly on
a worker thread. Once every region has finished, the partials are folded into
one :class:`GlobalStatistics` in region order. The fold runs on the calling
thread after the join, so no lock is needed and repeated runs over the same
regions give bit-identical results.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Union

import numpy as np
from numpy.typing import DTypeLike

from imagestats.metrics.partial import PartialStatistics, sample_limits
from imagestats.metrics.result import GlobalStatistics, StatisticsResult
from imagestats.reduction.regions import PartitionStrategy, split_slowest_axis

logger = logging.getLogger(__name__)

Region = Union[np.ndarray, Iterable[Any]]


class PartitionCoverageError(ValueError):
    """Raised when regions do not cover the expected number of samples."""

    def __init__(self, expected: int, visited: int):
        """Initialize the error."""
        super().__init__(
            f"Partitions visited {visited} samples but the image holds {expected}; "
            "regions must be disjoint and cover every sample exactly once."
        )


def accumulate_region(region: Region, dtype: DTypeLike) -> PartialStatistics:
    """Accumulate statistics over a single region.

    Parameters
    ----------
    region : np.ndarray | Iterable
        Either an array (accumulated in bulk) or any iterable yielding each
        sample of the region exactly once.
    dtype : DTypeLike
        Sample type of the image.

    Returns
    -------
    PartialStatistics
        Statistics of the region.
    """
    partial = PartialStatistics(dtype)
    if isinstance(region, np.ndarray):
        partial.visit_array(region)
    else:
        for sample in region:
            partial.visit(sample)
    return partial


class ReductionDriver:
    """Compute image statistics over already-partitioned regions.

    Preconditions (not checked unless ``expected_count`` is given): regions are
    disjoint and together cover every sample of the image.

    Parameters
    ----------
    dtype : DTypeLike
        Sample type of the image.
    n_jobs : int, optional
        Number of worker threads accumulating regions, by default 1 (sequential).
    """

    def __init__(self, dtype: DTypeLike = np.float64, *, n_jobs: int = 1) -> None:
        self.dtype = np.dtype(dtype)
        sample_limits(self.dtype)
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be at least 1, got {n_jobs}.")
        self.n_jobs = int(n_jobs)

    def accumulate(self, regions: Sequence[Region]) -> list[PartialStatistics]:
        """Accumulate every region independently and wait for all of them.

        Returns
        -------
        list[PartialStatistics]
            One partial per region, in region order.
        """
        logger.debug("Accumulating %d regions with %d worker(s)", len(regions), self.n_jobs)
        if self.n_jobs == 1 or len(regions) <= 1:
            return [accumulate_region(region, self.dtype) for region in regions]

        with ThreadPoolExecutor(max_workers=min(self.n_jobs, len(regions))) as executor:
            return list(executor.map(accumulate_region, regions, [self.dtype] * len(regions)))

    def merge(self, partials: Sequence[PartialStatistics]) -> GlobalStatistics:
        """Fold the partials of a finished accumulation into global totals."""
        return GlobalStatistics.from_partials(partials, dtype=self.dtype)

    def run(self, regions: Sequence[Region], expected_count: int | None = None) -> StatisticsResult:
        """Reduce the regions of an image into its statistics.

        Parameters
        ----------
        regions : Sequence[np.ndarray | Iterable]
            Disjoint regions covering the image.
        expected_count : int | None, optional
            Total number of samples in the image. When given, the visited
            total is checked against it.

        Returns
        -------
        StatisticsResult
            Statistics of the whole image.

        Raises
        ------
        PartitionCoverageError
            If ``expected_count`` is given and does not match the number of
            samples visited.
        """
        regions = list(regions)
        partials = self.accumulate(regions)
        totals = self.merge(partials)
        if expected_count is not None and totals.count != expected_count:
            raise PartitionCoverageError(expected_count, totals.count)

        result = StatisticsResult.from_global(totals)
        logger.debug(
            "Reduced %d samples over %d regions: mean=%s sigma=%s",
            result.count,
            len(regions),
            result.mean,
            result.sigma,
        )
        return result


def reduce_array(
    array: np.ndarray,
    n_partitions: int = 1,
    *,
    n_jobs: int = 1,
    strategy: PartitionStrategy = split_slowest_axis,
) -> StatisticsResult:
    """Compute the statistics of an array.

    Parameters
    ----------
    array : np.ndarray
        Image data of any shape.
    n_partitions : int, optional
        Number of regions to split the array into, by default 1.
    n_jobs : int, optional
        Number of worker threads, by default 1.
    strategy : PartitionStrategy, optional
        Partitioning strategy, by default :func:`split_slowest_axis`.

    Returns
    -------
    StatisticsResult
        Statistics of every sample of ``array``.
    """
    array = np.asarray(array)
    driver = ReductionDriver(array.dtype, n_jobs=n_jobs)
    regions = strategy(array, n_partitions)
    return driver.run(regions, expected_count=int(array.size))
