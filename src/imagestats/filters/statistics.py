from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Union

import numpy as np
import pandas as pd
from nibabel.spatialimages import SpatialImage

from imagestats.metrics.result import StatisticsResult
from imagestats.reduction.driver import ReductionDriver
from imagestats.reduction.regions import PartitionStrategy, get_strategy, split_slowest_axis
from imagestats.utils import _image_data, _load_nifti

logger = logging.getLogger(__name__)

ImageInput = Union[SpatialImage, np.ndarray, str, Path]


class StatisticsNotComputedError(RuntimeError):
    """Raised when statistics are read before the filter has been updated."""

    def __init__(self) -> None:
        """Initialize the error."""
        super().__init__("Statistics have not been computed; call update() after set_input().")


class StatisticsImageFilter:
    """Compute minimum, maximum, sum, mean, variance and sigma of an image.

    The filter passes its input through unmodified and only reruns the
    reduction when its input changed since the last :meth:`update`. Each run
    splits the image into ``n_partitions`` regions, accumulates them on up to
    ``n_jobs`` threads, and merges the partial results.

    Parameters
    ----------
    n_partitions : int, optional
        Number of regions the image is split into, by default 1.
    n_jobs : int, optional
        Number of worker threads, by default 1.
    strategy : PartitionStrategy | str, optional
        Partitioning strategy or its registered name, by default split along
        the slowest axis.
    """

    def __init__(
        self,
        n_partitions: int = 1,
        n_jobs: int = 1,
        strategy: PartitionStrategy | str = split_slowest_axis,
    ) -> None:
        if n_partitions < 1:
            raise ValueError(f"n_partitions must be at least 1, got {n_partitions}.")
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be at least 1, got {n_jobs}.")
        self.n_partitions = int(n_partitions)
        self.n_jobs = int(n_jobs)
        self.strategy = get_strategy(strategy) if isinstance(strategy, str) else strategy
        self._input: SpatialImage | np.ndarray | None = None
        self._result: StatisticsResult | None = None
        self._dirty = False

    def set_input(self, image: ImageInput) -> StatisticsImageFilter:
        """Set the image to summarize and mark the filter out of date."""
        if isinstance(image, (SpatialImage, str, Path)):
            self._input = _load_nifti(image)
        else:
            self._input = np.asarray(image)
        self.modified()
        return self

    def modified(self) -> None:
        """Mark the filter out of date, e.g. after the input data changed in place."""
        self._dirty = True

    @property
    def output(self) -> SpatialImage | np.ndarray:
        """The input image, passed through unmodified."""
        if self._input is None:
            raise ValueError("No input image has been set.")
        return self._input

    def _input_data(self) -> np.ndarray:
        if isinstance(self._input, np.ndarray):
            return self._input
        return _image_data(self._input)

    def update(self) -> StatisticsResult:
        """Recompute the statistics if the input changed since the last run."""
        if self._input is None:
            raise ValueError("No input image has been set.")
        if not self._dirty and self._result is not None:
            logger.debug("Input unchanged; reusing statistics")
            return self._result

        data = self._input_data()
        logger.info(
            "Computing statistics of %s %s image with %d partition(s) on %d worker(s)",
            "x".join(str(s) for s in data.shape) or "scalar",
            data.dtype,
            self.n_partitions,
            self.n_jobs,
        )
        driver = ReductionDriver(data.dtype, n_jobs=self.n_jobs)
        regions = self.strategy(data, self.n_partitions)
        self._result = driver.run(regions, expected_count=int(data.size))
        self._dirty = False
        return self._result

    def transform(self, image: ImageInput) -> pd.DataFrame:
        """Summarize an image into a one-row table.

        Parameters
        ----------
        image : nib.Nifti1Image | np.ndarray | str | Path
            Image to summarize.

        Returns
        -------
        pd.DataFrame
            One row holding ``count``, ``minimum``, ``maximum``, ``sum``,
            ``sum_of_squares``, ``mean``, ``variance`` and ``sigma``.
        """
        self.set_input(image)
        result = self.update()
        return pd.DataFrame([result.as_dict()])

    @property
    def result(self) -> StatisticsResult:
        if self._result is None or self._dirty:
            raise StatisticsNotComputedError()
        return self._result

    @property
    def minimum(self) -> Any:
        return self.result.minimum

    @property
    def maximum(self) -> Any:
        return self.result.maximum

    @property
    def mean(self) -> float:
        return self.result.mean

    @property
    def sigma(self) -> float:
        return self.result.sigma

    @property
    def variance(self) -> float:
        return self.result.variance

    @property
    def sum(self) -> float:
        return self.result.sum

    @property
    def sum_of_squares(self) -> float:
        return self.result.sum_of_squares

    @property
    def count(self) -> int:
        return self.result.count

    def __repr__(self) -> str:
        strategy = getattr(self.strategy, "__name__", repr(self.strategy))
        parts = [f"n_partitions={self.n_partitions}", f"n_jobs={self.n_jobs}", f"strategy={strategy}"]
        if self._result is not None and not self._dirty:
            parts.extend(f"{name}={value!r}" for name, value in self._result.as_dict().items())
        return f"{type(self).__name__}({', '.join(parts)})"
