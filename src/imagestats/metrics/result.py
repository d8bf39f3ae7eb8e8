"""
Merged totals and the statistics derived from them.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import pandas as pd

from imagestats.metrics.partial import PartialStatistics


@dataclass(frozen=True)
class GlobalStatistics:
    """Totals over a whole image, produced by merging every partition."""

    dtype: np.dtype
    count: int
    minimum: Any
    maximum: Any
    sum: float
    sum_of_squares: float
    extrema_defined: bool

    @classmethod
    def from_partials(cls, partials: Iterable[PartialStatistics], dtype: Any = None) -> GlobalStatistics:
        """Fold partial statistics into global totals.

        Partials are merged one after the other in iteration order. The fold
        is the only place partial results meet, and it runs once all
        partitions have finished.

        Parameters
        ----------
        partials : Iterable[PartialStatistics]
            Statistics of each partition.
        dtype : Any, optional
            Sample type, required only when ``partials`` may be empty.

        Returns
        -------
        GlobalStatistics
            Immutable merged totals.
        """
        merged: PartialStatistics | None = None
        for partial in partials:
            merged = partial if merged is None else merged.merge(partial)
        if merged is None:
            if dtype is None:
                raise ValueError("A sample type is required to merge an empty set of partitions.")
            merged = PartialStatistics(dtype)

        return cls(
            dtype=merged.dtype,
            count=merged.count,
            minimum=merged.minimum,
            maximum=merged.maximum,
            sum=merged.sum.value,
            sum_of_squares=merged.sum_of_squares.value,
            extrema_defined=merged.extrema_defined,
        )


@dataclass(frozen=True)
class StatisticsResult:
    """Final statistics of an image.

    ``minimum`` and ``maximum`` are ``None`` when no orderable sample was
    visited (empty image, or an image holding only NaN).
    """

    count: int
    minimum: Any
    maximum: Any
    sum: float
    sum_of_squares: float
    mean: float
    variance: float
    sigma: float

    @classmethod
    def from_global(cls, totals: GlobalStatistics) -> StatisticsResult:
        count = totals.count
        if count > 0:
            mean = totals.sum / count
        else:
            mean = 0.0

        # Bessel-corrected sample variance
        if count > 1:
            variance = (totals.sum_of_squares - count * mean * mean) / (count - 1)
        else:
            variance = 0.0

        if math.isnan(variance):
            sigma = math.nan
        elif variance > 0.0:
            sigma = math.sqrt(variance)
        else:
            sigma = 0.0

        minimum = totals.minimum.item() if totals.extrema_defined else None
        maximum = totals.maximum.item() if totals.extrema_defined else None
        return cls(
            count=count,
            minimum=minimum,
            maximum=maximum,
            sum=totals.sum,
            sum_of_squares=totals.sum_of_squares,
            mean=mean,
            variance=variance,
            sigma=sigma,
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_series(self, name: str | None = None) -> pd.Series:
        """Return the statistics as a :class:`pandas.Series` indexed by statistic name."""
        return pd.Series(self.as_dict(), name=name, dtype=object)
