"""Partitioning strategies.

A strategy splits an array into disjoint regions that together cover every
sample exactly once. The reduction driver never chooses the partitioning; it
receives the regions already split.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

PartitionStrategy = Callable[[np.ndarray, int], list[np.ndarray]]


def _check_partitions(n_partitions: int) -> None:
    if n_partitions < 1:
        raise ValueError(f"Number of partitions must be at least 1, got {n_partitions}.")


def split_slowest_axis(array: np.ndarray, n_partitions: int) -> list[np.ndarray]:
    """Split an array into contiguous slabs along its first axis.

    The first axis is the slowest-varying one of a C-ordered array, so each
    slab is a contiguous view. At most one slab per index along that axis is
    produced.

    Parameters
    ----------
    array : np.ndarray
        Array to split. Zero-dimensional arrays are treated as one sample.
    n_partitions : int
        Requested number of regions.

    Returns
    -------
    list[np.ndarray]
        Views into ``array``.
    """
    _check_partitions(n_partitions)
    array = np.asarray(array)
    if array.ndim == 0:
        return [array.reshape(1)]
    if array.shape[0] == 0:
        return [array]
    n_regions = min(n_partitions, array.shape[0])
    return np.array_split(array, n_regions, axis=0)


def split_flat(array: np.ndarray, n_partitions: int) -> list[np.ndarray]:
    """Split the raveled array into contiguous chunks of near-equal size."""
    _check_partitions(n_partitions)
    flat = np.ravel(np.asarray(array), order="K")
    if flat.size == 0:
        return [flat]
    return np.array_split(flat, min(n_partitions, flat.size))


STRATEGIES: dict[str, PartitionStrategy] = {
    "slowest-axis": split_slowest_axis,
    "flat": split_flat,
}


def get_strategy(name: str) -> PartitionStrategy:
    """Look up a partition strategy by name.

    Raises
    ------
    ValueError
        If no strategy is registered under ``name``.
    """
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown partition strategy {name!r}; expected one of {sorted(STRATEGIES)}") from None
