"""Shared utility functions for interfaces.

This module provides shared utility functions for the interfaces.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

_NIFTI_SUFFIXES: tuple[str, ...] = (".nii.gz", ".nii", ".mgz", ".mgh", ".img", ".hdr")


def _parse_log_level(value: str | int | None) -> int:
    """Return a logging level from common string/int inputs.

    Parameters
    ----------
    value
        The value to parse.

    Returns
    -------
    int
        The logging level.

    Examples
    --------
    >>> _parse_log_level("INFO")
    20
    >>> _parse_log_level("DEBUG")
    10
    >>> _parse_log_level(logging.WARNING)
    30
    >>> _parse_log_level(None)
    20
    """
    if value is None:
        return logging.INFO
    if isinstance(value, int):
        return value
    return getattr(logging, str(value).upper(), logging.INFO)


def _as_list(value: Iterable[str] | str | None) -> list[str] | None:
    """Normalize configuration values into a list of strings.

    Parameters
    ----------
    value
        The value to normalize.

    Returns
    -------
    list[str] | None
        The normalized list of strings, or None if the input is None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    return list(value)


def _image_stem(path: Path) -> str:
    """Return the file name of an image without its (possibly double) suffix.

    Examples
    --------
    >>> _image_stem(Path("/data/sub-01_T1w.nii.gz"))
    'sub-01_T1w'
    >>> _image_stem(Path("brain.mgz"))
    'brain'
    """
    name = path.name
    for suffix in _NIFTI_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return path.stem


def write_statistics_sidecar(
    tsv_path: Path,
    original_file: Path,
    n_partitions: int,
    strategy: str,
    sample_type: str | None = None,
) -> Path:
    """Write a JSON sidecar file alongside a statistics TSV.

    The sidecar captures provenance: which image was summarized and how the
    reduction was partitioned.

    Parameters
    ----------
    tsv_path
        Path to the statistics TSV file. The JSON will share its stem.
    original_file
        Path to the image that was summarized.
    n_partitions
        Number of regions the image was split into.
    strategy
        Name of the partitioning strategy.
    sample_type
        Stored sample type of the image (e.g. ``"int16"``).

    Returns
    -------
    Path
        Path to the written JSON sidecar file.
    """
    try:
        from importlib.metadata import version as pkg_version

        software_version = pkg_version("imagestats")
    except Exception:
        software_version = "unknown"

    sidecar: dict = {
        "original_file": str(original_file),
        "sample_type": sample_type,
        "reduction": {
            "n_partitions": n_partitions,
            "strategy": strategy,
            "summation": "neumaier",
            "variance": "sample (n - 1)",
        },
        "software_version": software_version,
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
    }

    json_path = tsv_path.with_suffix(".json")
    json_path.write_text(json.dumps(sidecar, indent=2) + "\n")
    logger.debug("Wrote statistics sidecar to %s", json_path)
    return json_path
