"""Shared orchestration utilities for the statistics workflow.

This module holds the TOML config loading and the parallel execution logic
used by the command-line interface.
"""

from __future__ import annotations

import argparse
import logging
from collections import defaultdict
from collections.abc import Callable
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older environments
    import tomli as tomllib  # type: ignore[import]

from imagestats.interfaces.models import StatisticsConfig
from imagestats.interfaces.utils import _as_list, _image_stem, _parse_log_level
from imagestats.reduction.regions import get_strategy

LOGGER = logging.getLogger(__name__)


def _override(cli_value: int | None, data: dict[str, object], key: str, default: int) -> int:
    """Return the CLI value when it was given (0 included), else the config or default value."""
    if cli_value is not None:
        return int(cli_value)
    return int(data.get(key, default))  # type: ignore[call-overload]


def _check_unique_stems(inputs: list[Path]) -> None:
    """Raise if two inputs would write to the same statistics table."""
    by_stem: dict[str, list[Path]] = defaultdict(list)
    for path in inputs:
        by_stem[_image_stem(path)].append(path)
    clashes = {stem: paths for stem, paths in by_stem.items() if len(paths) > 1}
    if clashes:
        details = "; ".join(f"{stem}: {', '.join(str(p) for p in paths)}" for stem, paths in sorted(clashes.items()))
        raise ValueError(f"Input images share an output name: {details}")


def load_config(args: argparse.Namespace) -> StatisticsConfig:
    """Parse a TOML configuration file and override with CLI arguments.

    The configuration accepts the following keys:
    - ``inputs``: Image path or list of image paths to summarize.
    - ``output_dir``: Destination directory for statistics tables.
    - ``n_partitions``: Number of regions each image is split into.
    - ``n_jobs``: Number of worker threads reducing the regions of one image.
    - ``n_procs``: Number of processes summarizing images in parallel.
    - ``strategy``: Partitioning strategy (``"slowest-axis"`` or ``"flat"``).
    - ``force``: Whether to overwrite existing outputs.
    - ``log_level``: Logging verbosity (e.g., ``INFO``, ``DEBUG``).

    Parameters
    ----------
    args
        Parsed CLI arguments (from :func:`argparse.ArgumentParser.parse_args`).

    Returns
    -------
    StatisticsConfig
        A fully initialised workflow configuration.

    Raises
    ------
    ValueError
        If the partitioning strategy is unknown, a count is below 1, or two
        inputs share a file stem (their statistics tables would collide).
    """
    data: dict[str, object] = {}
    if args.config:
        with args.config.open("rb") as f:
            data = tomllib.load(f)

    input_values = args.inputs or _as_list(data.get("inputs")) or []  # type: ignore[arg-type]
    inputs = [Path(str(value)).expanduser().resolve() for value in input_values]
    output_dir_str = args.output_dir or data.get("output_dir", "statistics")
    output_dir = Path(str(output_dir_str)).expanduser().resolve()
    n_partitions = _override(args.n_partitions, data, "n_partitions", 1)
    n_jobs = _override(args.n_jobs, data, "n_jobs", 1)
    n_procs = _override(args.n_procs, data, "n_procs", 1)
    strategy = str(args.strategy or data.get("strategy", "slowest-axis"))
    force = args.force or bool(data.get("force", False))
    log_level = _parse_log_level(args.log_level or data.get("log_level"))  # type: ignore[arg-type]

    get_strategy(strategy)
    _check_unique_stems(inputs)
    for name, value in (("n_partitions", n_partitions), ("n_jobs", n_jobs), ("n_procs", n_procs)):
        if value < 1:
            raise ValueError(f"{name} must be at least 1, got {value}.")

    return StatisticsConfig(
        inputs=inputs,
        output_dir=output_dir,
        n_partitions=n_partitions,
        n_jobs=n_jobs,
        n_procs=n_procs,
        strategy=strategy,
        force=force,
        log_level=log_level,
    )


def run_parallel_workflow(
    config: StatisticsConfig,
    run_image_fn: Callable[[Path, StatisticsConfig], list[Path]],
) -> list[Path]:
    """Execute a statistics workflow over all images, with optional parallelism.

    Respects ``config.n_procs``: when > 1, images are processed in a
    :class:`~concurrent.futures.ProcessPoolExecutor`; otherwise they are
    processed sequentially.

    Parameters
    ----------
    config
        Parsed workflow configuration.
    run_image_fn
        Callable that summarizes a single image and returns the output paths.
        Signature: ``(nifti_path, config) -> list[Path]``.

    Returns
    -------
    list[Path]
        All output paths produced across all images.
    """
    outputs: list[Path] = []
    total = len(config.inputs)

    if config.n_procs > 1:
        LOGGER.info("Summarizing %d images with %d processes", total, config.n_procs)
        with ProcessPoolExecutor(max_workers=config.n_procs) as executor:
            future_to_path = {executor.submit(run_image_fn, path, config): path for path in config.inputs}
            for i, future in enumerate(as_completed(future_to_path), start=1):
                path = future_to_path[future]
                try:
                    result = future.result()
                    outputs.extend(result)
                    LOGGER.info("[%d/%d] Finished %s (%d outputs)", i, total, path.name, len(result))
                except Exception:
                    LOGGER.exception("[%d/%d] Failed %s", i, total, path.name)
    else:
        for i, path in enumerate(config.inputs, start=1):
            try:
                result = run_image_fn(path, config)
                outputs.extend(result)
                LOGGER.info("[%d/%d] Finished %s (%d outputs)", i, total, path.name, len(result))
            except Exception:
                LOGGER.exception("[%d/%d] Failed %s", i, total, path.name)

    LOGGER.info("Finished writing %d statistics files", len(outputs))
    return outputs
