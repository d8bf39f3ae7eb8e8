"""Command-line entry point for imagestats.

Usage::

    imagestats IMAGE [IMAGE ...] \\
        [--output-dir DIR] \\
        [--config CONFIG.toml] \\
        [--n-partitions K] [--n-jobs N] [--n-procs N] \\
        [--strategy {slowest-axis,flat}] \\
        [--force] [--log-level LEVEL]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from imagestats.reduction.regions import STRATEGIES


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="imagestats",
        description=(
            "Compute minimum, maximum, sum, mean, variance and standard deviation "
            "of every voxel of one or more images, reducing each image in parallel."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "inputs",
        type=Path,
        nargs="*",
        help="Images to summarize (any format readable by nibabel). May also be given in --config.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        dest="output_dir",
        help="Directory where one statistics TSV (plus JSON sidecar) per image is written.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML configuration file.",
    )
    parser.add_argument(
        "--n-partitions",
        type=int,
        default=None,
        dest="n_partitions",
        help="Number of regions each image is split into. Default: 1.",
    )
    parser.add_argument(
        "--n-jobs",
        type=int,
        default=None,
        dest="n_jobs",
        help="Number of worker threads reducing the regions of one image. Default: 1.",
    )
    parser.add_argument(
        "--n-procs",
        type=int,
        default=None,
        dest="n_procs",
        help="Number of parallel processes summarizing different images. Default: 1.",
    )
    parser.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES),
        default=None,
        help="How images are split into regions. Default: slowest-axis.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing statistics outputs.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        dest="log_level",
        help="Logging verbosity. Default: INFO.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the imagestats CLI."""
    argv = list(argv) if argv is not None else sys.argv[1:]

    if not argv:
        _build_parser().print_help()
        return 1

    args = _build_parser().parse_args(argv)

    from imagestats.interfaces.runner import run_statistics_workflow
    from imagestats.interfaces.shared import load_config, run_parallel_workflow

    try:
        config = load_config(args)
        logging.basicConfig(
            level=config.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        if not config.inputs:
            logging.getLogger(__name__).error("No input images given on the command line or in the config.")
            return 1
        outputs = run_parallel_workflow(config, run_statistics_workflow)
    except Exception:
        logging.getLogger(__name__).exception("Statistics workflow failed")
        return 1

    return 0 if len(outputs) == len(config.inputs) else 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
