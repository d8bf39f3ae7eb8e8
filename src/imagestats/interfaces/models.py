"""Structured representations of workflow inputs and outputs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd


@dataclass
class StatisticsConfig:
    """Configuration for an image statistics workflow."""

    inputs: list[Path] = field(default_factory=list)
    output_dir: Path = Path("statistics")
    n_partitions: int = 1
    n_jobs: int = 1
    n_procs: int = 1
    strategy: str = "slowest-axis"
    force: bool = False
    log_level: int = logging.INFO


@dataclass(frozen=True)
class ScalarImage:
    """An image file to summarize."""

    name: str
    nifti_path: Path


@dataclass(frozen=True)
class StatisticsOutput:
    """Statistics computed for one image."""

    image: ScalarImage
    stats_table: pd.DataFrame
    sample_type: str | None = None
