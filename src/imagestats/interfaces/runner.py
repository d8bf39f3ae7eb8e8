"""Run statistics workflows.

This module provides functions for summarizing images and writing the
resulting tables.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from imagestats.filters.statistics import StatisticsImageFilter
from imagestats.interfaces.models import ScalarImage, StatisticsConfig, StatisticsOutput
from imagestats.interfaces.utils import _image_stem, write_statistics_sidecar

logger = logging.getLogger(__name__)


def _build_output_path(image: ScalarImage, destination: Path) -> Path:
    """Construct the output path for the statistics of an image."""
    return destination / f"{image.name}_stats.tsv"


def summarize_image(image: ScalarImage, config: StatisticsConfig) -> Optional[StatisticsOutput]:
    """Compute the statistics of a single image.

    Returns ``None`` when the image cannot be read or reduced; the failure is
    logged.
    """
    logger.debug("Summarizing %s", image.nifti_path)
    try:
        stats_filter = StatisticsImageFilter(
            n_partitions=config.n_partitions,
            n_jobs=config.n_jobs,
            strategy=config.strategy,
        )
        stats_table = stats_filter.transform(image.nifti_path)
        stats_table.insert(0, "image", image.name)
        sample_type = str(stats_filter.output.get_data_dtype())
        logger.info("Successfully summarized %s", image.name)
        return StatisticsOutput(image=image, stats_table=stats_table, sample_type=sample_type)  # noqa: TRY300
    except Exception:  # Broad catch intentional: one unreadable image must not stop a batch
        logger.exception("Failed to summarize %s", image.nifti_path)
        return None


def write_output(result: StatisticsOutput, config: StatisticsConfig) -> Path:
    """Write a statistics table (TSV + JSON sidecar) to disk.

    Parameters
    ----------
    result
        The statistics output to write.
    config
        Workflow configuration (destination and reduction settings).

    Returns
    -------
    Path
        Path to the written TSV file.
    """
    out_path = _build_output_path(result.image, config.output_dir)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    result.stats_table.to_csv(out_path, sep="\t", index=False)
    logger.debug("Wrote statistics output to %s", out_path)

    write_statistics_sidecar(
        tsv_path=out_path,
        original_file=result.image.nifti_path,
        n_partitions=config.n_partitions,
        strategy=config.strategy,
        sample_type=result.sample_type,
    )
    return out_path


def run_statistics_workflow(nifti_path: Path, config: StatisticsConfig) -> list[Path]:
    """Summarize one image and write its outputs.

    Existing outputs are reused unless ``config.force`` is set.

    Parameters
    ----------
    nifti_path
        Path to the image to summarize.
    config
        Workflow configuration.

    Returns
    -------
    list[Path]
        Path of the statistics table, or an empty list if the image failed.
    """
    image = ScalarImage(name=_image_stem(nifti_path), nifti_path=nifti_path)
    out_path = _build_output_path(image, config.output_dir)
    if not config.force and out_path.exists():
        logger.info("Reusing existing statistics output at %s", out_path)
        return [out_path]

    result = summarize_image(image, config)
    if result is None:
        return []
    return [write_output(result, config)]
