"""Batch workflow interfaces: configuration, runner and shared utilities."""

from imagestats.interfaces.models import ScalarImage, StatisticsConfig, StatisticsOutput
from imagestats.interfaces.runner import run_statistics_workflow, summarize_image
from imagestats.interfaces.shared import load_config, run_parallel_workflow
from imagestats.interfaces.utils import _parse_log_level

__all__ = [
    "ScalarImage",
    "StatisticsConfig",
    "StatisticsOutput",
    "_parse_log_level",
    "load_config",
    "run_parallel_workflow",
    "run_statistics_workflow",
    "summarize_image",
]
