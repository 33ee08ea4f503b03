"""Utility modules for ffafir."""

from ffafir.utils.log_levels import parse_log_level
from ffafir.utils.profiler import Profiler, StageStats

__all__ = [
    "Profiler",
    "StageStats",
    "parse_log_level",
]
