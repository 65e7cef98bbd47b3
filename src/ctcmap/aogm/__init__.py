"""
AOGM/TRA tracking measures computed from node mappings.

``GroundTruthCache`` parses the ground truth once, ``BatchCalculator`` scores
any number of result sets against it.
"""

from .cache import GroundTruthCache
from .calculator import BatchCalculator, BatchRunState, evaluate_mapped, matching_report, tra_score
from .engine import AogmEngine, AogmReport, MetricEngine, check_consistency
from .forks import detect_forks, divisions

__all__ = [
    "AogmEngine",
    "AogmReport",
    "BatchCalculator",
    "BatchRunState",
    "GroundTruthCache",
    "MetricEngine",
    "check_consistency",
    "detect_forks",
    "divisions",
    "evaluate_mapped",
    "matching_report",
    "tra_score",
]
