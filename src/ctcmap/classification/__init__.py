"""
Per-frame label classification built from node mappings.

Produces the ordered ``FrameClassification`` tables that the AOGM engine
scores, without any mask overlap analysis.
"""

from .bitset import LabelBitSet
from .frame import classify_frame, count_active
from .grouping import build_classification, scratch_for
from .model import NO_MATCH, FrameClassification, MatchSet

__all__ = [
    "NO_MATCH",
    "FrameClassification",
    "LabelBitSet",
    "MatchSet",
    "build_classification",
    "classify_frame",
    "count_active",
    "scratch_for",
]
