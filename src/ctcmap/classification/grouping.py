"""Split a mapping into per-frame runs and classify each frame in time order."""

from typing import List, Optional, Sequence

from ..errors import EmptyMappingError
from ..logging import get_logger
from ..records.model import NodeMapping, TrackRecord
from .bitset import LabelBitSet
from .frame import classify_frame
from .model import FrameClassification

logger = get_logger(__name__)


def scratch_for(ground_truth: Sequence[TrackRecord]) -> LabelBitSet:
    """Scratch label set able to hold every ground-truth label."""
    return LabelBitSet(max((track.id for track in ground_truth), default=1))


def build_classification(
    mappings: Sequence[NodeMapping],
    ground_truth: Sequence[TrackRecord],
    scratch: Optional[LabelBitSet] = None,
) -> List[FrameClassification]:
    """
    Classify every frame present in the mapping.

    Args:
        mappings: Mapping records in any order
        ground_truth: All ground-truth tracks
        scratch: Reusable label set; one sized to the ground truth is created
            when omitted

    Returns:
        One FrameClassification per distinct mapped time, ascending

    Raises:
        EmptyMappingError: The mapping is empty
    """
    if not mappings:
        raise EmptyMappingError()
    if scratch is None:
        scratch = scratch_for(ground_truth)

    # sorted() is stable: ties keep their input order
    ordered = sorted(mappings, key=lambda mapping: mapping.time)

    levels: List[FrameClassification] = []
    start = 0
    time = ordered[0].time
    for i in range(1, len(ordered)):
        if ordered[i].time != time:
            levels.append(classify_frame(ordered[start:i], ground_truth, time, scratch))
            start = i
            time = ordered[i].time
    levels.append(classify_frame(ordered[start:], ground_truth, time, scratch))

    logger.debug(f"Classified {len(levels)} frames from {len(ordered)} mapping records")
    return levels
