"""
Frame classification from explicit result to ground-truth node mappings.

The mask-overlap classifier of the Cell Tracking Challenge measures decides
which result label covers which ground-truth label in each frame. Here that
decision is already made and given as ``resId time gtId`` records, so a
frame's tables are assembled directly:

1. every mapping record is one matched pair at the same slot index
2. every ground-truth track alive in the frame but absent from the mapping is
   appended unmatched, so the engine counts it as a false negative
"""

from typing import List, Sequence

from ..errors import ConsistencyError
from ..logging import get_logger
from ..records.model import NodeMapping, TrackRecord
from .bitset import LabelBitSet
from .model import NO_MATCH, FrameClassification, MatchSet

logger = get_logger(__name__)


def count_active(ground_truth: Sequence[TrackRecord], time: int) -> int:
    """Number of ground-truth tracks alive at ``time``."""
    return sum(1 for track in ground_truth if track.start <= time <= track.end)


def classify_frame(
    mappings: Sequence[NodeMapping],
    ground_truth: Sequence[TrackRecord],
    time: int,
    scratch: LabelBitSet,
) -> FrameClassification:
    """
    Build the classification tables for one frame.

    Args:
        mappings: Mapping records of this frame, in input order
        ground_truth: All ground-truth tracks
        time: The frame
        scratch: Reusable set of observed ground-truth labels, cleared here

    Returns:
        FrameClassification with the mapped pairs first, then the unmapped
        active ground-truth labels

    Raises:
        ConsistencyError: The mapping names more ground-truth labels than are
            alive in this frame, or a label that is not an active ground-truth
            track
    """
    gt_count = count_active(ground_truth, time)
    if len(mappings) > gt_count:
        raise ConsistencyError(
            f"{len(mappings)} mapping records but only {gt_count} ground-truth tracks are active",
            time=time,
        )

    gt_labels: List[int] = [0] * gt_count
    gt_match: List[int] = [NO_MATCH] * gt_count
    res_labels: List[int] = []
    res_match: List[MatchSet] = []

    scratch.clear()
    for i, mapping in enumerate(mappings):
        if not 0 <= mapping.gt_id < scratch.size:
            # Outside the ground-truth label range, so never an active track
            raise ConsistencyError(
                f"mapped ground-truth label {mapping.gt_id} (result label {mapping.result_id}) "
                f"is not a ground-truth track",
                time=time,
            )
        gt_labels[i] = mapping.gt_id
        gt_match[i] = i
        res_labels.append(mapping.result_id)
        res_match.append(MatchSet.single(i))
        scratch.set(mapping.gt_id)

    index = len(mappings)
    for track in ground_truth:
        if track.start <= time <= track.end and track.id not in scratch:
            if index >= gt_count:
                # Only reachable when a mapped label is repeated or not alive
                raise ConsistencyError(
                    f"ground-truth track {track.id} has no free slot; a mapped ground-truth "
                    f"label is repeated or not active in this frame",
                    time=time,
                )
            gt_labels[index] = track.id
            index += 1

    if index < gt_count:
        raise ConsistencyError(
            f"{gt_count - index} ground-truth slots left unassigned",
            time=time,
        )

    return FrameClassification(
        time=time,
        gt_labels=tuple(gt_labels),
        res_labels=tuple(res_labels),
        gt_match=tuple(gt_match),
        res_match=tuple(res_match),
    )
