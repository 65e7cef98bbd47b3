"""Parent to children tables for track lists."""

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from ..records.model import TrackRecord


def detect_forks(tracks: Sequence[TrackRecord]) -> Dict[int, Tuple[int, ...]]:
    """
    Find every track that other tracks name as their parent.

    Args:
        tracks: Track records of one track file

    Returns:
        Mapping of parent label to its child labels, both ascending
    """
    children: Dict[int, List[int]] = defaultdict(list)
    for track in tracks:
        if track.has_parent:
            children[track.parent].append(track.id)
    return {parent: tuple(sorted(ids)) for parent, ids in sorted(children.items())}


def divisions(forks: Dict[int, Tuple[int, ...]]) -> Dict[int, Tuple[int, ...]]:
    """Forks with two or more children, i.e. real cell divisions."""
    return {parent: ids for parent, ids in forks.items() if len(ids) > 1}
