"""
AOGM scoring over frame classification tables.

The engine counts the graph operations needed to turn the result tracking
graph into the ground-truth graph and weights them with a ``PenaltyConfig``:

- NS: split a result vertex matching several ground-truth vertices
- FN: add a ground-truth vertex no result vertex matches
- FP: delete a result vertex matching nothing
- ED: delete a result edge with no ground-truth counterpart
- EA: add a ground-truth edge with no result counterpart
- EC: relabel an edge whose kind (track link or parent link) differs

Vertices are only known for the frames present in the classification
sequence. An edge can only be compared when both of its endpoints are
matched one-to-one.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..classification.model import NO_MATCH, FrameClassification
from ..config import PenaltyConfig
from ..errors import ConsistencyError
from ..logging import get_logger
from ..records.model import TrackRecord
from .forks import divisions

logger = get_logger(__name__)

Forks = Mapping[int, Tuple[int, ...]]

CATEGORIES = ("ns", "fn", "fp", "ed", "ea", "ec")

TRACK_LINK = "track"
PARENT_LINK = "parent"


@dataclass
class AogmReport:
    """AOGM score with the number of operations of each kind."""
    aogm: float
    ns: int = 0
    fn: int = 0
    fp: int = 0
    ed: int = 0
    ea: int = 0
    ec: int = 0
    details: Dict[str, List[str]] = field(default_factory=dict)  # Per-category entries, if collected

    def counts(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in CATEGORIES}


class MetricEngine(Protocol):
    """Anything that scores classification tables against two track lists."""

    def evaluate(
        self,
        gt_tracks: Sequence[TrackRecord],
        res_tracks: Sequence[TrackRecord],
        levels: Sequence[FrameClassification],
        gt_forks: Forks,
        res_forks: Forks,
        penalty: PenaltyConfig,
    ) -> AogmReport:
        ...


class _Tally:
    def __init__(self, collect: bool) -> None:
        self.counts = dict.fromkeys(CATEGORIES, 0)
        self.details: Dict[str, List[str]] = {name: [] for name in CATEGORIES} if collect else {}

    def add(self, category: str, entry: str, times: int = 1) -> None:
        self.counts[category] += times
        if self.details:
            self.details[category].append(entry)


class AogmEngine:
    """Reference AOGM engine following the Cell Tracking Challenge rules."""

    def __init__(self, consistency_check: bool = True, collect_reports: bool = False) -> None:
        self.consistency_check = consistency_check
        self.collect_reports = collect_reports

    def evaluate(
        self,
        gt_tracks: Sequence[TrackRecord],
        res_tracks: Sequence[TrackRecord],
        levels: Sequence[FrameClassification],
        gt_forks: Forks,
        res_forks: Forks,
        penalty: PenaltyConfig,
    ) -> AogmReport:
        gt_by_id = {track.id: track for track in gt_tracks}
        res_by_id = {track.id: track for track in res_tracks}
        by_time = {level.time: level for level in levels}

        if self.consistency_check:
            check_consistency(levels, gt_by_id, res_by_id, gt_forks, res_forks)

        tally = _Tally(self.collect_reports)
        self._count_vertices(levels, tally)
        self._count_result_edges(by_time, gt_by_id, res_by_id, tally)
        self._count_missing_edges(by_time, gt_by_id, res_by_id, tally)

        counts = tally.counts
        aogm = (
            penalty.ns * counts["ns"]
            + penalty.fn * counts["fn"]
            + penalty.fp * counts["fp"]
            + penalty.ed * counts["ed"]
            + penalty.ea * counts["ea"]
            + penalty.ec * counts["ec"]
        )
        logger.debug(f"AOGM {aogm} from operation counts {counts}")
        return AogmReport(aogm=aogm, details=tally.details, **counts)

    def _count_vertices(self, levels: Sequence[FrameClassification], tally: _Tally) -> None:
        for level in levels:
            for label, match in zip(level.gt_labels, level.gt_match):
                if match == NO_MATCH:
                    tally.add("fn", f"T={level.time} GT_label={label}")
            for label, match in zip(level.res_labels, level.res_match):
                if len(match) == 0:
                    tally.add("fp", f"T={level.time} Label={label}")
                elif len(match) > 1:
                    tally.add("ns", f"T={level.time} Label={label}", times=len(match) - 1)

    def _count_result_edges(
        self,
        by_time: Dict[int, FrameClassification],
        gt_by_id: Dict[int, TrackRecord],
        res_by_id: Dict[int, TrackRecord],
        tally: _Tally,
    ) -> None:
        for track in res_by_id.values():
            for t in range(track.start, track.end):
                self._compare_result_edge(by_time, gt_by_id, t, track.id, t + 1, track.id, TRACK_LINK, tally)
            if track.has_parent:
                parent = res_by_id.get(track.parent)
                if parent is None:
                    logger.warning(f"Result track {track.id} names unknown parent {track.parent}")
                    continue
                self._compare_result_edge(
                    by_time, gt_by_id, parent.end, parent.id, track.start, track.id, PARENT_LINK, tally
                )

    def _compare_result_edge(
        self,
        by_time: Dict[int, FrameClassification],
        gt_by_id: Dict[int, TrackRecord],
        start_time: int,
        start_label: int,
        end_time: int,
        end_label: int,
        kind: str,
        tally: _Tally,
    ) -> None:
        entry = f"[T={start_time} Label={start_label}] -> [T={end_time} Label={end_label}]"
        gt_start = _unique_gt_label(by_time.get(start_time), start_label)
        gt_end = _unique_gt_label(by_time.get(end_time), end_label)
        if gt_start is None or gt_end is None:
            tally.add("ed", entry)
            return

        gt_kind = _edge_kind(gt_by_id, start_time, gt_start, end_time, gt_end)
        if gt_kind is None:
            tally.add("ed", entry)
        elif gt_kind != kind:
            tally.add("ec", entry)

    def _count_missing_edges(
        self,
        by_time: Dict[int, FrameClassification],
        gt_by_id: Dict[int, TrackRecord],
        res_by_id: Dict[int, TrackRecord],
        tally: _Tally,
    ) -> None:
        for track in gt_by_id.values():
            edges = [(t, track.id, t + 1, track.id) for t in range(track.start, track.end)]
            parent = gt_by_id.get(track.parent) if track.has_parent else None
            if parent is not None:
                edges.append((parent.end, parent.id, track.start, track.id))

            for start_time, start_label, end_time, end_label in edges:
                res_start = _unique_res_label(by_time.get(start_time), start_label)
                res_end = _unique_res_label(by_time.get(end_time), end_label)
                if (
                    res_start is None
                    or res_end is None
                    or _edge_kind(res_by_id, start_time, res_start, end_time, res_end) is None
                ):
                    tally.add(
                        "ea",
                        f"[T={start_time} GT_label={start_label}] -> [T={end_time} GT_label={end_label}]",
                    )


def _unique_gt_label(level: Optional[FrameClassification], res_label: int) -> Optional[int]:
    """Ground-truth label matched one-to-one by ``res_label`` in this frame."""
    if level is None:
        return None
    index = level.res_index(res_label)
    if index == NO_MATCH or len(level.res_match[index]) != 1:
        return None
    return level.gt_labels[level.res_match[index].first()]


def _unique_res_label(level: Optional[FrameClassification], gt_label: int) -> Optional[int]:
    """Result label matched one-to-one to ``gt_label`` in this frame."""
    if level is None:
        return None
    index = level.gt_index(gt_label)
    if index == NO_MATCH:
        return None
    res_index = level.gt_match[index]
    if res_index == NO_MATCH or len(level.res_match[res_index]) != 1:
        return None
    return level.res_labels[res_index]


def _edge_kind(
    tracks: Dict[int, TrackRecord],
    start_time: int,
    start_label: int,
    end_time: int,
    end_label: int,
) -> Optional[str]:
    """Kind of the edge between two vertices in a track graph, None if absent."""
    if start_label == end_label:
        track = tracks.get(start_label)
        if track is not None and end_time == start_time + 1 and track.start <= start_time and end_time <= track.end:
            return TRACK_LINK
        return None

    parent = tracks.get(start_label)
    child = tracks.get(end_label)
    if (
        parent is not None
        and child is not None
        and child.parent == start_label
        and parent.end == start_time
        and child.start == end_time
    ):
        return PARENT_LINK
    return None


def check_consistency(
    levels: Sequence[FrameClassification],
    gt_by_id: Dict[int, TrackRecord],
    res_by_id: Dict[int, TrackRecord],
    gt_forks: Forks,
    res_forks: Forks,
) -> None:
    """
    Verify the classification tables agree with both track lists.

    Raises:
        ConsistencyError: A label is unknown or outside its track's lifetime,
            or a parent link is broken
    """
    for level in levels:
        for label in level.gt_labels:
            _check_label(gt_by_id, label, level.time, "ground-truth")
        for label in level.res_labels:
            _check_label(res_by_id, label, level.time, "result")

    for name, tracks, forks in (("ground-truth", gt_by_id, gt_forks), ("result", res_by_id, res_forks)):
        for parent_id, child_ids in forks.items():
            parent = tracks.get(parent_id)
            if parent is None:
                raise ConsistencyError(f"{name} tracks {list(child_ids)} name unknown parent {parent_id}")
            for child_id in child_ids:
                child = tracks[child_id]
                if child.start <= parent.end:
                    raise ConsistencyError(
                        f"{name} track {child_id} starts at {child.start} "
                        f"before its parent {parent_id} ends at {parent.end}"
                    )
        logger.debug(f"{name} tracks hold {len(divisions(dict(forks)))} divisions")


def _check_label(tracks: Dict[int, TrackRecord], label: int, time: int, name: str) -> None:
    track = tracks.get(label)
    if track is None:
        raise ConsistencyError(f"{name} label {label} has no track record", time=time)
    if not track.is_active(time):
        raise ConsistencyError(
            f"{name} label {label} is outside its track lifetime [{track.start}, {track.end}]",
            time=time,
        )
