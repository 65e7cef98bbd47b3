"""
Ground-truth data parsed once and reused for every result set of a batch.

Besides the tracks themselves the cache holds the structural size of the
ground-truth graph. ``AOGM_empty``, the cost of building the ground truth from
nothing, is ``node_count * fn + edge_count * ea`` for any penalty weights.
"""

from pathlib import Path
from typing import Dict, Sequence, Tuple, Union

from ..classification.bitset import LabelBitSet
from ..classification.grouping import scratch_for
from ..config import PenaltyConfig
from ..errors import EmptyGroundTruthError, Source
from ..logging import get_logger
from ..records.model import TrackRecord
from ..records.parser import parse_track_records, read_record_text
from .forks import detect_forks

logger = get_logger(__name__)


class GroundTruthCache:
    """
    Parsed ground-truth tracks with their baseline node and edge counts.

    Read-only after construction apart from ``scratch``, which is cleared and
    refilled for every classified frame. Share one cache between workers only
    if each worker brings its own scratch set.
    """

    def __init__(self, tracks: Sequence[TrackRecord], source: Source = None) -> None:
        if not tracks:
            raise EmptyGroundTruthError(source)

        self._tracks: Tuple[TrackRecord, ...] = tuple(tracks)
        self._source = source

        # Links between consecutive frames of the same track
        self.edge_units = sum(track.end - track.start for track in self._tracks)
        self.node_count = self.edge_units + len(self._tracks)
        self.parent_link_count = sum(1 for track in self._tracks if track.has_parent)
        self.edge_count = self.edge_units + self.parent_link_count

        self._forks = detect_forks(self._tracks)
        self.scratch: LabelBitSet = scratch_for(self._tracks)

        logger.info(
            f"Loaded {len(self._tracks)} ground-truth tracks from {source or '<text>'}: "
            f"{self.node_count} nodes, {self.edge_count} edges"
        )

    @classmethod
    def load(cls, text: str, source: Source = None) -> "GroundTruthCache":
        """
        Parse ground-truth track text into a cache.

        Raises:
            MalformedRecordError: A record line is invalid
            EmptyGroundTruthError: The text holds no track
        """
        return cls(parse_track_records(text, source=source), source=source)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "GroundTruthCache":
        path = Path(path)
        return cls.load(read_record_text(path), source=path)

    @property
    def tracks(self) -> Tuple[TrackRecord, ...]:
        return self._tracks

    @property
    def forks(self) -> Dict[int, Tuple[int, ...]]:
        return dict(self._forks)

    @property
    def source(self) -> Source:
        return self._source

    def aogm_empty(self, penalty: PenaltyConfig) -> float:
        """Cost of creating the ground-truth graph from an empty graph."""
        return self.node_count * penalty.fn + self.edge_count * penalty.ea
