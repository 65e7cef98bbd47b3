"""
Repeated AOGM evaluation of many result sets against one ground truth.

Each ``calculate`` call parses the result tracks and the node mapping, builds
the frame classification tables, detects result forks and scores them. All of
that per-result data lives in a ``BatchRunState`` that is rebuilt on every
call; only the ``GroundTruthCache`` carries over.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..classification.grouping import build_classification
from ..classification.model import FrameClassification
from ..config import PenaltyConfig
from ..errors import EmptyMappingError, Source
from ..logging import get_logger
from ..records.model import TrackRecord
from ..records.parser import parse_node_mappings, parse_track_records, read_record_text
from .cache import GroundTruthCache
from .engine import AogmEngine, AogmReport, MetricEngine
from .forks import detect_forks

logger = get_logger(__name__)


@dataclass
class BatchRunState:
    """Everything derived from a single result set."""
    result_tracks: List[TrackRecord] = field(default_factory=list)
    levels: List[FrameClassification] = field(default_factory=list)
    result_forks: Dict[int, Tuple[int, ...]] = field(default_factory=dict)
    report: Optional[AogmReport] = None


class BatchCalculator:
    """
    AOGM calculator bound to one cached ground truth.

    Not safe for concurrent use: run one instance per worker, each built from
    its own ``GroundTruthCache``.
    """

    def __init__(
        self,
        cache: GroundTruthCache,
        penalty: Optional[PenaltyConfig] = None,
        engine: Optional[MetricEngine] = None,
        consistency_check: bool = True,
        collect_reports: bool = False,
        matching_reports: bool = False,
    ) -> None:
        self.cache = cache
        self.matching_reports = matching_reports
        self.penalty = penalty or PenaltyConfig.cell_tracking_challenge()
        self.engine: MetricEngine = engine or AogmEngine(
            consistency_check=consistency_check, collect_reports=collect_reports
        )
        self._state = BatchRunState()

    @property
    def state(self) -> BatchRunState:
        """Per-result data of the last call, empty if that call failed."""
        return self._state

    @property
    def last_report(self) -> Optional[AogmReport]:
        return self._state.report

    @property
    def aogm_empty(self) -> float:
        return self.cache.aogm_empty(self.penalty)

    def get_gt_node_count(self) -> int:
        return self.cache.node_count

    def get_gt_edge_count(self) -> int:
        return self.cache.edge_count

    def tra(self, aogm: float) -> float:
        """Normalised score ``max(0, 1 - aogm / aogm_empty)``."""
        return tra_score(aogm, self.aogm_empty)

    def calculate(
        self,
        result_track_text: str,
        mapping_text: str,
        result_source: Source = None,
        mapping_source: Source = None,
    ) -> float:
        """
        Compute the AOGM of one result set.

        Args:
            result_track_text: Result track records ``id start end parent``
            mapping_text: Node mapping records ``resId time gtId``
            result_source: Result file identity for error messages
            mapping_source: Mapping file identity for error messages

        Returns:
            The AOGM score

        Raises:
            MalformedRecordError: A record line is invalid
            EmptyMappingError: The mapping holds no record
            ConsistencyError: The mapping disagrees with the track lists
        """
        self._state = BatchRunState()

        result_tracks = parse_track_records(result_track_text, source=result_source)
        mappings = parse_node_mappings(mapping_text, source=mapping_source)
        if not mappings:
            raise EmptyMappingError(mapping_source)

        levels = build_classification(mappings, self.cache.tracks, self.cache.scratch)
        if self.matching_reports:
            for line in matching_report(levels):
                logger.info(line)
        result_forks = detect_forks(result_tracks)

        report = self.engine.evaluate(
            self.cache.tracks,
            result_tracks,
            levels,
            self.cache.forks,
            result_forks,
            self.penalty,
        )

        # Filled only on success; a failed call leaves the state empty
        self._state = BatchRunState(
            result_tracks=result_tracks,
            levels=levels,
            result_forks=result_forks,
            report=report,
        )
        logger.debug(f"AOGM {report.aogm} over {len(levels)} frames for {result_source or '<text>'}")
        return report.aogm

    def calculate_paths(self, result_path: Union[str, Path], mapping_path: Union[str, Path]) -> float:
        result_path = Path(result_path)
        mapping_path = Path(mapping_path)
        return self.calculate(
            read_record_text(result_path),
            read_record_text(mapping_path),
            result_source=result_path,
            mapping_source=mapping_path,
        )


def matching_report(levels: List[FrameClassification]) -> List[str]:
    """One line per matched pair: which result label covers which ground-truth label."""
    return [
        f"T={level.time} RES_label={res_label} GT_label={gt_label}"
        for level in levels
        for res_label, gt_label in level.matched_pairs()
    ]


def tra_score(aogm: float, aogm_empty: float) -> float:
    """TRA: ``max(0, 1 - aogm / aogm_empty)``, 0 for an empty baseline."""
    if aogm_empty <= 0:
        return 0.0
    return max(0.0, 1.0 - aogm / aogm_empty)


def evaluate_mapped(
    gt_text: str,
    res_text: str,
    mapping_text: str,
    penalty: Optional[PenaltyConfig] = None,
    consistency_check: bool = True,
    collect_reports: bool = False,
) -> AogmReport:
    """
    One-shot AOGM evaluation of a single result set.

    Raises:
        EmptyGroundTruthError: The ground-truth text holds no track
        EmptyMappingError: The mapping holds no record
    """
    calculator = BatchCalculator(
        GroundTruthCache.load(gt_text),
        penalty=penalty,
        consistency_check=consistency_check,
        collect_reports=collect_reports,
    )
    calculator.calculate(res_text, mapping_text)
    return calculator.last_report
