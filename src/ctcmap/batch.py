"""
Batch evaluation of a folder of result sets against one ground truth.

A result set is a pair of files in the same folder: ``name.map.txt`` holding
the node mapping and ``name.txt`` holding the result tracks. A bad result set
is logged and skipped; only an unreadable ground truth stops the batch.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from .aogm.cache import GroundTruthCache
from .aogm.calculator import BatchCalculator
from .config import PenaltyConfig, Settings
from .errors import CtcMapError
from .logging import get_logger

logger = get_logger(__name__)

COUNT_COLUMNS = ("NS", "FN", "FP", "ED", "EA", "EC")


@dataclass(frozen=True)
class ResultPair:
    """Node mapping file and its result track file."""
    name: str
    mapping_path: Path
    track_path: Optional[Path]    # None when the track file is missing


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one result set."""
    name: str
    track_file: Optional[str] = None
    aogm: Optional[float] = None
    tra: Optional[float] = None
    counts: Optional[Dict[str, int]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchSummary:
    """Scores of a batch run together with the ground-truth baseline."""
    gt_path: Path
    result_dir: Path
    gt_node_count: int
    gt_edge_count: int
    penalty: PenaltyConfig
    aogm_empty: float
    items: List[BatchItemResult] = field(default_factory=list)

    def scored(self) -> List[BatchItemResult]:
        return [item for item in self.items if item.ok]

    def failures(self) -> List[BatchItemResult]:
        return [item for item in self.items if not item.ok]

    def statistics(self) -> Dict[str, Any]:
        """Count and min/mean/max of AOGM and TRA over the scored items."""
        scored = self.scored()
        stats: Dict[str, Any] = {"n": len(scored)}
        if not scored:
            return stats
        for name in ("aogm", "tra"):
            values = np.array([getattr(item, name) for item in scored], dtype=float)
            stats[name] = {
                "min": float(values.min()),
                "mean": float(values.mean()),
                "max": float(values.max()),
            }
        return stats


def find_result_pairs(folder: Union[str, Path], settings: Optional[Settings] = None) -> List[ResultPair]:
    """
    Pair every mapping file in ``folder`` with its result track file.

    Args:
        folder: Directory holding ``name.map.txt`` and ``name.txt`` files
        settings: Supplies the mapping and track file suffixes

    Returns:
        Pairs sorted by name; ``track_path`` is None for a missing track file
    """
    settings = settings or Settings()
    folder = Path(folder)
    pairs = []
    for mapping_path in sorted(folder.iterdir()):
        if not mapping_path.is_file() or not mapping_path.name.endswith(settings.map_suffix):
            continue
        name = mapping_path.name[: -len(settings.map_suffix)]
        track_path = folder / f"{name}{settings.track_suffix}"
        pairs.append(ResultPair(name=name, mapping_path=mapping_path,
                                track_path=track_path if track_path.is_file() else None))
    return pairs


def run_batch(
    gt_path: Union[str, Path],
    result_dir: Union[str, Path],
    settings: Optional[Settings] = None,
) -> BatchSummary:
    """
    Score every result set in ``result_dir`` against the ground truth.

    Raises:
        OSError: The ground-truth file cannot be read
        CtcMapError: The ground-truth file is malformed or empty
    """
    settings = settings or Settings()
    gt_path = Path(gt_path)
    result_dir = Path(result_dir)

    cache = GroundTruthCache.from_path(gt_path)
    calculator = BatchCalculator(
        cache,
        penalty=settings.penalty,
        consistency_check=settings.consistency_check,
        collect_reports=settings.collect_reports,
        matching_reports=settings.matching_reports,
    )
    summary = BatchSummary(
        gt_path=gt_path,
        result_dir=result_dir,
        gt_node_count=calculator.get_gt_node_count(),
        gt_edge_count=calculator.get_gt_edge_count(),
        penalty=settings.penalty,
        aogm_empty=calculator.aogm_empty,
    )

    for pair in find_result_pairs(result_dir, settings):
        summary.items.append(_score_pair(calculator, pair))

    stats = summary.statistics()
    logger.info(f"Scored {stats['n']} of {len(summary.items)} result sets in {result_dir}")
    return summary


def _score_pair(calculator: BatchCalculator, pair: ResultPair) -> BatchItemResult:
    if pair.track_path is None:
        message = f"Mapping file ({pair.mapping_path}) is missing its track file"
        logger.error(message)
        return BatchItemResult(name=pair.name, error=message)

    try:
        aogm = calculator.calculate_paths(pair.track_path, pair.mapping_path)
    except (CtcMapError, OSError) as exc:
        logger.error(f"Skipping {pair.name}: {exc}")
        return BatchItemResult(name=pair.name, error=str(exc))

    counts = calculator.last_report.counts()
    return BatchItemResult(
        name=pair.name,
        track_file=pair.track_path.name,
        aogm=aogm,
        tra=calculator.tra(aogm),
        counts=counts,
    )


def header_lines(summary: BatchSummary) -> List[str]:
    return [
        f"# GT = {summary.gt_path}",
        f"# GT nodes = {summary.gt_node_count}",
        f"# GT edges = {summary.gt_edge_count}",
        f"# Penalty [ns, fn, fp, ed, ea, ec] = {list(summary.penalty.as_tuple())}",
        f"# AOGM_e = {summary.aogm_empty}",
        f"# Result dir = {summary.result_dir}",
    ]


def format_rows(summary: BatchSummary, with_counts: bool = False) -> Iterator[str]:
    """CSV lines ``Tracks,AOGM,TRA[,NS..EC]`` for the scored items, named by track file."""
    columns: Tuple[str, ...] = ("Tracks", "AOGM", "TRA")
    if with_counts:
        columns += COUNT_COLUMNS
    yield ",".join(columns)

    for item in summary.scored():
        row = [item.track_file or item.name, str(item.aogm), str(item.tra)]
        if with_counts and item.counts is not None:
            row += [str(item.counts[column.lower()]) for column in COUNT_COLUMNS]
        yield ",".join(row)
