from dataclasses import astuple, dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class PenaltyConfig:
    """AOGM penalty weights for each graph correction operation."""
    ns: float = 5.0    # splitting a result vertex
    fn: float = 10.0   # adding a false-negative vertex
    fp: float = 1.0    # deleting a false-positive vertex
    ed: float = 1.0    # deleting a redundant edge
    ea: float = 1.5    # adding a missing edge
    ec: float = 1.0    # changing the semantics of an edge

    def __post_init__(self) -> None:
        for name, value in zip(("ns", "fn", "fp", "ed", "ea", "ec"), self.as_tuple()):
            if value < 0:
                raise ValueError(f"Penalty '{name}' must be non-negative, got {value}")

    @classmethod
    def cell_tracking_challenge(cls) -> "PenaltyConfig":
        """Weights used for the Cell Tracking Challenge TRA measure."""
        return cls(ns=5.0, fn=10.0, fp=1.0, ed=1.0, ea=1.5, ec=1.0)

    def as_tuple(self) -> Tuple[float, float, float, float, float, float]:
        return astuple(self)


PENALTY_PRESETS: Dict[str, PenaltyConfig] = {
    "ctc": PenaltyConfig.cell_tracking_challenge(),
}


@dataclass
class Settings:
    penalty: PenaltyConfig = field(default_factory=PenaltyConfig.cell_tracking_challenge)
    consistency_check: bool = True
    collect_reports: bool = False
    matching_reports: bool = False
    map_suffix: str = ".map.txt"
    track_suffix: str = ".txt"
