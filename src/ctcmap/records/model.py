"""Typed records parsed from track and node mapping files."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackRecord:
    """A track: a label persisting over a run of frames, with an optional parent."""
    id: int       # Track label
    start: int    # First frame (inclusive)
    end: int      # Last frame (inclusive)
    parent: int   # Parent track label, 0 for a root track

    @property
    def has_parent(self) -> bool:
        return self.parent > 0

    @property
    def length(self) -> int:
        """Number of frames the track exists in."""
        return self.end - self.start + 1

    def is_active(self, time: int) -> bool:
        return self.start <= time <= self.end


@dataclass(frozen=True)
class NodeMapping:
    """At frame ``time`` the result label ``result_id`` corresponds to ``gt_id``."""
    result_id: int
    time: int
    gt_id: int
