"""
Per-frame classification tables consumed by the AOGM engine.

A ``FrameClassification`` pairs the ground-truth and result labels alive in one
frame with index-level matches between them:

- ``gt_match[i]`` is the ``res_labels`` index matched by ``gt_labels[i]``, or
  ``NO_MATCH``
- ``res_match[j]`` is the set of ``gt_labels`` indices matched by
  ``res_labels[j]``
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple

from ..errors import ConsistencyError

NO_MATCH = -1


class MatchSet:
    """
    Immutable set of ground-truth slot indices matched by one result label.

    Nearly every slot matches exactly one index, so that case is held inline
    and a frozenset is only built for two or more indices.
    """

    __slots__ = ("_single", "_many")

    def __init__(self, indices: Iterable[int] = ()) -> None:
        unique = frozenset(indices)
        self._single: Optional[int] = None
        self._many: Optional[FrozenSet[int]] = None
        if len(unique) == 1:
            self._single = next(iter(unique))
        elif unique:
            self._many = unique

    @classmethod
    def empty(cls) -> "MatchSet":
        return cls()

    @classmethod
    def single(cls, index: int) -> "MatchSet":
        match = cls.__new__(cls)
        match._single = index
        match._many = None
        return match

    @classmethod
    def of(cls, *indices: int) -> "MatchSet":
        return cls(indices)

    def first(self) -> int:
        """Smallest matched index, ``NO_MATCH`` when empty."""
        if self._single is not None:
            return self._single
        if self._many:
            return min(self._many)
        return NO_MATCH

    def __len__(self) -> int:
        if self._single is not None:
            return 1
        return len(self._many) if self._many else 0

    def __contains__(self, index: object) -> bool:
        if self._single is not None:
            return index == self._single
        return bool(self._many) and index in self._many

    def __iter__(self) -> Iterator[int]:
        if self._single is not None:
            yield self._single
        elif self._many:
            yield from sorted(self._many)

    def as_frozenset(self) -> FrozenSet[int]:
        return frozenset(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MatchSet):
            return self.as_frozenset() == other.as_frozenset()
        if isinstance(other, (set, frozenset)):
            return self.as_frozenset() == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.as_frozenset())

    def __repr__(self) -> str:
        return f"MatchSet({sorted(self)})"


@dataclass(frozen=True)
class FrameClassification:
    """Ground-truth/result label correspondence for a single frame."""
    time: int
    gt_labels: Tuple[int, ...]
    res_labels: Tuple[int, ...]
    gt_match: Tuple[int, ...]
    res_match: Tuple[MatchSet, ...]

    def __post_init__(self) -> None:
        if len(self.gt_match) != len(self.gt_labels):
            raise ConsistencyError(
                f"{len(self.gt_match)} GT matches for {len(self.gt_labels)} GT labels",
                time=self.time,
            )
        if len(self.res_match) != len(self.res_labels):
            raise ConsistencyError(
                f"{len(self.res_match)} result matches for {len(self.res_labels)} result labels",
                time=self.time,
            )

    def gt_index(self, label: int) -> int:
        """First slot holding the ground-truth label, ``NO_MATCH`` if absent."""
        try:
            return self.gt_labels.index(label)
        except ValueError:
            return NO_MATCH

    def res_index(self, label: int) -> int:
        """First slot holding the result label, ``NO_MATCH`` if absent."""
        try:
            return self.res_labels.index(label)
        except ValueError:
            return NO_MATCH

    def unmatched_gt(self) -> List[int]:
        return [label for label, match in zip(self.gt_labels, self.gt_match) if match == NO_MATCH]

    def matched_pairs(self) -> List[Tuple[int, int]]:
        """``(result label, ground-truth label)`` for every match, in result order."""
        return [
            (res_label, self.gt_labels[i])
            for res_label, match in zip(self.res_labels, self.res_match)
            for i in match
        ]
