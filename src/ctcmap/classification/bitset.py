"""Reusable scratch set of ground-truth labels observed in a frame."""

import numpy as np


class LabelBitSet:
    """
    Fixed-size boolean membership table indexed by label.

    Sized once to the largest ground-truth label and cleared per frame, so
    classifying a frame does not allocate.
    """

    def __init__(self, size: int) -> None:
        self._bits = np.zeros(max(int(size), 1) + 1, dtype=bool)

    @property
    def size(self) -> int:
        return len(self._bits)

    def set(self, label: int) -> None:
        if not 0 <= label < len(self._bits):
            raise IndexError(f"Label {label} is outside the range 0..{len(self._bits) - 1}")
        self._bits[label] = True

    def get(self, label: int) -> bool:
        return 0 <= label < len(self._bits) and bool(self._bits[label])

    def __contains__(self, label: int) -> bool:
        return self.get(label)

    def clear(self) -> None:
        self._bits[:] = False

    def count(self) -> int:
        return int(np.count_nonzero(self._bits))
