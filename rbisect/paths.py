# rbisect/paths.py
from __future__ import annotations

from typing import Iterable

import numpy as np


class PathTracker:
    """
    Root-to-leaf path of every point through the split tree, one char per split
    the point's cluster went through ("0" stayed, "1" moved to the new slot).
    """

    def __init__(self, n_points: int):
        self._paths: list[list[str]] = [[] for _ in range(int(n_points))]

    def start(self, labels: np.ndarray) -> None:
        for i, lab in enumerate(np.asarray(labels, dtype=int)):
            self._paths[i] = [str(int(lab))]

    def extend(self, indices: Iterable[int], bits: Iterable[int]) -> None:
        for i, b in zip(indices, bits):
            self._paths[int(i)].append(str(int(b)))

    def paths(self) -> list[str]:
        return ["".join(p) for p in self._paths]
