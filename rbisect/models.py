# rbisect/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


def _check_arrays(X: np.ndarray, w: np.ndarray) -> None:
    if X.ndim != 2:
        raise ValueError(f"vectors must be a 2-D (N, D) matrix, got shape {X.shape}")
    if w.ndim != 1 or w.shape[0] != X.shape[0]:
        raise ValueError(f"Mismatch: {X.shape[0]} vectors but weights has shape {w.shape}")
    if w.size > 0:
        if np.any(w < 0):
            raise ValueError("weights must be non-negative")
        if not np.all(np.equal(np.mod(w, 1), 0)):
            raise ValueError("weights must be integral (multiplicities)")


@dataclass(frozen=True)
class Dataset:
    """
    Weighted points: row i of `vectors` carries multiplicity `weights[i]`.
    Shapes and weights are checked on construction; Dataset.from_arrays()
    also packs lists into float / int64 arrays.
    """
    vectors: np.ndarray   # (N, D) float
    weights: np.ndarray   # (N,) int, >= 0

    def __post_init__(self):
        _check_arrays(np.asarray(self.vectors), np.asarray(self.weights))

    @property
    def n(self) -> int:
        return int(self.vectors.shape[0])

    @property
    def dim(self) -> int:
        return int(self.vectors.shape[1])

    @property
    def total_weight(self) -> int:
        return int(self.weights.sum())

    @classmethod
    def from_arrays(cls, vectors, weights=None) -> "Dataset":
        X = np.asarray(vectors, dtype=float)
        if X.size == 0 and X.ndim < 2:
            X = X.reshape(0, 0)
        w = np.ones(X.shape[0], dtype=np.int64) if weights is None and X.ndim > 0 else np.asarray(weights)
        # validate before the int64 cast would truncate fractional weights
        _check_arrays(X, w)
        return cls(vectors=X, weights=w.astype(np.int64))


@dataclass(frozen=True)
class SplitOutcome:
    """Result of one two-way split: labels follow the submitted vector order."""
    labels: np.ndarray                # (m,) values in {0, 1}
    scores: tuple[float, float]       # score of group 0, score of group 1


@dataclass
class BisectResult:
    assignments: np.ndarray           # (N,) slot id per point
    scores: np.ndarray                # (n_clusters,) final per-slot quality score
    slot_weights: np.ndarray          # (n_clusters,)
    slot_sizes: np.ndarray            # (n_clusters,)
    paths: list[str]                  # per-point split path, "" when nothing was split
    history: list[dict[str, Any]] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=dict)

    @property
    def n_clusters(self) -> int:
        """Number of allocated slots (may be below the requested count after early stop)."""
        return int(self.scores.shape[0])

    @property
    def n_nonempty(self) -> int:
        return int((self.slot_sizes > 0).sum())
