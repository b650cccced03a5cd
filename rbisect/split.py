# rbisect/split.py
from __future__ import annotations

from typing import Callable

import numpy as np

from config import SplitConfig
from rbisect.models import SplitOutcome

# splitter(vectors (m,D), weights (m,), k, cfg) -> SplitOutcome
Splitter = Callable[[np.ndarray, np.ndarray, int, SplitConfig], SplitOutcome]


class SplitContractError(RuntimeError):
    """The split collaborator returned something bisect() cannot use."""


def validate_outcome(outcome: SplitOutcome, n_submitted: int) -> tuple[np.ndarray, float, float]:
    """
    Check a collaborator response and return (labels as int array, score0, score1).
    Raises SplitContractError on wrong label count, labels outside {0,1}, or bad scores.
    """
    labels = np.asarray(outcome.labels)
    if labels.ndim != 1 or labels.shape[0] != n_submitted:
        raise SplitContractError(
            f"Splitter returned {labels.size} labels for {n_submitted} submitted vectors."
        )
    if labels.size > 0 and not np.all((labels == 0) | (labels == 1)):
        bad = sorted(set(np.unique(labels).tolist()) - {0, 1})
        raise SplitContractError(f"Splitter returned labels outside {{0, 1}}: {bad[:5]}")

    scores = tuple(outcome.scores)
    if len(scores) != 2:
        raise SplitContractError(f"Splitter must return exactly 2 scores, got {len(scores)}.")
    try:
        s0, s1 = float(scores[0]), float(scores[1])
    except (TypeError, ValueError) as e:
        raise SplitContractError(f"Splitter scores are not real numbers: {scores!r}") from e
    if np.isnan(s0) or np.isnan(s1):
        raise SplitContractError("Splitter returned NaN score.")

    return labels.astype(int), s0, s1


def group_score(X: np.ndarray, w: np.ndarray) -> float:
    """
    Weighted mean squared distance to the weighted centroid.
    Zero total weight -> unweighted mean; empty group -> 0.0.
    """
    if X.shape[0] == 0:
        return 0.0
    w = np.maximum(np.asarray(w, dtype=float), 0.0)
    sw = float(w.sum())
    if sw <= 0:
        c = X.mean(axis=0)
        return float(np.mean(np.sum((X - c) ** 2, axis=1)))
    c = (X * w[:, None]).sum(axis=0) / sw
    d2 = np.sum((X - c) ** 2, axis=1)
    return float((w * d2).sum() / sw)


def group_scores(X: np.ndarray, w: np.ndarray, labels: np.ndarray) -> tuple[float, float]:
    m0 = labels == 0
    return group_score(X[m0], w[m0]), group_score(X[~m0], w[~m0])


def split_farthest(vectors: np.ndarray, weights: np.ndarray, k: int, cfg: SplitConfig) -> SplitOutcome:
    """
    Fast bisection:
    pick a point -> farthest A -> farthest B from A, then split by proximity to A/B.
    """
    if k != 2:
        raise ValueError(f"split_farthest only bisects (k=2), got k={k}")
    X = np.asarray(vectors, dtype=float)
    w = np.asarray(weights)
    m = X.shape[0]
    if m < 2:
        return SplitOutcome(labels=np.zeros(m, dtype=int), scores=(group_score(X, w), 0.0))

    rng = np.random.default_rng(cfg.seed)
    i0 = int(rng.integers(0, m))
    a = int(np.argmax(np.linalg.norm(X - X[i0], axis=1)))
    b = int(np.argmax(np.linalg.norm(X - X[a], axis=1)))

    dA = np.linalg.norm(X - X[a][None, :], axis=1)
    dB = np.linalg.norm(X - X[b][None, :], axis=1)
    labels = (dA > dB).astype(int)

    # all points identical -> proximity cannot separate them; halve instead
    if labels.sum() == 0 or labels.sum() == m:
        labels = np.zeros(m, dtype=int)
        labels[m // 2:] = 1

    return SplitOutcome(labels=labels, scores=group_scores(X, w, labels))
