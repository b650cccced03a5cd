# rbisect/splitters/weighted_kmeans.py
from __future__ import annotations
import numpy as np

from config import SplitConfig
from rbisect.models import SplitOutcome
from rbisect.split import group_score, group_scores


def _sq_dists(X: np.ndarray, C: np.ndarray) -> np.ndarray:
    """(N,K) squared distances between rows of X and rows of C."""
    return np.sum((X[:, None, :] - C[None, :, :]) ** 2, axis=2)


def _weighted_choice(rng: np.random.Generator, probs: np.ndarray) -> int:
    s = probs.sum()
    if s <= 0:
        return int(rng.integers(0, len(probs)))
    return int(rng.choice(len(probs), p=probs / s))


def weighted_kmeans_pp_init(X: np.ndarray, K: int, w: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    k-means++ seeding where a point of multiplicity w_i counts w_i times:
    first center ~ w, next ones ~ w * D^2 to the closest chosen center.
    All-zero weights fall back to uniform picks.
    """
    centers = np.empty((K, X.shape[1]), dtype=float)
    centers[0] = X[_weighted_choice(rng, w)]
    d2 = _sq_dists(X, centers[:1])[:, 0]
    for k in range(1, K):
        centers[k] = X[_weighted_choice(rng, w * d2)]
        d2 = np.minimum(d2, _sq_dists(X, centers[k:k + 1])[:, 0])
    return centers


def _weighted_centroids(X: np.ndarray, w: np.ndarray, labels: np.ndarray, prev: np.ndarray) -> np.ndarray:
    K = prev.shape[0]
    onehot = np.zeros((X.shape[0], K), dtype=float)
    onehot[np.arange(X.shape[0]), labels] = w
    mass = onehot.sum(axis=0)
    counts = np.bincount(labels, minlength=K)

    centers = prev.copy()  # a cluster that lost all its points keeps its center
    heavy = mass > 0
    centers[heavy] = (onehot.T @ X)[heavy] / mass[heavy, None]
    for k in np.flatnonzero(~heavy & (counts > 0)):
        centers[k] = X[labels == k].mean(axis=0)
    return centers


def weighted_kmeans(
    X: np.ndarray,
    K: int,
    sample_w: np.ndarray,
    n_iter: int = 50,
    tol: float = 1e-4,
    seed: int = 1
) -> tuple[np.ndarray, np.ndarray]:
    """
    Lloyd iterations on weighted points (weights are multiplicities).
    Stops when labels repeat or the relative center shift drops below tol.
    Returns labels (N,) and centers (K,D).
    """
    X = np.asarray(X, dtype=float)
    w = np.maximum(np.asarray(sample_w, dtype=float), 0.0)
    rng = np.random.default_rng(seed)

    centers = weighted_kmeans_pp_init(X, K, w, rng)
    labels = np.argmin(_sq_dists(X, centers), axis=1)

    for _ in range(n_iter):
        new_centers = _weighted_centroids(X, w, labels, centers)
        shift = np.linalg.norm(new_centers - centers) / (np.linalg.norm(centers) + 1e-12)
        centers = new_centers
        labels, prev = np.argmin(_sq_dists(X, centers), axis=1), labels
        if shift < tol or np.array_equal(labels, prev):
            break

    return labels, centers


def weighted_kmeans_split(vectors: np.ndarray, weights: np.ndarray, k: int, cfg: SplitConfig) -> SplitOutcome:
    """Default bisection: weighted 2-means, scored per side by weighted mean squared distance."""
    if k != 2:
        raise ValueError(f"weighted_kmeans_split only bisects (k=2), got k={k}")
    X = np.asarray(vectors, dtype=float)
    w = np.asarray(weights)
    if X.shape[0] < 2:
        return SplitOutcome(labels=np.zeros(X.shape[0], dtype=int), scores=(group_score(X, w), 0.0))

    labels, _centers = weighted_kmeans(X, 2, w, n_iter=cfg.n_iter, tol=cfg.tol, seed=cfg.seed)
    return SplitOutcome(labels=labels, scores=group_scores(X, w, labels))
