# rbisect/splitters/sklearn_kmeans.py
from __future__ import annotations

import numpy as np
from sklearn.cluster import KMeans

from config import SplitConfig
from rbisect.models import SplitOutcome
from rbisect.split import group_score, group_scores


def sklearn_kmeans_split(vectors: np.ndarray, weights: np.ndarray, k: int, cfg: SplitConfig) -> SplitOutcome:
    """
    Two-way split with sklearn's Lloyd k-means; point multiplicities go in as
    sample_weight.
    """
    if k != 2:
        raise ValueError(f"sklearn_kmeans_split only bisects (k=2), got k={k}")
    X = np.asarray(vectors, dtype=float)
    w = np.maximum(np.asarray(weights, dtype=float), 0.0)
    if X.shape[0] < 2:
        return SplitOutcome(labels=np.zeros(X.shape[0], dtype=int), scores=(group_score(X, w), 0.0))

    # sklearn rejects an all-zero sample_weight
    sample_weight = w if w.sum() > 0 else None

    km = KMeans(
        n_clusters=2,
        init="k-means++",
        n_init=1,
        max_iter=int(cfg.n_iter),
        tol=float(cfg.tol),
        random_state=int(cfg.seed),
        algorithm="lloyd",
    )
    labels = km.fit_predict(X, sample_weight=sample_weight).astype(int, copy=False)
    return SplitOutcome(labels=labels, scores=group_scores(X, w, labels))
