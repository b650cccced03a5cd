"""
Shared fixtures: small weighted datasets and deterministic stand-in splitters.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from rbisect.models import Dataset, SplitOutcome
from rbisect.split import group_scores


def median_split(vectors, weights, k, cfg):
    """Deterministic bisection: points above the median of coordinate 0 get label 1."""
    X = np.asarray(vectors, dtype=float)
    labels = (X[:, 0] > np.median(X[:, 0])).astype(int)
    return SplitOutcome(labels=labels, scores=group_scores(X, np.asarray(weights), labels))


def always_zero_split(vectors, weights, k, cfg):
    return SplitOutcome(labels=np.zeros(len(vectors), dtype=int), scores=(0.0, 0.0))


class CountingSplitter:
    """Wraps a splitter and records the size of every submitted batch."""

    def __init__(self, inner):
        self.inner = inner
        self.calls: list[int] = []

    def __call__(self, vectors, weights, k, cfg):
        self.calls.append(len(vectors))
        return self.inner(vectors, weights, k, cfg)


def line_dataset(n: int, weights=None) -> Dataset:
    """n points on the x axis at 0, 1, ..., n-1 (distinct first coordinates)."""
    X = np.column_stack([np.arange(n, dtype=float), np.zeros(n)])
    return Dataset.from_arrays(X, weights)


@pytest.fixture
def blobs():
    """Four well separated 2-D blobs of 40 points, integer weights 1..5."""
    rng = np.random.default_rng(7)
    centers = np.array([[0.0, 0.0], [50.0, 0.0], [0.0, 50.0], [50.0, 50.0]])
    X = np.vstack([c + rng.standard_normal((40, 2)) for c in centers])
    w = rng.integers(1, 6, size=X.shape[0])
    return Dataset.from_arrays(X, w)


@pytest.fixture
def line60():
    return line_dataset(60)
