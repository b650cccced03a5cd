# rbisect/splitters/factory.py
from __future__ import annotations

from config import SplitConfig
from rbisect.split import Splitter, split_farthest
from rbisect.splitters.sklearn_kmeans import sklearn_kmeans_split
from rbisect.splitters.weighted_kmeans import weighted_kmeans_split

SPLITTERS: dict[str, Splitter] = {
    "wkmeans": weighted_kmeans_split,
    "sklearn": sklearn_kmeans_split,
    "farthest": split_farthest,
}


def make_splitter(cfg: SplitConfig) -> Splitter:
    if cfg.method not in SPLITTERS:
        raise ValueError(f"Unknown split method {cfg.method!r}; expected one of {sorted(SPLITTERS)}")
    return SPLITTERS[cfg.method]
