# config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple


# -----------------------------
# Grouped config blocks
# -----------------------------
@dataclass(frozen=True)
class SplitConfig:
    """Options owned by the two-way split collaborator (forwarded as-is by bisect())."""
    method: Literal["wkmeans", "sklearn", "farthest"] = "wkmeans"
    n_iter: int = 50
    tol: float = 1e-4
    seed: int = 1


@dataclass(frozen=True)
class BisectConfig:
    n_clusters: int = 16
    min_split_size: int = 10  # a slot needs MORE members than this to be split
    criterion: Literal["lowest_score", "highest_score", "largest_size", "largest_weight"] = "lowest_score"


@dataclass(frozen=True)
class DatagenConfig:
    n_points: int = 2000
    dim: int = 2
    box_half_width: float = 100.0

    n_hotspots: int = 8
    hotspot_sigma_min: float = 2.0
    hotspot_sigma_max: float = 12.0
    noise_frac: float = 0.10

    # integer multiplicities ~ round(lognormal), like corpus token counts
    freq_median: float = 3.0
    freq_logn_sigma: float = 1.0
    zero_weight_frac: float = 0.0


@dataclass(frozen=True)
class RunConfig:
    seed: int = 1
    enable_plots: bool = False
    verbose: bool = True
    enable_baseline: bool = True


@dataclass(frozen=True)
class SweepConfig:
    k_values: Tuple[int, ...] = (2, 4, 8, 16, 32)
    seeds: Tuple[int, ...] = (1, 2, 3)
    out_csv: str = "sweep.csv"
    plot_path: str = ""  # empty -> no plot


# -----------------------------
# Top-level scenario config
# -----------------------------
@dataclass(frozen=True)
class ScenarioConfig:
    run: RunConfig = RunConfig()
    split: SplitConfig = SplitConfig()
    bisect: BisectConfig = BisectConfig()
    datagen: DatagenConfig = DatagenConfig()
    sweep: SweepConfig = SweepConfig()

    @property
    def seed(self) -> int:
        return int(self.run.seed)
