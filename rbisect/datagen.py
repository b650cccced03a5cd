# rbisect/datagen.py
from __future__ import annotations

import numpy as np

from config import DatagenConfig
from rbisect.models import Dataset


def _clip01(x: float) -> float:
    return float(min(max(x, 0.0), 1.0))


def _sample_uniform_in_box(rng: np.random.Generator, half_width: float, n: int, dim: int) -> np.ndarray:
    return rng.uniform(-half_width, half_width, size=(n, dim))


def sample_frequencies(rng: np.random.Generator, cfg: DatagenConfig, n: int) -> np.ndarray:
    """
    Integer multiplicities: round(lognormal) clipped at 1, then a
    zero_weight_frac share of points set to 0.
    """
    mu = np.log(max(float(cfg.freq_median), 1e-9))
    freq = np.rint(rng.lognormal(mean=mu, sigma=float(cfg.freq_logn_sigma), size=n))
    freq = np.maximum(freq, 1).astype(np.int64)

    n_zero = int(round(n * _clip01(float(cfg.zero_weight_frac))))
    if n_zero > 0:
        freq[rng.choice(n, size=n_zero, replace=False)] = 0
    return freq


def generate_dataset(cfg: DatagenConfig, seed: int = 1) -> Dataset:
    """
    Gaussian hotspots + uniform noise inside [-box_half_width, box_half_width]^dim,
    each point with an integer frequency from sample_frequencies().
    """
    rng = np.random.default_rng(seed)
    N = int(cfg.n_points)
    D = int(cfg.dim)
    if N < 0 or D < 1:
        raise ValueError(f"Need n_points >= 0 and dim >= 1, got n_points={N}, dim={D}")
    hw = float(cfg.box_half_width)

    freq = sample_frequencies(rng, cfg, N)

    noise_frac = _clip01(float(cfg.noise_frac))
    n_noise = int(round(N * noise_frac))
    n_hot = N - n_noise

    n_hotspots = max(int(cfg.n_hotspots), 1)
    centers = _sample_uniform_in_box(rng, 0.8 * hw, n_hotspots, D)

    smin = float(cfg.hotspot_sigma_min)
    smax = float(cfg.hotspot_sigma_max)
    if smax < smin:
        smin, smax = smax, smin
    sigmas = rng.uniform(smin, smax, size=n_hotspots)

    # Hotspot mixture weights
    w_hotspots = rng.dirichlet(np.ones(n_hotspots, dtype=float))
    hotspot_ids = rng.choice(np.arange(n_hotspots), size=n_hot, p=w_hotspots)

    eps = rng.standard_normal((n_hot, D))
    X_hot = np.clip(centers[hotspot_ids] + eps * sigmas[hotspot_ids][:, None], -hw, hw)

    if n_noise > 0:
        X = np.vstack([X_hot, _sample_uniform_in_box(rng, hw, n_noise, D)])
    else:
        X = X_hot

    return Dataset.from_arrays(X.reshape(N, D), freq)
