# rbisect/pipeline.py
from __future__ import annotations

from typing import Any

import numpy as np

from config import ScenarioConfig
from rbisect.bisecting import bisect
from rbisect.datagen import generate_dataset
from rbisect.helper import print_config, print_summary, summarize, weighted_sse
from rbisect.models import Dataset
from rbisect.plot import plot_assignments
from rbisect.profiling import Profiler
from rbisect.splitters.weighted_kmeans import weighted_kmeans


def run_flat_baseline(dataset: Dataset, K: int, cfg: ScenarioConfig) -> dict[str, Any]:
    """Baseline: one weighted k-means++ run with fixed K on the whole dataset."""
    K = int(min(max(K, 1), dataset.n))
    labels, centers = weighted_kmeans(
        X=dataset.vectors,
        K=K,
        sample_w=dataset.weights,
        n_iter=cfg.split.n_iter,
        tol=cfg.split.tol,
        seed=cfg.split.seed + 999,
    )
    return {
        "name": "WKMeans++ (flat)",
        "K": K,
        "K_nonempty": int(np.unique(labels).size),
        "labels": labels,
        "centers": centers,
        "wsse": weighted_sse(dataset.vectors, dataset.weights, labels),
    }


def run_scenario(cfg: ScenarioConfig, dataset: Dataset | None = None) -> dict[str, Any]:
    """
    Generate (or take) a weighted dataset, run repeated bisection, and
    optionally a flat weighted k-means baseline with the same effective K.
    Returns the keys consumed by sweep.flatten_run_record().
    """
    prof = Profiler()
    verbose = bool(cfg.run.verbose)

    if dataset is None:
        prof.tic("datagen")
        dataset = generate_dataset(cfg.datagen, seed=cfg.seed)
        prof.toc("datagen")

    if verbose:
        print(f"Dataset: {dataset.n} points, dim={dataset.dim}, total weight={dataset.total_weight}")
        print_config(cfg)

    prof.tic("bisect")
    result = bisect(
        dataset,
        cfg.bisect.n_clusters,
        cfg.split,
        min_split_size=cfg.bisect.min_split_size,
        criterion=cfg.bisect.criterion,
        verbose=verbose,
        prof=prof,
    )
    prof.toc("bisect")

    main_summary = summarize(dataset, result)
    if verbose:
        print_summary(f"Repeated bisection (requested K={cfg.bisect.n_clusters})", main_summary)

    baseline = None
    if cfg.run.enable_baseline and dataset.n > 0 and result.n_clusters > 0:
        prof.tic("baseline")
        baseline = run_flat_baseline(dataset, result.n_nonempty, cfg)
        prof.toc("baseline")
        if verbose:
            print(f"\n=== Baseline {baseline['name']} (K={baseline['K']}) ===")
            print(f"Weighted SSE: {baseline['wsse']:.3f} (bisection: {main_summary['wsse']:.3f})")

    if cfg.run.enable_plots and dataset.n > 0:
        plot_assignments(
            dataset.vectors, dataset.weights, result.assignments,
            title=f"Repeated bisection (K={result.n_clusters})",
        )
        if baseline is not None:
            plot_assignments(
                dataset.vectors, dataset.weights, baseline["labels"],
                title=f"Flat weighted k-means (K={baseline['K']})",
            )

    return {
        "seed": cfg.seed,
        "n_points": dataset.n,
        "dim": dataset.dim,
        "total_weight": dataset.total_weight,
        "k_requested": cfg.bisect.n_clusters,
        "criterion": cfg.bisect.criterion,
        "split_method": cfg.split.method,
        "result": result,
        "main": main_summary,
        "baseline": baseline,
        "prof": prof,
    }
