# rbisect/sweep.py
from __future__ import annotations

from dataclasses import replace
from typing import Any

from config import ScenarioConfig
from rbisect.datagen import generate_dataset
from rbisect.helper import flatten_summary, write_csv
from rbisect.pipeline import run_scenario
from rbisect.plot import plot_sweep


def flatten_run_record(rec: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {
        "seed": rec["seed"],
        "n_points": rec["n_points"],
        "dim": rec["dim"],
        "total_weight": rec["total_weight"],
        "k_requested": rec["k_requested"],
        "criterion": rec["criterion"],
        "split_method": rec["split_method"],
    }
    row |= flatten_summary("bisect", rec["main"])
    row |= rec["prof"].as_record()

    base = rec["baseline"]
    row["flat_K"] = base["K"] if base else None
    row["flat_wsse"] = base["wsse"] if base else None
    return row


def run_sweep(cfg: ScenarioConfig) -> list[dict[str, Any]]:
    """
    One scenario per (seed, K) in cfg.sweep. The dataset depends on the seed
    only, so all K values of a seed cluster the same points.
    """
    rows: list[dict[str, Any]] = []
    for seed in cfg.sweep.seeds:
        dataset = generate_dataset(cfg.datagen, seed=int(seed))
        for K in cfg.sweep.k_values:
            run_cfg = replace(
                cfg,
                run=replace(cfg.run, seed=int(seed), verbose=False, enable_plots=False),
                bisect=replace(cfg.bisect, n_clusters=int(K)),
            )
            rec = run_scenario(run_cfg, dataset=dataset)
            rows.append(flatten_run_record(rec))
            if cfg.run.verbose:
                m = rec["main"]
                print(f"[sweep] seed={seed} K={K} -> K_eff={m['K']} wsse={m['wsse']:.3f}")

    if cfg.sweep.out_csv:
        write_csv(cfg.sweep.out_csv, rows)
    if cfg.sweep.plot_path:
        plot_sweep(rows, out_path=cfg.sweep.plot_path, show=False)
    return rows
