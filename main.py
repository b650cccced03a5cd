# main.py
from __future__ import annotations

import sys

from config import ScenarioConfig
from rbisect.pipeline import run_scenario
from rbisect.sweep import run_sweep


def main():
    cfg = ScenarioConfig()

    # ------------------------------------------
    # 1) Single scenario: bisection + flat baseline
    # ------------------------------------------
    rec = run_scenario(cfg)

    res = rec["result"]
    print(f"\nEffective clusters: {res.n_clusters} (requested {cfg.bisect.n_clusters})")
    print(f"Example split paths: {res.paths[:5]}")

    # ------------------------------------------
    # 2) Optional sweep over K and seeds -> CSV
    # ------------------------------------------
    if "--sweep" in sys.argv[1:]:
        rows = run_sweep(cfg)
        print(f"\nSweep: {len(rows)} runs written to {cfg.sweep.out_csv}")


if __name__ == "__main__":
    main()
