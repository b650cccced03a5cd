from __future__ import annotations
from rbisect.models import BisectResult, Dataset
from rbisect.registry import EXHAUSTED
import numpy as np
import csv
from dataclasses import asdict, is_dataclass
from typing import Any, Mapping, Sequence


def _fmt_value(v: Any) -> str:
    if isinstance(v, bool):
        return str(v)
    if isinstance(v, float):
        return f"{v:.6g}"
    if isinstance(v, int):
        return str(v)
    if isinstance(v, str):
        return f'"{v}"'
    if isinstance(v, (tuple, list)):
        return "(" + ", ".join(_fmt_value(x) for x in v) + ")"
    return str(v)


def _flatten_dict(d: Mapping[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    """Flatten nested dicts into [('a.b.c', value), ...]."""
    items: list[tuple[str, Any]] = []
    for k in sorted(d.keys()):
        v = d[k]
        full = f"{prefix}.{k}" if prefix else k
        if isinstance(v, Mapping):
            items.extend(_flatten_dict(v, full))
        else:
            items.append((full, v))
    return items


def _group_by_topkey(flat: Sequence[tuple[str, Any]]) -> dict[str, list[tuple[str, Any]]]:
    groups: dict[str, list[tuple[str, Any]]] = {}
    for path, v in flat:
        top = path.split(".", 1)[0]
        rest = path.split(".", 1)[1] if "." in path else ""
        groups.setdefault(top, []).append((rest, v))
    return groups


def print_config(cfg: Any) -> None:
    """Pretty-print ScenarioConfig (or any nested dataclass) with one section per block."""
    if not is_dataclass(cfg):
        raise TypeError("print_config expects a dataclass instance (e.g., ScenarioConfig).")

    groups = _group_by_topkey(_flatten_dict(asdict(cfg)))

    preferred_order = ["run", "datagen", "split", "bisect", "sweep"]
    section_names = [s for s in preferred_order if s in groups]
    section_names += [s for s in sorted(groups.keys()) if s not in section_names]

    print("\n" + "=" * 72)
    print("SCENARIO CONFIG")
    print("=" * 72)

    for sec in section_names:
        entries = groups[sec]
        print(f"\n[{sec}]")
        pad = max([len(k) for (k, _v) in entries] + [1])
        for k, v in sorted(entries, key=lambda x: x[0]):
            print(f"  {k or sec:<{pad}} : {_fmt_value(v)}")

    print("\n" + "=" * 72 + "\n")


# ----------------------------
# Labels -> ragged membership
# ----------------------------
def labels_to_clusters(labels: np.ndarray, K: int) -> list[np.ndarray]:
    """Point indices of each slot 0..K-1 (empty arrays for unused slots)."""
    clusters = []
    for k in range(K):
        clusters.append(np.where(labels == k)[0].astype(int))
    return clusters


def weighted_sse(X: np.ndarray, w: np.ndarray, labels: np.ndarray) -> float:
    """Sum over clusters of w_i * ||x_i - weighted centroid||^2."""
    if X.shape[0] == 0:
        return 0.0
    wf = np.maximum(np.asarray(w, dtype=float), 0.0)
    total = 0.0
    for idx in labels_to_clusters(labels, int(labels.max()) + 1):
        if idx.size == 0:
            continue
        Xk = X[idx]
        wk = wf[idx]
        sw = wk.sum()
        c = (Xk * wk[:, None]).sum(axis=0) / sw if sw > 0 else Xk.mean(axis=0)
        total += float((wk * np.sum((Xk - c) ** 2, axis=1)).sum())
    return total


def summarize(dataset: Dataset, result: BisectResult) -> dict:
    """KPIs of one bisection run. Sanity-checks weight conservation on the way."""
    sizes = result.slot_sizes
    weights = result.slot_weights
    if int(weights.sum()) != dataset.total_weight and result.assignments.size > 0:
        raise ValueError(f"Mismatch: slots hold weight {int(weights.sum())}, dataset has {dataset.total_weight}")

    nonempty = sizes > 0
    live_scores = result.scores[result.scores != EXHAUSTED]

    return {
        "K": result.n_clusters,
        "K_nonempty": int(nonempty.sum()),
        "n_splits": int(result.stats.get("n_splits", 0)),
        "n_degenerate": int(result.stats.get("n_degenerate", 0)),
        "stop_reason": result.stats.get("stop_reason", ""),
        "size_min": int(sizes[nonempty].min()) if nonempty.any() else 0,
        "size_max": int(sizes.max()) if sizes.size > 0 else 0,
        "weight_max": int(weights.max()) if weights.size > 0 else 0,
        "score_mean": float(np.mean(live_scores)) if live_scores.size > 0 else 0.0,
        "max_depth": max((len(p) for p in result.paths), default=0),
        "wsse": weighted_sse(dataset.vectors, dataset.weights, result.assignments)
        if result.assignments.size > 0 else 0.0,
    }


def print_summary(title: str, s: dict):
    print(f"\n=== {title} ===")
    print(f"K: {s['K']} allocated, {s['K_nonempty']} non-empty")
    print(f"Splits: {s['n_splits']} ({s['n_degenerate']} degenerate), stop: {s['stop_reason']}")
    print(f"Slot size: min={s['size_min']}, max={s['size_max']}; heaviest slot weight={s['weight_max']}")
    print(f"Score mean (live slots): {s['score_mean']:.3f}, max path depth: {s['max_depth']}")
    print(f"Weighted SSE: {s['wsse']:.3f}")


# ----------------------------
# Helpers for sweep output
# ----------------------------
def flatten_summary(prefix: str, s: dict[str, Any]) -> dict[str, Any]:
    return {f"{prefix}_{k}": v for k, v in s.items()}


def write_csv(path: str, rows: list[dict[str, Any]]):
    if not rows:
        return
    fieldnames = sorted({k for r in rows for k in r})
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        for r in rows:
            w.writerow(r)
