# rbisect/plot.py
from __future__ import annotations
import numpy as np
import matplotlib.pyplot as plt

from rbisect.helper import labels_to_clusters


def plot_assignments(
    X: np.ndarray,
    weights: np.ndarray,
    assignments: np.ndarray,
    title: str = "",
    out_path: str = "",
    show: bool = True,
):
    """
    Scatter of the first two coordinates, one colour per slot, marker area
    growing with the point weight. Slot centroids (weighted) drawn as 'x'.
    """
    K = int(assignments.max()) + 1 if assignments.size > 0 else 0
    xy = X[:, :2] if X.shape[1] >= 2 else np.column_stack([X[:, 0], np.zeros(X.shape[0])])
    w = np.asarray(weights, dtype=float)
    sizes = 4.0 + 10.0 * np.sqrt(w / max(float(w.max()), 1.0)) if w.size > 0 else 4.0

    plt.figure()
    ax = plt.gca()
    cmap = plt.get_cmap("tab20")
    for k, m in enumerate(labels_to_clusters(assignments, K)):
        if m.size == 0:
            continue
        ax.scatter(xy[m, 0], xy[m, 1], s=sizes[m], color=cmap(k % 20), alpha=0.6)
        wk = w[m]
        c = (xy[m] * wk[:, None]).sum(axis=0) / wk.sum() if wk.sum() > 0 else xy[m].mean(axis=0)
        ax.scatter([c[0]], [c[1]], s=25, c="black", marker="x", alpha=0.8)

    ax.set_aspect("equal", adjustable="box")
    plt.title(title or f"Bisection result (K={K})")
    plt.xlabel("x0")
    plt.ylabel("x1")
    plt.grid(True, alpha=0.2)
    if out_path:
        plt.savefig(out_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    else:
        plt.close()


def plot_sweep(rows: list[dict], out_path: str = "", show: bool = False):
    """Weighted SSE vs requested K, bisection vs flat weighted k-means, mean over seeds."""
    ks = sorted({int(r["k_requested"]) for r in rows})
    series = {"bisect": "bisect_wsse", "flat wkmeans": "flat_wsse"}

    plt.figure()
    for label, col in series.items():
        ys = []
        for k in ks:
            vals = [float(r[col]) for r in rows if int(r["k_requested"]) == k and r.get(col) is not None]
            ys.append(np.mean(vals) if vals else np.nan)
        plt.plot(ks, ys, marker="o", label=label)

    plt.xscale("log", base=2)
    plt.title("Weighted SSE vs K")
    plt.xlabel("K requested")
    plt.ylabel("weighted SSE")
    plt.legend(loc="best")
    plt.grid(True, alpha=0.2)
    if out_path:
        plt.savefig(out_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    else:
        plt.close()
