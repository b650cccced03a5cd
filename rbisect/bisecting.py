# rbisect/bisecting.py
from __future__ import annotations

from typing import Any, Union

import numpy as np

from config import SplitConfig
from rbisect.models import BisectResult, Dataset
from rbisect.paths import PathTracker
from rbisect.profiling import Profiler
from rbisect.registry import ClusterRegistry, ClusterSlot
from rbisect.selection import Comparator, get_criterion, select_next
from rbisect.split import Splitter, validate_outcome
from rbisect.splitters.factory import make_splitter


def _split_members(
    splitter: Splitter,
    dataset: Dataset,
    members: list[int],
    cfg: SplitConfig,
    prof: Profiler | None,
) -> tuple[np.ndarray, float, float]:
    idx = np.asarray(members, dtype=int)
    if prof:
        prof.tic("split")
    outcome = splitter(dataset.vectors[idx], dataset.weights[idx], 2, cfg)
    if prof:
        prof.toc("split")
        prof.inc("split_calls")
    return validate_outcome(outcome, idx.size)


def _record(k: int, parent: ClusterSlot, child: ClusterSlot, registry: ClusterRegistry, degenerate: bool) -> dict[str, Any]:
    return {
        "k": k,
        "split_slot": parent.slot_id,
        "new_slot": child.slot_id,
        "size0": parent.size,
        "size1": child.size,
        "weight0": parent.weight,
        "weight1": child.weight,
        "score0": parent.score,
        "score1": child.score,
        "degenerate": degenerate,
        "total_weight": registry.total_weight(),
    }


def _result(
    assignments: np.ndarray,
    registry: ClusterRegistry,
    tracker: PathTracker,
    history: list[dict[str, Any]],
    stats: dict[str, Any],
) -> BisectResult:
    return BisectResult(
        assignments=assignments,
        scores=registry.scores(),
        slot_weights=registry.weights(),
        slot_sizes=registry.sizes(),
        paths=tracker.paths(),
        history=history,
        stats=stats,
    )


def bisect(
    dataset: Dataset,
    num_clusters: int,
    cfg: SplitConfig = SplitConfig(),
    *,
    splitter: Splitter | None = None,
    min_split_size: int = 10,
    criterion: Union[str, Comparator] = "lowest_score",
    verbose: bool = False,
    prof: Profiler | None = None,
) -> BisectResult:
    """
    Repeated bisection of a weighted dataset into (at most) num_clusters slots.

    - num_clusters <= 1 puts every point in slot 0 without splitting.
    - Split the whole dataset in two (slots 0 and 1).
    - For k = 2..num_clusters-1: pick a slot with select_next(), split its members,
      keep label-0 points in place and move label-1 points to the new slot k.
    - A split leaving either side empty exhausts both slots (never split again).
    - Stops early when no slot is eligible; the result then has fewer slots.

    `cfg` is handed to the splitter untouched. Raises ValueError on bad arguments
    and SplitContractError when the splitter breaks its contract.
    """
    num_clusters = int(num_clusters)
    if num_clusters < 0:
        raise ValueError(f"num_clusters must be >= 0, got {num_clusters}")
    if min_split_size < 0:
        raise ValueError(f"min_split_size must be >= 0, got {min_split_size}")
    better = criterion if callable(criterion) else get_criterion(criterion)
    split_fn = splitter if splitter is not None else make_splitter(cfg)

    n = dataset.n
    w = dataset.weights
    total_weight = dataset.total_weight

    tracker = PathTracker(n)
    history: list[dict[str, Any]] = []
    stats: dict[str, Any] = {"n_splits": 0, "n_degenerate": 0, "stop_reason": "done"}

    if n == 0:
        stats["stop_reason"] = "empty"
        return _result(np.zeros(0, dtype=int), ClusterRegistry(0), tracker, history, stats)

    registry = ClusterRegistry(max(num_clusters, 1))
    assignments = np.zeros(n, dtype=int)

    # Base case: everything in slot 0
    if num_clusters <= 1:
        s0 = registry.allocate(0)
        for i in range(n):
            s0.add(i, w[i])
        return _result(assignments, registry, tracker, history, stats)

    # First bisection of the whole dataset
    s0 = registry.allocate(0)
    s1 = registry.allocate(1)
    labels, c0, c1 = _split_members(split_fn, dataset, list(range(n)), cfg, prof)
    stats["n_splits"] += 1

    tracker.start(labels)
    for i, lab in enumerate(labels):
        (s1 if lab else s0).add(i, w[i])
    assignments[:] = labels
    registry.set_score(0, c0)
    registry.set_score(1, c1)

    degenerate = s0.size == 0 or s1.size == 0
    if degenerate:
        registry.exhaust(0, 1)
        stats["n_degenerate"] += 1
    history.append(_record(1, s0, s1, registry, degenerate))

    if verbose:
        print(
            f"[bisect] split #1: into {s0.size:,d} and {s1.size:,d} points; "
            f"{s0.weight:,d} and {s1.weight:,d} weight  s0={c0:.2f}, s1={c1:.2f}"
        )

    for k in range(2, num_clusters):
        target = select_next(registry, k, better=better, min_split_size=min_split_size)
        if target is None:
            stats["stop_reason"] = "no_eligible"
            if verbose:
                print(f"[bisect] done at k={k}: no eligible slot")
            break

        parent = registry.get(target)
        if parent.size == 0:
            stats["stop_reason"] = "empty_target"
            if verbose:
                print(f"[bisect] done at k={k}: selected slot {target} is empty")
            break

        if verbose:
            print(
                f"[bisect] splitting slot {target} with {parent.size:,d} points, "
                f"{parent.weight:,d} weight, s={parent.score:f}"
            )

        prev = list(parent.members)
        labels, c0, c1 = _split_members(split_fn, dataset, prev, cfg, prof)
        stats["n_splits"] += 1

        child = registry.allocate(k)
        parent.clear()

        # label 0 keeps its slot id, label 1 moves to slot k
        for i, lab in zip(prev, labels):
            if lab == 0:
                parent.add(i, w[i])
            else:
                child.add(i, w[i])
                assignments[i] = k
        tracker.extend(prev, labels)

        registry.set_score(target, c0)
        registry.set_score(k, c1)

        degenerate = parent.size == 0 or child.size == 0
        if degenerate:
            registry.exhaust(target, k)
            stats["n_degenerate"] += 1
        history.append(_record(k, parent, child, registry, degenerate))

        if verbose:
            print(
                f"[bisect] split #{k}: into {parent.size:,d} and {child.size:,d} points; "
                f"{parent.weight:,d} and {child.weight:,d} weight  s0={c0:.2f}, s1={c1:.2f}"
                + ("  (degenerate)" if degenerate else "")
            )

    registry.check(n, total_weight)
    return _result(assignments, registry, tracker, history, stats)
