"""
Tests for the repeated-bisection controller.
"""

import numpy as np
import pytest

from config import SplitConfig
from rbisect.bisecting import bisect
from rbisect.models import Dataset, SplitOutcome
from rbisect.registry import EXHAUSTED
from rbisect.split import SplitContractError

from conftest import CountingSplitter, always_zero_split, line_dataset, median_split


def _explode(vectors, weights, k, cfg):
    raise AssertionError("splitter must not be called")


# ------------------------------------------------------------------
# Base cases
# ------------------------------------------------------------------


@pytest.mark.parametrize("K", [0, 1])
def test_small_k_never_splits(K, line60):
    res = bisect(line60, K, splitter=_explode)
    np.testing.assert_array_equal(res.assignments, np.zeros(60, dtype=int))
    assert res.n_clusters == 1
    assert res.slot_weights.tolist() == [60]
    assert res.paths == [""] * 60
    assert res.stats["n_splits"] == 0


def test_zero_clusters_still_places_points_in_slot_zero():
    res = bisect(line_dataset(5), 0, splitter=median_split)
    assert res.assignments.tolist() == [0, 0, 0, 0, 0]
    assert res.slot_sizes.tolist() == [5]


@pytest.mark.parametrize("K", [0, 1, 5])
def test_empty_dataset_gives_empty_assignment(K):
    empty = Dataset.from_arrays(np.zeros((0, 3)), np.zeros(0, dtype=int))
    res = bisect(empty, K, splitter=_explode)
    assert res.assignments.size == 0
    assert res.paths == []


def test_four_points_two_clusters():
    X = np.array([[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]])
    ds = Dataset.from_arrays(X, [1, 1, 1, 1])

    res = bisect(ds, 2, SplitConfig(method="wkmeans", seed=3))

    assert res.n_clusters == 2
    assert sorted(res.slot_sizes.tolist()) == [2, 2]
    assert int(res.slot_weights.sum()) == 4
    assert len(np.unique(res.assignments)) == 2
    assert res.assignments[0] == res.assignments[1]
    assert res.assignments[2] == res.assignments[3]


# ------------------------------------------------------------------
# Full runs and invariants
# ------------------------------------------------------------------


@pytest.mark.parametrize("K", [2, 3, 5, 8])
def test_full_run_reaches_requested_count(K, line60):
    res = bisect(line60, K, splitter=median_split)
    assert res.stats["stop_reason"] == "done"
    assert res.n_clusters == K
    assert len(np.unique(res.assignments)) == K
    assert res.assignments.min() >= 0 and res.assignments.max() < K


def test_weight_conserved_after_every_split(blobs):
    res = bisect(blobs, 10, splitter=median_split)
    assert len(res.history) == res.stats["n_splits"]
    for rec in res.history:
        assert rec["total_weight"] == blobs.total_weight
    assert int(res.slot_weights.sum()) == blobs.total_weight


def test_membership_is_partition(blobs):
    res = bisect(blobs, 7, splitter=median_split)
    counts = np.bincount(res.assignments, minlength=res.n_clusters)
    np.testing.assert_array_equal(counts, res.slot_sizes)
    assert int(res.slot_sizes.sum()) == blobs.n
    for c in range(res.n_clusters):
        assert int(blobs.weights[res.assignments == c].sum()) == res.slot_weights[c]


def test_label_one_moves_to_new_slot(line60):
    res = bisect(line60, 3, splitter=median_split)
    # first split: x > 29.5 -> slot 1; slot 0 = [0..29], slot 1 = [30..59]
    first = res.history[0]
    assert (first["size0"], first["size1"]) == (30, 30)
    # both halves have the same spread, tie -> slot 0 is split; its upper half becomes slot 2
    second = res.history[1]
    assert second["split_slot"] == 0 and second["new_slot"] == 2
    np.testing.assert_array_equal(res.assignments[:15], 0)
    np.testing.assert_array_equal(res.assignments[15:30], 2)
    np.testing.assert_array_equal(res.assignments[30:], 1)


def test_submits_members_in_index_order(line60):
    seen = []

    def recording(vectors, weights, k, cfg):
        seen.append(np.asarray(vectors)[:, 0].copy())
        return median_split(vectors, weights, k, cfg)

    bisect(line60, 4, splitter=recording)
    for xs in seen:
        assert np.all(np.diff(xs) > 0)


def test_scores_taken_from_splitter():
    def fixed_scores(vectors, weights, k, cfg):
        out = median_split(vectors, weights, k, cfg)
        return SplitOutcome(labels=out.labels, scores=(1.5, 2.5))

    res = bisect(line_dataset(40), 2, splitter=fixed_scores)
    np.testing.assert_allclose(res.scores, [1.5, 2.5])


def test_deterministic_with_default_splitter(blobs):
    a = bisect(blobs, 6, SplitConfig(seed=5))
    b = bisect(blobs, 6, SplitConfig(seed=5))
    np.testing.assert_array_equal(a.assignments, b.assignments)
    assert a.paths == b.paths


@pytest.mark.parametrize("method", ["wkmeans", "sklearn", "farthest"])
def test_each_split_method_runs(method, blobs):
    res = bisect(blobs, 4, SplitConfig(method=method, seed=2))
    assert res.n_clusters == 4
    assert int(res.slot_weights.sum()) == blobs.total_weight


# ------------------------------------------------------------------
# Degenerate splits and early termination
# ------------------------------------------------------------------


def test_always_zero_splitter_stops_at_two_clusters(line60):
    spl = CountingSplitter(always_zero_split)
    res = bisect(line60, 3, splitter=spl)

    assert res.n_clusters == 2
    assert res.stats["n_degenerate"] == 1
    assert res.stats["stop_reason"] == "no_eligible"
    np.testing.assert_array_equal(res.assignments, np.zeros(60, dtype=int))
    assert np.all(res.scores == EXHAUSTED)
    assert spl.calls == [60]


def test_exhausted_slots_never_selected_again():
    calls = {"n": 0}

    def zero_on_second_call(vectors, weights, k, cfg):
        calls["n"] += 1
        if calls["n"] == 2:
            return always_zero_split(vectors, weights, k, cfg)
        return median_split(vectors, weights, k, cfg)

    res = bisect(line_dataset(120), 7, splitter=zero_on_second_call)

    bad = res.history[1]
    assert bad["degenerate"]
    exhausted = {bad["split_slot"], bad["new_slot"]}
    assert res.scores[bad["split_slot"]] == EXHAUSTED
    assert res.scores[bad["new_slot"]] == EXHAUSTED
    assert res.slot_sizes[bad["new_slot"]] == 0
    for rec in res.history[2:]:
        assert rec["split_slot"] not in exhausted


def test_more_clusters_than_points():
    ds = line_dataset(25)
    res = bisect(ds, 100, splitter=median_split)

    assert res.stats["stop_reason"] == "no_eligible"
    assert 2 <= res.n_clusters < 100
    assert np.all(res.slot_sizes <= 10)
    assert res.assignments.max() < res.n_clusters
    assert int(res.slot_weights.sum()) == ds.total_weight


def test_single_point_dataset():
    ds = Dataset.from_arrays([[1.0, 2.0]], [4])
    res = bisect(ds, 3, SplitConfig())
    assert res.n_clusters == 2
    assert res.assignments.tolist() == [0]
    assert res.stats["n_degenerate"] == 1


def test_min_split_size_is_configurable(line60):
    res = bisect(line60, 5, splitter=median_split, min_split_size=30)
    assert res.n_clusters == 2
    assert res.stats["stop_reason"] == "no_eligible"

    res = bisect(line60, 5, splitter=median_split, min_split_size=0)
    assert res.n_clusters == 5


def test_criterion_largest_weight_splits_heaviest():
    w = np.ones(60, dtype=int)
    w[40:] = 10  # upper half (slot 1) is heavier
    res = bisect(line_dataset(60, w), 3, splitter=median_split, criterion="largest_weight")
    assert res.history[1]["split_slot"] == 1


# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------


def test_negative_cluster_count_rejected(line60):
    with pytest.raises(ValueError):
        bisect(line60, -1, splitter=median_split)


def test_unknown_criterion_rejected(line60):
    with pytest.raises(ValueError, match="criterion"):
        bisect(line60, 3, splitter=median_split, criterion="smallest_everything")


def test_negative_min_split_size_rejected(line60):
    with pytest.raises(ValueError):
        bisect(line60, 3, splitter=median_split, min_split_size=-1)


@pytest.mark.parametrize(
    "n_weights, weights_fill",
    [(5, 1.0), (30, 1.0), (20, -1.0), (20, 0.5)],
)
def test_directly_built_bad_dataset_rejected_before_splitting(n_weights, weights_fill):
    counting = CountingSplitter(median_split)
    with pytest.raises(ValueError):
        bisect(Dataset(vectors=np.zeros((20, 2)), weights=np.full(n_weights, weights_fill)), 3, splitter=counting)
    assert counting.calls == []


def test_wrong_label_count_is_contract_violation(line60):
    def short(vectors, weights, k, cfg):
        return SplitOutcome(labels=np.zeros(len(vectors) - 1, dtype=int), scores=(0.0, 0.0))

    with pytest.raises(SplitContractError):
        bisect(line60, 2, splitter=short)


def test_label_outside_binary_is_contract_violation(line60):
    def three_way(vectors, weights, k, cfg):
        return SplitOutcome(labels=np.arange(len(vectors)) % 3, scores=(0.0, 0.0))

    with pytest.raises(SplitContractError):
        bisect(line60, 2, splitter=three_way)


def test_contract_violation_mid_run_aborts(line60):
    calls = {"n": 0}

    def breaks_later(vectors, weights, k, cfg):
        calls["n"] += 1
        if calls["n"] == 3:
            return SplitOutcome(labels=np.full(len(vectors), 7), scores=(0.0, 0.0))
        return median_split(vectors, weights, k, cfg)

    with pytest.raises(SplitContractError):
        bisect(line60, 6, splitter=breaks_later)


# ------------------------------------------------------------------
# Split paths
# ------------------------------------------------------------------


def test_paths_identify_final_slots(blobs):
    res = bisect(blobs, 6, splitter=median_split)

    first_labels = (blobs.vectors[:, 0] > np.median(blobs.vectors[:, 0])).astype(int)
    assert [int(p[0]) for p in res.paths] == first_labels.tolist()

    by_slot = {}
    for c, p in zip(res.assignments, res.paths):
        by_slot.setdefault(int(c), set()).add(p)
    assert all(len(ps) == 1 for ps in by_slot.values())
    leaf_paths = [next(iter(ps)) for ps in by_slot.values()]
    assert len(set(leaf_paths)) == len(leaf_paths)


def test_path_length_counts_splits_seen(line60):
    res = bisect(line60, 3, splitter=median_split)
    # slot 0 was split twice, slot 1 only once
    assert all(len(p) == 2 for p in res.paths[:30])
    assert all(p == "1" for p in res.paths[30:])
    assert res.paths[0] == "00" and res.paths[20] == "01"
