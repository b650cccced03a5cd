# rbisect/selection.py
from __future__ import annotations

from typing import Callable, Optional

from rbisect.registry import ClusterRegistry, ClusterSlot

# better(a, b) -> True iff a should be split before b (strict)
Comparator = Callable[[ClusterSlot, ClusterSlot], bool]


def lowest_score(a: ClusterSlot, b: ClusterSlot) -> bool:
    # NOTE: lower score wins. Classic bisecting k-means splits the highest-error
    # cluster instead; use highest_score for that.
    return a.score < b.score


def highest_score(a: ClusterSlot, b: ClusterSlot) -> bool:
    return a.score > b.score


def largest_size(a: ClusterSlot, b: ClusterSlot) -> bool:
    return a.size > b.size


def largest_weight(a: ClusterSlot, b: ClusterSlot) -> bool:
    return a.weight > b.weight


CRITERIA: dict[str, Comparator] = {
    "lowest_score": lowest_score,
    "highest_score": highest_score,
    "largest_size": largest_size,
    "largest_weight": largest_weight,
}


def get_criterion(name: str) -> Comparator:
    try:
        return CRITERIA[name]
    except KeyError:
        raise ValueError(f"Unknown selection criterion {name!r}; expected one of {sorted(CRITERIA)}") from None


def select_next(
    registry: ClusterRegistry,
    k: int,
    *,
    better: Comparator = lowest_score,
    min_split_size: int = 10,
) -> Optional[int]:
    """
    Scan slots 0..k-1 and return the id of the best eligible slot, or None.
    Only a strictly better slot replaces the current pick, so exact ties go to
    the lowest id.
    """
    best: Optional[ClusterSlot] = None
    for c in range(min(k, len(registry))):
        slot = registry.get(c)
        if not slot.is_eligible(min_split_size):
            continue
        if best is None or better(slot, best):
            best = slot
    return None if best is None else best.slot_id
