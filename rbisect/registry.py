# rbisect/registry.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

# Score of a slot whose split produced an empty side; it is never split again.
EXHAUSTED = float(np.finfo(np.float64).max)


@dataclass
class ClusterSlot:
    slot_id: int
    members: list[int] = field(default_factory=list)  # point indices, ascending
    weight: int = 0
    score: float = 0.0

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def exhausted(self) -> bool:
        return self.score == EXHAUSTED

    def add(self, idx: int, w: int) -> None:
        self.members.append(int(idx))
        self.weight += int(w)

    def clear(self) -> None:
        self.members = []
        self.weight = 0

    def is_eligible(self, min_split_size: int) -> bool:
        return self.size > min_split_size and not self.exhausted


class ClusterRegistry:
    """
    Bookkeeping for one bisection run. Slots are allocated in id order
    (slot k exists only once iteration k created it). Holds no policy.
    """

    def __init__(self, capacity: int):
        self.capacity = int(capacity)
        self._slots: list[ClusterSlot] = []

    def __len__(self) -> int:
        return len(self._slots)

    def allocate(self, slot_id: int) -> ClusterSlot:
        if slot_id != len(self._slots):
            raise RuntimeError(f"slot {slot_id} allocated out of order (next id is {len(self._slots)})")
        if slot_id >= self.capacity:
            raise RuntimeError(f"slot {slot_id} exceeds capacity {self.capacity}")
        slot = ClusterSlot(slot_id=slot_id)
        self._slots.append(slot)
        return slot

    def get(self, slot_id: int) -> ClusterSlot:
        return self._slots[slot_id]

    def set_score(self, slot_id: int, score: float) -> None:
        self._slots[slot_id].score = float(score)

    def exhaust(self, *slot_ids: int) -> None:
        for c in slot_ids:
            self._slots[c].score = EXHAUSTED

    def total_weight(self) -> int:
        return int(sum(s.weight for s in self._slots))

    def scores(self) -> np.ndarray:
        return np.array([s.score for s in self._slots], dtype=float)

    def weights(self) -> np.ndarray:
        return np.array([s.weight for s in self._slots], dtype=np.int64)

    def sizes(self) -> np.ndarray:
        return np.array([s.size for s in self._slots], dtype=np.int64)

    def check(self, n_points: int, total_weight: int) -> None:
        """Raise if membership is not a partition of range(n_points) or weight leaked."""
        seen = np.zeros(n_points, dtype=np.int64)
        for s in self._slots:
            if s.members:
                np.add.at(seen, np.asarray(s.members, dtype=int), 1)
        if n_points > 0 and not np.all(seen == 1):
            missing = int((seen == 0).sum())
            dup = int((seen > 1).sum())
            raise RuntimeError(f"Membership is not a partition: {missing} missing, {dup} duplicated points.")
        got = self.total_weight()
        if got != int(total_weight):
            raise RuntimeError(f"Weight not conserved: slots hold {got}, dataset has {total_weight}.")
