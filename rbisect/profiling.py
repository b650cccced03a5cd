# rbisect/profiling.py
from __future__ import annotations
from dataclasses import dataclass, field
import time
from typing import Any, Dict


@dataclass
class Profiler:
    """Accumulated wall time per phase (t, seconds) and event counters (c)."""
    t: Dict[str, float] = field(default_factory=dict)
    c: Dict[str, int] = field(default_factory=dict)
    _start: Dict[str, float] = field(default_factory=dict)

    def tic(self, name: str) -> None:
        self._start[name] = time.perf_counter()

    def toc(self, name: str) -> None:
        dt = time.perf_counter() - self._start.pop(name, time.perf_counter())
        self.t[name] = self.t.get(name, 0.0) + dt

    def inc(self, name: str, k: int = 1) -> None:
        self.c[name] = self.c.get(name, 0) + k

    def as_record(self) -> dict[str, Any]:
        """Flat {time_<phase>_s, <counter>} mapping for sweep rows."""
        row: dict[str, Any] = {f"time_{k}_s": float(v) for k, v in self.t.items()}
        row.update({k: int(v) for k, v in self.c.items()})
        return row
