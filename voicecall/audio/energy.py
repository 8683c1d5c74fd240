"""Rolling energy history with incrementally maintained order statistics."""

from __future__ import annotations

import bisect
from collections import deque


class EnergyProfile:
    """Bounded window of per-chunk RMS energies.

    Arrival order lives in a deque for eviction; a parallel sorted list is kept
    up to date with bisect so percentiles never need a full sort.
    """

    def __init__(self, *, capacity: int = 50) -> None:
        self.capacity = max(1, int(capacity))
        self._window: deque[float] = deque()
        self._sorted: list[float] = []

    def __len__(self) -> int:
        return len(self._window)

    def add(self, energy: float) -> None:
        value = float(energy)
        if len(self._window) >= self.capacity:
            oldest = self._window.popleft()
            idx = bisect.bisect_left(self._sorted, oldest)
            del self._sorted[idx]
        self._window.append(value)
        bisect.insort(self._sorted, value)

    def percentile(self, fraction: float) -> float:
        if not self._sorted:
            return 0.0
        fraction = min(1.0, max(0.0, float(fraction)))
        idx = min(len(self._sorted) - 1, int(len(self._sorted) * fraction))
        return self._sorted[idx]

    def median(self) -> float:
        return self.percentile(0.5)

    def values(self) -> list[float]:
        return list(self._window)

    def clear(self) -> None:
        self._window.clear()
        self._sorted.clear()


__all__ = ["EnergyProfile"]
