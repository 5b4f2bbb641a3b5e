import csv
from collections import deque
from typing import Deque, List, Optional, Tuple

from .config import SERIES_MAX_POINTS, SERIES_SAMPLE_INTERVAL


class ScoreSeries:
    """Global score over time for a recorded video, exportable as CSV."""

    def __init__(self, interval: float = SERIES_SAMPLE_INTERVAL, max_points: int = SERIES_MAX_POINTS):
        self.interval = interval
        self.points: Deque[Tuple[float, float]] = deque(maxlen=max_points)
        self.t0: Optional[float] = None

    def add(self, timestamp: float, score: Optional[float]) -> bool:
        """Record ``score`` at absolute ``timestamp`` (seconds). Returns True if kept."""
        if score is None:
            return False
        if self.t0 is None:
            self.t0 = timestamp
        t = timestamp - self.t0
        if self.points and t - self.points[-1][0] < self.interval:
            return False
        self.points.append((t, float(score)))
        return True

    def __len__(self) -> int:
        return len(self.points)

    def values(self) -> List[float]:
        return [s for _, s in self.points]

    def clear(self) -> None:
        self.points.clear()
        self.t0 = None

    def to_csv(self, target) -> None:
        """Write ``time_sec,score`` rows to a path or an open text file."""
        if hasattr(target, "write"):
            self._write(target)
            return
        with open(target, "w", newline="", encoding="utf-8") as f:
            self._write(f)

    def _write(self, f) -> None:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(["time_sec", "score"])
        for t, score in self.points:
            writer.writerow([f"{t:.2f}", f"{score:g}"])
