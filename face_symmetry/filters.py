from collections import deque
from typing import Deque, Dict, Mapping, Optional

import numpy as np

from .config import BLEND_NEW_WEIGHT, WINDOW_CAPACITY, WINDOW_STRIDE


def blend_value(x: float, x_prev: Optional[float], weight: float = BLEND_NEW_WEIGHT) -> float:
    if x_prev is None:
        return x
    return weight * x + (1.0 - weight) * x_prev


def blend_mapping(
    new: Mapping[str, Optional[float]],
    previous: Optional[Mapping[str, Optional[float]]],
    weight: float = BLEND_NEW_WEIGHT,
) -> Dict[str, Optional[float]]:
    """Blend each key of ``new`` with the same key of ``previous``.

    Keys absent (or ``None``) on either side pass the new value through.
    """
    out = {}
    for key, value in new.items():
        if value is None:
            out[key] = None
            continue
        prev = previous.get(key) if previous is not None else None
        out[key] = blend_value(value, prev, weight)
    return out


class ExponentialBlend:
    """One-pole low-pass filter over a scalar stream."""

    def __init__(self, weight: float = BLEND_NEW_WEIGHT):
        self.weight = weight
        self.x_prev: Optional[float] = None

    def __call__(self, x: float) -> float:
        x_hat = blend_value(x, self.x_prev, self.weight)
        self.x_prev = x_hat
        return x_hat

    def reset(self) -> None:
        self.x_prev = None


class FrameWindow:
    """Bounded buffer of flattened, aligned landmark frames."""

    def __init__(self, capacity: int = WINDOW_CAPACITY, stride: int = WINDOW_STRIDE):
        self.capacity = capacity
        self.stride = stride
        self.frames: Deque[np.ndarray] = deque(maxlen=capacity)
        self.frames_seen = 0

    def __call__(self, flat: np.ndarray) -> bool:
        """Push one frame; True when this frame lands on a recompute tick."""
        flat = np.asarray(flat, dtype=np.float64).reshape(-1)
        if self.frames and self.frames[0].shape != flat.shape:
            # Landmark count changed (different model or refine mode): restart.
            self.frames.clear()
        self.frames.append(flat)
        self.frames_seen += 1
        return self.frames_seen % self.stride == 0

    def __len__(self) -> int:
        return len(self.frames)

    def mean(self) -> Optional[np.ndarray]:
        if not self.frames:
            return None
        return np.mean(np.stack(list(self.frames)), axis=0)

    def reset(self) -> None:
        self.frames.clear()
        self.frames_seen = 0
