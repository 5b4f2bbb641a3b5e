from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .config import (
    MIRROR_DISTANCE_GAIN,
    MIRROR_ZONE_WEIGHTS,
    ROLL_TOLERANCE_DEG,
    SCORE_DECIMALS,
    WINDOW_CAPACITY,
    WINDOW_STRIDE,
)
from .filters import FrameWindow
from .landmarks import DEFAULT_SCHEME, PointScheme, missing_features, to_points
from .normalization import align_frame, measure_roll
from .scoring import NO_SCORE, Quality, Scorer, Scores, clamp_score


def mirrored_pair_distance(pts: np.ndarray, pairs: Sequence[Tuple[int, int]]) -> float:
    """Mean distance between each left point and its right partner reflected
    across the vertical axis (x -> -x) of an eye-centered frame."""
    if not pairs:
        return 0.0
    ds = []
    for il, ir in pairs:
        left = pts[il] if il < len(pts) else np.zeros(2)
        right = pts[ir] if ir < len(pts) else np.zeros(2)
        ds.append(float(np.hypot(left[0] + right[0], left[1] - right[1])))
    return float(np.mean(ds))


def window_scores(avg_flat: np.ndarray, scheme: PointScheme = DEFAULT_SCHEME,
                  gain: float = MIRROR_DISTANCE_GAIN) -> Dict[str, float]:
    pts = np.asarray(avg_flat, dtype=np.float64).reshape(-1, 2)
    zones = {}
    for zone, pairs in scheme.mirror_pairs.items():
        asym = min(100.0, mirrored_pair_distance(pts, pairs) * gain)
        zones[zone] = clamp_score(100.0 - asym)
    zones["global"] = clamp_score(sum(MIRROR_ZONE_WEIGHTS[z] * zones[z] for z in MIRROR_ZONE_WEIGHTS))
    return zones


class MirroredDistanceScorer(Scorer):
    """Window-averaged mirrored-distance scorer.

    Every frame is aligned on the eye centers and pushed into a bounded
    window; scores are recomputed from the window mean every ``stride``
    frames (and on the first frame) and held in between.
    """

    name = "mirrored"

    def __init__(self, scheme: PointScheme = DEFAULT_SCHEME, capacity: int = WINDOW_CAPACITY,
                 stride: int = WINDOW_STRIDE, gain: float = MIRROR_DISTANCE_GAIN,
                 roll_tolerance_deg: float = ROLL_TOLERANCE_DEG):
        self.scheme = scheme
        self.window = FrameWindow(capacity, stride)
        self.gain = gain
        self.roll_tolerance_deg = roll_tolerance_deg

    def reset(self) -> None:
        self.window.reset()

    def score(self, landmarks, previous: Optional[Scores] = None,
              frame_size: Optional[Tuple[int, int]] = None) -> Scores:
        points = to_points(landmarks)
        if points is None:
            return NO_SCORE
        w, h = frame_size if frame_size is not None else (1, 1)
        roll = measure_roll(points, self.scheme)
        quality = Quality(
            roll_deg=roll,
            roll_ok=abs(roll) <= self.roll_tolerance_deg,
            missing=missing_features(points, self.scheme),
        )
        frames = (previous.frames_processed if previous is not None else 0) + 1

        tick = self.window(align_frame(points, w, h, self.scheme))
        have_previous = previous is not None and previous.detected
        if not tick and have_previous:
            return Scores(
                global_score=previous.global_score,
                eyes=previous.eyes,
                mouth=previous.mouth,
                jaw=previous.jaw,
                quality=quality,
                frames_processed=frames,
            )

        zones = window_scores(self.window.mean(), self.scheme, self.gain)
        return Scores(
            global_score=round(zones["global"], SCORE_DECIMALS),
            eyes=round(zones["eyes"], SCORE_DECIMALS),
            mouth=round(zones["mouth"], SCORE_DECIMALS),
            jaw=round(zones["jaw"], SCORE_DECIMALS),
            quality=quality,
            frames_processed=frames,
        )
