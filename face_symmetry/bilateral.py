from typing import Dict

import numpy as np

from .landmarks import DEFAULT_SCHEME, PointScheme, point_or_origin

# Zone -> (left feature, right feature) compared against the midline.
BILATERAL_ZONES = {
    "eyes": ("eye_inner_l", "eye_inner_r"),
    "mouth": ("mouth_corner_l", "mouth_corner_r"),
    "jaw": ("jaw_l", "jaw_r"),
    "nose": ("nose_base_l", "nose_base_r"),
}


def pair_score(a: np.ndarray, b: np.ndarray, mid_x: float, ref: float) -> float:
    """0-100 lateral symmetry of one left/right pair.

    Both points should sit at the same horizontal distance from the midline;
    the gap between those distances is normalized by the reference scale.
    """
    da = abs(float(a[0]) - mid_x)
    db = abs(float(b[0]) - mid_x)
    norm = min(abs(da - db) / ref, 1.0)
    return 100.0 * (1.0 - norm)


def bilateral_scores(points: np.ndarray, mid_x: float, ref: float,
                     scheme: PointScheme = DEFAULT_SCHEME) -> Dict[str, float]:
    out = {}
    for zone, (left, right) in BILATERAL_ZONES.items():
        out[zone] = pair_score(
            point_or_origin(points, scheme[left]),
            point_or_origin(points, scheme[right]),
            mid_x,
            ref,
        )
    return out

