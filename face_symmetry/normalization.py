from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .config import REFERENCE_SCALE_FLOOR
from .geometry import distance, line_angle_deg, midpoint, rotate_points
from .landmarks import DEFAULT_SCHEME, PointScheme, mean_point, point_or_origin


@dataclass
class RollCorrection:
    corrected: np.ndarray
    roll_deg: float
    pivot: np.ndarray


def eye_line(points: np.ndarray, scheme: PointScheme = DEFAULT_SCHEME) -> Tuple[np.ndarray, np.ndarray]:
    return (
        point_or_origin(points, scheme["eye_outer_l"]),
        point_or_origin(points, scheme["eye_outer_r"]),
    )


def measure_roll(points: np.ndarray, scheme: PointScheme = DEFAULT_SCHEME) -> float:
    left, right = eye_line(points, scheme)
    return line_angle_deg(left, right)


def deroll(points: np.ndarray, scheme: PointScheme = DEFAULT_SCHEME) -> RollCorrection:
    """Rotate the whole set about the eye-line midpoint so the outer eye
    corners end up level.

    Two missing eye corners both default to the origin, which gives
    atan2(0, 0) = 0 and leaves the set untouched.
    """
    left, right = eye_line(points, scheme)
    roll = line_angle_deg(left, right)
    pivot = midpoint(left, right)
    if len(points) == 0:
        return RollCorrection(corrected=points.copy(), roll_deg=roll, pivot=pivot)
    corrected = rotate_points(points, pivot, -roll)
    return RollCorrection(corrected=corrected, roll_deg=roll, pivot=pivot)


def reference_scale(points: np.ndarray, scheme: PointScheme = DEFAULT_SCHEME,
                    floor: float = REFERENCE_SCALE_FLOOR) -> float:
    left, right = eye_line(points, scheme)
    return max(floor, distance(left, right))


def align_frame(points: np.ndarray, width: float = 1.0, height: float = 1.0,
                scheme: PointScheme = DEFAULT_SCHEME) -> np.ndarray:
    """Pixel-space frame aligned on the eye centers.

    Origin at the midpoint between both eye centers, unit length equal to the
    inter-eye-center distance, eye line rotated onto the x axis. Returns the
    flattened ``[x0, y0, x1, y1, ...]`` vector the sliding window stores.
    Non-finite points are placed at the origin, as everywhere else.
    """
    px = np.array(points, dtype=np.float64)[:, :2]
    px[~np.isfinite(px).all(axis=1)] = 0.0
    px *= np.array([width, height], dtype=np.float64)
    left = mean_point(px, scheme.left_eye_center)
    right = mean_point(px, scheme.right_eye_center)
    mid = midpoint(left, right)
    d = distance(left, right) or 1.0
    ang = line_angle_deg(left, right)
    aligned = rotate_points((px - mid) / d, np.zeros(2), -ang)
    return aligned.reshape(-1)
