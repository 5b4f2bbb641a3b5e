import math
from typing import Tuple

import numpy as np


def vec(x: float, y: float) -> np.ndarray:
    return np.array([x, y], dtype=np.float64)


def sub(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.asarray(a, dtype=np.float64)[:2] - np.asarray(b, dtype=np.float64)[:2]


def add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.asarray(a, dtype=np.float64)[:2] + np.asarray(b, dtype=np.float64)[:2]


def scale(a: np.ndarray, k: float) -> np.ndarray:
    return np.asarray(a, dtype=np.float64)[:2] * k


def dot(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.dot(np.asarray(a, dtype=np.float64)[:2], np.asarray(b, dtype=np.float64)[:2]))


def length(a: np.ndarray) -> float:
    return float(math.hypot(a[0], a[1]))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return length(sub(a, b))


def midpoint(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return scale(add(a, b), 0.5)


def to_rad(deg: float) -> float:
    return deg * math.pi / 180.0


def to_deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def line_angle_deg(a: np.ndarray, b: np.ndarray) -> float:
    """Signed angle of the a->b segment against the +x axis (image y points down)."""
    d = sub(b, a)
    return to_deg(math.atan2(d[1], d[0]))


def rotation_matrix(deg: float) -> np.ndarray:
    r = to_rad(deg)
    c, s = math.cos(r), math.sin(r)
    return np.array([[c, -s], [s, c]], dtype=np.float64)


def rotate_about(p: np.ndarray, pivot: np.ndarray, deg: float) -> np.ndarray:
    return rotation_matrix(deg) @ sub(p, pivot) + np.asarray(pivot, dtype=np.float64)[:2]


def rotate_points(points: np.ndarray, pivot: np.ndarray, deg: float) -> np.ndarray:
    """Rotate an (N, 2) array about ``pivot`` in one shot."""
    pivot = np.asarray(pivot, dtype=np.float64)[:2]
    return (np.asarray(points, dtype=np.float64)[:, :2] - pivot) @ rotation_matrix(deg).T + pivot


def clip(value: float, lo: float, hi: float) -> float:
    return float(min(max(value, lo), hi))


def bbox(a: np.ndarray, b: np.ndarray) -> Tuple[float, float, float, float]:
    return (
        float(min(a[0], b[0])),
        float(min(a[1], b[1])),
        float(max(a[0], b[0])),
        float(max(a[1], b[1])),
    )
