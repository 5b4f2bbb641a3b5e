from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

# MediaPipe Face Mesh topology (468 points, 478 with refine_landmarks=True).
# "left"/"right" follow the image as the model reports it, not the subject.

FACE_MESH_POINTS = {
    "eye_outer_l": 33,
    "eye_outer_r": 263,
    "eye_inner_l": 133,
    "eye_inner_r": 362,
    "eyelid_top_l": 159,
    "eyelid_bottom_l": 145,
    "eyelid_top_r": 386,
    "eyelid_bottom_r": 374,
    "mouth_corner_l": 61,
    "mouth_corner_r": 291,
    "lip_upper": 13,
    "lip_lower": 14,
    "jaw_l": 172,
    "jaw_r": 397,
    "nose_tip": 1,
    "nose_base_l": 98,
    "nose_base_r": 327,
    "brow_apex_l": 105,
    "brow_apex_r": 334,
}

# Eye center = mean of both corners and both lids.
LEFT_EYE_CENTER = (33, 133, 159, 145)
RIGHT_EYE_CENTER = (362, 263, 386, 374)

MIRROR_PAIRS = {
    "eyes": ((33, 263), (133, 362), (159, 386), (145, 374)),
    "mouth": ((61, 291), (78, 308), (80, 310), (88, 318)),
    "jaw": ((172, 397), (58, 288), (132, 361)),
}


@dataclass(frozen=True)
class PointScheme:
    """Semantic feature -> landmark index table.

    The default values are only valid for MediaPipe Face Mesh. A different
    landmark model must supply its own table.
    """

    points: Dict[str, int] = field(default_factory=lambda: dict(FACE_MESH_POINTS))
    left_eye_center: Tuple[int, ...] = LEFT_EYE_CENTER
    right_eye_center: Tuple[int, ...] = RIGHT_EYE_CENTER
    mirror_pairs: Dict[str, Tuple[Tuple[int, int], ...]] = field(
        default_factory=lambda: dict(MIRROR_PAIRS)
    )

    def __getitem__(self, name: str) -> int:
        return self.points[name]

    def required_indices(self) -> Tuple[int, ...]:
        idx = set(self.points.values())
        idx.update(self.left_eye_center)
        idx.update(self.right_eye_center)
        return tuple(sorted(idx))


DEFAULT_SCHEME = PointScheme()


def _landmark_xy(lm) -> Tuple[float, float]:
    if isinstance(lm, dict):
        return float(lm.get("x", 0.0)), float(lm.get("y", 0.0))
    if hasattr(lm, "x") and hasattr(lm, "y"):
        return float(lm.x), float(lm.y)
    seq = tuple(lm)
    if len(seq) < 2:
        raise ValueError(f"landmark needs at least x and y, got {seq!r}")
    return float(seq[0]), float(seq[1])


def to_points(landmarks) -> Optional[np.ndarray]:
    """Convert a landmark set into a float (N, 2) array of normalized x, y.

    Accepts an (N, 2)/(N, 3) array, a sequence of ``{x, y, z}`` dicts, or a
    sequence of objects with ``.x``/``.y`` (MediaPipe NormalizedLandmark).
    ``None`` means "no face" and is returned unchanged.
    """
    if landmarks is None:
        return None
    if hasattr(landmarks, "landmark"):
        landmarks = landmarks.landmark
    if isinstance(landmarks, np.ndarray):
        arr = np.asarray(landmarks, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] < 2:
            raise ValueError(f"expected an (N, 2) or (N, 3) array, got shape {arr.shape}")
        return arr[:, :2].copy()
    pts = [_landmark_xy(lm) for lm in landmarks]
    if not pts:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array(pts, dtype=np.float64)


def has_point(points: np.ndarray, index: int) -> bool:
    return 0 <= index < len(points) and bool(np.all(np.isfinite(points[index])))


def point(points: np.ndarray, index: int) -> Optional[np.ndarray]:
    if not has_point(points, index):
        return None
    return points[index]


def point_or_origin(points: np.ndarray, index: int) -> np.ndarray:
    p = point(points, index)
    if p is None:
        return np.zeros(2, dtype=np.float64)
    return p


def missing_features(points: np.ndarray, scheme: PointScheme = DEFAULT_SCHEME) -> Tuple[str, ...]:
    return tuple(name for name, idx in scheme.points.items() if not has_point(points, idx))


def mean_point(points: np.ndarray, indices: Sequence[int]) -> np.ndarray:
    return np.mean([point_or_origin(points, i) for i in indices], axis=0)
