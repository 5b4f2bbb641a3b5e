from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .geometry import bbox, midpoint
from .landmarks import DEFAULT_SCHEME, PointScheme, has_point, point, to_points
from .report import rating

Segment = Tuple[Tuple[float, float], Tuple[float, float]]

# BGR
MIDLINE_COLOR = (80, 80, 255)
MOUTH_COLOR = (50, 160, 255)
APERTURE_COLOR = (255, 160, 80)
BROW_COLOR = (255, 90, 180)
DENTAL_COLOR = (120, 200, 60)
POINT_COLOR = (255, 120, 0)
RATING_COLORS = {"high": (80, 200, 80), "medium": (0, 190, 255), "low": (80, 80, 255), "none": (180, 180, 180)}


@dataclass
class ClinicalGuides:
    """Guide geometry in normalized frame coordinates."""

    midline_x: Optional[float] = None
    mouth_line: Optional[Segment] = None
    apertures: List[Segment] = field(default_factory=list)
    brow_lines: List[Segment] = field(default_factory=list)
    dental_box: Optional[Tuple[float, float, float, float]] = None


def _xy(p: np.ndarray) -> Tuple[float, float]:
    return float(p[0]), float(p[1])


def _eye_center(points: np.ndarray, indices) -> Optional[np.ndarray]:
    if not all(has_point(points, i) for i in indices):
        return None
    return np.mean([points[i] for i in indices], axis=0)


def clinical_guides(landmarks, scheme: PointScheme = DEFAULT_SCHEME) -> ClinicalGuides:
    """Guides drawn on the raw frame; a guide whose points are unavailable is left out."""
    pts = to_points(landmarks)
    guides = ClinicalGuides()
    if pts is None:
        return guides

    left, right = point(pts, scheme["eye_outer_l"]), point(pts, scheme["eye_outer_r"])
    if left is not None and right is not None:
        guides.midline_x = float(midpoint(left, right)[0])

    ml, mr = point(pts, scheme["mouth_corner_l"]), point(pts, scheme["mouth_corner_r"])
    if ml is not None and mr is not None:
        guides.mouth_line = (_xy(ml), _xy(mr))

    for top, bottom in (("eyelid_top_l", "eyelid_bottom_l"), ("eyelid_top_r", "eyelid_bottom_r")):
        u, d = point(pts, scheme[top]), point(pts, scheme[bottom])
        if u is not None and d is not None:
            guides.apertures.append((_xy(u), _xy(d)))

    for brow, center_idx in (("brow_apex_l", scheme.left_eye_center), ("brow_apex_r", scheme.right_eye_center)):
        b = point(pts, scheme[brow])
        c = _eye_center(pts, center_idx)
        if b is not None and c is not None:
            guides.brow_lines.append((_xy(b), _xy(c)))

    upper, lower = point(pts, scheme["lip_upper"]), point(pts, scheme["lip_lower"])
    if ml is not None and mr is not None and upper is not None and lower is not None:
        x1, _, x2, _ = bbox(ml, mr)
        _, y1, _, y2 = bbox(upper, lower)
        guides.dental_box = (x1, y1, x2, y2)
    return guides


def _px(p: Tuple[float, float], w: int, h: int) -> Tuple[int, int]:
    return int(p[0] * w), int(p[1] * h)


def draw_guides(image: np.ndarray, guides: ClinicalGuides) -> np.ndarray:
    h, w = image.shape[:2]
    if guides.midline_x is not None:
        x = int(guides.midline_x * w)
        cv2.line(image, (x, 0), (x, h), MIDLINE_COLOR, 2)
    if guides.mouth_line is not None:
        a, b = guides.mouth_line
        cv2.line(image, _px(a, w, h), _px(b, w, h), MOUTH_COLOR, 2)
    for a, b in guides.apertures:
        cv2.line(image, _px(a, w, h), _px(b, w, h), APERTURE_COLOR, 2)
    for a, b in guides.brow_lines:
        cv2.line(image, _px(a, w, h), _px(b, w, h), BROW_COLOR, 2)
    if guides.dental_box is not None:
        x1, y1, x2, y2 = guides.dental_box
        cv2.rectangle(image, _px((x1, y1), w, h), _px((x2, y2), w, h), DENTAL_COLOR, 2)
    return image


def draw_landmarks(image: np.ndarray, landmarks, radius: int = 1) -> np.ndarray:
    pts = to_points(landmarks)
    if pts is None:
        return image
    h, w = image.shape[:2]
    for x, y in pts:
        cv2.circle(image, (int(x * w), int(y * h)), radius, POINT_COLOR, -1)
    return image


def draw_scores(image: np.ndarray, scores) -> np.ndarray:
    if not scores.detected:
        cv2.putText(image, "Face not detected!", (10, 25), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 255), 2)
        return image

    label = rating(scores.global_score)
    cv2.putText(image, f"Global: {scores.global_score:.1f}% ({label})", (10, 28),
                cv2.FONT_HERSHEY_SIMPLEX, 0.75, RATING_COLORS[label], 2)
    y = 55
    for zone in ("eyes", "mouth", "jaw", "nose"):
        value = getattr(scores, zone)
        if value is None:
            continue
        cv2.putText(image, f"{zone.capitalize()}: {value:.1f}", (10, y),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.55, (255, 255, 255), 1)
        y += 22
    if scores.quality is not None:
        color = (0, 255, 255) if scores.quality.roll_ok else (0, 0, 255)
        text = f"Roll: {scores.quality.roll_deg:+.1f} deg"
        if not scores.quality.roll_ok:
            text += "  straighten your head"
        cv2.putText(image, text, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1)
        y += 22
    if scores.clinical is not None and scores.clinical.smile_likely:
        cv2.putText(image, "Smile detected", (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 0), 1)
        y += 22
    cv2.putText(image, f"Frames: {scores.frames_processed}", (10, y),
                cv2.FONT_HERSHEY_SIMPLEX, 0.45, (180, 180, 180), 1)
    return image
