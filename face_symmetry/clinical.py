"""Clinical sub-metrics measured on a roll-corrected landmark set.

All distances are in normalized frame units; anything compared across zones
or subjects is divided by the reference scale first. Values are kept
unrounded here; ``ClinicalMetrics.rounded()`` is for display only.
"""

from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np

from .config import (
    APERTURE_FLOOR,
    MOUTH_ANGLE_LIMIT_DEG,
    MOUTH_WIDTH_FLOOR,
    SMILE_DENTAL_THRESHOLD,
)
from .geometry import distance, line_angle_deg
from .landmarks import DEFAULT_SCHEME, PointScheme, mean_point, point_or_origin

# Display precision per field.
_DECIMALS = {
    "eyes_apert_l": 4,
    "eyes_apert_r": 4,
    "eyes_apert_diff": 4,
    "eyes_apert_ratio_diff": 3,
    "mouth_angle_deg": 1,
    "mouth_vert_diff": 3,
    "mouth_width": 4,
    "mouth_open": 4,
    "dental_proxy": 3,
    "brow_eye_dist_l": 3,
    "brow_eye_dist_r": 3,
    "brow_asym": 3,
    "mid_x": 4,
}


@dataclass(frozen=True)
class ClinicalMetrics:
    eyes_apert_l: float
    eyes_apert_r: float
    eyes_apert_diff: float
    eyes_apert_ratio_diff: float
    mouth_angle_deg: float
    mouth_vert_diff: float
    mouth_width: float
    mouth_open: float
    dental_proxy: float
    smile_likely: bool
    brow_eye_dist_l: float
    brow_eye_dist_r: float
    brow_asym: float
    mid_x: float

    def rounded(self) -> Dict[str, object]:
        out = {}
        for key, value in asdict(self).items():
            if key in _DECIMALS:
                out[key] = round(float(value), _DECIMALS[key])
            else:
                out[key] = value
        return out


def _score_from_ratio(ratio: float) -> float:
    return 100.0 * (1.0 - min(max(ratio, 0.0), 1.0))


def aperture_score(metrics: ClinicalMetrics) -> float:
    return _score_from_ratio(metrics.eyes_apert_ratio_diff)


def mouth_vertical_score(metrics: ClinicalMetrics) -> float:
    return _score_from_ratio(metrics.mouth_vert_diff)


def mouth_angle_score(metrics: ClinicalMetrics, limit_deg: float = MOUTH_ANGLE_LIMIT_DEG) -> float:
    return _score_from_ratio(metrics.mouth_angle_deg / limit_deg)


def eye_aperture(points: np.ndarray, top_idx: int, bottom_idx: int) -> float:
    top = point_or_origin(points, top_idx)
    bottom = point_or_origin(points, bottom_idx)
    return max(float(bottom[1] - top[1]), 0.0)


def brow_eye_distance(points: np.ndarray, brow_idx: int, eye_center_idx, ref: float) -> float:
    """Height of the brow apex above the eye center, in reference units."""
    brow = point_or_origin(points, brow_idx)
    center = mean_point(points, eye_center_idx)
    return max(float(center[1] - brow[1]), 0.0) / ref


def extract_clinical_metrics(points: np.ndarray, ref: float, mid_x: float,
                             scheme: PointScheme = DEFAULT_SCHEME,
                             smile_threshold: float = SMILE_DENTAL_THRESHOLD) -> ClinicalMetrics:
    aper_l = eye_aperture(points, scheme["eyelid_top_l"], scheme["eyelid_bottom_l"])
    aper_r = eye_aperture(points, scheme["eyelid_top_r"], scheme["eyelid_bottom_r"])
    aper_diff = abs(aper_l - aper_r)
    aper_ratio_diff = aper_diff / max(aper_l, aper_r, APERTURE_FLOOR)

    mouth_l = point_or_origin(points, scheme["mouth_corner_l"])
    mouth_r = point_or_origin(points, scheme["mouth_corner_r"])
    mouth_vert_diff = abs(float(mouth_l[1] - mouth_r[1])) / ref
    mouth_angle = abs(line_angle_deg(mouth_l, mouth_r))

    upper = point_or_origin(points, scheme["lip_upper"])
    lower = point_or_origin(points, scheme["lip_lower"])
    mouth_open = max(float(lower[1] - upper[1]), 0.0)
    mouth_width = max(distance(mouth_l, mouth_r), MOUTH_WIDTH_FLOOR)
    dental_proxy = (mouth_width * mouth_open) / (ref * ref)

    brow_l = brow_eye_distance(points, scheme["brow_apex_l"], scheme.left_eye_center, ref)
    brow_r = brow_eye_distance(points, scheme["brow_apex_r"], scheme.right_eye_center, ref)

    return ClinicalMetrics(
        eyes_apert_l=aper_l,
        eyes_apert_r=aper_r,
        eyes_apert_diff=aper_diff,
        eyes_apert_ratio_diff=aper_ratio_diff,
        mouth_angle_deg=mouth_angle,
        mouth_vert_diff=mouth_vert_diff,
        mouth_width=mouth_width,
        mouth_open=mouth_open,
        dental_proxy=dental_proxy,
        smile_likely=dental_proxy > smile_threshold,
        brow_eye_dist_l=brow_l,
        brow_eye_dist_r=brow_r,
        brow_asym=abs(brow_l - brow_r),
        mid_x=mid_x,
    )
