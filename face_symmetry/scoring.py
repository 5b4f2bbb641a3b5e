"""Symmetry scores for one face.

``ClinicalScorer`` is the primary per-frame method: roll correction,
bilateral midline comparison and clinical sub-metrics, composed per zone
and globally. ``MirroredDistanceScorer`` (see ``mirrored.py``) is the
window-averaged alternative. Both take the previously returned ``Scores``
as explicit smoothing state and return a fresh value.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .bilateral import bilateral_scores
from .clinical import (
    ClinicalMetrics,
    aperture_score,
    extract_clinical_metrics,
    mouth_angle_score,
    mouth_vertical_score,
)
from .config import (
    BLEND_NEW_WEIGHT,
    CRITICAL_FLOOR_WEIGHT,
    EYE_BILATERAL_WEIGHT,
    MOUTH_WEIGHTS_NEUTRAL,
    MOUTH_WEIGHTS_SMILING,
    ROLL_TOLERANCE_DEG,
    SCORE_DECIMALS,
    ZONE_WEIGHTS,
)
from .filters import blend_mapping
from .landmarks import DEFAULT_SCHEME, PointScheme, missing_features, to_points
from .normalization import deroll, eye_line, reference_scale
from .geometry import midpoint

ZONES = ("eyes", "mouth", "jaw", "nose")


def clamp_score(value: float) -> float:
    return float(min(max(value, 0.0), 100.0))


@dataclass(frozen=True)
class Quality:
    roll_deg: float
    roll_ok: bool
    missing: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Scores:
    global_score: Optional[float] = None
    eyes: Optional[float] = None
    mouth: Optional[float] = None
    jaw: Optional[float] = None
    nose: Optional[float] = None
    quality: Optional[Quality] = None
    clinical: Optional[ClinicalMetrics] = None
    frames_processed: int = 0
    detected: bool = True

    def zone_values(self) -> Dict[str, Optional[float]]:
        return {
            "global": self.global_score,
            "eyes": self.eyes,
            "mouth": self.mouth,
            "jaw": self.jaw,
            "nose": self.nose,
        }

    def to_dict(self) -> Dict[str, object]:
        if not self.detected:
            return {"detected": False, "framesProcessed": self.frames_processed}
        out: Dict[str, object] = {k: v for k, v in self.zone_values().items() if v is not None}
        out["framesProcessed"] = self.frames_processed
        if self.quality is not None:
            out["quality"] = {
                "rollDeg": round(self.quality.roll_deg, 1),
                "rollOk": self.quality.roll_ok,
            }
            if self.quality.missing:
                out["quality"]["missing"] = list(self.quality.missing)
        if self.clinical is not None:
            out["clinical"] = self.clinical.rounded()
        return out


# No face in the frame. Distinct from any numeric score, including 0.
NO_SCORE = Scores(detected=False)


@dataclass
class ZoneBreakdown:
    """Unrounded intermediate values of one clinical evaluation."""

    bilateral: Dict[str, float]
    aperture: float
    mouth_vertical: float
    mouth_angle: float
    mouth_weights: Dict[str, float]
    zones: Dict[str, float]
    weighted_global: float
    critical_min: float
    global_score: float
    clinical: ClinicalMetrics
    roll_deg: float
    missing: Tuple[str, ...] = field(default_factory=tuple)


def mouth_weights(smile_likely: bool) -> Dict[str, float]:
    """Sub-score weights of the mouth zone; they always sum to 1.

    A smile displaces the mouth corners for reasons unrelated to asymmetry,
    so the vertical and angle terms lose weight to the bilateral term.
    """
    base = MOUTH_WEIGHTS_SMILING if smile_likely else MOUTH_WEIGHTS_NEUTRAL
    vertical = base["vertical"]
    angle = base["angle"]
    return {"bilateral": 1.0 - vertical - angle, "vertical": vertical, "angle": angle}


def critical_floor(global_score: float, critical_min: float,
                   weight: float = CRITICAL_FLOOR_WEIGHT) -> float:
    return min(global_score, weight * critical_min + (1.0 - weight) * global_score)


def compose(bilateral: Dict[str, float], clinical: ClinicalMetrics) -> Dict[str, float]:
    aper = aperture_score(clinical)
    vert = mouth_vertical_score(clinical)
    ang = mouth_angle_score(clinical)
    w = mouth_weights(clinical.smile_likely)

    zones = {
        "eyes": EYE_BILATERAL_WEIGHT * bilateral["eyes"] + (1.0 - EYE_BILATERAL_WEIGHT) * aper,
        "mouth": w["bilateral"] * bilateral["mouth"] + w["vertical"] * vert + w["angle"] * ang,
        "jaw": bilateral["jaw"],
        "nose": bilateral["nose"],
    }
    weighted = sum(ZONE_WEIGHTS[z] * zones[z] for z in ZONES)
    crit = min(aper, vert, ang)
    return {
        **zones,
        "weighted_global": weighted,
        "critical_min": crit,
        "global": critical_floor(weighted, crit),
        "aperture": aper,
        "mouth_vertical": vert,
        "mouth_angle": ang,
    }


class Scorer(ABC):
    name = "scorer"

    @abstractmethod
    def score(self, landmarks, previous: Optional[Scores] = None,
              frame_size: Optional[Tuple[int, int]] = None) -> Scores:
        """Score one landmark set; ``None`` landmarks yield ``NO_SCORE``."""

    def reset(self) -> None:
        pass


def _present(raw: Dict[str, Optional[float]], previous: Optional[Scores], blend_weight: float,
             quality: Quality, clinical: Optional[ClinicalMetrics]) -> Scores:
    prev_values = previous.zone_values() if previous is not None and previous.detected else None
    smoothed = blend_mapping(raw, prev_values, blend_weight)

    def out(key: str) -> Optional[float]:
        v = smoothed.get(key)
        return None if v is None else round(clamp_score(v), SCORE_DECIMALS)

    frames = (previous.frames_processed if previous is not None else 0) + 1
    return Scores(
        global_score=out("global"),
        eyes=out("eyes"),
        mouth=out("mouth"),
        jaw=out("jaw"),
        nose=out("nose"),
        quality=quality,
        clinical=clinical,
        frames_processed=frames,
    )


class ClinicalScorer(Scorer):
    name = "clinical"

    def __init__(self, scheme: PointScheme = DEFAULT_SCHEME, blend_weight: float = BLEND_NEW_WEIGHT,
                 roll_tolerance_deg: float = ROLL_TOLERANCE_DEG, include_clinical: bool = True):
        self.scheme = scheme
        self.blend_weight = blend_weight
        self.roll_tolerance_deg = roll_tolerance_deg
        self.include_clinical = include_clinical

    def evaluate(self, landmarks) -> Optional[ZoneBreakdown]:
        points = to_points(landmarks)
        if points is None:
            return None
        missing = missing_features(points, self.scheme)

        correction = deroll(points, self.scheme)
        corrected = correction.corrected
        left, right = eye_line(corrected, self.scheme)
        mid_x = float(midpoint(left, right)[0])
        ref = reference_scale(corrected, self.scheme)

        bilateral = bilateral_scores(corrected, mid_x, ref, self.scheme)
        clinical = extract_clinical_metrics(corrected, ref, mid_x, self.scheme)
        c = compose(bilateral, clinical)

        return ZoneBreakdown(
            bilateral=bilateral,
            aperture=c["aperture"],
            mouth_vertical=c["mouth_vertical"],
            mouth_angle=c["mouth_angle"],
            mouth_weights=mouth_weights(clinical.smile_likely),
            zones={z: c[z] for z in ZONES},
            weighted_global=c["weighted_global"],
            critical_min=c["critical_min"],
            global_score=c["global"],
            clinical=clinical,
            roll_deg=correction.roll_deg,
            missing=missing,
        )

    def score(self, landmarks, previous: Optional[Scores] = None,
              frame_size: Optional[Tuple[int, int]] = None) -> Scores:
        b = self.evaluate(landmarks)
        if b is None:
            return NO_SCORE
        quality = Quality(
            roll_deg=b.roll_deg,
            roll_ok=abs(b.roll_deg) <= self.roll_tolerance_deg,
            missing=b.missing,
        )
        raw = {"global": b.global_score, **b.zones}
        return _present(raw, previous, self.blend_weight, quality,
                        b.clinical if self.include_clinical else None)
