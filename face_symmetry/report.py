from typing import Optional, Tuple

from .config import RATING_HIGH, RATING_MEDIUM

ZONE_ADVICE = {
    "eyes": "Keep the head straight when capturing to reduce tilt.",
    "mouth": "Relax the lips and avoid a wide smile for a better reading.",
    "jaw": "Use frontal lighting to avoid side shadows.",
}


def rating(score: Optional[float]) -> str:
    if score is None:
        return "none"
    if score >= RATING_HIGH:
        return "high"
    if score >= RATING_MEDIUM:
        return "medium"
    return "low"


def weakest_zone(scores) -> Optional[Tuple[str, float, str]]:
    """Lowest of eyes/mouth/jaw with the matching capture advice."""
    if not scores.detected:
        return None
    values = [(zone, getattr(scores, zone)) for zone in ZONE_ADVICE]
    values = [(z, v) for z, v in values if v is not None]
    if not values:
        return None
    zone, value = min(values, key=lambda zv: zv[1])
    return zone, value, ZONE_ADVICE[zone]


def format_summary(scores) -> str:
    if not scores.detected:
        return "no face"
    parts = [f"global={scores.global_score:.1f} ({rating(scores.global_score)})"]
    for zone in ("eyes", "mouth", "jaw", "nose"):
        value = getattr(scores, zone)
        if value is not None:
            parts.append(f"{zone}={value:.1f}")
    if scores.quality is not None:
        flag = "" if scores.quality.roll_ok else " TILTED"
        parts.append(f"roll={scores.quality.roll_deg:+.1f}deg{flag}")
    parts.append(f"frames={scores.frames_processed}")
    return " ".join(parts)
