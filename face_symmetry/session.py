from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np

from .logging_utils import log, log_periodic, warn
from .report import format_summary
from .scoring import NO_SCORE, ClinicalScorer, Scorer, Scores

if TYPE_CHECKING:
    from .detector import LandmarkDetector


class SessionState(Enum):
    IDLE = "idle"
    DETECTING = "detecting"
    SCORED = "scored"
    NO_FACE = "no-face"


class SymmetrySession:
    """One analysis loop: owns the smoothing state between frames.

    ``stop()`` drops the previous scores and the scorer's window so that a
    new subject never inherits them.
    """

    def __init__(self, scorer: Optional[Scorer] = None, detector: Optional["LandmarkDetector"] = None):
        self.scorer = scorer if scorer is not None else ClinicalScorer()
        self.detector = detector
        self.state = SessionState.IDLE
        self.previous: Optional[Scores] = None
        self.frame_idx = 0

    @property
    def active(self) -> bool:
        return self.state is not SessionState.IDLE

    @property
    def frames_processed(self) -> int:
        return self.previous.frames_processed if self.previous is not None else 0

    def start(self) -> None:
        if self.active:
            return
        self._clear()
        self.state = SessionState.DETECTING
        log(f"=== SESSION STARTED ({self.scorer.name}) ===")

    def stop(self) -> None:
        if not self.active:
            return
        log(f"=== SESSION STOPPED after {self.frames_processed} scored frames ===")
        self._clear()
        self.state = SessionState.IDLE

    def reset(self) -> None:
        self._clear()
        if self.active:
            self.state = SessionState.DETECTING

    def _clear(self) -> None:
        self.previous = None
        self.frame_idx = 0
        self.scorer.reset()

    def process_frame(self, frame: np.ndarray) -> Scores:
        if self.detector is None:
            raise RuntimeError("session has no landmark detector")
        self._require_active()
        h, w = frame.shape[:2]
        return self.process_landmarks(self.detector.detect(frame), frame_size=(w, h))

    def process_landmarks(self, landmarks, frame_size: Optional[Tuple[int, int]] = None) -> Scores:
        self._require_active()
        prior = self.state
        self.state = SessionState.DETECTING
        self.frame_idx += 1

        if landmarks is None:
            if prior is not SessionState.NO_FACE:
                log("No face detected")
            self.state = SessionState.NO_FACE
            return NO_SCORE

        scores = self.scorer.score(landmarks, previous=self.previous, frame_size=frame_size)
        self.previous = scores
        self.state = SessionState.SCORED

        if scores.quality is not None and scores.quality.missing and scores.frames_processed == 1:
            warn(f"Missing landmarks: {', '.join(scores.quality.missing)}")
        log_periodic(self.frame_idx, format_summary(scores))
        return scores

    def _require_active(self) -> None:
        if not self.active:
            raise RuntimeError("session is idle; call start() first")
