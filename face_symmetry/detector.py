from abc import ABC, abstractmethod
from typing import Optional

import cv2
import numpy as np

from .config import MIN_DETECTION_CONFIDENCE, MIN_TRACKING_CONFIDENCE, REFINE_LANDMARKS
from .logging_utils import log, warn

try:
    import mediapipe as mp
    MEDIAPIPE_AVAILABLE = True
except ImportError:
    mp = None
    MEDIAPIPE_AVAILABLE = False


class LandmarkDetector(ABC):
    """Anything that turns a BGR frame into one face's landmarks.

    ``detect`` returns an (N, 3) array of normalized coordinates, or ``None``
    when no face is found.
    """

    @abstractmethod
    def detect(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """Landmarks of the first face in ``frame``, or ``None``."""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class FaceMeshDetector(LandmarkDetector):
    def __init__(self, static_image_mode: bool = False, refine_landmarks: bool = REFINE_LANDMARKS):
        if not MEDIAPIPE_AVAILABLE:
            raise RuntimeError("MediaPipe is not installed")
        self.static_image_mode = static_image_mode
        self.face_mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=static_image_mode,
            max_num_faces=1,
            refine_landmarks=refine_landmarks,
            min_detection_confidence=MIN_DETECTION_CONFIDENCE,
            min_tracking_confidence=MIN_TRACKING_CONFIDENCE,
        )
        mode = "image" if static_image_mode else "video"
        log(f"MediaPipe FaceMesh initialized ({mode} mode)")

    def detect(self, frame: np.ndarray) -> Optional[np.ndarray]:
        if self.face_mesh is None:
            raise RuntimeError("detector is closed")
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        results = self.face_mesh.process(rgb)
        if not results.multi_face_landmarks:
            return None
        lms = results.multi_face_landmarks[0].landmark
        return np.array([(lm.x, lm.y, lm.z) for lm in lms], dtype=np.float64)

    def close(self) -> None:
        if self.face_mesh is None:
            return
        try:
            self.face_mesh.close()
        except Exception as exc:
            warn(f"face_mesh.close failed: {exc}")
        finally:
            self.face_mesh = None
