import time
from typing import List, Optional

import cv2
import numpy as np
import tkinter as tk
from tkinter import filedialog, messagebox

from ..config import (
    CAMERA_INDEX,
    CAMERA_WIDTH,
    CAMERA_HEIGHT,
    CAMERA_FPS,
    CAMERA_BUFFERSIZE,
    WARMUP_FRAMES,
)
from ..detector import MEDIAPIPE_AVAILABLE, FaceMeshDetector
from ..filters import ExponentialBlend
from ..logging_utils import log, warn
from ..mirrored import MirroredDistanceScorer
from ..overlay import clinical_guides, draw_guides, draw_landmarks, draw_scores
from ..report import format_summary, weakest_zone
from ..scoring import ClinicalScorer, Scorer, Scores
from ..series import ScoreSeries
from ..session import SymmetrySession

WINDOW_NAME = "Facial Symmetry"
IMAGE_TYPES = [("Images", "*.jpg *.jpeg *.png *.bmp"), ("All files", "*.*")]
VIDEO_TYPES = [("Videos", "*.mp4 *.mov *.avi *.webm *.mkv"), ("All files", "*.*")]
IMAGE_POLL_MS = 30


def show_images(images: List[np.ndarray], title: str = WINDOW_NAME) -> List[str]:
    """Open one window per rendered image and paint them once."""
    names = []
    for i, display in enumerate(images):
        name = f"{title} [{i + 1}]"
        cv2.imshow(name, display)
        names.append(name)
    if names:
        cv2.waitKey(1)
    return names


def poll_windows(names: List[str]) -> List[str]:
    """Process pending HighGUI events; returns the windows still open."""
    cv2.waitKey(1)
    return [n for n in names if cv2.getWindowProperty(n, cv2.WND_PROP_VISIBLE) >= 1]


class SymmetryApp:
    def __init__(self) -> None:
        self.running = False
        self._cap = None
        self.detector: Optional[FaceMeshDetector] = None
        self.session: Optional[SymmetrySession] = None
        self.series = ScoreSeries()
        self.last_scores: Optional[Scores] = None
        self._image_windows: List[str] = []

        self.root = tk.Tk()
        self.root.title("Facial Symmetry")
        self.status_var = tk.StringVar(value="Ready")
        self.clinical_mode = tk.BooleanVar(value=False)
        self.scorer_name = tk.StringVar(value=ClinicalScorer.name)
        self._build_ui()
        self.root.protocol("WM_DELETE_WINDOW", self._quit)

        log("=== App started ===")

    def _build_ui(self) -> None:
        frame = tk.Frame(self.root, padx=12, pady=12)
        frame.pack(fill="both", expand=True)

        tk.Label(frame, text="Facial Symmetry", font=("Segoe UI", 14, "bold")).pack(pady=(0, 8))
        info_text = (
            "1. Face the camera with even, frontal light\n"
            "2. Keep the head level (roll within 5 deg)\n"
            "3. Relax the mouth for the most stable reading"
        )
        tk.Label(frame, text=info_text, justify="left", fg="#555").pack(pady=(0, 10))

        tk.Button(frame, text="Start / Stop Camera", command=self._toggle_camera,
                  bg="#4CAF50", fg="white").pack(fill="x", pady=4)
        tk.Button(frame, text="Analyze Image(s)", command=self._analyze_images).pack(fill="x", pady=4)
        tk.Button(frame, text="Analyze Video", command=self._analyze_video).pack(fill="x", pady=4)
        tk.Button(frame, text="Export Series CSV", command=self._export_series).pack(fill="x", pady=4)
        tk.Checkbutton(frame, text="Clinical mode (guides)", variable=self.clinical_mode).pack(anchor="w", pady=(8, 0))

        scorer_box = tk.LabelFrame(frame, text="Method", padx=6, pady=4)
        scorer_box.pack(fill="x", pady=(8, 0))
        tk.Radiobutton(scorer_box, text="Clinical (per frame)", value=ClinicalScorer.name,
                       variable=self.scorer_name).pack(anchor="w")
        tk.Radiobutton(scorer_box, text="Mirrored distance (window average)", value=MirroredDistanceScorer.name,
                       variable=self.scorer_name).pack(anchor="w")

        tk.Button(frame, text="Exit", command=self._quit).pack(fill="x", pady=(12, 0))

        if not MEDIAPIPE_AVAILABLE:
            tk.Label(frame, text="MediaPipe not installed!", fg="red").pack(anchor="w")

        tk.Label(frame, textvariable=self.status_var, fg="#444", wraplength=320, justify="left").pack(pady=(10, 0))

    def _make_scorer(self) -> Scorer:
        if self.scorer_name.get() == MirroredDistanceScorer.name:
            return MirroredDistanceScorer()
        return ClinicalScorer()

    def _render(self, frame: np.ndarray, landmarks, scores: Scores) -> np.ndarray:
        display = frame.copy()
        if landmarks is not None:
            draw_landmarks(display, landmarks)
            if self.clinical_mode.get():
                draw_guides(display, clinical_guides(landmarks))
        draw_scores(display, scores)
        return display

    def _pump_ui(self) -> bool:
        try:
            self.root.update_idletasks()
            self.root.update()
        except tk.TclError:
            return False
        return True

    def _show_result(self, scores: Optional[Scores]) -> None:
        if scores is None or not scores.detected:
            self.status_var.set("No face detected")
            return
        text = format_summary(scores)
        worst = weakest_zone(scores)
        if worst is not None:
            text += f"\nTip ({worst[0]}): {worst[2]}"
        self.status_var.set(text)

    # --- live camera -----------------------------------------------------

    def _toggle_camera(self) -> None:
        if self.running:
            self.running = False
            return
        self._run_stream(CAMERA_INDEX, live=True)

    def _analyze_video(self) -> None:
        if self.running:
            messagebox.showinfo("Video", "Stop the camera first")
            return
        path = filedialog.askopenfilename(title="Select video", filetypes=VIDEO_TYPES)
        if not path:
            return
        self._run_stream(path, live=False)

    def _run_stream(self, source, live: bool) -> None:
        if not MEDIAPIPE_AVAILABLE:
            messagebox.showerror("Error", "MediaPipe not installed")
            return

        cap = cv2.VideoCapture(source)
        if not cap.isOpened():
            messagebox.showerror("Error", f"Could not open {'camera' if live else source}")
            return
        if live:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, CAMERA_WIDTH)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, CAMERA_HEIGHT)
            cap.set(cv2.CAP_PROP_FPS, CAMERA_FPS)
            cap.set(cv2.CAP_PROP_BUFFERSIZE, CAMERA_BUFFERSIZE)
        self._cap = cap
        log(f"{'Camera' if live else 'Video'} opened: {source}")

        self.detector = FaceMeshDetector(static_image_mode=False)
        self.session = SymmetrySession(self._make_scorer(), self.detector)
        self.session.start()
        self.series.clear()
        self.running = True
        self.status_var.set("Analyzing... press Q in the video window to stop")
        cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

        fps_filter = ExponentialBlend()
        t_prev = time.time()
        frame_count = 0
        try:
            while self.running:
                ret, frame = cap.read()
                if not ret:
                    break
                frame_count += 1

                if live and frame_count < WARMUP_FRAMES:
                    cv2.putText(frame, "Camera warming up...", (10, 25),
                                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
                    cv2.imshow(WINDOW_NAME, frame)
                    cv2.waitKey(1)
                    continue

                h, w = frame.shape[:2]
                landmarks = self.detector.detect(frame)
                scores = self.session.process_landmarks(landmarks, frame_size=(w, h))
                if scores.detected:
                    self.last_scores = scores
                    if live:
                        stamp = time.time()
                    else:
                        stamp = cap.get(cv2.CAP_PROP_POS_MSEC) / 1000.0
                    self.series.add(stamp, scores.global_score)

                now = time.time()
                fps = fps_filter(1.0 / max(now - t_prev, 1e-3))
                t_prev = now

                display = self._render(frame, landmarks, scores)
                cv2.putText(display, f"FPS: {fps:.0f}", (w - 110, 25),
                            cv2.FONT_HERSHEY_SIMPLEX, 0.55, (200, 200, 200), 1)
                cv2.imshow(WINDOW_NAME, display)

                if not self._pump_ui():
                    break
                key = cv2.waitKey(1) & 0xFF
                if key == 27 or key == ord("q"):
                    break
        except Exception as exc:
            warn(f"Stream error: {exc}")
            messagebox.showerror("Error", f"Analysis failed:\n{exc}")
        finally:
            self._stop_stream()

        self._show_result(self.last_scores)
        log(f"Series samples: {len(self.series)}")

    def _stop_stream(self) -> None:
        self.running = False
        self._image_windows = []
        if self.session is not None:
            self.session.stop()
            self.session = None
        if self.detector is not None:
            self.detector.close()
            self.detector = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        cv2.destroyAllWindows()

    # --- still images ----------------------------------------------------

    def _analyze_images(self) -> None:
        if self.running:
            messagebox.showinfo("Images", "Stop the camera first")
            return
        if not MEDIAPIPE_AVAILABLE:
            messagebox.showerror("Error", "MediaPipe not installed")
            return
        paths = filedialog.askopenfilenames(title="Select image(s)", filetypes=IMAGE_TYPES)
        if not paths:
            return

        self.status_var.set("Processing image...")
        scorer = ClinicalScorer()
        result: Optional[Scores] = None
        images: List[np.ndarray] = []
        with FaceMeshDetector(static_image_mode=True) as detector:
            for path in paths:
                image = cv2.imread(path, cv2.IMREAD_COLOR)
                if image is None:
                    warn(f"Unreadable image: {path}")
                    continue
                landmarks = detector.detect(image)
                # Images are scored independently: no smoothing, one frame.
                result = scorer.score(landmarks)
                log(f"{path}: {format_summary(result)}")
                images.append(self._render(image, landmarks, result))

        self._image_windows = show_images(images)
        self._show_result(result)
        self._poll_image_windows()

    def _poll_image_windows(self) -> None:
        # HighGUI only repaints inside waitKey; the Tk mainloop does not pump it.
        if self.running or not self._image_windows:
            return
        self._image_windows = poll_windows(self._image_windows)
        if self._image_windows:
            self.root.after(IMAGE_POLL_MS, self._poll_image_windows)

    def _export_series(self) -> None:
        if not len(self.series):
            messagebox.showinfo("Export", "No samples recorded yet")
            return
        path = filedialog.asksaveasfilename(defaultextension=".csv", initialfile="symmetry_series.csv",
                                            filetypes=[("CSV", "*.csv")])
        if not path:
            return
        try:
            self.series.to_csv(path)
        except OSError as exc:
            messagebox.showerror("Export", f"Could not write CSV:\n{exc}")
            return
        log(f"Series exported: {path} ({len(self.series)} samples)")
        self.status_var.set(f"Exported {len(self.series)} samples")

    def _quit(self) -> None:
        self._stop_stream()
        self.root.destroy()

    def run(self) -> None:
        self.root.mainloop()


def main() -> None:
    app = SymmetryApp()
    app.run()
