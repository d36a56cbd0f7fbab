"""OpenCV camera and Haar cascade face detection backend.

The Haar backend only reports what cascades can support: a bounding box,
eye openness and roll when both eyes are found, and a binary smile.
Yaw is never reported and falls back to the extractor default.
"""

import logging
import math
import threading
from typing import List, Optional, Union

import cv2
import numpy as np

from readycheck.backends.base import CapturedFrame, DetectedFace

logger = logging.getLogger(__name__)


class OpenCVCamera:
    """Camera device backed by ``cv2.VideoCapture``.

    Args:
        source: Camera index or video path/URL.
        width: Requested capture width (None keeps the device default).
        height: Requested capture height (None keeps the device default).

    Example:
        >>> with OpenCVCamera(0) as camera:
        ...     frame = camera.capture()
    """

    def __init__(
        self,
        source: Union[int, str] = 0,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ):
        self._source = source
        self._width = width
        self._height = height
        self._cap: Optional[cv2.VideoCapture] = None
        self._ready = False
        self._frame_id = 0
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self._ready

    def open(self) -> bool:
        """Open the device and read one frame. Returns the ready flag."""
        with self._lock:
            if self._cap is None:
                cap = cv2.VideoCapture(self._source)
                if self._width:
                    cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
                if self._height:
                    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
                self._cap = cap
            if not self._cap.isOpened():
                logger.warning("Cannot open camera source %r", self._source)
                return False
            ok, _ = self._cap.read()
            self._ready = bool(ok)
            if self._ready:
                logger.info("Camera %r ready", self._source)
            return self._ready

    def capture(self) -> Optional[CapturedFrame]:
        with self._lock:
            if not self._ready or self._cap is None:
                return None
            ok, image = self._cap.read()
            if not ok or image is None:
                return None
            self._frame_id += 1
            return CapturedFrame.from_array(image, frame_id=self._frame_id)

    def close(self) -> None:
        with self._lock:
            self._ready = False
            if self._cap is not None:
                self._cap.release()
                self._cap = None

    def __enter__(self) -> "OpenCVCamera":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _cascade(name: str) -> cv2.CascadeClassifier:
    path = cv2.data.haarcascades + name
    cascade = cv2.CascadeClassifier(path)
    if cascade.empty():
        raise RuntimeError(f"Failed to load Haar cascade: {path}")
    return cascade


def roll_from_eyes(left_center: tuple, right_center: tuple) -> float:
    """Roll in degrees from the line through both eye centers (image coords)."""
    dx = right_center[0] - left_center[0]
    dy = right_center[1] - left_center[1]
    return math.degrees(math.atan2(dy, dx))


class HaarFaceBackend:
    """Face detection with OpenCV's bundled Haar cascades.

    Args:
        scale_factor: ``detectMultiScale`` scale step.
        min_neighbors: ``detectMultiScale`` neighbor count for faces.
        min_face_px: Minimum face side in pixels.
        classify: Run eye and smile cascades inside each face.
    """

    def __init__(
        self,
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_face_px: int = 60,
        classify: bool = True,
    ):
        self._scale_factor = scale_factor
        self._min_neighbors = min_neighbors
        self._min_face_px = min_face_px
        self._classify = classify
        self._face = None
        self._eye = None
        self._smile = None

    def initialize(self) -> None:
        if self._face is not None:
            return
        self._face = _cascade("haarcascade_frontalface_default.xml")
        if self._classify:
            self._eye = _cascade("haarcascade_eye.xml")
            self._smile = _cascade("haarcascade_smile.xml")
        logger.debug("Haar cascades loaded (classify=%s)", self._classify)

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        face_cascade, eye_cascade, smile_cascade = self._face, self._eye, self._smile
        if face_cascade is None:
            raise RuntimeError("HaarFaceBackend not initialized")

        gray = image if image.ndim == 2 else cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        gray = cv2.equalizeHist(gray)
        rects = face_cascade.detectMultiScale(
            gray,
            scaleFactor=self._scale_factor,
            minNeighbors=self._min_neighbors,
            minSize=(self._min_face_px, self._min_face_px),
        )

        faces = []
        for (x, y, w, h) in rects:
            face = DetectedFace(bbox=(float(x), float(y), float(w), float(h)))
            if self._classify:
                self._classify_face(gray[y:y + h, x:x + w], face, eye_cascade, smile_cascade)
            faces.append(face)
        return faces

    def _classify_face(
        self, roi: np.ndarray, face: DetectedFace, eye_cascade, smile_cascade,
    ) -> None:
        h, w = roi.shape[:2]

        upper = roi[: h // 2]
        eyes = eye_cascade.detectMultiScale(upper, scaleFactor=1.1, minNeighbors=8)
        if len(eyes) == 0:
            # The open-eye cascade found nothing: report both eyes closed.
            face.left_eye_open = 0.0
            face.right_eye_open = 0.0
        elif len(eyes) >= 2:
            # Two largest hits, ordered left to right in the image.
            pair = sorted(eyes, key=lambda e: e[2] * e[3], reverse=True)[:2]
            pair = sorted(pair, key=lambda e: e[0])
            centers = [(ex + ew / 2, ey + eh / 2) for (ex, ey, ew, eh) in pair]
            face.roll = roll_from_eyes(centers[0], centers[1])
            face.left_eye_open = 1.0
            face.right_eye_open = 1.0

        lower = roi[h // 2:]
        smiles = smile_cascade.detectMultiScale(
            lower, scaleFactor=1.7, minNeighbors=20, minSize=(w // 4, h // 10),
        )
        face.smile_probability = 1.0 if len(smiles) > 0 else 0.0

    def cleanup(self) -> None:
        self._face = None
        self._eye = None
        self._smile = None


__all__ = ["OpenCVCamera", "HaarFaceBackend", "roll_from_eyes"]
