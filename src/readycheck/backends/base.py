"""Collaborator protocols: camera device and face detection backend."""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import numpy as np


@dataclass
class CapturedFrame:
    """One still frame handed out by a camera.

    Attributes:
        image: BGR image as numpy array (H, W, 3).
        width: Frame width in pixels.
        height: Frame height in pixels.
        frame_id: Capture counter of the device.
    """

    image: np.ndarray
    width: int
    height: int
    frame_id: int = 0

    @classmethod
    def from_array(cls, image: np.ndarray, frame_id: int = 0) -> "CapturedFrame":
        h, w = image.shape[:2]
        return cls(image=image, width=w, height=h, frame_id=frame_id)


@dataclass
class DetectedFace:
    """Result from a face detection backend.

    Only the bounding box is mandatory. Optional fields left as ``None``
    are defaulted by the metrics extractor.

    Attributes:
        bbox: Bounding box (left, top, width, height) in pixels.
        yaw: Head yaw angle in degrees.
        roll: Head roll angle in degrees.
        smile_probability: Smile probability [0, 1].
        left_eye_open: Left eye open probability [0, 1].
        right_eye_open: Right eye open probability [0, 1].
    """

    bbox: Tuple[float, float, float, float]  # left, top, w, h in pixels
    yaw: Optional[float] = None
    roll: Optional[float] = None
    smile_probability: Optional[float] = None
    left_eye_open: Optional[float] = None
    right_eye_open: Optional[float] = None


class CameraDevice(Protocol):
    """Protocol for camera devices.

    ``capture()`` may return ``None`` or raise; the sampling loop treats
    both as a skipped cycle.
    """

    @property
    def is_ready(self) -> bool:
        """Whether the device delivers frames."""
        ...

    def capture(self) -> Optional[CapturedFrame]:
        """Capture one still frame."""
        ...


class FaceDetectionBackend(Protocol):
    """Protocol for face detection backends.

    Implementations should be swappable without changing evaluation logic.
    """

    def initialize(self) -> None:
        """Load models."""
        ...

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in a BGR image."""
        ...

    def cleanup(self) -> None:
        """Release resources."""
        ...


__all__ = ["CapturedFrame", "DetectedFace", "CameraDevice", "FaceDetectionBackend"]
