"""FaceMetrics extraction from raw detector output.

Missing optional detector fields are replaced by the named defaults from
``readycheck.config``, the same values ``FaceMetrics`` uses for its fields.
"""

import logging
from typing import Optional, Sequence

from readycheck.backends.base import CapturedFrame, DetectedFace, FaceDetectionBackend
from readycheck.config import (
    ASSUMED_EYE_OPEN_PROBABILITY,
    DEFAULT_ROLL_ANGLE,
    DEFAULT_SMILE_PROBABILITY,
    DEFAULT_YAW_ANGLE,
)
from readycheck.types import FaceMetrics

logger = logging.getLogger(__name__)


def _or_default(value: Optional[float], default: float) -> float:
    return default if value is None else float(value)


def extract_metrics(
    faces: Sequence[DetectedFace],
    frame_width: float,
    frame_height: float,
) -> Optional[FaceMetrics]:
    """Build FaceMetrics for the primary face, or ``None`` when no face was found.

    The primary face is the first entry returned by the detector; no
    "best face" selection is made.

    Raises:
        ValueError: If the frame dimensions are not positive.
    """
    if frame_width <= 0 or frame_height <= 0:
        raise ValueError(f"invalid frame size {frame_width}x{frame_height}")
    if not faces:
        return None

    if len(faces) > 1:
        logger.debug("%d faces detected, using the first", len(faces))

    face = faces[0]
    left, top, width, height = face.bbox
    return FaceMetrics(
        center_x=(left + width / 2) / frame_width,
        center_y=(top + height / 2) / frame_height,
        width_ratio=width / frame_width,
        yaw_angle=_or_default(face.yaw, DEFAULT_YAW_ANGLE),
        roll_angle=_or_default(face.roll, DEFAULT_ROLL_ANGLE),
        smile_probability=_or_default(face.smile_probability, DEFAULT_SMILE_PROBABILITY),
        left_eye_open=_or_default(face.left_eye_open, ASSUMED_EYE_OPEN_PROBABILITY),
        right_eye_open=_or_default(face.right_eye_open, ASSUMED_EYE_OPEN_PROBABILITY),
        face_count=len(faces),
    )


class FaceMetricsExtractor:
    """Runs the detector on a captured frame and reduces the result to FaceMetrics.

    The frame image is not retained: only the derived metrics leave
    :meth:`extract`.

    Args:
        backend: Face detection backend.
    """

    def __init__(self, backend: FaceDetectionBackend):
        self._backend = backend
        self._initialized = False

    def initialize(self) -> None:
        if not self._initialized:
            self._backend.initialize()
            self._initialized = True

    def cleanup(self) -> None:
        if self._initialized:
            self._backend.cleanup()
            self._initialized = False

    def extract(self, frame: CapturedFrame) -> Optional[FaceMetrics]:
        """Detect faces on *frame* and return the primary face's metrics.

        Detector exceptions propagate; the sampling loop decides what a
        failed detection means for the cycle.
        """
        faces = self._backend.detect(frame.image) or []
        return extract_metrics(faces, frame.width, frame.height)


__all__ = [
    "DEFAULT_YAW_ANGLE",
    "DEFAULT_ROLL_ANGLE",
    "DEFAULT_SMILE_PROBABILITY",
    "ASSUMED_EYE_OPEN_PROBABILITY",
    "extract_metrics",
    "FaceMetricsExtractor",
]
