"""Camera and face detection backends."""

from readycheck.backends.base import (
    CameraDevice,
    CapturedFrame,
    DetectedFace,
    FaceDetectionBackend,
)

__all__ = ["CameraDevice", "CapturedFrame", "DetectedFace", "FaceDetectionBackend"]
