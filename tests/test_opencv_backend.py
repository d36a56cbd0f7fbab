"""Tests for the OpenCV camera and Haar cascade backend."""

from unittest.mock import Mock

import numpy as np
import pytest

from readycheck.backends.opencv import HaarFaceBackend, OpenCVCamera, roll_from_eyes
from readycheck.config import DEFAULT_THRESHOLDS
from readycheck.evaluator import evaluate_eye_contact
from readycheck.metrics import extract_metrics
from readycheck.types import CheckStatus


class TestRollFromEyes:
    def test_level_eyes(self):
        assert roll_from_eyes((10, 50), (60, 50)) == pytest.approx(0.0)

    def test_tilted(self):
        assert roll_from_eyes((0, 0), (10, 10)) == pytest.approx(45.0)
        assert roll_from_eyes((0, 10), (10, 0)) == pytest.approx(-45.0)


class TestHaarFaceBackend:
    def test_blank_image_has_no_faces(self):
        backend = HaarFaceBackend()
        backend.initialize()
        try:
            assert backend.detect(np.zeros((240, 320, 3), dtype=np.uint8)) == []
        finally:
            backend.cleanup()

    def test_grayscale_input(self):
        backend = HaarFaceBackend(classify=False)
        backend.initialize()
        assert backend.detect(np.full((240, 320), 128, dtype=np.uint8)) == []

    def test_detect_requires_initialize(self):
        backend = HaarFaceBackend(classify=False)
        with pytest.raises(RuntimeError, match="not initialized"):
            backend.detect(np.zeros((120, 160, 3), dtype=np.uint8))

    def test_detect_after_cleanup_does_not_reload(self):
        backend = HaarFaceBackend(classify=False)
        backend.initialize()
        backend.cleanup()
        with pytest.raises(RuntimeError, match="not initialized"):
            backend.detect(np.zeros((120, 160, 3), dtype=np.uint8))
        assert backend._face is None


def _stub_backend(eyes, smiles=()):
    """Backend whose cascades are mocks returning fixed rectangles."""
    backend = HaarFaceBackend()
    backend._face = Mock()
    backend._face.detectMultiScale.return_value = [(100, 80, 120, 120)]
    backend._eye = Mock()
    backend._eye.detectMultiScale.return_value = eyes
    backend._smile = Mock()
    backend._smile.detectMultiScale.return_value = smiles
    return backend


class TestHaarClassification:
    IMAGE = np.zeros((240, 320, 3), dtype=np.uint8)

    def test_no_eyes_reported_closed(self):
        [face] = _stub_backend(eyes=()).detect(self.IMAGE)
        assert face.left_eye_open == 0.0
        assert face.right_eye_open == 0.0
        assert face.roll is None

    def test_no_eyes_fails_eye_contact(self):
        [face] = _stub_backend(eyes=()).detect(self.IMAGE)
        metrics = extract_metrics([face], 320, 240)
        assert evaluate_eye_contact(metrics, DEFAULT_THRESHOLDS).status is CheckStatus.FAIL

    def test_two_eyes_open_with_roll(self):
        [face] = _stub_backend(eyes=[(70, 20, 20, 20), (20, 30, 20, 20)]).detect(self.IMAGE)
        assert face.left_eye_open == 1.0
        assert face.right_eye_open == 1.0
        assert face.roll == pytest.approx(roll_from_eyes((30, 40), (80, 30)))

    def test_single_eye_left_unknown(self):
        [face] = _stub_backend(eyes=[(20, 30, 20, 20)]).detect(self.IMAGE)
        assert face.left_eye_open is None
        assert face.right_eye_open is None

    def test_smile_hit(self):
        [face] = _stub_backend(eyes=(), smiles=[(10, 10, 40, 20)]).detect(self.IMAGE)
        assert face.smile_probability == 1.0


class TestOpenCVCamera:
    def test_missing_source_not_ready(self, tmp_path):
        camera = OpenCVCamera(str(tmp_path / "missing.mp4"))
        assert camera.open() is False
        assert camera.is_ready is False
        assert camera.capture() is None
        camera.close()

    def test_capture_before_open(self):
        camera = OpenCVCamera("does-not-exist.mp4")
        assert camera.capture() is None

    def test_reads_video_file(self, tmp_path):
        import cv2

        path = tmp_path / "clip.mp4"
        writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"mp4v"), 10, (160, 120))
        for i in range(5):
            writer.write(np.full((120, 160, 3), i * 40, dtype=np.uint8))
        writer.release()

        with OpenCVCamera(str(path)) as camera:
            assert camera.is_ready
            frame = camera.capture()
            assert frame is not None
            assert (frame.width, frame.height) == (160, 120)
            assert frame.frame_id == 1
        assert camera.is_ready is False
