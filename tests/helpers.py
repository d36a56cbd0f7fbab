"""Shared test helpers for readycheck tests."""

import threading
import time
from typing import Callable, List, Optional, Sequence, Union

import numpy as np

from readycheck.backends.base import CapturedFrame, DetectedFace

FRAME_W, FRAME_H = 640, 480


def face_for(
    center_x: float = 0.5,
    center_y: float = 0.5,
    width_ratio: float = 0.3,
    *,
    frame_w: int = FRAME_W,
    frame_h: int = FRAME_H,
    **optional,
) -> DetectedFace:
    """DetectedFace whose normalized geometry matches the given values.

    Extra keyword args (yaw, roll, smile_probability, left_eye_open,
    right_eye_open) are passed through.
    """
    w = width_ratio * frame_w
    h = w * 1.2
    left = center_x * frame_w - w / 2
    top = center_y * frame_h - h / 2
    return DetectedFace(bbox=(left, top, w, h), **optional)


def good_face() -> DetectedFace:
    """Face passing every criterion with default thresholds."""
    return face_for(
        0.5, 0.5, 0.3,
        yaw=0.0, roll=0.0, smile_probability=0.6,
        left_eye_open=0.9, right_eye_open=0.9,
    )


class FakeCamera:
    """Camera returning black frames; can return None or raise on demand."""

    def __init__(self, ready: bool = True, width: int = FRAME_W, height: int = FRAME_H):
        self.ready = ready
        self.width = width
        self.height = height
        self.capture_count = 0
        self.fail_next: List[Union[None, Exception]] = []

    @property
    def is_ready(self) -> bool:
        return self.ready

    def capture(self) -> Optional[CapturedFrame]:
        self.capture_count += 1
        if self.fail_next:
            failure = self.fail_next.pop(0)
            if failure is None:
                return None
            raise failure
        image = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        return CapturedFrame(image=image, width=self.width, height=self.height,
                             frame_id=self.capture_count)


FaceScript = Union[Sequence[DetectedFace], Exception, Callable[[], Sequence[DetectedFace]]]


class FakeDetector:
    """Detector replaying a script of per-call results.

    Each script entry is a list of faces, an exception to raise, or a
    callable returning faces. When the script runs out, ``default`` is used.
    ``gate`` (a threading.Event) blocks detect() until set; ``delay`` sleeps.
    Tracks the maximum number of concurrent detect() calls and how many
    were still running whenever cleanup() was called.
    """

    def __init__(self, script: Optional[List[FaceScript]] = None, default=None,
                 delay: float = 0.0, gate: Optional[threading.Event] = None):
        self.script = list(script or [])
        self.default = list(default or [])
        self.delay = delay
        self.gate = gate
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.initialized = 0
        self.cleaned_up = 0
        self.active_at_cleanup: List[int] = []
        self.started = threading.Event()
        self._lock = threading.Lock()

    def initialize(self) -> None:
        self.initialized += 1

    def cleanup(self) -> None:
        with self._lock:
            self.active_at_cleanup.append(self.active)
        self.cleaned_up += 1

    def detect(self, image):
        with self._lock:
            self.calls += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            if self.gate is not None:
                self.gate.wait(5.0)
            if self.delay:
                time.sleep(self.delay)
            entry = self.script.pop(0) if self.script else self.default
            if isinstance(entry, Exception):
                raise entry
            if callable(entry):
                return list(entry())
            return list(entry)
        finally:
            with self._lock:
                self.active -= 1
