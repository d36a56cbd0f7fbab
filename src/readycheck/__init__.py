"""readycheck - Camera readiness checklist before recording.

Samples a camera, scores five criteria per frame (face, framing, eye
contact, expression, head position) and reports ready once every
criterion passed on several consecutive cycles.

Quick Start:
    >>> from readycheck import SamplingLoop
    >>> from readycheck.backends.opencv import HaarFaceBackend, OpenCVCamera
    >>> camera = OpenCVCamera(0)
    >>> with SamplingLoop(camera, HaarFaceBackend()) as loop:
    ...     loop.start()
    ...     camera.open()
    ...     loop.camera_ready()
    ...     loop.wait_ready(timeout=30.0)

Single frame:
    >>> from readycheck import evaluate, FaceMetrics
    >>> results = evaluate(FaceMetrics(center_x=0.5, center_y=0.5, width_ratio=0.3))
"""

from readycheck.checklist import ChecklistState, initial_checklist
from readycheck.config import (
    DEFAULT_SAMPLING,
    DEFAULT_THRESHOLDS,
    SamplingConfig,
    ThresholdConfig,
)
from readycheck.evaluator import evaluate, passed_count
from readycheck.loop import CycleOutcome, SamplingLoop, SessionStats
from readycheck.metrics import FaceMetricsExtractor, extract_metrics
from readycheck.tracker import StabilizationTracker
from readycheck.types import (
    CRITERIA,
    CheckStatus,
    Criterion,
    CriterionResult,
    DisplayPhase,
    FaceMetrics,
    LoopPhase,
)

__all__ = [
    # Configuration
    "ThresholdConfig",
    "SamplingConfig",
    "DEFAULT_THRESHOLDS",
    "DEFAULT_SAMPLING",
    # Types
    "Criterion",
    "CRITERIA",
    "CheckStatus",
    "CriterionResult",
    "FaceMetrics",
    "LoopPhase",
    "DisplayPhase",
    # Components
    "extract_metrics",
    "FaceMetricsExtractor",
    "evaluate",
    "passed_count",
    "StabilizationTracker",
    "ChecklistState",
    "initial_checklist",
    "SamplingLoop",
    "CycleOutcome",
    "SessionStats",
]
