"""Criterion evaluator: FaceMetrics + thresholds -> five criterion results.

Pure and deterministic. Each call judges one frame on its own; carrying
results forward between cycles is the sampling loop's job.

Rules (checklist order):

- face: pass when the extractor produced metrics for a primary face
- framing: center offset within tolerance (vertical gets extra slack)
  and face width ratio within [min_face_size, max_face_size]
- eye contact: both eyes open and |yaw| below the yaw limit
- expression: smile probability above the expression threshold
- head position: |roll| below the roll limit

Without a face only the face criterion fails; the rest stay ``checking``.
"""

from typing import Optional, Tuple

from readycheck.config import (
    DEFAULT_THRESHOLDS,
    GREAT_ENERGY_SMILE,
    VERTICAL_SLACK,
    ThresholdConfig,
)
from readycheck.types import CheckStatus, Criterion, CriterionResult, FaceMetrics

Evaluation = Tuple[CriterionResult, ...]

NEED_FACE = "Need face"


def _passed(criterion: Criterion, detail: str) -> CriterionResult:
    return CriterionResult(criterion, CheckStatus.PASS, detail)


def _failed(criterion: Criterion, detail: str) -> CriterionResult:
    return CriterionResult(criterion, CheckStatus.FAIL, detail)


def evaluate_framing(m: FaceMetrics, cfg: ThresholdConfig) -> CriterionResult:
    off_x = abs(m.center_x - 0.5)
    off_y = abs(m.center_y - 0.5)
    centered = off_x < cfg.center_tolerance and off_y < cfg.center_tolerance + VERTICAL_SLACK
    good_size = cfg.min_face_size <= m.width_ratio <= cfg.max_face_size

    if centered and good_size:
        return _passed(Criterion.FRAMING, "Perfect")

    # Centering hint wins over size; report the dominant axis only.
    if not centered:
        if off_x > off_y:
            hint = "Move right" if m.center_x < 0.5 else "Move left"
        else:
            hint = "Move down" if m.center_y < 0.5 else "Move up"
    else:
        hint = "Move closer" if m.width_ratio < cfg.min_face_size else "Move back"
    return _failed(Criterion.FRAMING, hint)


def evaluate_eye_contact(m: FaceMetrics, cfg: ThresholdConfig) -> CriterionResult:
    eyes_ok = (
        m.left_eye_open > cfg.eye_open_threshold
        and m.right_eye_open > cfg.eye_open_threshold
    )
    looking_ok = abs(m.yaw_angle) < cfg.head_yaw_limit

    if eyes_ok and looking_ok:
        return _passed(Criterion.EYE_CONTACT, "Great!")
    return _failed(Criterion.EYE_CONTACT, "Open eyes" if not eyes_ok else "Look at camera")


def evaluate_expression(m: FaceMetrics, cfg: ThresholdConfig) -> CriterionResult:
    if m.smile_probability > cfg.expression_threshold:
        detail = "Great energy!" if m.smile_probability > GREAT_ENERGY_SMILE else "Engaged"
        return _passed(Criterion.EXPRESSION, detail)
    return _failed(Criterion.EXPRESSION, "Smile a bit")


def evaluate_head_position(m: FaceMetrics, cfg: ThresholdConfig) -> CriterionResult:
    if abs(m.roll_angle) < cfg.head_roll_limit:
        return _passed(Criterion.HEAD_POSITION, "Good")
    return _failed(Criterion.HEAD_POSITION, "Straighten head")


def evaluate(
    metrics: Optional[FaceMetrics],
    config: Optional[ThresholdConfig] = None,
) -> Evaluation:
    """Judge one frame.

    Args:
        metrics: Primary face metrics, or ``None`` when no face was found.
        config: Thresholds (defaults to ``DEFAULT_THRESHOLDS``).

    Returns:
        Five CriterionResults in ``Criterion`` order.
    """
    cfg = config or DEFAULT_THRESHOLDS

    if metrics is None:
        return (_failed(Criterion.FACE, "Not found"),) + tuple(
            CriterionResult(c, CheckStatus.CHECKING, NEED_FACE)
            for c in Criterion
            if c is not Criterion.FACE
        )

    return (
        _passed(Criterion.FACE, "Visible"),
        evaluate_framing(metrics, cfg),
        evaluate_eye_contact(metrics, cfg),
        evaluate_expression(metrics, cfg),
        evaluate_head_position(metrics, cfg),
    )


def passed_count(results: Evaluation) -> int:
    return sum(1 for r in results if r.passed)


__all__ = [
    "Evaluation",
    "NEED_FACE",
    "evaluate",
    "evaluate_framing",
    "evaluate_eye_contact",
    "evaluate_expression",
    "evaluate_head_position",
    "passed_count",
]
