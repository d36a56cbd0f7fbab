"""Core data types of the readiness check."""

from dataclasses import dataclass
from enum import Enum

from readycheck.config import (
    ASSUMED_EYE_OPEN_PROBABILITY,
    DEFAULT_ROLL_ANGLE,
    DEFAULT_SMILE_PROBABILITY,
    DEFAULT_YAW_ANGLE,
)


class Criterion(Enum):
    """The five readiness criteria, in checklist order."""

    FACE = "face"
    FRAMING = "framing"
    EYE_CONTACT = "eyeContact"
    EXPRESSION = "expression"
    HEAD_POSITION = "headPosition"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def initial_detail(self) -> str:
        return "Looking..." if self is Criterion.FACE else "Checking..."


_LABELS = {
    Criterion.FACE: "Face Detected",
    Criterion.FRAMING: "Face Centered",
    Criterion.EYE_CONTACT: "Eye Contact",
    Criterion.EXPRESSION: "Good Expression",
    Criterion.HEAD_POSITION: "Head Position",
}

CRITERIA = tuple(Criterion)


class CheckStatus(Enum):
    CHECKING = "checking"
    PASS = "pass"
    FAIL = "fail"


@dataclass(frozen=True)
class CriterionResult:
    """Status of one criterion plus the hint shown to the user."""

    criterion: Criterion
    status: CheckStatus = CheckStatus.CHECKING
    detail: str = ""

    @property
    def label(self) -> str:
        return self.criterion.label

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASS

    @classmethod
    def initial(cls, criterion: Criterion) -> "CriterionResult":
        return cls(criterion, CheckStatus.CHECKING, criterion.initial_detail)


@dataclass(frozen=True)
class FaceMetrics:
    """Normalized geometry and classification of the primary face in one frame.

    Attributes:
        center_x: Face center x / frame width.
        center_y: Face center y / frame height.
        width_ratio: Face width / frame width.
        yaw_angle: Head yaw in degrees.
        roll_angle: Head roll in degrees.
        smile_probability: Smile probability [0, 1].
        left_eye_open: Left eye open probability [0, 1].
        right_eye_open: Right eye open probability [0, 1].
        face_count: Number of faces the detector returned for the frame.
    """

    center_x: float
    center_y: float
    width_ratio: float
    yaw_angle: float = DEFAULT_YAW_ANGLE
    roll_angle: float = DEFAULT_ROLL_ANGLE
    smile_probability: float = DEFAULT_SMILE_PROBABILITY
    left_eye_open: float = ASSUMED_EYE_OPEN_PROBABILITY
    right_eye_open: float = ASSUMED_EYE_OPEN_PROBABILITY
    face_count: int = 1


class DisplayPhase(Enum):
    """Coarse phase shown by a presentation layer."""

    NOT_STARTED = "not-started"
    ACTIVE = "active"
    READY = "ready"


class LoopPhase(Enum):
    """Sampling loop states.

    IDLE -> WARMING_UP -> SAMPLING -> READY; any state -> IDLE on stop.
    """

    IDLE = "idle"
    WARMING_UP = "warming_up"
    SAMPLING = "sampling"
    READY = "ready"

    @property
    def display(self) -> DisplayPhase:
        if self is LoopPhase.IDLE:
            return DisplayPhase.NOT_STARTED
        if self is LoopPhase.READY:
            return DisplayPhase.READY
        return DisplayPhase.ACTIVE

    @property
    def status_text(self) -> str:
        return _STATUS_TEXT[self]


_STATUS_TEXT = {
    LoopPhase.IDLE: "Pre-Recording Check",
    LoopPhase.WARMING_UP: "Starting camera...",
    LoopPhase.SAMPLING: "Analyzing...",
    LoopPhase.READY: "You're Ready!",
}


__all__ = [
    "Criterion",
    "CRITERIA",
    "CheckStatus",
    "CriterionResult",
    "FaceMetrics",
    "DisplayPhase",
    "LoopPhase",
]
