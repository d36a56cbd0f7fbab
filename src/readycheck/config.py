"""Threshold and sampling configuration for the readiness check.

Both configs are immutable and meant to be built once at startup::

    >>> from readycheck.config import ThresholdConfig
    >>> strict = ThresholdConfig(center_tolerance=0.15, head_yaw_limit=12.0)
    >>> relaxed = strict.replace(expression_threshold=0.0)
"""

from dataclasses import dataclass, fields, replace as _replace
from typing import Any, Dict

# Vertical framing tolerance is looser than horizontal by this amount.
VERTICAL_SLACK = 0.1

# Smile probability above which the expression hint reads "Great energy!".
GREAT_ENERGY_SMILE = 0.5

# Stand-ins for detector fields that are missing. They decide pass/fail for
# detectors that do not classify eyes, smile or head pose.
DEFAULT_YAW_ANGLE = 0.0
DEFAULT_ROLL_ANGLE = 0.0
DEFAULT_SMILE_PROBABILITY = 0.0
# Above the default eye_open_threshold (0.4): a missing eye value reads as open.
ASSUMED_EYE_OPEN_PROBABILITY = 0.8


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True)
class ThresholdConfig:
    """Per-criterion thresholds.

    Attributes:
        center_tolerance: Max normalized offset of the face center from the
            frame center (horizontal; vertical gets ``VERTICAL_SLACK`` extra).
        head_yaw_limit: Max absolute yaw in degrees for eye contact.
        head_roll_limit: Max absolute roll in degrees for a straight head.
        eye_open_threshold: Min per-eye open probability.
        expression_threshold: Min smile probability.
        min_face_size: Min face width / frame width.
        max_face_size: Max face width / frame width.
    """

    center_tolerance: float = 0.22
    head_yaw_limit: float = 18.0
    head_roll_limit: float = 15.0
    eye_open_threshold: float = 0.4
    expression_threshold: float = 0.12
    min_face_size: float = 0.15
    max_face_size: float = 0.80

    def __post_init__(self) -> None:
        if self.center_tolerance < 0:
            raise ValueError(f"center_tolerance must be >= 0, got {self.center_tolerance}")
        if self.head_yaw_limit < 0 or self.head_roll_limit < 0:
            raise ValueError("head angle limits must be >= 0")
        _check_probability("eye_open_threshold", self.eye_open_threshold)
        _check_probability("expression_threshold", self.expression_threshold)
        _check_probability("min_face_size", self.min_face_size)
        _check_probability("max_face_size", self.max_face_size)
        if self.min_face_size > self.max_face_size:
            raise ValueError(
                f"min_face_size ({self.min_face_size}) exceeds "
                f"max_face_size ({self.max_face_size})"
            )

    def replace(self, **overrides: Any) -> "ThresholdConfig":
        """Return a validated copy with *overrides* applied (``None`` values ignored)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return _replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class SamplingConfig:
    """Timing policy of the sampling loop.

    Attributes:
        settle_delay_sec: Wait after the camera-ready signal before the first
            cycle. 0 starts sampling synchronously on the signal.
        period_sec: Interval between periodic triggers. 0 disables the
            periodic trigger; cycles are then driven with ``trigger()``.
        required_streak: Consecutive all-pass cycles needed for readiness.
    """

    settle_delay_sec: float = 1.0
    period_sec: float = 0.8
    required_streak: int = 3

    def __post_init__(self) -> None:
        if self.settle_delay_sec < 0:
            raise ValueError(f"settle_delay_sec must be >= 0, got {self.settle_delay_sec}")
        if self.period_sec < 0:
            raise ValueError(f"period_sec must be >= 0, got {self.period_sec}")
        if self.required_streak < 1:
            raise ValueError(f"required_streak must be >= 1, got {self.required_streak}")


DEFAULT_THRESHOLDS = ThresholdConfig()
DEFAULT_SAMPLING = SamplingConfig()


__all__ = [
    "VERTICAL_SLACK",
    "GREAT_ENERGY_SMILE",
    "DEFAULT_YAW_ANGLE",
    "DEFAULT_ROLL_ANGLE",
    "DEFAULT_SMILE_PROBABILITY",
    "ASSUMED_EYE_OPEN_PROBABILITY",
    "ThresholdConfig",
    "SamplingConfig",
    "DEFAULT_THRESHOLDS",
    "DEFAULT_SAMPLING",
]
