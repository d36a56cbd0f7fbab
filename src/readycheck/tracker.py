"""Stabilization tracker: consecutive all-pass streak with a latched ready flag."""

from readycheck.types import CRITERIA


class StabilizationTracker:
    """Promotes to ready after N consecutive fully passing cycles.

    - all criteria pass: streak + 1
    - anything else: streak reset to 0
    - ready latches on the cycle the streak reaches ``required_streak``
      and stays set until :meth:`reset`

    Args:
        required_streak: Consecutive all-pass cycles needed (default: 3).
        criteria_count: Criteria that must pass in a cycle (default: 5).

    Example:
        >>> tracker = StabilizationTracker()
        >>> [tracker.update(5) for _ in range(3)]
        [False, False, True]
    """

    def __init__(self, required_streak: int = 3, criteria_count: int = len(CRITERIA)):
        if required_streak < 1:
            raise ValueError(f"required_streak must be >= 1, got {required_streak}")
        self._required = required_streak
        self._criteria_count = criteria_count
        self._streak = 0
        self._ready = False

    @property
    def streak(self) -> int:
        return self._streak

    @property
    def required_streak(self) -> int:
        return self._required

    @property
    def is_ready(self) -> bool:
        return self._ready

    def update(self, passed: int) -> bool:
        """Feed one cycle's passed count; return the (latched) ready flag."""
        if passed >= self._criteria_count:
            self._streak += 1
            if self._streak >= self._required:
                self._ready = True
        else:
            self._streak = 0
        return self._ready

    def reset(self) -> None:
        self._streak = 0
        self._ready = False


__all__ = ["StabilizationTracker"]
