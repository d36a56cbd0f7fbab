"""Checklist state: the snapshot a presentation layer reads."""

from dataclasses import dataclass, field
from typing import Iterator, Tuple

from readycheck.types import CRITERIA, Criterion, CriterionResult


def _initial_items() -> Tuple[CriterionResult, ...]:
    return tuple(CriterionResult.initial(c) for c in CRITERIA)


@dataclass(frozen=True)
class ChecklistState:
    """Five criterion results in fixed order plus readiness.

    Attributes:
        items: One CriterionResult per Criterion, in ``Criterion`` order.
        is_ready: Latched readiness from the stabilization tracker.
        streak: Current consecutive all-pass count.
        required_streak: Streak needed for readiness.
    """

    items: Tuple[CriterionResult, ...] = field(default_factory=_initial_items)
    is_ready: bool = False
    streak: int = 0
    required_streak: int = 3

    def __post_init__(self) -> None:
        if tuple(r.criterion for r in self.items) != CRITERIA:
            raise ValueError("checklist items must cover every criterion in order")

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.items if r.passed)

    def __getitem__(self, criterion: Criterion) -> CriterionResult:
        return self.items[CRITERIA.index(criterion)]

    def __iter__(self) -> Iterator[CriterionResult]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def initial_checklist(required_streak: int = 3) -> ChecklistState:
    """All criteria ``checking``, streak 0, not ready."""
    return ChecklistState(required_streak=required_streak)


__all__ = ["ChecklistState", "initial_checklist"]
