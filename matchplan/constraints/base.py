"""
Constraint contract, constraint sets and the fluent set builder.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional, Sequence

from ..context import SchedulingContext
from ..models import Event

Predicate = Callable[[Event, SchedulingContext], bool]


class Constraint(ABC):
    """
    A rule every candidate event must satisfy.

    Constraints never raise on a well-formed event; returning False only marks
    the candidate as rejected. Escalating a rejection into a failure is the
    scheduler's job.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name used in diagnostics."""

    @abstractmethod
    def is_satisfied(self, event: Event, context: SchedulingContext) -> bool:
        """Check ``event`` against the history in ``context``."""

    def describe_violation(self, event: Event, context: SchedulingContext) -> str:
        """Reason text recorded when ``event`` is rejected."""
        return f"{self.name} rejected {event}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CallableConstraint(Constraint):
    """Wrap an arbitrary ``(event, context) -> bool`` predicate."""

    def __init__(self, predicate: Predicate, name: str = "Custom Constraint"):
        if not callable(predicate):
            raise ValueError("Predicate must be callable")
        self.predicate = predicate
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def is_satisfied(self, event, context):
        return bool(self.predicate(event, context))


class ConstraintSet:
    """
    A conjunction of constraints.

    Members are checked in insertion order and evaluation stops at the first
    failure, so put the most restrictive constraints first.
    """

    def __init__(self, constraints: Optional[Sequence[Constraint]] = None):
        self._constraints = tuple(constraints or ())

    @staticmethod
    def create() -> "ConstraintSetBuilder":
        return ConstraintSetBuilder()

    @property
    def constraints(self) -> List[Constraint]:
        return list(self._constraints)

    def is_satisfied(self, event: Event, context: SchedulingContext) -> bool:
        return self.first_violation(event, context) is None

    def first_violation(self, event: Event, context: SchedulingContext) -> Optional[Constraint]:
        """Return the first constraint ``event`` fails, or None."""
        for constraint in self._constraints:
            if not constraint.is_satisfied(event, context):
                return constraint
        return None

    def is_empty(self) -> bool:
        return not self._constraints

    def __len__(self) -> int:
        return len(self._constraints)

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self._constraints)

    def __repr__(self) -> str:
        return f"ConstraintSet({[c.name for c in self._constraints]!r})"


class ConstraintSetBuilder:
    """Fluent assembly of a ConstraintSet."""

    def __init__(self):
        self._constraints: List[Constraint] = []

    def add(self, constraint: Constraint) -> "ConstraintSetBuilder":
        self._constraints.append(constraint)
        return self

    def no_repeat_pairings(self) -> "ConstraintSetBuilder":
        from .pairings import NoRepeatPairings
        return self.add(NoRepeatPairings())

    def minimum_rest_periods(self, min_rounds: int) -> "ConstraintSetBuilder":
        from .pairings import MinimumRestPeriodsConstraint
        return self.add(MinimumRestPeriodsConstraint(min_rounds))

    def seed_protection(self, top_seeds: int, protection_period: float) -> "ConstraintSetBuilder":
        from .seeding import SeedProtectionConstraint
        return self.add(SeedProtectionConstraint(top_seeds, protection_period))

    def consecutive_home_away(self, max_consecutive: int) -> "ConstraintSetBuilder":
        from .roles import ConsecutiveRoleConstraint
        return self.add(ConsecutiveRoleConstraint.home_away(max_consecutive))

    def custom(self, predicate: Predicate, name: str = "Custom Constraint") -> "ConstraintSetBuilder":
        return self.add(CallableConstraint(predicate, name))

    def build(self) -> ConstraintSet:
        return ConstraintSet(self._constraints)
