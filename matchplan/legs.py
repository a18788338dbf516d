"""
Leg strategies: how legs after the first are derived from leg one.

A strategy works on leg one's resolved participant pairs, so it can swap
home and away or leave them as they are. The scheduler validates every event
a strategy produces against the full cross-leg history.
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .constraints.base import ConstraintSet
from .constraints.pairings import NoRepeatPairings
from .context import SchedulingContext
from .matchups import rounds_per_leg
from .models import Event, Participant, Round


@dataclass(frozen=True)
class GenerationPlan:
    """Advisory pre-flight estimate of what a strategy will generate."""
    total_events: int
    events_per_leg: int
    rounds_per_leg: int
    requires_randomization: bool = False
    strategy_data: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def get_strategy_value(self, key: str, default: Any = None) -> Any:
        return self.strategy_data.get(key, default)

    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class ConstraintSatisfiabilityReport:
    """Result of a strategy's structural check of a configuration."""
    can_satisfy: bool
    satisfiable_constraints: List[str] = field(default_factory=list)
    unsatisfiable_constraints: List[str] = field(default_factory=list)
    conflicting_constraints: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    analysis_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, satisfiable_constraints: Optional[List[str]] = None,
                analysis_data: Optional[Dict[str, Any]] = None) -> "ConstraintSatisfiabilityReport":
        return cls(True, satisfiable_constraints or [], analysis_data=analysis_data or {})

    @classmethod
    def failure(cls, unsatisfiable_constraints: Optional[List[str]] = None,
                conflicting_constraints: Optional[List[str]] = None,
                suggestions: Optional[List[str]] = None,
                analysis_data: Optional[Dict[str, Any]] = None) -> "ConstraintSatisfiabilityReport":
        return cls(
            False,
            unsatisfiable_constraints=unsatisfiable_constraints or [],
            conflicting_constraints=conflicting_constraints or [],
            suggestions=suggestions or [],
            analysis_data=analysis_data or {},
        )

    def get_analysis_value(self, key: str, default: Any = None) -> Any:
        return self.analysis_data.get(key, default)

    def has_issues(self) -> bool:
        return bool(self.unsatisfiable_constraints or self.conflicting_constraints)

    @property
    def summary(self) -> str:
        if self.can_satisfy:
            return "All constraints can be satisfied by this strategy."

        issues = []
        if self.unsatisfiable_constraints:
            issues.append(f"Unsatisfiable constraints: {', '.join(self.unsatisfiable_constraints)}")
        if self.conflicting_constraints:
            issues.append(f"Conflicting constraints: {', '.join(self.conflicting_constraints)}")
        return " | ".join(issues)


class LegStrategy(ABC):
    """Plans and generates the events of every leg after the first."""

    name = "abstract"
    requires_randomization = False

    def plan_generation(self, participants: Sequence[Participant], total_legs: int,
                        participants_per_event: int, constraints: ConstraintSet) -> GenerationPlan:
        """
        Estimate the totals this strategy will produce.

        The plan is advisory only; the scheduler's completeness check is the
        authority on whether a schedule is complete.
        """
        n = len(participants)
        events_per_leg = n * (n - 1) // 2
        warnings = []
        if total_legs > 1 and any(isinstance(c, NoRepeatPairings) for c in constraints):
            warnings.append("No Repeat Pairings rejects every pairing of legs after the first")

        return GenerationPlan(
            total_events=events_per_leg * total_legs,
            events_per_leg=events_per_leg,
            rounds_per_leg=rounds_per_leg(n),
            requires_randomization=self.requires_randomization,
            strategy_data=self._strategy_data(total_legs),
            warnings=warnings,
        )

    @abstractmethod
    def generate_event_for_leg(self, participants: Sequence[Participant], leg: int, round_number: int,
                               context: SchedulingContext) -> Optional[Event]:
        """
        Produce one event of ``leg`` from a leg-one pair.

        Args:
            participants: The leg-one event's participants, in leg-one order
            leg: Leg being generated (1-based)
            round_number: Global round number for the event
            context: History of every leg generated so far

        Returns:
            Optional[Event]: The event, or None to skip this slot
        """

    def can_satisfy_constraints(self, participants: Sequence[Participant], legs: int,
                                participants_per_event: int,
                                constraints: ConstraintSet) -> ConstraintSatisfiabilityReport:
        reasons = []
        label = self.name.capitalize()

        if participants_per_event != 2:
            reasons.append(f"{label} strategy only supports 2 participants per event")
        if len(participants) < 2:
            reasons.append(f"{label} strategy requires at least 2 participants")

        if reasons:
            return ConstraintSatisfiabilityReport.failure(
                unsatisfiable_constraints=reasons,
                analysis_data={'strategy': self.name},
            )
        return ConstraintSatisfiabilityReport.success(
            [c.name for c in constraints],
            {'strategy': self.name},
        )

    def _strategy_data(self, total_legs: int) -> Dict[str, Any]:
        return {'strategy': self.name}


class MirroredLegStrategy(LegStrategy):
    """Classic home/away: every later leg reverses every leg-one pairing."""

    name = "mirrored"

    def generate_event_for_leg(self, participants, leg, round_number, context):
        if len(participants) != 2:
            return None

        if leg == 1:
            return Event(list(participants), Round(round_number))

        # Away becomes home
        return Event([participants[1], participants[0]], Round(round_number))

    def _strategy_data(self, total_legs):
        leg_plans = {
            leg: {'strategy': self.name, 'reverse_order': leg > 1}
            for leg in range(1, total_legs + 1)
        }
        return {'strategy': self.name, 'leg_plans': leg_plans}


class RepeatedLegStrategy(LegStrategy):
    """Every leg is identical to leg one."""

    name = "repeated"

    def generate_event_for_leg(self, participants, leg, round_number, context):
        if len(participants) != 2:
            return None
        return Event(list(participants), Round(round_number))


class ShuffledLegStrategy(LegStrategy):
    """
    Leg one unchanged; later legs flip a coin for each event's order.

    Reproducible only when the caller supplies a seeded ``random.Random``.
    """

    name = "shuffled"
    requires_randomization = True

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def generate_event_for_leg(self, participants, leg, round_number, context):
        if len(participants) != 2:
            return None

        if leg == 1 or self.rng.randint(0, 1) == 0:
            return Event(list(participants), Round(round_number))
        return Event([participants[1], participants[0]], Round(round_number))


LEG_STRATEGIES = {
    'mirrored': MirroredLegStrategy,
    'repeated': RepeatedLegStrategy,
    'shuffled': ShuffledLegStrategy,
}


def create_leg_strategy(name: str, rng: Optional[random.Random] = None) -> LegStrategy:
    """Build a leg strategy by its configuration name."""
    if name not in LEG_STRATEGIES:
        raise ValueError(f"Unknown leg strategy: {name}. Must be one of {sorted(LEG_STRATEGIES)}")
    if name == 'shuffled':
        return ShuffledLegStrategy(rng)
    return LEG_STRATEGIES[name]()
