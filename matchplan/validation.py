"""
Completeness validation: violation tracking, expected event counts and the
checks that turn a shortfall into an IncompleteScheduleError.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constraints.base import Constraint
from .exceptions import IncompleteScheduleError
from .models import Event, Participant, Schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConstraintViolation:
    """A candidate event rejected by a constraint."""
    constraint: Constraint
    rejected_event: Event
    reason: str
    affected_participants: Tuple[Participant, ...] = ()
    round_number: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "affected_participants", tuple(self.affected_participants))

    @property
    def constraint_name(self) -> str:
        return self.constraint.name

    @property
    def description(self) -> str:
        round_text = f" in round {self.round_number}" if self.round_number else ""
        labels = ", ".join(p.label for p in self.affected_participants)
        return f"Constraint '{self.constraint_name}' violated{round_text}: {self.reason} (Participants: {labels})"

    def __str__(self) -> str:
        return self.description


class ConstraintViolationCollector:
    """Accumulates violations during a scheduling run."""

    def __init__(self):
        self._violations: List[ConstraintViolation] = []

    def record_violation(self, violation: ConstraintViolation) -> None:
        self._violations.append(violation)

    @property
    def violations(self) -> List[ConstraintViolation]:
        return list(self._violations)

    def has_violations(self) -> bool:
        return bool(self._violations)

    @property
    def violation_count(self) -> int:
        return len(self._violations)

    def get_violations_by_constraint(self) -> Dict[str, List[ConstraintViolation]]:
        grouped: Dict[str, List[ConstraintViolation]] = {}
        for violation in self._violations:
            grouped.setdefault(violation.constraint_name, []).append(violation)
        return grouped

    def get_violations_by_participant(self) -> Dict[str, List[ConstraintViolation]]:
        """Violations keyed by participant id."""
        grouped: Dict[str, List[ConstraintViolation]] = {}
        for violation in self._violations:
            for participant in violation.affected_participants:
                grouped.setdefault(participant.id, []).append(violation)
        return grouped

    def get_violation_counts_by_constraint(self) -> Dict[str, int]:
        return {name: len(items) for name, items in self.get_violations_by_constraint().items()}

    def get_affected_rounds(self) -> List[int]:
        """Distinct round numbers with at least one violation, ascending."""
        return sorted({v.round_number for v in self._violations if v.round_number})

    def get_most_affected_participants(self, limit: int = 3) -> List[Tuple[str, int]]:
        counts = Counter({pid: len(items) for pid, items in self.get_violations_by_participant().items()})
        return counts.most_common(limit)

    def clear(self) -> None:
        self._violations = []


class ExpectedEventCalculator(ABC):
    """Per-algorithm formula for the number of events a complete schedule has."""

    @abstractmethod
    def calculate_expected_events(self, participants: Sequence[Participant], legs: int = 1,
                                  algorithm_params: Optional[Dict[str, Any]] = None) -> int:
        """Expected event total for ``participants`` over ``legs``."""

    @property
    @abstractmethod
    def algorithm_name(self) -> str:
        """Display name of the algorithm."""


class RoundRobinEventCalculator(ExpectedEventCalculator):
    """Each participant meets every other participant once per leg."""

    description = "Each participant plays every other participant exactly once per leg. Formula: n*(n-1)/2 * legs"

    def calculate_expected_events(self, participants, legs=1, algorithm_params=None):
        n = len(participants)
        if n < 2:
            return 0
        return n * (n - 1) // 2 * legs

    @property
    def algorithm_name(self) -> str:
        return "Round Robin"


class ScheduleValidator:
    """Completeness checks and text reports over collected violations."""

    def validate_schedule_completeness(self, generated: Schedule, expected_event_count: int,
                                       violations: ConstraintViolationCollector,
                                       event_calculator: ExpectedEventCalculator,
                                       participants: Sequence[Participant], legs: int) -> None:
        """
        Raise if ``generated`` holds fewer events than expected.

        Raises:
            IncompleteScheduleError: When events are missing
        """
        self.validate_event_count(len(generated), expected_event_count, violations,
                                  event_calculator, participants, legs)

    def validate_event_count(self, actual_event_count: int, expected_event_count: int,
                             violations: ConstraintViolationCollector,
                             event_calculator: ExpectedEventCalculator,
                             participants: Sequence[Participant], legs: int) -> None:
        if actual_event_count < expected_event_count:
            logger.info(
                "Schedule incomplete: %d of %d events (%d violations recorded)",
                actual_event_count, expected_event_count, violations.violation_count,
            )
            raise IncompleteScheduleError(
                expected_event_count,
                actual_event_count,
                violations,
                event_calculator,
                participants,
                legs,
            )

    def generate_diagnostic_report(self, violations: ConstraintViolationCollector, expected_events: int,
                                   actual_events: int, algorithm_name: str) -> str:
        missing = expected_events - actual_events
        lines = [
            f"Cannot generate complete {algorithm_name} schedule.",
            f"Expected: {expected_events} events",
            f"Generated: {actual_events} events ({missing} missing)",
            "",
        ]

        if violations.has_violations():
            lines.append("Constraint violations:")
            for name, items in violations.get_violations_by_constraint().items():
                rounds = sorted({v.round_number for v in items if v.round_number is not None})
                rounds_text = f" in rounds [{','.join(str(r) for r in rounds)}]" if rounds else ""
                lines.append(f"  - {name}: {len(items)} violations{rounds_text}")

            lines.append("")
            lines.append("Participant impact:")
            for participant_id, items in violations.get_violations_by_participant().items():
                lines.append(f"  - {participant_id}: {len(items)} violations")

        return "\n".join(lines) + "\n"

    def generate_constraint_suggestions(self, violations: ConstraintViolationCollector,
                                        participant_count: int) -> str:
        if not violations.has_violations():
            return ""

        lines = ["", "Suggestions:"]
        for name, count in violations.get_violation_counts_by_constraint().items():
            lowered = name.lower()
            if "consecutive" in lowered:
                lines.append(f"  - Consider relaxing the consecutive limit for '{name}'")
            elif "rest" in lowered:
                lines.append(f"  - Consider reducing rest period requirements for '{name}'")
            elif "seed" in lowered:
                lines.append(f"  - Consider reducing seed protection rounds for '{name}'")
            elif "repeat" in lowered:
                lines.append(f"  - Consider allowing repeat pairings instead of '{name}'")
            else:
                lines.append(f"  - Review configuration for '{name}' ({count} violations)")

        pairs = participant_count * (participant_count - 1) / 2
        total = violations.violation_count
        if pairs and total / pairs > 0.5:
            lines.append(f"  - High violation ratio ({total} violations) suggests constraints may be too restrictive")
            lines.append("  - Consider relaxing constraint parameters or reducing participant count")

        return "\n".join(lines) + "\n"
