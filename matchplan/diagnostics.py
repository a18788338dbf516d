"""
Failure analysis for scheduling runs.

``SchedulingDiagnostics`` looks at a failed or partial run and explains what
is missing; it also performs the best-effort pre-flight detection of
configurations that can never be satisfied.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .constraints.base import Constraint, ConstraintSet
from .constraints.pairings import MinimumRestPeriodsConstraint
from .matchups import rounds_per_leg
from .models import Event, Participant
from .validation import ConstraintViolationCollector

logger = logging.getLogger(__name__)

# Missing pairings listed in full before the text report truncates
MAX_LISTED_PAIRINGS = 10


@dataclass(frozen=True)
class DiagnosticReport:
    """Summary of a scheduling run that fell short."""
    participant_count: int
    expected_events: int
    generated_events: int
    missing_events: int
    missing_pairings: List[str] = field(default_factory=list)
    constraint_violations: List[str] = field(default_factory=list)
    impossible_pairings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    analysis_context: Dict[str, Any] = field(default_factory=dict)

    def get_context_value(self, key: str, default: Any = None) -> Any:
        return self.analysis_context.get(key, default)

    @property
    def completion_percentage(self) -> float:
        if self.expected_events == 0:
            return 0.0
        return self.generated_events / self.expected_events * 100.0

    def is_successful(self) -> bool:
        return self.missing_events == 0 and not self.constraint_violations

    def has_critical_issues(self) -> bool:
        return (
            bool(self.impossible_pairings)
            or bool(self.constraint_violations)
            or self.missing_events > self.expected_events / 2
        )

    @property
    def summary(self) -> str:
        if self.is_successful():
            return "Schedule generation completed successfully."

        parts = [f"Schedule generation failed at {int(self.completion_percentage)}% completion."]
        if self.missing_events > 0:
            parts.append(f"{self.missing_events} events could not be generated.")
        if self.constraint_violations:
            parts.append(f"{len(self.constraint_violations)} constraint violations detected.")
        if self.impossible_pairings:
            parts.append(f"{len(self.impossible_pairings)} impossible pairings identified.")
        return " ".join(parts)

    def to_text(self) -> str:
        output = [
            "=== SCHEDULING DIAGNOSTIC REPORT ===",
            "",
            "Tournament Configuration:",
            f"  Participants: {self.participant_count}",
            f"  Expected Events: {self.expected_events}",
            f"  Generated Events: {self.generated_events}",
            f"  Missing Events: {self.missing_events}",
            f"  Completion: {self.completion_percentage:.1f}%",
            "",
        ]

        if self.missing_pairings:
            output.append("Missing Pairings:")
            for pairing in self.missing_pairings[:MAX_LISTED_PAIRINGS]:
                output.append(f"  - {pairing}")
            remaining = len(self.missing_pairings) - MAX_LISTED_PAIRINGS
            if remaining > 0:
                output.append(f"  ... and {remaining} more")
            output.append("")

        for title, items in (("Constraint Violations:", self.constraint_violations),
                             ("Impossible Pairings:", self.impossible_pairings),
                             ("Suggestions:", self.suggestions)):
            if items:
                output.append(title)
                output.extend(f"  - {item}" for item in items)
                output.append("")

        return "\n".join(output)

    def __str__(self) -> str:
        return self.to_text()


class SchedulingDiagnostics:
    """Explains incomplete runs and detects provably impossible setups."""

    def analyze_scheduling_failure(self, participants: Sequence[Participant], constraints: ConstraintSet,
                                   partial_events: Sequence[Event], legs: int,
                                   violations: Optional[ConstraintViolationCollector] = None,
                                   context: Optional[Dict[str, Any]] = None) -> DiagnosticReport:
        """
        Build a report for a run that produced ``partial_events``.

        Args:
            participants: Tournament participants
            constraints: Constraints in force
            partial_events: Events generated before the run stopped
            legs: Number of legs requested
            violations: Rejections recorded during the run
            context: Extra analysis context (e.g. the failing leg)

        Returns:
            DiagnosticReport: The analysis
        """
        n = len(participants)
        expected = self._expected_events(n, legs)
        generated = len(partial_events)
        context = dict(context or {})

        missing_pairings = self.identify_missing_pairings(participants, partial_events, legs)
        violation_texts = [v.description for v in violations.violations] if violations else []
        impossible = [reason for _, reason in self.identify_constraint_conflicts(participants, constraints, legs)]

        report = DiagnosticReport(
            participant_count=n,
            expected_events=expected,
            generated_events=generated,
            missing_events=expected - generated,
            missing_pairings=missing_pairings,
            constraint_violations=violation_texts,
            impossible_pairings=impossible,
            suggestions=self._generate_suggestions(n, generated, expected, legs),
            analysis_context=context,
        )
        logger.debug("Diagnostic summary: %s", report.summary)
        return report

    def identify_constraint_conflicts(self, participants: Sequence[Participant], constraints: ConstraintSet,
                                      legs: int) -> List[Tuple[Constraint, str]]:
        """
        Find constraints that no leg strategy could ever satisfy.

        Detection is partial: only configurations that are
        provably impossible are reported.

        Returns:
            List of (constraint, reason) pairs
        """
        conflicts = []
        n = len(participants)
        per_leg = rounds_per_leg(n)

        for constraint in constraints:
            if isinstance(constraint, MinimumRestPeriodsConstraint) and legs > 1 \
                    and constraint.min_rounds > per_leg:
                conflicts.append((
                    constraint,
                    f"{constraint.name}: consecutive meetings of a pair are exactly {per_leg} rounds "
                    f"apart, fewer than the {constraint.min_rounds} required",
                ))

        return conflicts

    def suggest_constraint_adjustments(self, report: DiagnosticReport) -> List[str]:
        suggestions = []

        if report.missing_events > 0:
            suggestions.append("Consider relaxing constraints that may be preventing event generation")
        if report.impossible_pairings:
            suggestions.append("Some participant pairings cannot be satisfied with current constraints")
        if report.constraint_violations:
            suggestions.append("Review constraint configuration for potential conflicts")
        if report.get_context_value('leg', 1) > 1:
            suggestions.append("Multi-leg constraint validation may require a different leg strategy")

        return suggestions

    def identify_missing_pairings(self, participants: Sequence[Participant], events: Sequence[Event],
                                  legs: int) -> List[str]:
        """Unordered pairs that met fewer than ``legs`` times, one entry per missing meeting."""
        met: Dict[frozenset, int] = {}
        for event in events:
            key = frozenset(event.participant_ids)
            met[key] = met.get(key, 0) + 1

        missing = []
        for i, first in enumerate(participants):
            for second in participants[i + 1:]:
                played = met.get(frozenset((first.id, second.id)), 0)
                for leg in range(played + 1, legs + 1):
                    missing.append(f"{first.label} vs {second.label} (Leg {leg})")
        return missing

    @staticmethod
    def _expected_events(participant_count: int, legs: int) -> int:
        if participant_count < 2:
            return 0
        return participant_count * (participant_count - 1) // 2 * legs

    @staticmethod
    def _generate_suggestions(participant_count: int, generated: int, expected: int, legs: int) -> List[str]:
        suggestions = []

        if generated == 0:
            suggestions.append("No events were generated - check participant count and constraint configuration")
        elif generated < expected:
            percentage = int(generated / expected * 100)
            suggestions.append(
                f"Only {percentage}% of expected events were generated - constraints may be too restrictive"
            )

        if legs > 1 and participant_count % 2 == 1:
            suggestions.append("Odd participant count in multi-leg tournaments may cause scheduling challenges")

        return suggestions
