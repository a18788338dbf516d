"""
Typed errors raised by the match planner.

Every failure is raised immediately; a Schedule is only ever returned when it
is complete. Each error can render a plain-text diagnostic report.
"""

from collections import Counter
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from .constraints.base import Constraint
    from .models import Participant
    from .validation import ConstraintViolationCollector, ExpectedEventCalculator


class SchedulingError(Exception):
    """Base class for all scheduling errors."""

    def get_diagnostic_report(self) -> str:
        raise NotImplementedError

    @classmethod
    def invalid_participant_count(cls, count: int) -> "InvalidConfigurationError":
        return InvalidConfigurationError(
            f"Invalid participant count: {count}. Must be at least 2.",
            {"participant_count": count, "minimum_required": 2},
        )

    @classmethod
    def constraint_violation(cls, constraint: str) -> "InvalidConfigurationError":
        return InvalidConfigurationError(
            f"Constraint violation: {constraint}",
            {"constraint": constraint},
        )

    @classmethod
    def invalid_schedule(cls, reason: str) -> "InvalidConfigurationError":
        return InvalidConfigurationError(
            f"Invalid schedule: {reason}",
            {"reason": reason},
        )


class InvalidConfigurationError(SchedulingError):
    """The inputs to a scheduling call are invalid; nothing was generated."""

    REQUIREMENTS = [
        "• Participants must contain at least 2 participants",
        "• Legs must be a positive integer (≥ 1)",
        "• All participants must have unique IDs",
        "• Participants per event must be 2",
        "• The leg strategy must support the requested configuration",
    ]

    def __init__(self, configuration_issue: str, context: Optional[Dict[str, Any]] = None,
                 message: Optional[str] = None):
        self.configuration_issue = configuration_issue
        self.context = dict(context or {})
        super().__init__(message or f"Invalid scheduler configuration: {configuration_issue}")

    def get_diagnostic_report(self) -> str:
        report = [
            "=== INVALID CONFIGURATION DIAGNOSTIC REPORT ===",
            "",
            f"Issue: {self.configuration_issue}",
        ]

        if self.context:
            report.append("")
            report.append("=== CONFIGURATION DETAILS ===")
            for key, value in self.context.items():
                report.append(f"• {key}: {_format_value(value)}")

        report.append("")
        report.append("=== REQUIREMENTS ===")
        report.extend(self.REQUIREMENTS)

        return "\n".join(report)


class IncompleteScheduleError(SchedulingError):
    """
    Generation produced fewer events than a complete schedule requires.

    Carries the expected and actual counts plus the full violation collector
    so callers can see which constraints rejected which candidates.
    """

    # Suggestions keyed by constraint class name
    SUGGESTIONS = {
        "ConsecutiveRoleConstraint": [
            "• Relax the consecutive role limit (allow longer runs in the same role)",
            "• Use a participant orderer that balances roles (e.g. balanced ordering)",
            "• Add more legs to provide more scheduling flexibility",
        ],
        "MinimumRestPeriodsConstraint": [
            "• Reduce the minimum rest period requirement",
            "• Add more rounds to provide scheduling flexibility",
        ],
        "NoRepeatPairings": [
            "• This constraint cannot hold across legs that repeat every pairing",
            "• Consider allowing some repeat pairings",
        ],
        "SeedProtectionConstraint": [
            "• Adjust seed protection settings (fewer seeds or a shorter period)",
            "• Ensure protected rounds don't conflict with other constraints",
        ],
        "MetadataConstraint": [
            "• Review participant metadata values for the constrained key",
        ],
    }

    def __init__(self, expected_event_count: int, actual_event_count: int,
                 violation_collector: "ConstraintViolationCollector",
                 event_calculator: "ExpectedEventCalculator",
                 participants: Sequence["Participant"], legs: int,
                 message: Optional[str] = None):
        self.expected_event_count = expected_event_count
        self.actual_event_count = actual_event_count
        self.violation_collector = violation_collector
        self.event_calculator = event_calculator
        self.participants = list(participants)
        self.legs = legs

        if message is None:
            message = (
                f"Incomplete schedule generated: {actual_event_count} events created out of "
                f"{expected_event_count} expected ({self.missing_event_count} missing)"
            )
        super().__init__(message)

    @property
    def missing_event_count(self) -> int:
        return self.expected_event_count - self.actual_event_count

    def get_diagnostic_report(self) -> str:
        missing_pct = 0.0
        if self.expected_event_count:
            missing_pct = self.missing_event_count / self.expected_event_count * 100

        report = [
            "=== INCOMPLETE SCHEDULE DIAGNOSTIC REPORT ===",
            "",
            f"Algorithm: {self.event_calculator.algorithm_name}",
            f"Participants: {len(self.participants)}",
            f"Legs: {self.legs}",
            f"Expected Events: {self.expected_event_count}",
            f"Generated Events: {self.actual_event_count}",
            f"Missing Events: {self.missing_event_count} ({missing_pct:.1f}%)",
            "",
        ]

        if self.violation_collector.has_violations():
            report.append("=== CONSTRAINT VIOLATIONS ===")
            for name, violations in self.violation_collector.get_violations_by_constraint().items():
                report.append(f"• {name}: {len(violations)} violations")

                participant_counts: Counter = Counter()
                round_counts: Counter = Counter()
                for violation in violations:
                    for participant in violation.affected_participants:
                        participant_counts[participant.id] += 1
                    if violation.round_number is not None:
                        round_counts[violation.round_number] += 1

                if participant_counts:
                    top = ", ".join(f"{pid} ({count})" for pid, count in participant_counts.most_common(3))
                    report.append(f"  Most affected participants: {top}")

                if round_counts:
                    rounds = ", ".join(f"{rnd} ({count})" for rnd, count in sorted(round_counts.items()))
                    report.append(f"  Affected rounds: {rounds}")

                report.append("")

        report.append("=== SUGGESTIONS ===")
        report.extend(self._generate_suggestions())

        return "\n".join(report)

    def _generate_suggestions(self) -> List[str]:
        suggestions: List[str] = []

        seen_types = []
        for violation in self.violation_collector.violations:
            type_name = type(violation.constraint).__name__
            if type_name not in seen_types:
                seen_types.append(type_name)

        for type_name in seen_types:
            suggestions.extend(
                self.SUGGESTIONS.get(type_name, [f"• Review {type_name} settings for compatibility"])
            )

        if not suggestions:
            suggestions.extend([
                "• Try relaxing constraint requirements",
                "• Increase the number of participants or legs",
                "• Review constraint combinations for conflicts",
            ])

        suggestions.append("• Use fewer or less restrictive constraints")
        suggestions.append("• Test with a simpler configuration first")

        return suggestions


class ImpossibleConstraintsError(SchedulingError):
    """A constraint configuration was proven unsatisfiable before generation."""

    def __init__(self, conflicting_constraints: Sequence["Constraint"],
                 participants: Sequence["Participant"], legs: int,
                 message: Optional[str] = None, reasons: Optional[List[str]] = None):
        self.conflicting_constraints = list(conflicting_constraints)
        self.participants = list(participants)
        self.legs = legs
        self.reasons = list(reasons or [])

        if message is None:
            message = (
                f"Impossible constraint configuration detected with {len(self.participants)} "
                f"participants and {legs} legs"
            )
        super().__init__(message)

    def get_diagnostic_report(self) -> str:
        n = len(self.participants)
        total_needed = n * (n - 1) // 2 * self.legs

        report = [
            "=== IMPOSSIBLE CONSTRAINTS DIAGNOSTIC REPORT ===",
            "",
            f"Participants: {n}",
            f"Legs: {self.legs}",
            "",
            "=== CONFLICTING CONSTRAINTS ===",
        ]
        for constraint in self.conflicting_constraints:
            report.append(f"• {type(constraint).__name__}: {constraint.name}")
        report.append("")

        report.append("=== MATHEMATICAL ANALYSIS ===")
        report.append(f"Total events needed for Round Robin with {self.legs} legs: {total_needed}")
        if self.reasons:
            report.extend(self.reasons)
        else:
            report.append("The constraint configuration creates impossible scheduling requirements.")
        report.append("")

        report.append("=== SUGGESTIONS ===")
        report.extend([
            "• Reduce constraint restrictions (lower limits, fewer requirements)",
            "• Increase the number of participants to provide more scheduling flexibility",
            "• Remove conflicting constraints",
            "• Test with a minimal constraint set first",
        ])

        return "\n".join(report)


class UnsupportedOperationError(SchedulingError):
    """The requested capability is not provided by this scheduling algorithm."""

    def __init__(self, message: str = "This operation is not supported by this scheduler"):
        super().__init__(message)

    def get_diagnostic_report(self) -> str:
        return "\n".join([
            "Unsupported Operation",
            "=====================",
            "",
            f"Error: {self}",
            "",
            "Suggestions:",
            "- Check supports_complete_generation() before calling generate_schedule()",
            "- Use generate_round() for round-by-round generation instead",
        ])


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple, dict, set)):
        return f"[{len(value)} items]"
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float, str)):
        return str(value)
    return type(value).__name__
