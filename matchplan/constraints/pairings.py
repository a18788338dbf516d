"""
Constraints on how often and how soon the same participants meet.
"""

from itertools import combinations
from typing import Optional

from ..context import SchedulingContext
from ..models import Event, Participant
from .base import Constraint


class NoRepeatPairings(Constraint):
    """Reject an event if any two of its participants have already met."""

    @property
    def name(self) -> str:
        return "No Repeat Pairings"

    def is_satisfied(self, event, context):
        return self._repeated_pair(event, context) is None

    def describe_violation(self, event, context):
        pair = self._repeated_pair(event, context)
        if pair is None:
            return super().describe_violation(event, context)
        return f"{pair[0].label} and {pair[1].label} have already met"

    @staticmethod
    def _repeated_pair(event: Event, context: SchedulingContext):
        for first, second in combinations(event.participants, 2):
            if context.have_participants_played(first, second):
                return first, second
        return None


class MinimumRestPeriodsConstraint(Constraint):
    """
    Require at least ``min_rounds`` rounds between two meetings of the same pair.

    A pair that has never met always passes.
    """

    def __init__(self, min_rounds: int):
        if min_rounds < 1:
            raise ValueError("Minimum rest periods must be at least 1")
        self.min_rounds = min_rounds

    @property
    def name(self) -> str:
        return f"Minimum Rest Periods ({self.min_rounds} rounds)"

    def is_satisfied(self, event, context):
        return self._violating_gap(event, context) is None

    def describe_violation(self, event, context):
        found = self._violating_gap(event, context)
        if found is None:
            return super().describe_violation(event, context)
        first, second, gap = found
        return (
            f"{first.label} and {second.label} met {gap} round(s) ago; "
            f"at least {self.min_rounds} required"
        )

    def _violating_gap(self, event: Event, context: SchedulingContext):
        current_round = event.round_number or 0

        for first, second in combinations(event.participants, 2):
            last_meeting = self._find_last_meeting_round(first, second, context)
            if last_meeting is not None and current_round - last_meeting < self.min_rounds:
                return first, second, current_round - last_meeting
        return None

    @staticmethod
    def _find_last_meeting_round(participant1: Participant, participant2: Participant,
                                 context: SchedulingContext) -> Optional[int]:
        rounds = [
            event.round_number for event in context.events
            if event.round_number is not None
            and event.has_participant(participant1) and event.has_participant(participant2)
        ]
        return max(rounds) if rounds else None
