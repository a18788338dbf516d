"""
Seed protection: keep top seeds apart early in the tournament.
"""

from typing import List, Sequence

from ..context import SchedulingContext
from ..models import Participant
from .base import Constraint


class SeedProtectionConstraint(Constraint):
    """
    During the protected part of the tournament, at most one of the top
    ``top_seeds`` seeded participants may appear in any event.

    The protected part lasts while the current round is at most
    ``floor(estimated_total_rounds * protection_period)``. The total is a
    heuristic: twice the largest round seen so far (but never less than
    n - 1), or n - 1 before any event exists.
    """

    def __init__(self, top_seeds: int, protection_period: float):
        if top_seeds < 1:
            raise ValueError("Must protect at least 1 seed")
        if not 0.0 <= protection_period <= 1.0:
            raise ValueError("Protection period must be between 0.0 and 1.0")
        self.top_seeds = top_seeds
        self.protection_period = protection_period

    @property
    def name(self) -> str:
        return f"Seed Protection (top {self.top_seeds}, {self.protection_period:.0%} period)"

    def is_satisfied(self, event, context):
        current_round = event.round_number or 0
        protected_round = int(self.estimate_total_rounds(context) * self.protection_period)

        if current_round > protected_round:
            return True

        top_ids = {p.id for p in self._top_seeds(context.participants)}
        protected_in_event = [p for p in event.participants if p.id in top_ids]
        return len(protected_in_event) <= 1

    def describe_violation(self, event, context):
        top_ids = {p.id for p in self._top_seeds(context.participants)}
        labels = [p.label for p in event.participants if p.id in top_ids]
        return f"Protected seeds {', '.join(labels)} cannot meet in round {event.round_number}"

    def _top_seeds(self, participants: Sequence[Participant]) -> List[Participant]:
        seeded = sorted((p for p in participants if p.seed is not None), key=lambda p: p.seed)
        return seeded[:self.top_seeds]

    @staticmethod
    def estimate_total_rounds(context: SchedulingContext) -> int:
        n = len(context.participants)
        if n < 2:
            return 1

        rounds = [event.round_number for event in context.events if event.round_number is not None]
        max_round = max(rounds) if rounds else 0

        if max_round > 0:
            return max(max_round * 2, n - 1)
        return n - 1
