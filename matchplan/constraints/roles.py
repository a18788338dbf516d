"""
Consecutive role limits (e.g. no more than two home games in a row).
"""

from typing import Any, Callable, Hashable, List, Optional

from ..context import SchedulingContext
from ..models import Event, Participant
from .base import Constraint

RoleExtractor = Callable[[Event, Participant], Hashable]


def home_away_role(event: Event, participant: Participant) -> str:
    """'home' for the first slot, 'away' for any other."""
    return 'home' if event.index_of(participant) == 0 else 'away'


def slot_position_role(event: Event, participant: Participant) -> Optional[int]:
    """The literal slot index of the participant."""
    return event.index_of(participant)


class ConsecutiveRoleConstraint(Constraint):
    """
    Limit how many events in a row a participant may spend in the same role.

    For each participant of the candidate, the roles of all their events
    (history plus the candidate) are taken in round order; the candidate is
    rejected if any run of identical roles is longer than ``max_consecutive``.
    """

    def __init__(self, max_consecutive: int, role_extractor: RoleExtractor,
                 name: str = "Consecutive Role Constraint"):
        if max_consecutive < 1:
            raise ValueError("Max consecutive must be at least 1")
        if not callable(role_extractor):
            raise ValueError("Role extractor must be callable")
        self.max_consecutive = max_consecutive
        self.role_extractor = role_extractor
        self._name = name

    @classmethod
    def home_away(cls, max_consecutive: int) -> "ConsecutiveRoleConstraint":
        return cls(max_consecutive, home_away_role, f"Home/Away consecutive limit ({max_consecutive})")

    @classmethod
    def position(cls, max_consecutive: int) -> "ConsecutiveRoleConstraint":
        return cls(max_consecutive, slot_position_role, f"Position consecutive limit ({max_consecutive})")

    @property
    def name(self) -> str:
        return self._name

    def is_satisfied(self, event, context):
        return self._first_offender(event, context) is None

    def describe_violation(self, event, context):
        offender = self._first_offender(event, context)
        if offender is None:
            return super().describe_violation(event, context)
        return f"{offender.label} would exceed {self.max_consecutive} consecutive events in the same role"

    def _first_offender(self, event: Event, context: SchedulingContext) -> Optional[Participant]:
        for participant in event.participants:
            roles = self._role_sequence(participant, event, context)
            if self.longest_run(roles) > self.max_consecutive:
                return participant
        return None

    def _role_sequence(self, participant: Participant, event: Event, context: SchedulingContext) -> List[Any]:
        history = [*context.get_events_for_participant(participant), event]
        # sorted() is stable, so same-round events keep generation order
        history = sorted(history, key=lambda e: e.round_number or 0)
        return [self.role_extractor(e, participant) for e in history]

    @staticmethod
    def longest_run(roles: List[Any]) -> int:
        longest = 0
        current = 0
        previous = object()
        for role in roles:
            current = current + 1 if role == previous else 1
            previous = role
            longest = max(longest, current)
        return longest
