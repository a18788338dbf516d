"""
Scheduling context: an immutable snapshot of tournament history.

Constraints, orderers and leg strategies all read from a context. Updates
never happen in place; ``with_events`` and friends return new instances so
every evaluation sees a stable snapshot.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Event, Participant


@dataclass(frozen=True)
class SchedulingContext:
    """
    Complete tournament state across all legs generated so far.

    Attributes:
        participants: Every participant in the tournament
        events: Events from all legs generated so far, in generation order
        current_leg: Leg currently being generated (1-based)
        total_legs: Number of legs in the tournament
        participants_per_event: Event arity (2 for round-robin)
        metadata: Free-form context metadata
        rounds_per_leg: Rounds in one leg, when known up front
    """
    participants: Tuple[Participant, ...]
    events: Tuple[Event, ...] = ()
    current_leg: int = 1
    total_legs: int = 1
    participants_per_event: int = 2
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    rounds_per_leg: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "participants", tuple(self.participants))
        object.__setattr__(self, "events", tuple(self.events))

    @property
    def event_count(self) -> int:
        return len(self.events)

    def is_multi_leg(self) -> bool:
        return self.total_legs > 1

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def get_metadata_value(self, key: str, default: Any = None) -> Any:
        value = self.metadata.get(key)
        return default if value is None else value

    def get_events_for_leg(self, leg: int) -> List[Event]:
        """Events whose round falls inside ``leg``."""
        if leg < 1 or leg > self.total_legs:
            return []

        rounds_per_leg = self._effective_rounds_per_leg()
        if rounds_per_leg == 0:
            return []

        return [
            event for event in self.events
            if event.round_number is not None and math.ceil(event.round_number / rounds_per_leg) == leg
        ]

    def get_events_for_participant(self, participant: Participant) -> List[Event]:
        return [event for event in self.events if event.has_participant(participant)]

    def get_events_in_round(self, round_number: int) -> List[Event]:
        return [event for event in self.events if event.round_number == round_number]

    def have_participants_played(self, participant1: Participant, participant2: Participant) -> bool:
        """Whether two participants have already met. A participant never 'meets' itself."""
        if participant1.id == participant2.id:
            return False

        return any(
            event.has_participant(participant1) and event.has_participant(participant2)
            for event in self.events
        )

    def has_event_between(self, participants: Sequence[Participant]) -> bool:
        """Whether an event containing exactly this participant set (any order) exists."""
        if len(participants) != self.participants_per_event:
            return False

        wanted = {p.id for p in participants}
        return any(wanted.issubset(event.participant_ids) for event in self.events)

    def get_expected_event_count(self) -> int:
        """Round-robin total: n(n-1)/2 per leg, times the number of legs."""
        n = len(self.participants)
        if n < self.participants_per_event:
            return 0
        return n * (n - 1) // 2 * self.total_legs

    def with_events(self, new_events: Iterable[Event]) -> "SchedulingContext":
        return replace(self, events=(*self.events, *new_events))

    def with_next_leg(self) -> "SchedulingContext":
        return replace(self, current_leg=self.current_leg + 1)

    def with_rounds_per_leg(self, rounds_per_leg: int) -> "SchedulingContext":
        return replace(self, rounds_per_leg=rounds_per_leg)

    def _effective_rounds_per_leg(self) -> int:
        if self.rounds_per_leg:
            return self.rounds_per_leg

        # Inferred from history; only reliable once the last leg has started
        rounds = [event.round_number for event in self.events if event.round_number is not None]
        if not rounds:
            return 0
        return max(rounds) // self.total_legs
