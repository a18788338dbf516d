"""
Data models for the match planner.
"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class Participant:
    """A competitor (team, player, entrant) taking part in a tournament."""
    id: str
    label: str
    seed: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def get_metadata_value(self, key: str, default: Any = None) -> Any:
        """Get a metadata value, falling back to ``default`` when absent or None."""
        value = self.metadata.get(key)
        return default if value is None else value

    def __str__(self) -> str:
        return self.label


@total_ordering
@dataclass(frozen=True)
class Round:
    """A numbered round. Rounds compare by number only."""
    number: int
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if self.number <= 0:
            raise ValueError("Round number must be positive")

    def __lt__(self, other: "Round") -> bool:
        if not isinstance(other, Round):
            return NotImplemented
        return self.number < other.number

    def is_before(self, other: "Round") -> bool:
        return self.number < other.number

    def is_after(self, other: "Round") -> bool:
        return self.number > other.number

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def get_metadata_value(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def __str__(self) -> str:
        return f"Round {self.number}"


@dataclass(frozen=True)
class Event:
    """
    A single pairing of participants in a round.

    The order of ``participants`` is meaningful: the first participant holds
    the primary ("home") slot.
    """
    participants: Tuple[Participant, ...]
    round: Optional[Round] = None
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "participants", tuple(self.participants))
        if len(self.participants) < 2:
            raise ValueError("An event must have at least 2 participants")

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def round_number(self) -> Optional[int]:
        return self.round.number if self.round is not None else None

    @property
    def home(self) -> Participant:
        return self.participants[0]

    @property
    def away(self) -> Participant:
        return self.participants[1]

    @property
    def participant_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self.participants)

    def has_participant(self, participant: Participant) -> bool:
        """Check membership by participant id."""
        return any(p.id == participant.id for p in self.participants)

    def index_of(self, participant: Participant) -> Optional[int]:
        """Slot index of a participant in this event, or None."""
        for i, p in enumerate(self.participants):
            if p.id == participant.id:
                return i
        return None

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def get_metadata_value(self, key: str, default: Any = None) -> Any:
        value = self.metadata.get(key)
        return default if value is None else value

    def __str__(self) -> str:
        matchup = " vs ".join(p.label for p in self.participants)
        if self.round is None:
            return matchup
        return f"{matchup} ({self.round})"


@dataclass(frozen=True)
class RoundSchedule:
    """All events of a single round."""
    round_number: int
    events: Tuple[Event, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "events", tuple(self.events))
        if self.round_number < 1:
            raise ValueError("Round number must be at least 1")

    @property
    def event_count(self) -> int:
        return len(self.events)

    @property
    def participants(self) -> List[Participant]:
        """Participants playing in this round, in first-seen order."""
        seen = {}
        for event in self.events:
            for participant in event.participants:
                seen.setdefault(participant.id, participant)
        return list(seen.values())

    def has_participant(self, participant: Participant) -> bool:
        return any(event.has_participant(participant) for event in self.events)


class Schedule:
    """
    A complete, immutable schedule.

    Schedules are only built once generation has fully succeeded, so every
    instance handed to a caller is complete.
    """

    def __init__(self, events: Optional[List[Event]] = None, metadata: Optional[Dict[str, Any]] = None):
        self._events: Tuple[Event, ...] = tuple(events or ())
        self._metadata: Dict[str, Any] = dict(metadata or {})

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self._metadata)

    def has_metadata(self, key: str) -> bool:
        return key in self._metadata

    def get_metadata_value(self, key: str, default: Any = None) -> Any:
        value = self._metadata.get(key)
        return default if value is None else value

    def add_event(self, event: Event) -> "Schedule":
        """Return a new schedule with ``event`` appended."""
        return Schedule([*self._events, event], self._metadata)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __getitem__(self, index: int) -> Event:
        return self._events[index]

    def is_empty(self) -> bool:
        return not self._events

    def get_events_for_round(self, round_: Any) -> List[Event]:
        """Get events of a round, given either a Round or a round number."""
        number = round_.number if isinstance(round_, Round) else round_
        return [event for event in self._events if event.round_number == number]

    def get_max_round(self) -> Optional[Round]:
        rounds = [event.round for event in self._events if event.round is not None]
        return max(rounds) if rounds else None

    def get_rounds(self) -> List[RoundSchedule]:
        """Group events into RoundSchedules in ascending round order."""
        grouped: Dict[int, List[Event]] = {}
        for event in self._events:
            if event.round_number is not None:
                grouped.setdefault(event.round_number, []).append(event)
        return [RoundSchedule(number, events) for number, events in sorted(grouped.items())]

    def get_participant_schedule(self, participant: Participant) -> List[Event]:
        """Get all events for a specific participant."""
        return [event for event in self._events if event.has_participant(participant)]

    def get_participants(self) -> List[Participant]:
        seen = {}
        for event in self._events:
            for participant in event.participants:
                seen.setdefault(participant.id, participant)
        return list(seen.values())

    def to_dataframe(self) -> pd.DataFrame:
        """Convert schedule to pandas DataFrame."""
        if not self._events:
            return pd.DataFrame()

        rounds_per_leg = self._metadata.get('rounds_per_leg')

        data = []
        for order, event in enumerate(self._events, start=1):
            round_number = event.round_number
            leg = None
            if rounds_per_leg and round_number is not None:
                leg = (round_number - 1) // rounds_per_leg + 1
            data.append({
                'Order': order,
                'Leg': leg,
                'Round': round_number,
                'Home': event.home.label,
                'Away': event.away.label,
                'Home ID': event.home.id,
                'Away ID': event.away.id,
            })

        return pd.DataFrame(data)

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics for the schedule."""
        if not self._events:
            return {}

        df = self.to_dataframe()

        home_counts = df['Home ID'].value_counts().to_dict()
        away_counts = df['Away ID'].value_counts().to_dict()
        participant_ids = [p.id for p in self.get_participants()]

        stats = {
            'total_events': len(self._events),
            'total_participants': len(participant_ids),
            'total_rounds': int(df['Round'].max()),
            'events_per_round': df['Round'].value_counts().sort_index().to_dict(),
            'home_away': {
                pid: {
                    'home': int(home_counts.get(pid, 0)),
                    'away': int(away_counts.get(pid, 0)),
                }
                for pid in participant_ids
            },
        }

        return stats

    def __repr__(self) -> str:
        return f"Schedule(events={len(self._events)}, metadata={self._metadata!r})"
