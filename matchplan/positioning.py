"""
Positional tournament structures.

A positional schedule describes a tournament in terms of abstract slots
("seed 3 vs seed 6") rather than concrete participants. It can be inspected
before anyone is assigned, and resolved into real events later.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import Event, Participant, Round, Schedule
from .ordering import EventOrderingContext, ParticipantOrderer, StaticParticipantOrderer


class PositionType(Enum):
    """Kinds of abstract positions."""
    SEED = "seed"
    STANDING = "standing"
    STANDING_AFTER_ROUND = "standing_after_round"


@dataclass(frozen=True)
class Position:
    """An abstract slot such as "Seed 3" or "Standing 1 (after round 4)"."""
    type: PositionType
    value: int
    round_context: Optional[int] = None

    def __post_init__(self):
        if self.value < 1:
            raise ValueError("Position value must be at least 1")
        if self.type is PositionType.STANDING_AFTER_ROUND and self.round_context is None:
            raise ValueError("Round context required for STANDING_AFTER_ROUND position type")

    @classmethod
    def seed(cls, value: int) -> "Position":
        return cls(PositionType.SEED, value)

    def is_statically_resolvable(self) -> bool:
        """Only seed positions are known before the tournament starts."""
        return self.type is PositionType.SEED

    def __str__(self) -> str:
        if self.type is PositionType.SEED:
            return f"Seed {self.value}"
        if self.type is PositionType.STANDING:
            return f"Standing {self.value}"
        return f"Standing {self.value} (after round {self.round_context})"


class PositionResolver(ABC):
    """Maps abstract positions to concrete participants."""

    @abstractmethod
    def resolve(self, position: Position) -> Optional[Participant]:
        """Return the participant at ``position``, or None if it cannot be resolved."""

    @abstractmethod
    def can_resolve(self, position: Position) -> bool:
        """Whether this resolver understands ``position``'s type."""


class SeedBasedPositionResolver(PositionResolver):
    """
    Resolve SEED(k) to the k-th (1-based) participant of an ordered list.

    Pre-seeding or pre-shuffling the list is how callers control who lands in
    which slot.
    """

    def __init__(self, participants: Sequence[Participant]):
        self.participants = list(participants)

    def resolve(self, position: Position) -> Optional[Participant]:
        if not self.can_resolve(position):
            return None

        index = position.value - 1
        if index >= len(self.participants):
            return None
        return self.participants[index]

    def can_resolve(self, position: Position) -> bool:
        return position.type is PositionType.SEED


@dataclass(frozen=True)
class PositionalPairing:
    """Two positions that meet in a round."""
    position1: Position
    position2: Position

    def resolve(self, resolver: PositionResolver) -> Optional[List[Participant]]:
        participant1 = resolver.resolve(self.position1)
        participant2 = resolver.resolve(self.position2)

        if participant1 is None or participant2 is None:
            return None
        return [participant1, participant2]

    def can_resolve(self, resolver: PositionResolver) -> bool:
        return resolver.can_resolve(self.position1) and resolver.can_resolve(self.position2)

    def __str__(self) -> str:
        return f"{self.position1} vs {self.position2}"


@dataclass(frozen=True)
class PositionalRound:
    """A round number with its ordered positional pairings."""
    round_number: int
    pairings: Tuple[PositionalPairing, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "pairings", tuple(self.pairings))
        if self.round_number < 1:
            raise ValueError("Round number must be at least 1")

    @property
    def pairing_count(self) -> int:
        return len(self.pairings)

    def resolve(self, resolver: PositionResolver,
                orderer: Optional[ParticipantOrderer] = None,
                context=None, leg: Optional[int] = None) -> List[Event]:
        """
        Resolve this round into events.

        Args:
            resolver: Resolver mapping positions to participants
            orderer: Orderer deciding home/away; static when omitted
            context: SchedulingContext handed to the orderer; ordering is
                only applied when a context is given
            leg: Leg number passed through to the orderer

        Returns:
            List[Event]: Events for every resolvable pairing
        """
        events = []
        round_ = Round(self.round_number)
        orderer = orderer or StaticParticipantOrderer()

        for event_index, pairing in enumerate(self.pairings):
            participants = pairing.resolve(resolver)
            if participants is None:
                continue

            if context is not None:
                ordering_context = EventOrderingContext(self.round_number, event_index, leg, context)
                participants = orderer.order(participants, ordering_context)

            events.append(Event(participants, round_))

        return events

    def can_fully_resolve(self, resolver: PositionResolver) -> bool:
        return all(pairing.can_resolve(resolver) for pairing in self.pairings)


@dataclass(frozen=True)
class PositionalSchedule:
    """A tournament blueprint, independent of real participants."""
    rounds: Tuple[PositionalRound, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "rounds", tuple(self.rounds))

    def get_round(self, round_number: int) -> Optional[PositionalRound]:
        for round_ in self.rounds:
            if round_.round_number == round_number:
                return round_
        return None

    @property
    def round_count(self) -> int:
        return len(self.rounds)

    @property
    def total_pairing_count(self) -> int:
        return sum(round_.pairing_count for round_ in self.rounds)

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def get_metadata_value(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def resolve(self, resolver: PositionResolver) -> Schedule:
        """Resolve every round into a Schedule (static ordering, no constraints)."""
        events: List[Event] = []
        for positional_round in self.rounds:
            events.extend(positional_round.resolve(resolver))

        return Schedule(events, {
            **self.metadata,
            'fully_resolved': True,
            'positional_structure': self,
        })

    def can_fully_resolve(self, resolver: PositionResolver) -> bool:
        return all(round_.can_fully_resolve(resolver) for round_ in self.rounds)

    def is_fully_predetermined(self) -> bool:
        """True when every position is known before play starts."""
        return all(
            pairing.position1.is_statically_resolvable() and pairing.position2.is_statically_resolvable()
            for round_ in self.rounds
            for pairing in round_.pairings
        )
