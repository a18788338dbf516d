"""
Participant ordering strategies.

An orderer decides which participant of a resolved pairing takes the primary
("home") slot. Orderers are pure: they never modify the context they read.
"""

import random
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .context import SchedulingContext
from .models import Participant


@dataclass(frozen=True)
class EventOrderingContext:
    """Where an event sits in the tournament, plus the history so far."""
    round_number: int
    event_index_in_round: int
    leg: Optional[int]
    scheduling_context: SchedulingContext


class ParticipantOrderer(ABC):
    """Decides the slot order of an event's participants."""

    @abstractmethod
    def order(self, participants: Sequence[Participant], context: EventOrderingContext) -> List[Participant]:
        """Return the participants in slot order (first = primary/home)."""


class StaticParticipantOrderer(ParticipantOrderer):
    """Keep the structure's order unchanged."""

    def order(self, participants, context):
        return list(participants)


class AlternatingParticipantOrderer(ParticipantOrderer):
    """Reverse every other event within a round."""

    def order(self, participants, context):
        participants = list(participants)
        if context.event_index_in_round % 2 == 1:
            participants.reverse()
        return participants


class BalancedParticipantOrderer(ParticipantOrderer):
    """
    Give the primary slot to whoever has held it least so far.

    Counts each participant's earlier primary-slot appearances in the
    scheduling context. Ties keep the original order. Only pairs are
    reordered; larger events pass through unchanged.
    """

    def order(self, participants, context):
        participants = list(participants)
        if len(participants) != 2:
            return participants

        first, second = participants
        first_count = self._home_count(first, context.scheduling_context)
        second_count = self._home_count(second, context.scheduling_context)

        if second_count < first_count:
            return [second, first]
        return [first, second]

    @staticmethod
    def _home_count(participant: Participant, scheduling_context: SchedulingContext) -> int:
        return sum(
            1 for event in scheduling_context.get_events_for_participant(participant)
            if event.participants[0].id == participant.id
        )


class SeededRandomParticipantOrderer(ParticipantOrderer):
    """
    Pseudo-random but reproducible ordering.

    The decision for each event is derived from its round, its index in the
    round and its leg, salted with a value drawn once from ``rng``. Two
    orderers built from random engines in the same state make identical
    decisions.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.salt = rng.getrandbits(32) if rng is not None else 0

    def order(self, participants, context):
        participants = list(participants)
        if self._should_reverse(self._create_seed(context)):
            participants.reverse()
        return participants

    @staticmethod
    def _create_seed(context: EventOrderingContext) -> int:
        leg = context.leg or 0
        return context.round_number * 10000 + context.event_index_in_round * 100 + leg

    def _should_reverse(self, seed: int) -> bool:
        digest = zlib.crc32(f"{self.salt}:{seed}".encode("ascii"))
        return digest % 2 == 1


ORDERERS = {
    'static': StaticParticipantOrderer,
    'alternating': AlternatingParticipantOrderer,
    'balanced': BalancedParticipantOrderer,
    'seeded_random': SeededRandomParticipantOrderer,
}


def create_orderer(name: str, rng: Optional[random.Random] = None) -> ParticipantOrderer:
    """
    Build an orderer by its configuration name.

    Args:
        name: One of 'static', 'alternating', 'balanced', 'seeded_random'
        rng: Random engine for the seeded-random orderer

    Returns:
        ParticipantOrderer: The orderer instance
    """
    if name not in ORDERERS:
        raise ValueError(f"Unknown participant ordering: {name}. Must be one of {sorted(ORDERERS)}")
    if name == 'seeded_random':
        return SeededRandomParticipantOrderer(rng)
    return ORDERERS[name]()
