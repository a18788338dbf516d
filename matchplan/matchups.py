"""
Round-robin structure generation using the circle method.
"""

from typing import List, Optional

from .positioning import Position, PositionalPairing, PositionalRound, PositionalSchedule

# Slot value standing in for "no opponent this round"
BYE = None


def rotate_slots(slots: List[Optional[int]]) -> List[Optional[int]]:
    """
    Compute the next circle-method arrangement.

    Slot 0 stays fixed; every other slot moves one place towards slot 1,
    so the occupant of slot 1 moves to the last slot.

    Args:
        slots: Current slot ring

    Returns:
        List: A new ring; the input is not modified
    """
    if len(slots) <= 2:
        return list(slots)
    return [slots[0]] + slots[2:] + [slots[1]]


def round_robin_slot_rounds(participant_count: int) -> List[List[Optional[int]]]:
    """
    Slot arrangements for every round of a single round robin.

    Slots hold 1-based seed numbers, with ``BYE`` appended when the
    participant count is odd.

    Args:
        participant_count: Number of participants

    Returns:
        List: One slot ring per round (n - 1 rounds for even n, n for odd n)
    """
    if participant_count < 2:
        return []

    slots: List[Optional[int]] = list(range(1, participant_count + 1))
    if participant_count % 2 == 1:
        slots.append(BYE)

    arrangements = []
    for _ in range(len(slots) - 1):
        arrangements.append(slots)
        slots = rotate_slots(slots)

    return arrangements


def generate_round_robin_structure(participant_count: int) -> PositionalSchedule:
    """
    Generate the positional blueprint of a single round robin.

    Round r pairs slot i with slot n'-1-i for i < n'/2. Pairings involving
    the bye slot are dropped, so for odd n every participant sits out exactly
    one round. The result depends only on ``participant_count``.

    Args:
        participant_count: Number of participants

    Returns:
        PositionalSchedule: Rounds of seed-position pairings
    """
    arrangements = round_robin_slot_rounds(participant_count)
    has_bye = participant_count % 2 == 1

    rounds = []
    for round_number, slots in enumerate(arrangements, start=1):
        n_slots = len(slots)
        pairings = []
        for i in range(n_slots // 2):
            first, second = slots[i], slots[n_slots - 1 - i]

            # Skip bye games
            if first is BYE or second is BYE:
                continue

            pairings.append(PositionalPairing(Position.seed(first), Position.seed(second)))

        rounds.append(PositionalRound(round_number, pairings))

    pairings_per_round = participant_count // 2 if participant_count >= 2 else 0

    return PositionalSchedule(rounds, {
        'algorithm': 'round-robin',
        'participant_count': participant_count,
        'rounds': len(rounds),
        'pairings_per_round': pairings_per_round,
        'has_bye': has_bye,
    })


def rounds_per_leg(participant_count: int) -> int:
    """Rounds needed for one full pass: n - 1 for even n, n for odd n."""
    if participant_count < 2:
        return 0
    return participant_count - 1 if participant_count % 2 == 0 else participant_count


def get_structure_summary(structure: PositionalSchedule) -> dict:
    """
    Get summary statistics for a positional structure.

    Args:
        structure: Positional schedule to summarise

    Returns:
        Dict: Round count, pairing totals and per-seed appearance counts
    """
    appearances = {}
    for positional_round in structure.rounds:
        for pairing in positional_round.pairings:
            for position in (pairing.position1, pairing.position2):
                key = str(position)
                appearances[key] = appearances.get(key, 0) + 1

    return {
        'rounds': structure.round_count,
        'total_pairings': structure.total_pairing_count,
        'pairings_per_round': [r.pairing_count for r in structure.rounds],
        'appearances': appearances,
    }
