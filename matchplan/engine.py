"""
Scheduling engine: the round-robin scheduler and its config-driven helpers.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from .config import SchedulerConfig
from .constraints import (
    ConsecutiveRoleConstraint,
    ConstraintSet,
    MetadataConstraint,
    MinimumRestPeriodsConstraint,
    NoRepeatPairings,
    SeedProtectionConstraint,
)
from .context import SchedulingContext
from .diagnostics import SchedulingDiagnostics
from .exceptions import ImpossibleConstraintsError, InvalidConfigurationError, UnsupportedOperationError
from .legs import LegStrategy, MirroredLegStrategy, create_leg_strategy
from .matchups import generate_round_robin_structure
from .models import Event, Participant, Round, RoundSchedule, Schedule
from .ordering import EventOrderingContext, ParticipantOrderer, StaticParticipantOrderer, create_orderer
from .positioning import PositionalSchedule, SeedBasedPositionResolver
from .validation import (
    ConstraintViolation,
    ConstraintViolationCollector,
    ExpectedEventCalculator,
    RoundRobinEventCalculator,
    ScheduleValidator,
)

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """
    Base class for scheduling algorithms.

    Only ``schedule`` is required. Algorithms whose structure is known up
    front also provide complete generation; the defaults here reject it.
    """

    def __init__(self, constraints: Optional[ConstraintSet] = None):
        self.constraints = constraints if constraints is not None else ConstraintSet()

    @abstractmethod
    def schedule(self, participants: Sequence[Participant], participants_per_event: int = 2,
                 legs: int = 1, strategy: Optional[LegStrategy] = None) -> Schedule:
        """Generate a complete schedule or raise."""

    def generate_structure(self, participant_count: int) -> PositionalSchedule:
        raise UnsupportedOperationError(f"{type(self).__name__} does not generate positional structures")

    def generate_schedule(self, participants: Sequence[Participant]) -> Schedule:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support complete schedule generation")

    def generate_round(self, participants: Sequence[Participant], round_number: int) -> RoundSchedule:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support round-by-round generation")

    def supports_complete_generation(self) -> bool:
        return False


class RoundRobinScheduler(Scheduler):
    """
    Round-robin scheduler built on the circle method.

    Every candidate event is checked against the constraint set; rejected
    candidates are recorded and never retried, so a schedule that comes back
    is always complete. The optional ``rng`` pre-shuffles participants before
    seeding and is the only state carried between calls.
    """

    def __init__(self, constraints: Optional[ConstraintSet] = None, rng: Optional[random.Random] = None,
                 orderer: Optional[ParticipantOrderer] = None):
        super().__init__(constraints)
        self.rng = rng
        self.orderer = orderer or StaticParticipantOrderer()
        self._violations = ConstraintViolationCollector()
        self._calculator = RoundRobinEventCalculator()
        self._validator = ScheduleValidator()
        self._diagnostics = SchedulingDiagnostics()

    @property
    def violation_collector(self) -> ConstraintViolationCollector:
        """Violations recorded by the most recent ``schedule`` call."""
        return self._violations

    @property
    def expected_event_calculator(self) -> ExpectedEventCalculator:
        return self._calculator

    def schedule(self, participants: Sequence[Participant], participants_per_event: int = 2,
                 legs: int = 1, strategy: Optional[LegStrategy] = None) -> Schedule:
        """
        Generate a complete multi-leg round-robin schedule.

        Args:
            participants: Participants in seed order
            participants_per_event: Event arity; must be 2
            legs: Number of legs (each pair meets once per leg)
            strategy: How legs after the first are derived; mirrored by default

        Returns:
            Schedule: Every event of every leg, in round order

        Raises:
            InvalidConfigurationError: Inputs are invalid or the strategy cannot handle them
            ImpossibleConstraintsError: The constraints can provably never be satisfied
            IncompleteScheduleError: Some events were rejected by constraints
        """
        participants = list(participants)
        strategy = strategy or MirroredLegStrategy()
        self._violations.clear()

        self._validate_input(participants, participants_per_event, legs)
        self._check_strategy(strategy, participants, participants_per_event, legs)
        self.validate_constraints(participants, legs)

        plan = strategy.plan_generation(participants, legs, participants_per_event, self.constraints)
        for warning in plan.warnings:
            logger.warning(warning)

        structure = self.generate_structure(len(participants))
        rounds_per_leg = structure.round_count
        expected = self.get_expected_event_count(participants, legs, participants_per_event)

        context = SchedulingContext(
            participants,
            total_legs=legs,
            participants_per_event=participants_per_event,
            rounds_per_leg=rounds_per_leg,
        )

        logger.info("Scheduling %d participants over %d leg(s) (%s strategy)",
                    len(participants), legs, strategy.name)

        context, leg_one_events = self._generate_first_leg(structure, participants, context)
        self._check_progress(context, expected, participants, legs)
        logger.info("Leg 1 complete: %d events", len(leg_one_events))

        for leg in range(2, legs + 1):
            context = context.with_next_leg()
            context = self._generate_leg(leg, leg_one_events, rounds_per_leg, strategy, context)
            self._check_progress(context, expected, participants, legs)
            logger.info("Leg %d complete: %d events", leg, context.event_count)

        logger.info("Schedule complete: %d events in %d rounds", context.event_count, rounds_per_leg * legs)

        return Schedule(list(context.events), {
            'algorithm': 'round-robin',
            'participant_count': len(participants),
            'legs': legs,
            'rounds_per_leg': rounds_per_leg,
            'total_rounds': rounds_per_leg * legs,
            'participants_per_event': participants_per_event,
            'leg_strategy': strategy.name,
        })

    def generate_structure(self, participant_count: int) -> PositionalSchedule:
        return generate_round_robin_structure(participant_count)

    def generate_schedule(self, participants: Sequence[Participant]) -> Schedule:
        """Resolve a single leg straight from the structure (no constraints, static ordering)."""
        participants = list(participants)
        self._validate_input(participants, 2, 1)

        structure = self.generate_structure(len(participants))
        if not structure.is_fully_predetermined():
            raise UnsupportedOperationError(
                "Round robin structure is not fully predetermined; use generate_round() instead"
            )

        resolver = SeedBasedPositionResolver(self._prepare_participants(participants))
        return structure.resolve(resolver)

    def generate_round(self, participants: Sequence[Participant], round_number: int) -> RoundSchedule:
        """
        Resolve one round of the single-leg structure.

        Raises:
            InvalidConfigurationError: When ``round_number`` is outside 1..rounds
        """
        participants = list(participants)
        self._validate_input(participants, 2, 1)

        structure = self.generate_structure(len(participants))
        positional_round = structure.get_round(round_number)
        if positional_round is None:
            raise InvalidConfigurationError(
                f"Round {round_number} does not exist; valid rounds are 1 to {structure.round_count}",
                {'round_number': round_number, 'total_rounds': structure.round_count},
            )

        resolver = SeedBasedPositionResolver(participants)
        return RoundSchedule(round_number, positional_round.resolve(resolver))

    def supports_complete_generation(self) -> bool:
        return True

    def validate_constraints(self, participants: Sequence[Participant], legs: int) -> None:
        """
        Best-effort pre-flight check for provably unsatisfiable constraints.

        Raises:
            ImpossibleConstraintsError: When a conflict is detected
        """
        conflicts = self._diagnostics.identify_constraint_conflicts(participants, self.constraints, legs)
        if conflicts:
            raise ImpossibleConstraintsError(
                [constraint for constraint, _ in conflicts],
                participants,
                legs,
                reasons=[reason for _, reason in conflicts],
            )

    def get_expected_event_count(self, participants: Sequence[Participant], legs: int = 1,
                                 participants_per_event: int = 2) -> int:
        if len(participants) < participants_per_event:
            return 0
        return self._calculator.calculate_expected_events(participants, legs)

    def _validate_input(self, participants: List[Participant], participants_per_event: int, legs: int) -> None:
        if len(participants) < 2:
            raise InvalidConfigurationError(
                "Round-robin scheduling requires at least 2 participants",
                {'participant_count': len(participants), 'minimum_required': 2},
            )

        if participants_per_event != 2:
            raise InvalidConfigurationError(
                f"Round-robin scheduling requires exactly 2 participants per event, got {participants_per_event}",
                {'participants_per_event': participants_per_event},
            )

        if legs < 1:
            raise InvalidConfigurationError(
                f"Number of legs must be at least 1, got {legs}",
                {'legs': legs},
            )

        seen = set()
        duplicates = []
        for participant in participants:
            if participant.id in seen:
                duplicates.append(participant.id)
            seen.add(participant.id)
        if duplicates:
            raise InvalidConfigurationError(
                f"Duplicate participant IDs: {', '.join(sorted(set(duplicates)))}",
                {'duplicate_ids': sorted(set(duplicates))},
            )

    def _check_strategy(self, strategy: LegStrategy, participants: List[Participant],
                        participants_per_event: int, legs: int) -> None:
        report = strategy.can_satisfy_constraints(participants, legs, participants_per_event, self.constraints)
        if not report.can_satisfy:
            raise InvalidConfigurationError(
                f"Leg strategy '{strategy.name}' cannot handle this configuration: {report.summary}",
                {'strategy': strategy.name, 'legs': legs, 'participant_count': len(participants)},
            )

    def _prepare_participants(self, participants: List[Participant]) -> List[Participant]:
        if self.rng is None:
            return list(participants)

        shuffled = list(participants)
        self.rng.shuffle(shuffled)
        return shuffled

    def _generate_first_leg(self, structure: PositionalSchedule, participants: List[Participant],
                            context: SchedulingContext) -> Tuple[SchedulingContext, List[Event]]:
        resolver = SeedBasedPositionResolver(self._prepare_participants(participants))
        accepted = []

        for positional_round in structure.rounds:
            round_ = Round(positional_round.round_number)
            for event_index, pairing in enumerate(positional_round.pairings):
                pair = pairing.resolve(resolver)
                if pair is None:
                    continue

                ordering_context = EventOrderingContext(positional_round.round_number, event_index, 1, context)
                event = Event(self.orderer.order(pair, ordering_context), round_)

                if self._accept(event, context):
                    context = context.with_events([event])
                    accepted.append(event)

        return context, accepted

    def _generate_leg(self, leg: int, leg_one_events: List[Event], rounds_per_leg: int,
                      strategy: LegStrategy, context: SchedulingContext) -> SchedulingContext:
        offset = (leg - 1) * rounds_per_leg

        for source in leg_one_events:
            event = strategy.generate_event_for_leg(
                list(source.participants), leg, offset + source.round_number, context
            )
            if event is None:
                continue

            if self._accept(event, context):
                context = context.with_events([event])

        return context

    def _accept(self, event: Event, context: SchedulingContext) -> bool:
        constraint = self.constraints.first_violation(event, context)
        if constraint is None:
            return True

        reason = constraint.describe_violation(event, context)
        self._violations.record_violation(ConstraintViolation(
            constraint,
            event,
            reason,
            event.participants,
            event.round_number,
        ))
        logger.debug("Rejected %s: %s", event, reason)
        return False

    def _check_progress(self, context: SchedulingContext, expected_total: int,
                        participants: List[Participant], legs: int) -> None:
        per_leg = self._calculator.calculate_expected_events(participants, 1)
        if context.event_count < per_leg * context.current_leg:
            # Report the shortfall against the full multi-leg total
            self._validator.validate_event_count(
                context.event_count, expected_total, self._violations, self._calculator, participants, legs
            )


def build_constraints(config: SchedulerConfig) -> ConstraintSet:
    """
    Translate the constraint section of a config into a ConstraintSet.

    Args:
        config: Scheduler configuration

    Returns:
        ConstraintSet: Constraints in declaration order
    """
    settings = config.constraints
    builder = ConstraintSet.create()

    if settings.no_repeat_pairings:
        builder.add(NoRepeatPairings())
    if settings.min_rest_rounds is not None:
        builder.add(MinimumRestPeriodsConstraint(settings.min_rest_rounds))
    if settings.seed_protection is not None:
        builder.add(SeedProtectionConstraint(settings.seed_protection.top_seeds, settings.seed_protection.period))
    if settings.max_consecutive_home_away is not None:
        builder.add(ConsecutiveRoleConstraint.home_away(settings.max_consecutive_home_away))
    if settings.max_consecutive_position is not None:
        builder.add(ConsecutiveRoleConstraint.position(settings.max_consecutive_position))

    for rule in settings.metadata_rules:
        if rule.rule == 'same':
            builder.add(MetadataConstraint.require_same_value(rule.key))
        elif rule.rule == 'different':
            builder.add(MetadataConstraint.require_different_values(rule.key))
        elif rule.rule == 'max_unique':
            builder.add(MetadataConstraint.max_unique_values(rule.key, rule.max_unique))
        elif rule.rule == 'adjacent':
            builder.add(MetadataConstraint.require_adjacent_values(rule.key))

    return builder.build()


def build_scheduler(config: SchedulerConfig, rng: Optional[random.Random] = None) -> RoundRobinScheduler:
    """
    Build a scheduler from a config.

    Args:
        config: Scheduler configuration
        rng: Random engine shared with the orderer; seeded from config when omitted

    Returns:
        RoundRobinScheduler: Configured scheduler
    """
    if rng is None:
        rng = random.Random(config.seed)

    return RoundRobinScheduler(
        constraints=build_constraints(config),
        rng=rng if config.shuffle_participants else None,
        orderer=create_orderer(config.ordering, rng),
    )


def schedule(participants: Sequence[Participant], config: SchedulerConfig) -> Schedule:
    """
    Convenience function to run the scheduler.

    Args:
        participants: Participants in seed order
        config: Scheduler configuration

    Returns:
        Schedule: Complete schedule
    """
    rng = random.Random(config.seed)
    scheduler = build_scheduler(config, rng)
    strategy = create_leg_strategy(config.leg_strategy, rng)
    return scheduler.schedule(participants, config.participants_per_event, config.legs, strategy)
