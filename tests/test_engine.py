"""
Tests for the round-robin scheduler.
"""

import random
from collections import Counter
from itertools import combinations

import pytest

from matchplan.config import SchedulerConfig
from matchplan.constraints import (
    ConsecutiveRoleConstraint,
    ConstraintSet,
    MinimumRestPeriodsConstraint,
    NoRepeatPairings,
    SeedProtectionConstraint,
)
from matchplan.engine import RoundRobinScheduler, Scheduler, build_constraints, build_scheduler, schedule
from matchplan.exceptions import (
    ImpossibleConstraintsError,
    IncompleteScheduleError,
    InvalidConfigurationError,
    UnsupportedOperationError,
)
from matchplan.legs import MirroredLegStrategy, RepeatedLegStrategy, ShuffledLegStrategy
from matchplan.models import Participant
from matchplan.ordering import BalancedParticipantOrderer

from conftest import make_participants


def _pairs(schedule):
    return [frozenset(e.participant_ids) for e in schedule]


def test_example_a_single_leg(four):
    """Four participants, one leg: six events over three rounds."""
    result = RoundRobinScheduler().schedule(four)

    assert len(result) == 6
    assert result.get_max_round().number == 3
    assert set(_pairs(result)) == {frozenset(p) for p in combinations("ABCD", 2)}
    assert result.get_metadata_value("algorithm") == "round-robin"
    assert result.get_metadata_value("participant_count") == 4
    assert result.get_metadata_value("total_rounds") == 3
    assert result.get_metadata_value("leg_strategy") == "mirrored"


def test_example_b_odd_participants(five):
    """Five participants: ten events, five rounds, one bye each."""
    result = RoundRobinScheduler().schedule(five)

    assert len(result) == 10
    assert result.get_max_round().number == 5
    for participant in five:
        events = result.get_participant_schedule(participant)
        assert len(events) == 4
        assert len({e.round_number for e in events}) == 4


def test_example_c_mirrored_legs(three):
    """Leg two reverses leg one's pairs in rounds four to six."""
    result = RoundRobinScheduler().schedule(three, legs=2, strategy=MirroredLegStrategy())

    leg_one = [e for e in result if e.round_number <= 3]
    leg_two = [e for e in result if e.round_number > 3]

    assert len(leg_one) == 3
    assert [e.round_number for e in leg_two] == [4, 5, 6]
    for first, second in zip(leg_one, leg_two):
        assert second.participant_ids == tuple(reversed(first.participant_ids))
        assert second.round_number == first.round_number + 3


@pytest.mark.parametrize("n,legs", [(2, 1), (4, 2), (5, 3), (6, 2)])
def test_each_pair_meets_once_per_leg(n, legs):
    """Every unordered pair appears exactly ``legs`` times."""
    participants = make_participants(*[f"T{i}" for i in range(1, n + 1)])
    result = RoundRobinScheduler().schedule(participants, legs=legs)

    assert len(result) == n * (n - 1) // 2 * legs
    assert set(Counter(_pairs(result)).values()) == {legs}


def test_events_in_round_order_without_double_booking(four):
    """Rounds never decrease and nobody plays twice in a round."""
    result = RoundRobinScheduler().schedule(four, legs=2)

    rounds = [e.round_number for e in result]
    assert rounds == sorted(rounds)
    for round_schedule in result.get_rounds():
        ids = [pid for e in round_schedule.events for pid in e.participant_ids]
        assert len(ids) == len(set(ids))


def test_mirrored_balances_home_and_away(four):
    """Over two mirrored legs every participant is home exactly n-1 times."""
    result = RoundRobinScheduler().schedule(four, legs=2, strategy=MirroredLegStrategy())

    for counts in result.get_summary_stats()["home_away"].values():
        assert counts == {"home": 3, "away": 3}


def test_repeated_strategy_copies_leg_one(four):
    """Test repeated legs keep leg one's ordering."""
    result = RoundRobinScheduler().schedule(four, legs=2, strategy=RepeatedLegStrategy())
    events = result.events

    assert [e.participant_ids for e in events[:6]] == [e.participant_ids for e in events[6:]]


def test_same_seed_gives_same_schedule(four):
    """Identical random engine state reproduces the schedule."""
    def run():
        rng = random.Random(42)
        return RoundRobinScheduler(rng=rng).schedule(four, legs=2, strategy=ShuffledLegStrategy(rng))

    assert [(e.participant_ids, e.round_number) for e in run()] == \
        [(e.participant_ids, e.round_number) for e in run()]


def test_rng_shuffles_seeding(four):
    """The scheduler's random engine shuffles who takes which seed."""
    results = {
        tuple(e.participant_ids for e in RoundRobinScheduler(rng=random.Random(seed)).schedule(four))
        for seed in range(20)
    }

    assert len(results) > 1


def test_invalid_participant_counts():
    """Fewer than two participants is a configuration error."""
    scheduler = RoundRobinScheduler()

    with pytest.raises(InvalidConfigurationError, match="at least 2 participants"):
        scheduler.schedule([])
    with pytest.raises(InvalidConfigurationError, match="at least 2 participants"):
        scheduler.schedule(make_participants("A"))


def test_invalid_arity_legs_and_duplicates(four):
    """Test other invalid inputs fail before any work is done."""
    scheduler = RoundRobinScheduler()

    with pytest.raises(InvalidConfigurationError, match="2 participants per event"):
        scheduler.schedule(four, participants_per_event=3)
    with pytest.raises(InvalidConfigurationError, match="legs"):
        scheduler.schedule(four, legs=0)
    with pytest.raises(InvalidConfigurationError, match="Duplicate participant IDs: A"):
        scheduler.schedule([*four, Participant("A", "Again")])


def test_error_message_prefix():
    """Configuration errors carry the standard message prefix."""
    with pytest.raises(InvalidConfigurationError) as excinfo:
        RoundRobinScheduler().schedule(make_participants("A"))

    assert str(excinfo.value).startswith("Invalid scheduler configuration: ")
    assert "=== INVALID CONFIGURATION DIAGNOSTIC REPORT ===" in excinfo.value.get_diagnostic_report()


def test_home_away_limit_one_is_incomplete(four):
    """A limit of one consecutive home/away event cannot be met with four participants."""
    constraints = ConstraintSet([ConsecutiveRoleConstraint.home_away(1)])
    scheduler = RoundRobinScheduler(constraints)

    with pytest.raises(IncompleteScheduleError) as excinfo:
        scheduler.schedule(four)

    error = excinfo.value
    assert error.expected_event_count == 6
    assert error.actual_event_count == 3
    assert error.missing_event_count == 3
    assert error.violation_collector.violation_count == 3
    assert scheduler.violation_collector.violation_count == 3


def test_home_away_limit_two_over_two_legs(four):
    """Test the expected total covers every leg even when leg one fails."""
    constraints = ConstraintSet([ConsecutiveRoleConstraint.home_away(2)])

    with pytest.raises(IncompleteScheduleError) as excinfo:
        RoundRobinScheduler(constraints).schedule(four, legs=2)

    error = excinfo.value
    assert error.expected_event_count == 12
    assert error.actual_event_count == 5

    report = error.get_diagnostic_report()
    assert "=== INCOMPLETE SCHEDULE DIAGNOSTIC REPORT ===" in report
    assert "Algorithm: Round Robin" in report
    assert "Expected Events: 12" in report
    assert "Participants: 4" in report
    assert "Legs: 2" in report
    assert "Home/Away consecutive limit (2)" in report
    assert "Relax the consecutive role limit" in report


def test_seed_protection_failure_is_incomplete():
    """Protecting the whole tournament makes the top-seed meeting impossible."""
    participants = make_participants("A", "B", "C", "D", seeded=True)
    constraints = ConstraintSet([SeedProtectionConstraint(2, 1.0)])

    with pytest.raises(IncompleteScheduleError) as excinfo:
        RoundRobinScheduler(constraints).schedule(participants)

    violation = excinfo.value.violation_collector.violations[0]
    assert violation.constraint_name.startswith("Seed Protection")
    assert violation.round_number == 2
    assert {p.id for p in violation.affected_participants} == {"A", "B"}


def test_seed_protection_half_period_succeeds():
    """Test the heuristic window lets the top seeds meet in round two."""
    participants = make_participants("A", "B", "C", "D", seeded=True)
    constraints = ConstraintSet([SeedProtectionConstraint(2, 0.5)])

    assert len(RoundRobinScheduler(constraints).schedule(participants)) == 6


def test_no_repeat_single_leg(four):
    """No-repeat never triggers within one leg."""
    constraints = ConstraintSet([NoRepeatPairings()])
    result = RoundRobinScheduler(constraints).schedule(four)

    assert len(set(_pairs(result))) == len(result)


def test_no_repeat_multi_leg_is_incomplete(four):
    """No-repeat rejects every leg-two rematch and reports the shortfall."""
    scheduler = RoundRobinScheduler(ConstraintSet([NoRepeatPairings()]))

    with pytest.raises(IncompleteScheduleError) as excinfo:
        scheduler.schedule(four, legs=2, strategy=RepeatedLegStrategy())

    error = excinfo.value
    assert error.expected_event_count == 12
    assert error.actual_event_count == 6
    assert error.violation_collector.violation_count == 6
    assert {v.round_number for v in error.violation_collector.violations} == {4, 5, 6}

    report = error.get_diagnostic_report()
    assert "• No Repeat Pairings: 6 violations" in report
    assert "Affected rounds: 4 (2), 5 (2), 6 (2)" in report
    assert "This constraint cannot hold across legs that repeat every pairing" in report


def test_rest_period_longer_than_a_leg_is_impossible(four):
    """Test rest periods that exceed the leg length are rejected up front."""
    scheduler = RoundRobinScheduler(ConstraintSet([MinimumRestPeriodsConstraint(4)]))

    with pytest.raises(ImpossibleConstraintsError):
        scheduler.schedule(four, legs=2)

    # Exactly one leg apart is fine
    relaxed = RoundRobinScheduler(ConstraintSet([MinimumRestPeriodsConstraint(3)]))
    assert len(relaxed.schedule(four, legs=2)) == 12


def test_cross_leg_constraint_visibility(four):
    """Later legs are checked against every earlier event."""
    seen_counts = []

    def record(event, context):
        seen_counts.append(context.event_count)
        return True

    RoundRobinScheduler(ConstraintSet.create().custom(record).build()).schedule(four, legs=2)

    assert seen_counts == list(range(12))


def test_violation_collector_resets_between_calls(four):
    """Each call starts with an empty collector."""
    scheduler = RoundRobinScheduler(ConstraintSet([ConsecutiveRoleConstraint.home_away(1)]))

    with pytest.raises(IncompleteScheduleError):
        scheduler.schedule(four)
    with pytest.raises(IncompleteScheduleError):
        scheduler.schedule(four)

    assert scheduler.violation_collector.violation_count == 3


def test_balanced_orderer_in_scheduler(four):
    """Test the balanced orderer spreads home events in leg one."""
    result = RoundRobinScheduler(orderer=BalancedParticipantOrderer()).schedule(four)

    homes = Counter(e.home.id for e in result)
    assert max(homes.values()) - min(homes.get(p.id, 0) for p in four) <= 1


def test_generate_schedule_and_round(four):
    """Test single-leg and round-by-round generation."""
    scheduler = RoundRobinScheduler()

    assert scheduler.supports_complete_generation()
    assert len(scheduler.generate_schedule(four)) == 6

    round_two = scheduler.generate_round(four, 2)
    assert round_two.round_number == 2
    assert [e.participant_ids for e in round_two.events] == [("A", "B"), ("C", "D")]

    with pytest.raises(InvalidConfigurationError, match="Round 4 does not exist"):
        scheduler.generate_round(four, 4)


def test_expected_event_count(four):
    """Test the expected count helper."""
    scheduler = RoundRobinScheduler()

    assert scheduler.get_expected_event_count(four, 2) == 12
    assert scheduler.get_expected_event_count(make_participants("A"), 1) == 0
    assert scheduler.expected_event_calculator.algorithm_name == "Round Robin"


def test_base_scheduler_operations_unsupported(four):
    """The base scheduler rejects complete generation."""
    class Minimal(Scheduler):
        def schedule(self, participants, participants_per_event=2, legs=1, strategy=None):
            raise NotImplementedError

    scheduler = Minimal()

    assert not scheduler.supports_complete_generation()
    with pytest.raises(UnsupportedOperationError):
        scheduler.generate_schedule(four)
    with pytest.raises(UnsupportedOperationError):
        scheduler.generate_round(four, 1)
    with pytest.raises(UnsupportedOperationError):
        scheduler.generate_structure(4)


def test_build_constraints_from_config():
    """Test config constraint sections map to constraint objects."""
    config = SchedulerConfig(constraints={
        "no_repeat_pairings": True,
        "min_rest_rounds": 2,
        "seed_protection": {"top_seeds": 2, "period": 0.5},
        "max_consecutive_home_away": 3,
        "max_consecutive_position": 3,
        "metadata_rules": [
            {"key": "division", "rule": "same"},
            {"key": "tier", "rule": "max_unique", "max_unique": 2},
        ],
    })

    constraints = build_constraints(config)

    assert len(constraints) == 7
    assert isinstance(constraints.constraints[0], NoRepeatPairings)
    assert isinstance(constraints.constraints[1], MinimumRestPeriodsConstraint)
    assert build_constraints(SchedulerConfig()).is_empty()


def test_schedule_from_config(four):
    """Test the config-driven convenience function."""
    config = SchedulerConfig(legs=2, leg_strategy="shuffled", ordering="seeded_random",
                             seed=11, shuffle_participants=True)

    first = schedule(four, config)
    second = schedule(four, config)

    assert len(first) == 12
    assert [e.participant_ids for e in first] == [e.participant_ids for e in second]
    assert first.get_metadata_value("leg_strategy") == "shuffled"
    assert build_scheduler(config).rng is not None
    assert build_scheduler(SchedulerConfig()).rng is None
