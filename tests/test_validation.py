"""
Tests for violation tracking, completeness validation and diagnostics.
"""

import pytest

from matchplan.constraints import (
    ConsecutiveRoleConstraint,
    ConstraintSet,
    MinimumRestPeriodsConstraint,
    NoRepeatPairings,
)
from matchplan.diagnostics import SchedulingDiagnostics
from matchplan.exceptions import IncompleteScheduleError
from matchplan.models import Event, Round, Schedule
from matchplan.validation import (
    ConstraintViolation,
    ConstraintViolationCollector,
    RoundRobinEventCalculator,
    ScheduleValidator,
)

from conftest import make_participants


@pytest.fixture
def collector(four):
    a, b, c, d = four
    home_away = ConsecutiveRoleConstraint.home_away(1)
    no_repeat = NoRepeatPairings()

    collector = ConstraintViolationCollector()
    collector.record_violation(ConstraintViolation(home_away, Event([a, c], Round(2)), "run", (a, c), 2))
    collector.record_violation(ConstraintViolation(home_away, Event([a, b], Round(3)), "run", (a, b), 3))
    collector.record_violation(ConstraintViolation(no_repeat, Event([b, a], Round(4)), "met", (b, a), 4))
    return collector


def test_collector_grouping(collector):
    """Test violations group by constraint and participant."""
    by_constraint = collector.get_violations_by_constraint()

    assert collector.has_violations()
    assert collector.violation_count == 3
    assert len(by_constraint["Home/Away consecutive limit (1)"]) == 2
    assert collector.get_violation_counts_by_constraint() == {
        "Home/Away consecutive limit (1)": 2,
        "No Repeat Pairings": 1,
    }
    assert len(collector.get_violations_by_participant()["A"]) == 3
    assert collector.get_affected_rounds() == [2, 3, 4]
    assert collector.get_most_affected_participants(1) == [("A", 3)]


def test_collector_clear(collector):
    """Test clearing empties the collector."""
    collector.clear()

    assert not collector.has_violations()
    assert collector.violations == []


def test_violation_description(four):
    """Test violation text includes constraint, round and participants."""
    a, b, _, _ = four
    violation = ConstraintViolation(NoRepeatPairings(), Event([a, b], Round(5)), "A and B have already met", (a, b), 5)

    assert violation.description == (
        "Constraint 'No Repeat Pairings' violated in round 5: A and B have already met (Participants: A, B)"
    )


def test_round_robin_calculator(four):
    """Test the round-robin formula."""
    calculator = RoundRobinEventCalculator()

    assert calculator.calculate_expected_events(four) == 6
    assert calculator.calculate_expected_events(four, legs=3) == 18
    assert calculator.calculate_expected_events(make_participants("A")) == 0
    assert calculator.algorithm_name == "Round Robin"


def test_validator_raises_on_shortfall(four, collector):
    """An incomplete schedule raises with the counts attached."""
    a, b, _, _ = four
    validator = ScheduleValidator()
    partial = Schedule([Event([a, b], Round(1))])

    with pytest.raises(IncompleteScheduleError) as excinfo:
        validator.validate_schedule_completeness(partial, 6, collector, RoundRobinEventCalculator(), four, 1)

    assert excinfo.value.actual_event_count == 1
    assert excinfo.value.missing_event_count == 5

    # Complete counts pass silently
    validator.validate_event_count(6, 6, collector, RoundRobinEventCalculator(), four, 1)


def test_validator_text_report(collector):
    """Test the plain-text report and suggestions."""
    validator = ScheduleValidator()

    report = validator.generate_diagnostic_report(collector, 6, 3, "Round Robin")
    assert "Cannot generate complete Round Robin schedule." in report
    assert "Generated: 3 events (3 missing)" in report
    assert "Home/Away consecutive limit (1): 2 violations in rounds [2,3]" in report
    assert "A: 3 violations" in report

    suggestions = validator.generate_constraint_suggestions(collector, 4)
    assert "Consider relaxing the consecutive limit" in suggestions
    assert "Consider allowing repeat pairings" in suggestions
    assert validator.generate_constraint_suggestions(ConstraintViolationCollector(), 4) == ""


def test_analyze_scheduling_failure(four, collector):
    """Test the diagnostic report for a partial run."""
    a, b, c, d = four
    partial = [Event([a, d], Round(1)), Event([b, c], Round(1))]

    report = SchedulingDiagnostics().analyze_scheduling_failure(
        four, ConstraintSet(), partial, legs=1, violations=collector, context={"leg": 1}
    )

    assert report.expected_events == 6
    assert report.generated_events == 2
    assert report.missing_events == 4
    assert report.completion_percentage == pytest.approx(100 / 3)
    assert len(report.missing_pairings) == 4
    assert "A vs B (Leg 1)" in report.missing_pairings
    assert len(report.constraint_violations) == 3
    assert not report.is_successful()
    assert report.has_critical_issues()
    assert report.summary.startswith("Schedule generation failed at 33% completion.")

    text = report.to_text()
    assert text.startswith("=== SCHEDULING DIAGNOSTIC REPORT ===")
    assert "Missing Pairings:" in text


def test_missing_pairings_truncated_in_text():
    """Only the first ten missing pairings are listed."""
    participants = make_participants(*[f"T{i}" for i in range(1, 7)])
    report = SchedulingDiagnostics().analyze_scheduling_failure(participants, ConstraintSet(), [], legs=1)

    assert len(report.missing_pairings) == 15
    assert "... and 5 more" in report.to_text()
    assert any("No events were generated" in s for s in report.suggestions)


def test_identify_constraint_conflicts(four):
    """Only rest periods longer than a leg are reported as provable conflicts."""
    diagnostics = SchedulingDiagnostics()
    constraints = ConstraintSet([NoRepeatPairings(), MinimumRestPeriodsConstraint(5), MinimumRestPeriodsConstraint(2)])

    assert diagnostics.identify_constraint_conflicts(four, constraints, 1) == []

    conflicts = diagnostics.identify_constraint_conflicts(four, constraints, 2)
    assert [type(c).__name__ for c, _ in conflicts] == ["MinimumRestPeriodsConstraint"]
    assert conflicts[0][0].min_rounds == 5
    assert "exactly 3 rounds apart" in conflicts[0][1]


def test_suggest_constraint_adjustments(four):
    """Test suggestions follow the report contents."""
    diagnostics = SchedulingDiagnostics()
    report = diagnostics.analyze_scheduling_failure(
        four, ConstraintSet([MinimumRestPeriodsConstraint(5)]), [], legs=2, context={"leg": 2}
    )

    suggestions = diagnostics.suggest_constraint_adjustments(report)
    assert "Consider relaxing constraints that may be preventing event generation" in suggestions
    assert "Some participant pairings cannot be satisfied with current constraints" in suggestions
    assert "Multi-leg constraint validation may require a different leg strategy" in suggestions
