"""Tests for condition dispatch, operators and day filters."""

import datetime as dt

import pytest

from staffing_rules.domain.rules import ComplexRule, Condition, Rule
from staffing_rules.engine.conditions import (
    Evaluated,
    Skipped,
    Unhandled,
    day_applies,
    evaluate,
    evaluate_complex_rule,
    evaluate_condition,
)
from staffing_rules.engine.operators import check_operator, generate_violation_message
from staffing_rules.engine.period import PeriodAggregator
from staffing_rules.engine.snapshot import ScheduleLookup, build_snapshot


@pytest.fixture
def lookup(sample_roster):
    return ScheduleLookup.build(sample_roster)


@pytest.fixture
def monday(lookup, week):
    return build_snapshot(week[0], lookup)


@pytest.fixture
def thursday(lookup, week):
    return build_snapshot(week[3], lookup)


def charge_rule():
    return Condition(type="count_by_role", role="Charge", operator="equals", value=1)


@pytest.mark.parametrize(
    "actual,operator,expected,violated",
    [
        (1, "equals", 1, False),
        (0, "equals", 1, True),
        (1, "not_equals", 1, True),
        (2, "not_equals", 1, False),
        (2, "greater_than", 2, True),
        (3, "greater_than", 2, False),
        (1, "greater_than_or_equal", 2, True),
        (2, "greater_than_or_equal", 2, False),
        (0, "less_than", 1, True),
        (1, "less_than", 1, False),
        (3, "less_than_or_equal", 2, True),
        (2, "less_than_or_equal", 2, False),
        (0, "between", {"min": 1, "max": 3}, True),
        (1, "between", {"min": 1, "max": 3}, False),
        (3, "between", {"min": 1, "max": 3}, False),
        (4, "between", {"min": 1, "max": 3}, True),
        (2, "equals", "2", False),
        (2, "no_such_operator", 1, False),
    ],
)
def test_check_operator(actual, operator, expected, violated):
    assert check_operator(actual, operator, expected) is violated


def test_satisfied_condition_is_evaluated_without_failure(monday, week):
    outcome = evaluate_condition(charge_rule(), week[0], monday)
    assert outcome == Evaluated()
    assert not outcome.violated


def test_violation_fields(thursday, week):
    rule = Rule(name="Daily Charge Nurse", id="r1")
    violation = evaluate(charge_rule(), week[3], thursday, rule=rule)

    assert violation is not None
    assert violation.rule_id == "r1"
    assert violation.rule_name == "Daily Charge Nurse"
    assert violation.date == "2025-01-09"
    assert violation.severity == "error"
    assert violation.actual_value == 0
    assert violation.expected_value == 1
    assert violation.message == "Expected exactly 1 Charge count, found 0"


def test_custom_message_wins(thursday, week):
    condition = Condition(type="count_by_role", role="Charge", operator="less_than", value=1,
                          severity="warning", message="No charge nurse scheduled")
    violation = evaluate(condition, week[3], thursday)
    assert violation.message == "No charge nurse scheduled"
    assert violation.severity == "warning"


def test_count_by_role_accepts_role_id(monday, week):
    condition = Condition(type="count_by_role", role="charge", operator="equals", value=1)
    assert evaluate(condition, week[0], monday) is None


def test_count_by_shift_and_role(monday, week):
    condition = Condition(type="count_by_shift_and_role", role="RN", shift="6t Day",
                          operator="equals", value=3)
    violation = evaluate(condition, week[0], monday)
    assert violation.actual_value == 2
    assert "RN on 6t Day shift" in violation.message


def test_between_counts_total(monday, week):
    outside = Condition(type="count_total", operator="between", value={"min": 1, "max": 2})
    inside = Condition(type="count_total", operator="between", value={"min": 3, "max": 5})
    assert evaluate(outside, week[0], monday).actual_value == 3
    assert evaluate(inside, week[0], monday) is None


def test_numeric_string_value_is_coerced(monday, week):
    condition = Condition(type="count_total", operator="equals", value="3")
    assert evaluate(condition, week[0], monday) is None


def test_summary_row_condition(monday, week):
    condition = Condition(type="rn_day_count", operator="less_than", value=8)
    violation = evaluate(condition, week[0], monday)
    assert violation.actual_value == 2
    assert "RN Day shift count" in violation.message


def test_explicit_row_and_shift_type(monday, week):
    condition = Condition(type="rn_day_count", row_type="charge", shift_type="day",
                          operator="equals", value=1)
    assert evaluate(condition, week[0], monday) is None


def test_weekend_filter_skips_weekday(sample_roster, week):
    lookup = ScheduleLookup.build(sample_roster)
    tuesday = week[1]
    condition = Condition(type="count_total", operator="greater_than", value=100, day_filter="weekends")

    outcome = evaluate_condition(condition, tuesday, build_snapshot(tuesday, lookup))
    assert isinstance(outcome, Skipped)
    assert evaluate(condition, tuesday, build_snapshot(tuesday, lookup)) is None


@pytest.mark.parametrize(
    "day_filter,day,applies",
    [
        (None, dt.date(2025, 1, 7), True),
        ("all", dt.date(2025, 1, 7), True),
        ("weekdays", dt.date(2025, 1, 7), True),
        ("weekdays", dt.date(2025, 1, 11), False),
        ("weekends", dt.date(2025, 1, 12), True),
        ("monday", dt.date(2025, 1, 6), True),
        ("Monday", dt.date(2025, 1, 7), False),
        (["saturday", "sunday"], dt.date(2025, 1, 11), True),
        (["saturday", "sunday"], dt.date(2025, 1, 10), False),
        ([], dt.date(2025, 1, 10), True),
        ("fortnightly", dt.date(2025, 1, 10), True),
    ],
)
def test_day_applies(day_filter, day, applies):
    assert day_applies(day_filter, day) is applies


def test_unknown_type_is_unhandled(monday, week):
    outcome = evaluate_condition(Condition(type="count_unicorns", operator="equals", value=1), week[0], monday)
    assert isinstance(outcome, Unhandled)
    assert outcome.kind == "type"


def test_unknown_operator_is_unhandled(monday, week):
    outcome = evaluate_condition(Condition(type="count_total", operator="roughly", value=1), week[0], monday)
    assert isinstance(outcome, Unhandled)
    assert outcome.kind == "operator"


def test_malformed_between_is_unhandled(monday, week):
    outcome = evaluate_condition(Condition(type="count_total", operator="between", value=3), week[0], monday)
    assert isinstance(outcome, Unhandled)


def test_employee_condition_needs_employee_id(monday, week, sample_roster):
    period = PeriodAggregator(ScheduleLookup.build(sample_roster), week)
    condition = Condition(type="employee_total_shifts", operator="less_than", value=10)
    assert isinstance(evaluate_condition(condition, week[0], monday, period), Unhandled)


def test_employee_condition_with_employee_id(monday, week, sample_roster):
    period = PeriodAggregator(ScheduleLookup.build(sample_roster), week)
    condition = Condition(type="employee_total_shifts", employee_id="e3",
                          operator="greater_than_or_equal", value=5)
    violation = evaluate(condition, week[0], monday, period=period)
    assert violation.actual_value == 3
    assert "employee e3 total shifts" in violation.message


def test_complex_rule_fires_only_when_if_and_then_fire(monday, thursday, week):
    complex_rule = ComplexRule(
        if_condition=Condition(type="count_by_role", role="Charge", operator="less_than", value=1),
        then_condition=Condition(type="count_total", operator="less_than", value=5),
        severity="warning",
        message="Short-staffed without a charge nurse",
    )

    assert evaluate_complex_rule(complex_rule, week[0], monday) == Evaluated()

    outcome = evaluate_complex_rule(complex_rule, week[3], thursday)
    assert outcome.violated
    assert outcome.failure.message == "Short-staffed without a charge nurse"
    assert outcome.failure.severity == "warning"


def test_generated_messages():
    assert generate_violation_message("equals", 1, "Charge count", 0) == "Expected exactly 1 Charge count, found 0"
    assert generate_violation_message("greater_than_or_equal", 2, "night shift count", 1) == \
        "Expected night shift count >= 2, found 1"
    assert generate_violation_message("between", {"min": 1, "max": 3}, "total staff count", 5) == \
        "Expected total staff count between 1-3, found 5"
