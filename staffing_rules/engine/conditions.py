"""Condition evaluation for one date.

Each condition type maps to a counting function in ``COUNTERS``. A counter
takes ``(condition, context)`` and returns the counted value, or None when the
condition cannot be counted (missing employee id, no period metrics).
``evaluate_condition`` returns one of three outcomes:

- ``Evaluated``: the count was compared; ``failure`` is set when violated
- ``Skipped``: the day filter excludes the date
- ``Unhandled``: unknown type or operator, or an uncountable condition
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from staffing_rules.domain.rules import ComplexRule, Condition, Rule, Violation

from .operators import check_operator, coerce_expected, generate_violation_message, operator_problem
from .period import EMPLOYEE_METRICS, PeriodAggregator
from .snapshot import WEEKDAY_NAMES, StaffingSnapshot, to_date, to_iso
from .summary import SUMMARY_KINDS, split_summary_kind, summary_key


@dataclass(frozen=True)
class ConditionContext:
    snapshot: StaffingSnapshot
    period: Optional[PeriodAggregator] = None


@dataclass(frozen=True)
class ConditionFailure:
    actual: Any
    expected: Any
    description: str
    message: str
    severity: str


@dataclass(frozen=True)
class Evaluated:
    failure: Optional[ConditionFailure] = None

    @property
    def violated(self) -> bool:
        return self.failure is not None


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class Unhandled:
    kind: str  # "type", "operator" or "value"
    reason: str


ConditionOutcome = Union[Evaluated, Skipped, Unhandled]
Counter = Callable[[Condition, ConditionContext], Any]


# -- day filter --------------------------------------------------------------

def _filter_matches(token: Any, day_name: str, weekend: bool) -> bool:
    if not isinstance(token, str):
        return True
    token = token.strip().lower()
    if token in ("", "all"):
        return True
    if token == "weekdays":
        return not weekend
    if token == "weekends":
        return weekend
    if token in WEEKDAY_NAMES:
        return token == day_name
    # unrecognised filter values do not restrict
    return True


def day_applies(day_filter: Any, day) -> bool:
    """Whether a condition with ``day_filter`` is evaluated on ``day``."""
    if day_filter is None:
        return True
    day = to_date(day)
    day_name = WEEKDAY_NAMES[day.weekday()]
    weekend = day.weekday() >= 5
    if isinstance(day_filter, (list, tuple)):
        if not day_filter:
            return True
        return any(_filter_matches(token, day_name, weekend) for token in day_filter)
    return _filter_matches(day_filter, day_name, weekend)


# -- counters ----------------------------------------------------------------

def _role_matches(placement, role) -> bool:
    return role is not None and (placement.role_name == role or placement.role_id == role)


def count_by_role(condition: Condition, ctx: ConditionContext) -> int:
    snapshot = ctx.snapshot
    if condition.role in snapshot.employees_by_role:
        return snapshot.employees_by_role[condition.role]
    # fall back to role id
    return sum(1 for p in snapshot.placements if _role_matches(p, condition.role))


def count_by_shift(condition: Condition, ctx: ConditionContext) -> int:
    return ctx.snapshot.employees_by_shift.get(condition.shift, 0)


def count_by_shift_and_role(condition: Condition, ctx: ConditionContext) -> int:
    return sum(
        1 for p in ctx.snapshot.placements
        if p.shift_name == condition.shift and _role_matches(p, condition.role)
    )


def count_total(condition: Condition, ctx: ConditionContext) -> int:
    return ctx.snapshot.total_staff


def _summary_parts(condition: Condition):
    if condition.row_type and condition.shift_type:
        return condition.row_type, condition.shift_type
    return split_summary_kind(condition.type)


def count_summary_row(condition: Condition, ctx: ConditionContext) -> Optional[int]:
    parts = _summary_parts(condition)
    if parts is None:
        return None
    return ctx.snapshot.summary_counts.get(summary_key(*parts), 0)


def summary_value(condition: Condition, ctx: ConditionContext) -> Optional[int]:
    if not condition.summary_field:
        return None
    return ctx.snapshot.summary_counts.get(condition.summary_field, 0)


def weekend_check(condition: Condition, ctx: ConditionContext) -> bool:
    return ctx.snapshot.is_weekend


def weekday_check(condition: Condition, ctx: ConditionContext) -> bool:
    return not ctx.snapshot.is_weekend


def employee_metric(condition: Condition, ctx: ConditionContext) -> Optional[int]:
    """Whole-interval metric for the condition's explicit employee."""
    if ctx.period is None or not condition.employee_id:
        return None
    return ctx.period.metrics_for(condition.employee_id).value_for(condition.type)


COUNTERS: Dict[str, Counter] = {
    "count_by_role": count_by_role,
    "count_by_shift": count_by_shift,
    "count_by_shift_and_role": count_by_shift_and_role,
    "count_total": count_total,
    "summary_value": summary_value,
    "weekend_check": weekend_check,
    "weekday_check": weekday_check,
}
COUNTERS.update({kind: count_summary_row for kind in SUMMARY_KINDS})
COUNTERS.update({kind: employee_metric for kind in EMPLOYEE_METRICS})


def describe(condition: Condition) -> str:
    kind = condition.type
    if kind == "count_by_role":
        return f"{condition.role} count"
    if kind == "count_by_shift":
        return f"{condition.shift} shift count"
    if kind == "count_by_shift_and_role":
        return f"{condition.role} on {condition.shift} shift"
    if kind == "count_total":
        return "total staff count"
    if kind == "summary_value":
        return f"summary {condition.summary_field}"
    if kind == "weekend_check":
        return "is weekend"
    if kind == "weekday_check":
        return "is weekday"
    if kind in EMPLOYEE_METRICS:
        return f"employee {condition.employee_id} {EMPLOYEE_METRICS[kind][1]}"
    parts = _summary_parts(condition)
    if parts is not None:
        row, half = parts
        return f"{row.upper()} {half.capitalize()} shift count"
    return str(kind)


def _unhandled_count_reason(condition: Condition) -> str:
    if condition.is_employee_scoped:
        return f"Condition {condition.type} needs an employeeId outside employee rules"
    return f"Cannot count condition {condition.type}"


# -- evaluation --------------------------------------------------------------

def evaluate_condition(
    condition: Condition,
    day,
    snapshot: StaffingSnapshot,
    period: Optional[PeriodAggregator] = None,
) -> ConditionOutcome:
    if not day_applies(condition.day_filter, day):
        return Skipped(f"dayFilter {condition.day_filter!r} excludes {to_iso(day)}")

    counter = COUNTERS.get(condition.type)
    if counter is None:
        return Unhandled("type", f"Unknown condition type: {condition.type}")

    expected = coerce_expected(condition.operator, condition.value)
    problem = operator_problem(condition.operator, expected)
    if problem:
        return Unhandled("operator", problem)

    actual = counter(condition, ConditionContext(snapshot, period))
    if actual is None:
        return Unhandled("value", _unhandled_count_reason(condition))

    try:
        violated = check_operator(actual, condition.operator, expected)
    except TypeError:
        return Unhandled("value", f"Cannot compare {actual!r} with {condition.value!r}")
    if not violated:
        return Evaluated()

    description = describe(condition)
    message = condition.message or generate_violation_message(
        condition.operator, condition.value, description, actual
    )
    return Evaluated(ConditionFailure(
        actual=actual,
        expected=condition.value,
        description=description,
        message=message,
        severity=condition.severity,
    ))


def failure_to_violation(rule: Optional[Rule], day, failure: ConditionFailure,
                         severity: Optional[str] = None, message: Optional[str] = None) -> Violation:
    return Violation(
        rule_id=rule.id if rule else None,
        rule_name=rule.name if rule else "",
        date=to_iso(day),
        severity=severity or failure.severity,
        message=message or failure.message,
        actual_value=failure.actual,
        expected_value=failure.expected,
    )


def evaluate(
    condition: Condition,
    day,
    snapshot: StaffingSnapshot,
    rule: Optional[Rule] = None,
    period: Optional[PeriodAggregator] = None,
) -> Optional[Violation]:
    """Violation for ``condition`` on ``day``, or None (including skipped and unhandled)."""
    outcome = evaluate_condition(condition, day, snapshot, period)
    if isinstance(outcome, Evaluated) and outcome.failure is not None:
        return failure_to_violation(rule, day, outcome.failure)
    return None


def evaluate_complex_rule(
    complex_rule: ComplexRule,
    day,
    snapshot: StaffingSnapshot,
    period: Optional[PeriodAggregator] = None,
) -> ConditionOutcome:
    """IF/THEN pair: a failure only when both the IF and the THEN condition fire."""
    if_outcome = evaluate_condition(complex_rule.if_condition, day, snapshot, period)
    if not isinstance(if_outcome, Evaluated) or not if_outcome.violated:
        return if_outcome

    then_outcome = evaluate_condition(complex_rule.then_condition, day, snapshot, period)
    if not isinstance(then_outcome, Evaluated) or not then_outcome.violated:
        return then_outcome

    then_failure = then_outcome.failure
    return Evaluated(ConditionFailure(
        actual=then_failure.actual,
        expected=then_failure.expected,
        description="IF condition met but THEN condition failed",
        message=complex_rule.message or "Complex rule violation",
        severity=complex_rule.severity,
    ))
