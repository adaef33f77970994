"""Per-employee metrics across the whole evaluation interval."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from staffing_rules.domain.models import Employee
from staffing_rules.domain.rules import PERIOD, Condition, Rule, Violation, severity_rank

from .diagnostics import Diagnostic, DiagnosticLog
from .operators import check_operator, coerce_expected, format_expected, operator_problem, OPERATOR_WORDS
from .snapshot import ScheduleLookup, to_date

VACATION_TOKEN = "C "
REQUEST_TOKENS = ("R1", "R 1")
OFF_SHIFT = "Off"

# condition type -> (EmployeeMetrics attribute, label used in messages)
EMPLOYEE_METRICS = {
    "employee_total_shifts": ("total_shifts", "total shifts"),
    "employee_vacation_days": ("vacation_days", "vacation days"),
    "employee_move_days": ("move_days", "move days"),
    "employee_day_shifts": ("day_shifts", "day shifts"),
    "employee_night_shifts": ("night_shifts", "night shifts"),
    "employee_weekend_shifts": ("weekend_shifts", "weekend shifts"),
    "employee_weekday_shifts": ("weekday_shifts", "weekday shifts"),
}


def is_vacation_shift(shift_name: str) -> bool:
    return VACATION_TOKEN in shift_name


def is_request_shift(shift_name: str) -> bool:
    return any(token in shift_name for token in REQUEST_TOKENS)


def is_work_shift(shift_name: str) -> bool:
    """Counts toward weekend/weekday totals: named, not Off, not leave or request."""
    return (
        bool(shift_name)
        and shift_name != OFF_SHIFT
        and not is_vacation_shift(shift_name)
        and not is_request_shift(shift_name)
    )


def format_employee_name(name: Optional[str]) -> str:
    """Stored names are "Last,First"; display them as "First Last"."""
    if not name:
        return "Unknown Employee"
    if "," in name:
        last, first = name.split(",", 1)
        return f"{first.strip()} {last.strip()}"
    return name


def interval_dates(start, length: int) -> List[date]:
    """The contiguous run of ``length`` calendar days beginning at ``start``."""
    if int(length) <= 0:
        return []
    return [ts.date() for ts in pd.date_range(to_date(start), periods=int(length), freq="D")]


@dataclass(frozen=True)
class EmployeeMetrics:
    assignments: int = 0
    total_shifts: int = 0
    vacation_days: int = 0
    move_days: int = 0  # same count as request days
    day_shifts: int = 0
    night_shifts: int = 0
    weekend_shifts: int = 0
    weekday_shifts: int = 0

    def value_for(self, condition_type: str) -> Optional[int]:
        metric = EMPLOYEE_METRICS.get(condition_type)
        if metric is None:
            return None
        return getattr(self, metric[0])


def compute_employee_metrics(employee_id: str, days: Sequence[date], lookup: ScheduleLookup) -> EmployeeMetrics:
    assignments = vacation = request = day_count = night_count = weekend = weekday = 0

    for day in days:
        entry = lookup.get(employee_id, day)
        if entry is None:
            continue
        assignments += 1
        name = lookup.shift_name(entry)

        if is_vacation_shift(name):
            vacation += 1
        if is_request_shift(name):
            request += 1

        leave_or_request = is_vacation_shift(name) or is_request_shift(name)
        lowered = name.lower()
        if "day" in lowered and not leave_or_request:
            day_count += 1
        if "night" in lowered and not leave_or_request:
            night_count += 1

        if is_work_shift(name):
            if day.weekday() >= 5:
                weekend += 1
            else:
                weekday += 1

    return EmployeeMetrics(
        assignments=assignments,
        total_shifts=assignments - vacation - request,
        vacation_days=vacation,
        move_days=request,
        day_shifts=day_count,
        night_shifts=night_count,
        weekend_shifts=weekend,
        weekday_shifts=weekday,
    )


class PeriodAggregator:
    """Memoised employee metrics for one interval of one evaluation pass."""

    def __init__(self, lookup: ScheduleLookup, days: Sequence[date]):
        self.lookup = lookup
        self.days = list(days)
        self._metrics: Dict[str, EmployeeMetrics] = {}

    def metrics_for(self, employee_id: str) -> EmployeeMetrics:
        if employee_id not in self._metrics:
            self._metrics[employee_id] = compute_employee_metrics(employee_id, self.days, self.lookup)
        return self._metrics[employee_id]

    def filtered_employees(self, conditions: Sequence[Condition]) -> List[Employee]:
        """Employees matching every condition's ``filters`` (job role and/or employee id)."""
        employees = list(self.lookup.roster.employees)
        for condition in conditions:
            filters = condition.filters or {}
            job_type = filters.get("jobType") or filters.get("job_type")
            if job_type:
                employees = [
                    emp for emp in employees
                    if emp.role_id == job_type or self.lookup.role_name(emp) == job_type
                ]
            employee_id = filters.get("employeeId") or filters.get("employee_id")
            if employee_id:
                employees = [emp for emp in employees if emp.id == employee_id]
        return employees


def describe_employee_failure(condition: Condition, employee_name: str, actual, expected) -> str:
    label = EMPLOYEE_METRICS.get(condition.type, (None, "shifts"))[1]
    word = OPERATOR_WORDS.get(condition.operator, condition.operator)
    return f"{employee_name} has {actual} {label}, but should have {word} {format_expected(condition.operator, expected)}"


def evaluate_employee_rule_across_period(
    rule: Rule,
    interval_start,
    interval_length: int,
    lookup: Optional[ScheduleLookup] = None,
    period: Optional[PeriodAggregator] = None,
    diagnostics: Optional[DiagnosticLog] = None,
) -> List[Violation]:
    """Evaluate an employee-scoped rule once per employee over the interval.

    All of one employee's failing conditions are merged into a single
    violation dated ``"Period"`` whose severity is the most severe failure.
    Either ``lookup`` or a prepared ``period`` aggregator must be given.
    """
    if period is None:
        if lookup is None:
            raise ValueError("evaluate_employee_rule_across_period needs a lookup or a period aggregator")
        period = PeriodAggregator(lookup, interval_dates(interval_start, interval_length))
    if not period.days:
        return []

    conditions = [c for c in rule.conditions if c.is_employee_scoped]
    usable = []
    for condition in conditions:
        problem = None
        if condition.type not in EMPLOYEE_METRICS:
            problem = f"Unknown condition type: {condition.type}"
        else:
            problem = operator_problem(condition.operator, coerce_expected(condition.operator, condition.value))
        if problem:
            if diagnostics is not None:
                diagnostics.add(Diagnostic(rule.id, rule.name, PERIOD, problem))
            continue
        usable.append(condition)

    violations: List[Violation] = []
    for employee in period.filtered_employees(conditions):
        metrics = period.metrics_for(employee.id)
        employee_name = format_employee_name(employee.name)
        failures = []
        for condition in usable:
            actual = metrics.value_for(condition.type)
            expected = condition.value
            try:
                violated = check_operator(actual, condition.operator, expected)
            except TypeError:
                if diagnostics is not None:
                    diagnostics.add(Diagnostic(rule.id, rule.name, PERIOD, f"Cannot compare {actual!r} with {expected!r}"))
                continue
            if violated:
                failures.append({
                    "condition": condition.type,
                    "description": describe_employee_failure(condition, employee_name, actual, expected),
                    "actualValue": actual,
                    "expectedValue": expected,
                    "operator": condition.operator,
                    "severity": condition.severity,
                })

        if not failures:
            continue

        worst = max(failures, key=lambda f: severity_rank(f["severity"]))
        violations.append(Violation(
            rule_id=rule.id,
            rule_name=rule.name,
            date=PERIOD,
            severity=_merged_severity(f["severity"] for f in failures),
            message="; ".join(f["description"] for f in failures),
            actual_value=worst["actualValue"],
            expected_value=worst["expectedValue"],
            employee_id=employee.id,
            employee_name=employee_name,
            details=tuple(failures),
        ))
    return violations


def _merged_severity(severities) -> str:
    seen = set(severities)
    if "error" in seen:
        return "error"
    if "warning" in seen:
        return "warning"
    return "info"
