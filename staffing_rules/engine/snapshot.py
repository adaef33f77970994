"""Per-date staffing snapshots built from the roster."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Set, Tuple

from staffing_rules.domain.models import Employee, ScheduleEntry
from staffing_rules.domain.roster import Roster

from .summary import empty_summary, is_night_shift, matching_rows

WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def to_iso(value) -> str:
    """Normalise a date, datetime or date string to YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


@dataclass(frozen=True)
class Placement:
    """One employee working on the snapshot date."""

    employee_id: str
    role_id: Optional[str]
    role_name: str
    shift_name: str


@dataclass(frozen=True)
class StaffingSnapshot:
    """Aggregated staffing for a single date."""

    date: str
    day_of_week: str
    is_weekend: bool
    employees_by_role: Dict[str, int] = field(default_factory=dict)
    employees_by_shift: Dict[str, int] = field(default_factory=dict)
    total_staff: int = 0
    employee_ids: Tuple[str, ...] = ()
    placements: Tuple[Placement, ...] = ()
    summary_counts: Dict[str, int] = field(default_factory=dict)


class ScheduleLookup:
    """Lookups over the roster, built once per evaluation pass.

    Holds the (employee, date) -> assignment map so that per-day snapshots and
    per-employee period metrics never scan the assignment list again.
    """

    def __init__(self, roster: Roster):
        self.roster = roster
        self.role_names: Dict[str, str] = {r.id: r.name for r in roster.job_roles}
        self.shift_names: Dict[str, str] = {s.id: s.name for s in roster.shift_types}
        self.entries: Dict[Tuple[str, str], ScheduleEntry] = {}
        self.night_workers: Set[str] = set()

        for entry in roster.assignments:
            self.entries[(entry.employee_id, to_iso(entry.date))] = entry
            if is_night_shift(self.shift_names.get(entry.shift_id)):
                self.night_workers.add(entry.employee_id)

    @classmethod
    def build(cls, roster: Roster) -> "ScheduleLookup":
        return cls(roster)

    def get(self, employee_id: str, day) -> Optional[ScheduleEntry]:
        return self.entries.get((employee_id, to_iso(day)))

    def shift_name(self, entry: Optional[ScheduleEntry]) -> str:
        """Display name of the entry's shift type, '' when unknown."""
        if entry is None:
            return ""
        return self.shift_names.get(entry.shift_id, "")

    def role_name(self, employee: Employee) -> str:
        return self.role_names.get(employee.role_id, "")


def build_snapshot(day: date, lookup: ScheduleLookup) -> StaffingSnapshot:
    """Count who works on ``day`` by role, by shift and by summary row."""
    day = to_date(day)
    date_str = to_iso(day)
    by_role = {name: 0 for name in lookup.role_names.values()}
    by_shift = {name: 0 for name in lookup.shift_names.values()}
    summary = empty_summary()
    employee_ids = []
    placements = []

    for employee in lookup.roster.employees:
        entry = lookup.get(employee.id, date_str)
        if entry is None:
            continue

        role_name = lookup.role_names.get(employee.role_id)
        if role_name is not None:
            by_role[role_name] = by_role.get(role_name, 0) + 1

        shift_name = lookup.shift_names.get(entry.shift_id)
        if shift_name is not None:
            by_shift[shift_name] = by_shift.get(shift_name, 0) + 1

        for key in matching_rows(role_name or "", shift_name or "", employee.id in lookup.night_workers):
            summary[key] += 1

        employee_ids.append(employee.id)
        placements.append(Placement(employee.id, employee.role_id, role_name or "", shift_name or ""))

    return StaffingSnapshot(
        date=date_str,
        day_of_week=WEEKDAY_NAMES[day.weekday()],
        is_weekend=is_weekend(day),
        employees_by_role=by_role,
        employees_by_shift=by_shift,
        total_staff=len(employee_ids),
        employee_ids=tuple(employee_ids),
        placements=tuple(placements),
        summary_counts=summary,
    )
