"""In-memory roster handed to the rule engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List

from .models import Employee, JobRole, ScheduleEntry, ShiftType


@dataclass
class Roster:
    """Read-only view of the schedule: employees, roles, shift types and assignments."""

    employees: List[Employee] = field(default_factory=list)
    job_roles: List[JobRole] = field(default_factory=list)
    shift_types: List[ShiftType] = field(default_factory=list)
    assignments: List[ScheduleEntry] = field(default_factory=list)


@dataclass
class CalendarContext:
    """Interval currently shown on the calendar; engine input, not engine state."""

    start_date: date
    interval_days: int = 42

    @classmethod
    def current_week(cls, interval_days: int = 42, today: date | None = None) -> "CalendarContext":
        """Interval starting on the Monday of the current week."""
        today = today or date.today()
        return cls(start_date=today - timedelta(days=today.weekday()), interval_days=interval_days)
