"""Domain models, rule types and data access layer."""

from .models import Base, Employee, JobRole, ScheduleEntry, ShiftType, StoredRule
from .repositories import EmployeeRepository, RosterRepository, RuleRepository
from .roster import CalendarContext, Roster
from .rules import AdvancedBody, ComplexRule, Condition, Rule, SimpleBody, Violation

__all__ = [
    "Base",
    "Employee",
    "JobRole",
    "ScheduleEntry",
    "ShiftType",
    "StoredRule",
    "EmployeeRepository",
    "RosterRepository",
    "RuleRepository",
    "CalendarContext",
    "Roster",
    "AdvancedBody",
    "ComplexRule",
    "Condition",
    "Rule",
    "SimpleBody",
    "Violation",
]
