"""Rule evaluation engine: snapshots, condition dispatch, period metrics, ordering.

``RuleEngine`` lives in ``staffing_rules.engine.orchestrator``; it depends on
the rule store in ``staffing_rules.services``, which in turn uses the pieces
exported here.
"""

from .cache import EvaluationCache
from .conditions import Evaluated, Skipped, Unhandled, day_applies, evaluate, evaluate_condition
from .diagnostics import Diagnostic, DiagnosticLog
from .operators import check_operator, generate_violation_message
from .period import PeriodAggregator, evaluate_employee_rule_across_period, interval_dates
from .shapes import RuleBuckets, classify_rules, normalize_tree
from .snapshot import ScheduleLookup, StaffingSnapshot, build_snapshot
from .sorting import count_by_severity, sort_violations

__all__ = [
    "EvaluationCache",
    "Evaluated",
    "Skipped",
    "Unhandled",
    "day_applies",
    "evaluate",
    "evaluate_condition",
    "Diagnostic",
    "DiagnosticLog",
    "check_operator",
    "generate_violation_message",
    "PeriodAggregator",
    "evaluate_employee_rule_across_period",
    "interval_dates",
    "RuleBuckets",
    "classify_rules",
    "normalize_tree",
    "ScheduleLookup",
    "StaffingSnapshot",
    "build_snapshot",
    "count_by_severity",
    "sort_violations",
]
