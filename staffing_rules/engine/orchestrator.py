"""RuleEngine - evaluates every enabled rule against the roster for an interval."""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from staffing_rules.config import EngineConfig
from staffing_rules.domain.roster import CalendarContext, Roster
from staffing_rules.domain.rules import Condition, Rule, Violation
from staffing_rules.services.rule_store import RuleStore
from staffing_rules.services.templates import RuleTemplate, get_rule_templates
from staffing_rules.services.templates import create_rule_from_template as _create_from_template

from .cache import EvaluationCache
from .conditions import Evaluated, Unhandled, evaluate_complex_rule, evaluate_condition, failure_to_violation
from .diagnostics import Diagnostic, DiagnosticLog
from .period import PeriodAggregator, evaluate_employee_rule_across_period, interval_dates
from .shapes import classify_rules, normalize_tree
from .snapshot import ScheduleLookup, StaffingSnapshot, build_snapshot, to_date, to_iso
from .sorting import sort_violations


class RuleEngine:
    """
    Evaluates staffing rules for a contiguous interval of days.

    One pass builds the assignment lookup once, evaluates employee rules once
    per employee across the whole interval, builds one snapshot per day shared
    by JSON and daily rules, then sorts. Results are cached per
    (start, length, rule-store version).
    """

    def __init__(
        self,
        roster: Roster,
        store: Optional[RuleStore] = None,
        rules: Optional[Iterable[Union[Rule, Mapping[str, Any]]]] = None,
        calendar: Optional[CalendarContext] = None,
        cache: Optional[EvaluationCache] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.config = config or EngineConfig()
        self.roster = roster
        self.store = store if store is not None else RuleStore(rules)
        self.calendar = calendar or self.config.calendar_context()
        self.cache = cache if cache is not None else EvaluationCache(
            freshness_seconds=self.config.cache.freshness_seconds,
            max_entries=self.config.cache.max_entries,
        )
        self._diagnostics: List[Diagnostic] = []

    # -- roster / interval ---------------------------------------------------

    def set_roster(self, roster: Roster) -> None:
        """Swap in a new roster; cached results were computed from the old one."""
        self.roster = roster
        self.cache.clear()

    def _interval(self, start_date, days) -> Tuple[date, int]:
        start = to_date(start_date) if start_date is not None else self.calendar.start_date
        length = int(days) if days is not None else self.calendar.interval_days
        return start, length

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """Problems met during the last evaluation pass."""
        return list(self._diagnostics)

    # -- evaluation ----------------------------------------------------------

    def evaluate_rules(self, start_date=None, days: Optional[int] = None) -> List[Violation]:
        start, length = self._interval(start_date, days)
        key = EvaluationCache.make_key(to_iso(start), length, self.store.version)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        violations = self._run_pass(self.store.rules, start, length)
        self.cache.put(key, violations)
        return violations

    def evaluate_single_rule(self, rule: Union[Rule, Mapping[str, Any]], start_date=None,
                             days: Optional[int] = None) -> List[Violation]:
        """Evaluate one rule regardless of ``enabled``; bypasses the cache."""
        if not isinstance(rule, Rule):
            rule = Rule.from_dict(rule)
        start, length = self._interval(start_date, days)
        return self._run_pass([rule], start, length, include_disabled=True)

    def evaluate_employee_rule_across_period(self, rule: Rule, interval_start, interval_length: int) -> List[Violation]:
        log = DiagnosticLog()
        lookup = ScheduleLookup.build(self.roster)
        violations = evaluate_employee_rule_across_period(
            rule, interval_start, interval_length, lookup=lookup, diagnostics=log
        )
        self._diagnostics = list(log)
        return violations

    def _run_pass(self, rules: Sequence[Rule], start: date, length: int,
                  include_disabled: bool = False) -> List[Violation]:
        log = DiagnosticLog()
        buckets = classify_rules(rules, include_disabled=include_disabled)
        days = interval_dates(start, length)
        lookup = ScheduleLookup.build(self.roster)
        period = PeriodAggregator(lookup, days)
        violations: List[Violation] = []

        for rule in buckets.employee:
            violations.extend(evaluate_employee_rule_across_period(
                rule, start, length, period=period, diagnostics=log
            ))

        json_rules: List[Tuple[Rule, List[Condition]]] = []
        for rule in buckets.json:
            conditions, problem = normalize_tree(rule.body.tree)
            if problem:
                log.add(Diagnostic(rule.id, rule.name, to_iso(start), problem))
                continue
            json_rules.append((rule, conditions))

        if buckets.needs_snapshots:
            snapshots = [build_snapshot(day, lookup) for day in days]
            for day, snapshot in zip(days, snapshots):
                for rule, conditions in json_rules:
                    self._evaluate_day(rule, conditions, day, snapshot, period, log, violations)
            for day, snapshot in zip(days, snapshots):
                for rule in buckets.daily:
                    self._evaluate_day(rule, rule.conditions, day, snapshot, period, log, violations)
                    self._evaluate_complex_rules(rule, day, snapshot, period, log, violations)

        self._diagnostics = list(log)
        return sort_violations(violations)

    @staticmethod
    def _record(rule: Rule, day: date, outcome, log: DiagnosticLog, violations: List[Violation]) -> None:
        if isinstance(outcome, Unhandled):
            log.add(Diagnostic(rule.id, rule.name, to_iso(day), outcome.reason))
        elif isinstance(outcome, Evaluated) and outcome.failure is not None:
            violations.append(failure_to_violation(rule, day, outcome.failure))

    def _evaluate_day(self, rule: Rule, conditions: Sequence[Condition], day: date, snapshot: StaffingSnapshot,
                      period: PeriodAggregator, log: DiagnosticLog, violations: List[Violation]) -> None:
        for condition in conditions:
            outcome = evaluate_condition(condition, day, snapshot, period)
            self._record(rule, day, outcome, log, violations)

    def _evaluate_complex_rules(self, rule: Rule, day: date, snapshot: StaffingSnapshot,
                                period: PeriodAggregator, log: DiagnosticLog, violations: List[Violation]) -> None:
        complex_rules = getattr(rule.body, "complex_rules", [])
        for complex_rule in complex_rules:
            outcome = evaluate_complex_rule(complex_rule, day, snapshot, period)
            self._record(rule, day, outcome, log, violations)

    # -- rule management -----------------------------------------------------

    def add_rule(self, rule: Union[Rule, Mapping[str, Any]]) -> Rule:
        return self.store.add(rule)

    def update_rule(self, rule_id: str, updates: Mapping[str, Any]) -> bool:
        return self.store.update(rule_id, updates)

    def remove_rule(self, rule_id: str) -> bool:
        return self.store.remove(rule_id)

    def get_rules(self) -> List[Rule]:
        return self.store.rules

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self.store.get(rule_id)

    def load_rules(self) -> List[Rule]:
        return self.store.load()

    def get_rule_templates(self) -> List[RuleTemplate]:
        return get_rule_templates()

    def create_rule_from_template(self, template_id: str, customizations: Optional[Mapping[str, Any]] = None) -> Rule:
        """New rule from a template. Not added to the store."""
        return _create_from_template(template_id, customizations)
