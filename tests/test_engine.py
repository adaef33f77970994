"""Tests for RuleEngine - full evaluation passes over an interval."""

import datetime as dt

import pytest

from staffing_rules.config import CalendarConfig, EngineConfig
from staffing_rules.domain.roster import CalendarContext
from staffing_rules.domain.rules import PERIOD, severity_rank
from staffing_rules.engine.cache import EvaluationCache
from staffing_rules.engine.orchestrator import RuleEngine
from staffing_rules.errors import InvalidRuleError, TemplateNotFoundError

MONDAY = dt.date(2025, 1, 6)

CHARGE_DAILY = {
    "id": "charge",
    "name": "Daily Charge Nurse",
    "conditions": [{"type": "count_by_role", "role": "Charge", "operator": "equals", "value": 1}],
}
WEEKEND_TOTAL = {
    "id": "weekend",
    "name": "Weekend Cover",
    "conditions": [{"type": "count_total", "operator": "greater_than_or_equal", "value": 3,
                    "severity": "warning", "dayFilter": "weekends"}],
}
WORKLOAD = {
    "id": "workload",
    "name": "Workload",
    "conditions": [{"type": "employee_total_shifts", "operator": "greater_than_or_equal", "value": 4,
                    "filters": {"jobType": "RN"}}],
}


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(sample_roster, clock):
    return RuleEngine(
        sample_roster,
        rules=[CHARGE_DAILY, WEEKEND_TOTAL, WORKLOAD],
        calendar=CalendarContext(MONDAY, 7),
        cache=EvaluationCache(clock=clock),
    )


def _ids(violations):
    return [(v.rule_id, v.date) for v in violations]


def test_daily_rule_flags_days_without_charge_nurse(sample_roster):
    engine = RuleEngine(sample_roster, rules=[CHARGE_DAILY])
    violations = engine.evaluate_rules(MONDAY, 7)

    assert _ids(violations) == [
        ("charge", "2025-01-09"),
        ("charge", "2025-01-10"),
        ("charge", "2025-01-11"),
        ("charge", "2025-01-12"),
    ]
    first = violations[0]
    assert first.severity == "error"
    assert first.actual_value == 0
    assert first.expected_value == 1


def test_full_pass_sorted_with_period_last(engine):
    violations = engine.evaluate_rules()

    dated = [v for v in violations if v.date != PERIOD]
    period = [v for v in violations if v.date == PERIOD]
    assert violations == dated + period

    keys = [(v.date, -severity_rank(v.severity)) for v in dated]
    assert keys == sorted(keys)

    # Saturday: the weekend warning and the charge error; error first
    saturday = [v for v in dated if v.date == "2025-01-11"]
    assert [v.severity for v in saturday] == ["error", "warning"]

    # e4 works 3 night shifts, below the RN minimum of 4
    assert [(v.rule_id, v.employee_id) for v in period] == [("workload", "e4")]


def test_day_filter_restricts_rule_to_weekends(engine):
    violations = engine.evaluate_rules()
    assert sorted(v.date for v in violations if v.rule_id == "weekend") == ["2025-01-11", "2025-01-12"]


def test_disabling_rule_removes_its_violations(engine):
    before = engine.evaluate_rules()
    assert any(v.rule_id == "weekend" for v in before)

    assert engine.update_rule("weekend", {"enabled": False}) is True
    after = engine.evaluate_rules()

    assert not any(v.rule_id == "weekend" for v in after)
    assert after == [v for v in before if v.rule_id != "weekend"]


def test_cache_serves_identical_result_within_window(engine, clock, monkeypatch):
    first = engine.evaluate_rules()

    calls = []
    monkeypatch.setattr(engine, "_run_pass", lambda *a, **k: calls.append(a) or [])
    clock.now += 0.5
    assert engine.evaluate_rules() == first
    assert calls == []

    clock.now += 1.0
    assert engine.evaluate_rules() == []
    assert len(calls) == 1


def test_rule_mutation_invalidates_cache(engine):
    first = engine.evaluate_rules()
    engine.remove_rule("charge")
    second = engine.evaluate_rules()
    assert len(second) < len(first)
    assert not any(v.rule_id == "charge" for v in second)


def test_set_roster_clears_cache(engine, roster_factory):
    engine.evaluate_rules()
    engine.set_roster(roster_factory([], []))
    assert len(engine.cache) == 0
    violations = engine.evaluate_rules()
    assert {v.rule_id for v in violations} == {"charge", "weekend"}


def test_malformed_json_rule_does_not_affect_others(sample_roster, capsys):
    rules = [CHARGE_DAILY, WEEKEND_TOTAL, WORKLOAD]
    baseline = RuleEngine(sample_roster, rules=rules).evaluate_rules(MONDAY, 7)

    broken = {"id": "broken", "name": "Broken", "json": "{not valid json"}
    engine = RuleEngine(sample_roster, rules=[*rules, broken])
    violations = engine.evaluate_rules(MONDAY, 7)

    assert violations == baseline
    assert [d.rule_id for d in engine.diagnostics] == ["broken"]
    assert "[WARN] Rule 'Broken'" in capsys.readouterr().out


def test_deeply_nested_json_rules_do_not_abort_evaluation(sample_roster):
    baseline = RuleEngine(sample_roster, rules=[CHARGE_DAILY]).evaluate_rules(MONDAY, 7)

    wrapped = {"type": "count_total", "operator": "equals", "value": 0}
    for _ in range(5000):
        wrapped = {"json": wrapped}
    rules = [
        CHARGE_DAILY,
        {"id": "deep_text", "name": "Deep Text", "json": "[" * 200000},
        {"id": "deep_wrapper", "name": "Deep Wrapper", "json": wrapped},
    ]
    engine = RuleEngine(sample_roster, rules=rules)

    assert engine.evaluate_rules(MONDAY, 7) == baseline
    assert sorted(d.rule_id for d in engine.diagnostics) == ["deep_text", "deep_wrapper"]


def test_zero_day_interval_is_empty(engine):
    assert engine.evaluate_rules(MONDAY, 0) == []


def test_json_rule_evaluated_per_day(sample_roster):
    rule = {"id": "rn", "name": "RN Monday", "json": {
        "type": "rn_day_count", "operator": "less_than", "value": 8, "dayFilter": "monday",
        "message": "Insufficient RN staffing on Monday"}}
    engine = RuleEngine(sample_roster, rules=[rule])
    violations = engine.evaluate_rules(MONDAY, 14)

    assert _ids(violations) == [("rn", "2025-01-06"), ("rn", "2025-01-13")]
    assert violations[0].actual_value == 2
    assert violations[1].actual_value == 0


def test_unknown_condition_type_warns_once_per_pass(sample_roster, capsys):
    rule = {"id": "odd", "name": "Odd", "conditions": [{"type": "count_unicorns", "operator": "equals", "value": 1}]}
    engine = RuleEngine(sample_roster, rules=[rule])

    assert engine.evaluate_rules(MONDAY, 7) == []
    assert len(engine.diagnostics) == 7
    assert capsys.readouterr().out.count("[WARN] Rule 'Odd'") == 1


def test_evaluate_single_rule_ignores_enabled_flag(sample_roster):
    engine = RuleEngine(sample_roster, calendar=CalendarContext(MONDAY, 7))
    disabled = {**CHARGE_DAILY, "enabled": False}

    assert len(engine.evaluate_single_rule(disabled)) == 4
    assert engine.evaluate_rules() == []


def test_employee_rule_across_period(engine):
    rule = engine.get_rule("workload")
    violations = engine.evaluate_employee_rule_across_period(rule, MONDAY, 7)
    assert [v.employee_name for v in violations] == ["Dan Park"]


def test_interval_defaults_come_from_config(sample_roster):
    cfg = EngineConfig(calendar=CalendarConfig(start_date=MONDAY, interval_days=3))
    engine = RuleEngine(sample_roster, rules=[CHARGE_DAILY], config=cfg)
    assert engine.calendar == CalendarContext(MONDAY, 3)
    assert engine.evaluate_rules() == []


def test_rule_management(engine):
    added = engine.add_rule({"name": "Total", "conditions": [
        {"type": "count_total", "operator": "less_than_or_equal", "value": 10}]})
    assert added.id.startswith("rule_")
    assert engine.get_rule(added.id) is added
    assert len(engine.get_rules()) == 4

    with pytest.raises(InvalidRuleError):
        engine.add_rule({"name": "", "conditions": []})

    assert engine.update_rule("missing", {"enabled": False}) is False
    assert engine.remove_rule("missing") is False


def test_templates_via_engine(engine):
    assert len(engine.get_rule_templates()) == 6
    rule = engine.create_rule_from_template("template_charge_nurse_daily", {"name": "Charge"})
    assert rule.name == "Charge"
    assert rule.enabled
    assert engine.get_rule(rule.id) is None

    with pytest.raises(TemplateNotFoundError):
        engine.create_rule_from_template("template_missing")
