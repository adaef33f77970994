"""Structural validation of rules before they enter the store."""

from __future__ import annotations

from typing import Any, List, Mapping, Union

from staffing_rules.domain.rules import AdvancedBody, Condition, Rule
from staffing_rules.engine.shapes import normalize_tree


def _condition_problems(conditions: List[Condition], label: str) -> List[str]:
    problems = []
    for index, condition in enumerate(conditions, start=1):
        if not condition.is_complete:
            problems.append(f"{label} {index} needs type, operator and value")
    return problems


def validate_rule(rule: Union[Rule, Mapping[str, Any]]) -> List[str]:
    """Return the problems that make ``rule`` unusable; empty when valid.

    Checks structure only: a name, and at least one complete condition
    (type, operator and value) in whichever body shape the rule carries.
    Unknown condition types and operators are reported at evaluation time.
    """
    if not isinstance(rule, Rule):
        if not isinstance(rule, Mapping):
            return ["Rule must be an object"]
        rule = Rule.from_dict(rule)

    problems = []
    if not rule.name.strip():
        problems.append("Rule name is required")

    if isinstance(rule.body, AdvancedBody):
        conditions, problem = normalize_tree(rule.body.tree)
        if problem:
            problems.append(problem)
        problems.extend(_condition_problems(conditions, "JSON condition"))
        return problems

    if not rule.body.conditions:
        problems.append("Rule needs at least one condition")
    problems.extend(_condition_problems(rule.body.conditions, "Condition"))
    for index, complex_rule in enumerate(rule.body.complex_rules, start=1):
        if not (complex_rule.if_condition.is_complete and complex_rule.then_condition.is_complete):
            problems.append(f"Complex rule {index} needs complete IF and THEN conditions")
    return problems


def is_valid_rule(rule: Union[Rule, Mapping[str, Any]]) -> bool:
    return not validate_rule(rule)
