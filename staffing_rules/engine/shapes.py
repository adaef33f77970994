"""Rule classification and JSON-tree normalisation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from staffing_rules.domain.rules import AdvancedBody, Condition, Rule, SimpleBody

_CONDITION_FIELDS = ("type", "operator", "value")
MAX_WRAPPER_DEPTH = 32


def _conditions_from_list(items: list) -> Tuple[List[Condition], Optional[str]]:
    conditions = [Condition.from_dict(item) for item in items if isinstance(item, Mapping)]
    if not conditions:
        return [], "JSON rule has an empty conditions list"
    return conditions, None


def normalize_tree(tree: Any) -> Tuple[List[Condition], Optional[str]]:
    """Flatten an authored JSON tree into conditions.

    Accepted shapes, tried in order: ``{"conditions": [...]}``, a bare
    condition object, raw JSON text holding any accepted shape, and a
    ``{"json": {...}}`` wrapper. Returns ``(conditions, problem)``; ``problem``
    is None when at least one condition was found.
    """
    for _ in range(MAX_WRAPPER_DEPTH):
        if tree is None or tree == "" or tree == {}:
            return [], "JSON rule is empty"

        if isinstance(tree, str):
            try:
                parsed = json.loads(tree)
            except (ValueError, RecursionError) as e:
                return [], f"Invalid JSON in rule: {e}"
            if isinstance(parsed, str):
                return [], "JSON rule text does not describe an object"
            tree = parsed
            continue

        if not isinstance(tree, Mapping):
            return [], f"Unsupported JSON rule shape: {type(tree).__name__}"

        if isinstance(tree.get("conditions"), list):
            return _conditions_from_list(tree["conditions"])

        if any(key in tree for key in _CONDITION_FIELDS):
            return [Condition.from_dict(tree)], None

        inner = tree.get("json")
        if not isinstance(inner, (Mapping, str)):
            return [], "JSON rule has no valid conditions"
        tree = inner

    return [], f"JSON rule nests deeper than {MAX_WRAPPER_DEPTH} wrappers"


def is_employee_rule(rule: Rule) -> bool:
    """Simple rule whose conditions are all employee-scoped and has no IF/THEN rules."""
    body = rule.body
    return (
        isinstance(body, SimpleBody)
        and bool(body.conditions)
        and not body.complex_rules
        and all(c.is_employee_scoped for c in body.conditions)
    )


@dataclass
class RuleBuckets:
    employee: List[Rule] = field(default_factory=list)
    json: List[Rule] = field(default_factory=list)
    daily: List[Rule] = field(default_factory=list)

    @property
    def needs_snapshots(self) -> bool:
        return bool(self.json or self.daily)


def classify_rule(rule: Rule) -> str:
    if isinstance(rule.body, AdvancedBody):
        return "json"
    if is_employee_rule(rule):
        return "employee"
    return "daily"


def classify_rules(rules: Iterable[Rule], include_disabled: bool = False) -> RuleBuckets:
    buckets = RuleBuckets()
    for rule in rules:
        if not rule.enabled and not include_disabled:
            continue
        getattr(buckets, classify_rule(rule)).append(rule)
    return buckets
