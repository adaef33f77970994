"""Rule, condition and violation types consumed and produced by the engine.

Rules arrive from the rule-builder as JSON documents. A rule carries exactly
one body shape:

- ``SimpleBody``: an ordered list of conditions (plus optional IF/THEN rules)
- ``AdvancedBody``: a free-form JSON tree, normalised at evaluation time

``Rule.from_dict`` and ``Rule.to_dict`` convert between the external camelCase
documents and these dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

EMPLOYEE_PREFIX = "employee_"
PERIOD = "Period"

SEVERITIES = ("error", "warning", "info")
SEVERITY_RANK = {"error": 3, "warning": 2, "info": 1}
DEFAULT_SEVERITY = "error"

# external key -> attribute name
_CONDITION_KEYS = {
    "type": "type",
    "operator": "operator",
    "value": "value",
    "severity": "severity",
    "dayFilter": "day_filter",
    "filters": "filters",
    "employeeId": "employee_id",
    "role": "role",
    "shift": "shift",
    "message": "message",
    "rowType": "row_type",
    "shiftType": "shift_type",
    "summaryField": "summary_field",
}


@dataclass(frozen=True)
class Condition:
    """One comparison: a counted value checked against an expected value."""

    type: Optional[str] = None
    operator: Optional[str] = None
    value: Any = None
    severity: str = DEFAULT_SEVERITY
    day_filter: Any = None
    filters: Optional[Dict[str, Any]] = None
    employee_id: Optional[str] = None
    role: Optional[str] = None
    shift: Optional[str] = None
    message: Optional[str] = None
    row_type: Optional[str] = None
    shift_type: Optional[str] = None
    summary_field: Optional[str] = None

    @property
    def is_employee_scoped(self) -> bool:
        return isinstance(self.type, str) and self.type.startswith(EMPLOYEE_PREFIX)

    @property
    def is_complete(self) -> bool:
        """True when type, operator and value are all present."""
        return bool(self.type) and bool(self.operator) and self.value is not None

    @classmethod
    def from_dict(cls, data: Any) -> "Condition":
        if isinstance(data, Condition):
            return data
        if not isinstance(data, Mapping):
            return cls()
        kwargs: Dict[str, Any] = {}
        for key, attr in _CONDITION_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]
        if not kwargs.get("severity"):
            kwargs["severity"] = DEFAULT_SEVERITY
        if kwargs.get("filters") is not None and not isinstance(kwargs["filters"], Mapping):
            kwargs["filters"] = None
        elif kwargs.get("filters") is not None:
            kwargs["filters"] = dict(kwargs["filters"])
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key, attr in _CONDITION_KEYS.items():
            val = getattr(self, attr)
            if val is not None:
                out[key] = val
        return out


@dataclass(frozen=True)
class ComplexRule:
    """IF/THEN pair: a violation when both conditions fire on the same day."""

    if_condition: Condition
    then_condition: Condition
    severity: str = DEFAULT_SEVERITY
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ComplexRule":
        return cls(
            if_condition=Condition.from_dict(data.get("if")),
            then_condition=Condition.from_dict(data.get("then")),
            severity=data.get("severity") or DEFAULT_SEVERITY,
            message=data.get("message"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "if": self.if_condition.to_dict(),
            "then": self.then_condition.to_dict(),
            "severity": self.severity,
        }
        if self.message:
            out["message"] = self.message
        return out


@dataclass
class SimpleBody:
    conditions: List[Condition] = field(default_factory=list)
    complex_rules: List[ComplexRule] = field(default_factory=list)


@dataclass
class AdvancedBody:
    # dict, list or raw JSON text exactly as authored
    tree: Any = None


RuleBody = Union[SimpleBody, AdvancedBody]


@dataclass
class Rule:
    """A named, switchable staffing constraint."""

    name: str
    body: RuleBody = field(default_factory=SimpleBody)
    id: Optional[str] = None
    enabled: bool = True
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_advanced(self) -> bool:
        return isinstance(self.body, AdvancedBody)

    @property
    def conditions(self) -> List[Condition]:
        """Conditions of a simple rule; empty for advanced rules."""
        if isinstance(self.body, SimpleBody):
            return self.body.conditions
        return []

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
        known = {"id", "name", "enabled", "description", "conditions", "complexRules", "json"}
        extra = {k: v for k, v in data.items() if k not in known}

        tree = data.get("json")
        if tree is not None and tree != "":
            body: RuleBody = AdvancedBody(tree=tree)
        else:
            raw_conditions = data.get("conditions")
            if not isinstance(raw_conditions, list):
                raw_conditions = []
            raw_complex = data.get("complexRules")
            if not isinstance(raw_complex, list):
                raw_complex = []
            body = SimpleBody(
                conditions=[Condition.from_dict(c) for c in raw_conditions],
                complex_rules=[ComplexRule.from_dict(c) for c in raw_complex if isinstance(c, Mapping)],
            )

        enabled = data.get("enabled", True)
        return cls(
            name=str(data.get("name") or ""),
            body=body,
            id=data.get("id"),
            enabled=bool(enabled),
            description=str(data.get("description") or ""),
            extra=extra,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update({"id": self.id, "name": self.name, "enabled": self.enabled})
        if self.description:
            out["description"] = self.description
        if isinstance(self.body, AdvancedBody):
            out["json"] = self.body.tree
        else:
            out["conditions"] = [c.to_dict() for c in self.body.conditions]
            if self.body.complex_rules:
                out["complexRules"] = [c.to_dict() for c in self.body.complex_rules]
        return out


def rule_type(rule: Rule) -> str:
    """Return "advanced" for JSON-tree rules, "simple" for condition lists."""
    return "advanced" if rule.is_advanced else "simple"


def severity_rank(severity: Optional[str]) -> int:
    return SEVERITY_RANK.get(severity or "", 0)


@dataclass(frozen=True)
class Violation:
    """One reported rule violation."""

    rule_id: Optional[str]
    rule_name: str
    date: str  # YYYY-MM-DD, or PERIOD for employee-scoped rules
    severity: str
    message: str
    actual_value: Any = None
    expected_value: Any = None
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    details: tuple = ()

    @property
    def is_period(self) -> bool:
        return self.date == PERIOD

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "date": self.date,
            "severity": self.severity,
            "message": self.message,
            "actualValue": self.actual_value,
            "expectedValue": self.expected_value,
        }
        if self.employee_id is not None:
            out["employeeId"] = self.employee_id
            out["employeeName"] = self.employee_name
        if self.details:
            out["details"] = list(self.details)
        return out


def merge_rule_dict(base: Mapping[str, Any], updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay ``updates`` on a rule document. Supplying one body shape drops the other."""
    merged = {**base, **updates}
    if "conditions" in updates and "json" not in updates:
        merged.pop("json", None)
    elif "json" in updates and "conditions" not in updates:
        merged.pop("conditions", None)
        merged.pop("complexRules", None)
    return merged
