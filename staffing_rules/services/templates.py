"""Built-in rule templates for common staffing constraints."""

from __future__ import annotations

import random
import string
import time
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from staffing_rules.domain.rules import Rule, merge_rule_dict
from staffing_rules.errors import TemplateNotFoundError

_BASE36 = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class RuleTemplate:
    id: str
    name: str
    description: str
    category: str
    rule: Dict[str, Any] = field(default_factory=dict)


RULE_TEMPLATES: List[RuleTemplate] = [
    RuleTemplate(
        id="template_charge_nurse_daily",
        name="Daily Charge Nurse Requirement",
        description="Every day should have exactly 1 charge nurse",
        category="basic",
        rule={
            "name": "Daily Charge Nurse",
            "conditions": [
                {"type": "count_by_role", "role": "charge_nurse", "operator": "equals",
                 "value": 1, "severity": "error"},
            ],
        },
    ),
    RuleTemplate(
        id="template_charge_nurse_range",
        name="Charge Nurse Range (0-2)",
        description="Charge nurse count should be 0-2, with warnings for 0 or 2+",
        category="basic",
        rule={
            "name": "Charge Nurse Range",
            "conditions": [
                {"type": "count_by_role", "role": "charge_nurse", "operator": "less_than",
                 "value": 1, "severity": "error", "message": "No charge nurse scheduled"},
                {"type": "count_by_role", "role": "charge_nurse", "operator": "greater_than",
                 "value": 2, "severity": "warning", "message": "Too many charge nurses scheduled"},
            ],
        },
    ),
    RuleTemplate(
        id="template_shift_coverage",
        name="Shift Coverage Requirements",
        description="Each shift needs minimum staff levels",
        category="coverage",
        rule={
            "name": "Shift Coverage",
            "conditions": [
                {"type": "count_by_shift", "shift": "morning", "operator": "greater_than_or_equal",
                 "value": 2, "severity": "error"},
                {"type": "count_by_shift", "shift": "afternoon", "operator": "greater_than_or_equal",
                 "value": 2, "severity": "error"},
                {"type": "count_by_shift", "shift": "night", "operator": "greater_than_or_equal",
                 "value": 1, "severity": "error"},
            ],
        },
    ),
    RuleTemplate(
        id="template_weekend_manager",
        name="Weekend Manager Requirement",
        description="Weekends need at least one manager on duty",
        category="weekend",
        rule={
            "name": "Weekend Manager",
            "conditions": [
                {"type": "count_by_role", "role": "manager", "operator": "greater_than_or_equal",
                 "value": 1, "severity": "warning", "dayFilter": ["saturday", "sunday"]},
            ],
        },
    ),
    RuleTemplate(
        id="template_rn_monday_advanced",
        name="RN Monday Day Staffing (Advanced)",
        description="Advanced JSON rule for RN staffing on Mondays",
        category="advanced",
        rule={
            "name": "RN Monday Day Staffing",
            "json": {
                "type": "rn_day_count",
                "operator": "less_than",
                "value": 8,
                "severity": "error",
                "message": "Insufficient RN staffing on Monday - need at least 8 RN staff during day shift",
                "dayFilter": "monday",
            },
        },
    ),
    RuleTemplate(
        id="template_charge_nurse_advanced",
        name="Charge Nurse Advanced Rule",
        description="Advanced JSON rule for charge nurse requirements",
        category="advanced",
        rule={
            "name": "Charge Nurse Advanced",
            "json": {
                "type": "charge_day_count",
                "operator": "less_than",
                "value": 1,
                "severity": "error",
                "message": "No charge nurse scheduled for day shift",
                "dayFilter": "weekdays",
            },
        },
    ),
]


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_rule_id() -> str:
    """Unique-enough id: ``rule_<base36 epoch ms>_<random base36>``."""
    stamp = _base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=11))
    return f"rule_{stamp}_{suffix}"


def get_rule_templates() -> List[RuleTemplate]:
    return list(RULE_TEMPLATES)


def get_template(template_id: str) -> RuleTemplate:
    for template in RULE_TEMPLATES:
        if template.id == template_id:
            return template
    raise TemplateNotFoundError(template_id)


def create_rule_from_template(template_id: str, customizations: Optional[Mapping[str, Any]] = None) -> Rule:
    """New enabled rule from a template; ``customizations`` override template fields."""
    template = get_template(template_id)
    data = merge_rule_dict(deepcopy(template.rule), dict(customizations or {}))
    data.update(id=generate_rule_id(), enabled=True)
    return Rule.from_dict(data)
