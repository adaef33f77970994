"""Exceptions raised by the rule engine and rule store."""

from __future__ import annotations

from typing import List


class RuleEngineError(ValueError):
    """Base class for rule engine errors."""


class InvalidRuleError(RuleEngineError):
    """Rule rejected at add/update time."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid rule structure: " + "; ".join(self.problems))


class TemplateNotFoundError(RuleEngineError):
    """Unknown rule template id."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")
