"""Owner of the rule list.

Every mutation bumps ``version`` so cached evaluation results keyed on it can
never be served after a change, then persists the list when a persistence
backend is attached.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Union

from staffing_rules.domain.rules import Rule, merge_rule_dict
from staffing_rules.errors import InvalidRuleError

from .persistence import RulePersistence
from .templates import generate_rule_id
from .validation import validate_rule


class RuleStore:
    def __init__(self, rules: Optional[Iterable[Union[Rule, Mapping[str, Any]]]] = None,
                 persistence: Optional[RulePersistence] = None):
        # rules handed over here are trusted as stored; only add/update validate
        self._rules: List[Rule] = [self._coerce(r) for r in (rules or [])]
        self.persistence = persistence
        self.version = 0

    @staticmethod
    def _coerce(rule: Union[Rule, Mapping[str, Any]]) -> Rule:
        return rule if isinstance(rule, Rule) else Rule.from_dict(rule)

    @property
    def rules(self) -> List[Rule]:
        return list(self._rules)

    def get(self, rule_id: str) -> Optional[Rule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def add(self, rule: Union[Rule, Mapping[str, Any]]) -> Rule:
        """Validate and append ``rule``, assigning an id when it has none."""
        rule = self._coerce(rule)
        problems = validate_rule(rule)
        if rule.id and self.get(rule.id) is not None:
            problems.append(f"Duplicate rule id: {rule.id}")
        if problems:
            raise InvalidRuleError(problems)
        if not rule.id:
            rule.id = generate_rule_id()
        self._rules.append(rule)
        self._changed()
        return rule

    def update(self, rule_id: str, updates: Mapping[str, Any]) -> bool:
        """Apply ``updates`` to a stored rule. False when no rule has ``rule_id``."""
        for index, rule in enumerate(self._rules):
            if rule.id != rule_id:
                continue
            merged = merge_rule_dict(rule.to_dict(), dict(updates))
            merged["id"] = rule_id
            updated = Rule.from_dict(merged)
            problems = validate_rule(updated)
            if problems:
                raise InvalidRuleError(problems)
            self._rules[index] = updated
            self._changed()
            return True
        return False

    def set_enabled(self, rule_id: str, enabled: bool) -> bool:
        """Toggle a rule without re-validating its body, so stored legacy rules can be switched off."""
        rule = self.get(rule_id)
        if rule is None:
            return False
        rule.enabled = bool(enabled)
        self._changed()
        return True

    def remove(self, rule_id: str) -> bool:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                del self._rules[index]
                self._changed()
                return True
        return False

    def load(self) -> List[Rule]:
        """Replace the rule list with what persistence holds."""
        if self.persistence is None:
            return self.rules
        self._rules = self.persistence.load()
        self.version += 1
        return self.rules

    def _changed(self) -> None:
        self.version += 1
        if self.persistence is not None:
            self.persistence.save(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self.rules)
