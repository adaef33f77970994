"""Rule management services: store, templates, validation, persistence."""

from .persistence import RulePersistence
from .rule_store import RuleStore
from .templates import RuleTemplate, create_rule_from_template, generate_rule_id, get_rule_templates
from .validation import is_valid_rule, validate_rule

__all__ = [
    "RulePersistence",
    "RuleStore",
    "RuleTemplate",
    "create_rule_from_template",
    "generate_rule_id",
    "get_rule_templates",
    "is_valid_rule",
    "validate_rule",
]
