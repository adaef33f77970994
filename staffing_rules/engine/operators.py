"""Comparison operators. A check returns True when the condition is violated."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional


def _between(actual, expected) -> bool:
    return actual < expected["min"] or actual > expected["max"]


# The flagging semantics the rule presets are written against: less_than
# flags counts below the value, greater_than flags counts not above it.
OPERATOR_CHECKS: Dict[str, Callable[[Any, Any], bool]] = {
    "equals": lambda actual, expected: actual != expected,
    "not_equals": lambda actual, expected: actual == expected,
    "greater_than": lambda actual, expected: actual <= expected,
    "greater_than_or_equal": lambda actual, expected: actual < expected,
    "less_than": lambda actual, expected: actual < expected,
    "less_than_or_equal": lambda actual, expected: actual > expected,
    "between": _between,
}

OPERATOR_WORDS = {
    "equals": "exactly",
    "not_equals": "not",
    "greater_than": "more than",
    "greater_than_or_equal": "at least",
    "less_than": "less than",
    "less_than_or_equal": "at most",
    "between": "between",
}


def coerce_number(value: Any) -> Any:
    """Turn numeric strings from form input into numbers; leave anything else alone."""
    if isinstance(value, bool) or not isinstance(value, str):
        return value
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return value


def coerce_expected(operator: str, value: Any) -> Any:
    if operator == "between" and isinstance(value, Mapping):
        return {"min": coerce_number(value.get("min")), "max": coerce_number(value.get("max"))}
    return coerce_number(value)


def operator_problem(operator: Optional[str], expected: Any) -> Optional[str]:
    """Why ``operator``/``expected`` cannot be checked, or None when they can."""
    if operator not in OPERATOR_CHECKS:
        return f"Unknown operator: {operator}"
    if operator == "between":
        if not isinstance(expected, Mapping) or expected.get("min") is None or expected.get("max") is None:
            return "Operator 'between' expects a {min, max} value"
    return None


def check_operator(actual: Any, operator: Optional[str], expected: Any) -> bool:
    """True when ``actual`` violates ``operator expected``; unknown operators never violate."""
    check = OPERATOR_CHECKS.get(operator)
    if check is None:
        return False
    return check(actual, coerce_expected(operator, expected))


def format_expected(operator: Optional[str], expected: Any) -> str:
    if operator == "between" and isinstance(expected, Mapping):
        return f"{expected.get('min')}-{expected.get('max')}"
    return str(expected)


def generate_violation_message(operator: Optional[str], expected: Any, description: str, actual: Any) -> str:
    """Human-readable sentence for a failed per-day condition."""
    if operator == "equals":
        return f"Expected exactly {expected} {description}, found {actual}"
    if operator == "not_equals":
        return f"Expected {description} to not equal {expected}, found {actual}"
    if operator == "greater_than":
        return f"Expected {description} > {expected}, found {actual}"
    if operator == "greater_than_or_equal":
        return f"Expected {description} >= {expected}, found {actual}"
    if operator == "less_than":
        return f"Expected {description} < {expected}, found {actual}"
    if operator == "less_than_or_equal":
        return f"Expected {description} <= {expected}, found {actual}"
    if operator == "between":
        return f"Expected {description} between {format_expected(operator, expected)}, found {actual}"
    return f"{description} violation: expected {operator} {expected}, found {actual}"
