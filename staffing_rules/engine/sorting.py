"""Deterministic ordering of violations."""

from __future__ import annotations

from typing import Dict, Iterable, List

from staffing_rules.domain.rules import SEVERITIES, Violation, severity_rank


def _sort_key(violation: Violation):
    # dated entries (YYYY-MM-DD sorts lexically) first, "Period" entries last
    return (violation.is_period, "" if violation.is_period else violation.date,
            -severity_rank(violation.severity))


def sort_violations(violations: Iterable[Violation]) -> List[Violation]:
    """Date ascending, then severity descending; stable for ties."""
    return sorted(violations, key=_sort_key)


def count_by_severity(violations: Iterable[Violation]) -> Dict[str, int]:
    counts = {severity: 0 for severity in SEVERITIES}
    for violation in violations:
        counts[violation.severity] = counts.get(violation.severity, 0) + 1
    return counts
