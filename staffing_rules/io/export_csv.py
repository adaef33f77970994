"""Violation reports as CSV and per-date summaries."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from staffing_rules.domain.rules import SEVERITIES, Violation

VIOLATION_COLUMNS = [
    "date", "severity", "rule_id", "rule_name", "message",
    "actual_value", "expected_value", "employee_id", "employee_name",
]


def violations_frame(violations: Iterable[Violation]) -> pd.DataFrame:
    rows = []
    for v in violations:
        rows.append({
            "date": v.date,
            "severity": v.severity,
            "rule_id": v.rule_id,
            "rule_name": v.rule_name,
            "message": v.message,
            "actual_value": v.actual_value,
            "expected_value": v.expected_value,
            "employee_id": v.employee_id,
            "employee_name": v.employee_name,
        })
    return pd.DataFrame(rows, columns=VIOLATION_COLUMNS)


def export_violations_csv(violations: Iterable[Violation], csv_path: str | Path) -> int:
    """
    Write violations to CSV in the order given.

    Returns:
        Number of rows written
    """
    df = violations_frame(violations)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} violations to {csv_path}")
    return len(df)


def summarize_violations(violations: Iterable[Violation]) -> pd.DataFrame:
    """Violation counts per date (rows) and severity (columns), with a total column."""
    df = violations_frame(violations)
    if df.empty:
        return pd.DataFrame(columns=[*SEVERITIES, "total"])

    summary = pd.crosstab(df["date"], df["severity"])
    for severity in SEVERITIES:
        if severity not in summary.columns:
            summary[severity] = 0
    summary = summary[list(SEVERITIES)]
    summary["total"] = summary.sum(axis=1)
    summary.columns.name = None
    return summary
