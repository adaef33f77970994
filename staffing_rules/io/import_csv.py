"""CSV import utilities to load the roster into the database."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from sqlalchemy.orm import Session

from staffing_rules.domain.models import Employee, JobRole, ScheduleEntry, ShiftType


def _read(csv_path: str | Path, required: list[str]) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str)

    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{csv_path}: missing columns {missing}")
    return df


def _text(value) -> str | None:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def import_job_roles_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import job roles (columns: id, name).

    Returns:
        Number of roles imported
    """
    df = _read(csv_path, ["id", "name"])
    roles = [JobRole(id=str(row["id"]).strip(), name=str(row["name"]).strip()) for _, row in df.iterrows()]

    session.add_all(roles)
    session.commit()

    print(f"[INFO] Imported {len(roles)} job roles from {csv_path}")
    return len(roles)


def import_employees_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import employees (columns: id, name, role_id). Names are kept as given,
    usually "Last,First".

    Returns:
        Number of employees imported
    """
    df = _read(csv_path, ["id", "name"])
    df.rename(columns={"roleid": "role_id", "job_role": "role_id"}, inplace=True)

    employees = []
    for _, row in df.iterrows():
        employees.append(Employee(
            id=str(row["id"]).strip(),
            name=str(row["name"]).strip(),
            role_id=_text(row.get("role_id")),
        ))

    session.add_all(employees)
    session.commit()

    print(f"[INFO] Imported {len(employees)} employees from {csv_path}")
    return len(employees)


def import_shift_types_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import shift types (columns: id, name, optional color).

    Returns:
        Number of shift types imported
    """
    df = _read(csv_path, ["id", "name"])

    shift_types = []
    for _, row in df.iterrows():
        shift_types.append(ShiftType(
            id=str(row["id"]).strip(),
            name=str(row["name"]).strip(),
            color=_text(row.get("color")),
        ))

    session.add_all(shift_types)
    session.commit()

    print(f"[INFO] Imported {len(shift_types)} shift types from {csv_path}")
    return len(shift_types)


def import_assignments_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import schedule entries (columns: employee_id, date, shift_id).

    Rows without a date are dropped. A later row for the same employee and
    date replaces an earlier one.

    Returns:
        Number of entries imported
    """
    df = _read(csv_path, ["employee_id", "date", "shift_id"])

    # Convert date
    df["date"] = pd.to_datetime(df["date"], errors="coerce").dt.date
    df = df.dropna(subset=["date"])

    # One assignment per employee per day
    df = df.drop_duplicates(subset=["employee_id", "date"], keep="last")

    entries = []
    for _, row in df.iterrows():
        entries.append(ScheduleEntry(
            employee_id=str(row["employee_id"]).strip(),
            date=row["date"],
            shift_id=_text(row["shift_id"]),
        ))

    session.add_all(entries)
    session.commit()

    print(f"[INFO] Imported {len(entries)} assignments from {csv_path}")
    return len(entries)
