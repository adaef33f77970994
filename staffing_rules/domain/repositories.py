"""Repository classes for data access."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import Employee, JobRole, ScheduleEntry, ShiftType, StoredRule
from .roster import Roster


class EmployeeRepository:
    """Repository for employee data access."""

    @staticmethod
    def get_all(session: Session) -> List[Employee]:
        """Get all employees."""
        return session.query(Employee).order_by(Employee.id).all()

    @staticmethod
    def get_by_id(session: Session, employee_id: str) -> Optional[Employee]:
        """Get employee by ID."""
        return session.query(Employee).filter(Employee.id == employee_id).first()


class RosterRepository:
    """Repository for roles, shift types and schedule entries."""

    @staticmethod
    def get_job_roles(session: Session) -> List[JobRole]:
        return session.query(JobRole).order_by(JobRole.id).all()

    @staticmethod
    def get_shift_types(session: Session) -> List[ShiftType]:
        return session.query(ShiftType).order_by(ShiftType.id).all()

    @staticmethod
    def get_entries(
        session: Session,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[ScheduleEntry]:
        """Get schedule entries, optionally limited to ``start <= date <= end``."""
        query = session.query(ScheduleEntry)
        if start is not None:
            query = query.filter(ScheduleEntry.date >= start)
        if end is not None:
            query = query.filter(ScheduleEntry.date <= end)
        return query.order_by(ScheduleEntry.date, ScheduleEntry.employee_id).all()

    @staticmethod
    def load_roster(session: Session) -> Roster:
        """Load the whole roster into memory for an evaluation pass."""
        return Roster(
            employees=EmployeeRepository.get_all(session),
            job_roles=RosterRepository.get_job_roles(session),
            shift_types=RosterRepository.get_shift_types(session),
            assignments=RosterRepository.get_entries(session),
        )


class RuleRepository:
    """Repository for persisted rule documents."""

    @staticmethod
    def get_all(session: Session) -> List[StoredRule]:
        """Get all stored rules in authoring order."""
        return session.query(StoredRule).order_by(StoredRule.position).all()

    @staticmethod
    def replace_all(session: Session, payloads: List[dict]) -> int:
        """Replace every stored rule with ``payloads``. Returns number written."""
        session.query(StoredRule).delete(synchronize_session=False)
        rows = [
            StoredRule(
                id=str(payload["id"]),
                name=str(payload.get("name") or ""),
                enabled=bool(payload.get("enabled", True)),
                position=position,
                payload=payload,
            )
            for position, payload in enumerate(payloads)
        ]
        session.add_all(rows)
        session.commit()
        return len(rows)
