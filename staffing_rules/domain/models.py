"""SQLAlchemy models for the staffing roster and stored rules."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class JobRole(Base):
    """Job role (e.g. RN, Charge Nurse, AMGR)."""

    __tablename__ = "job_roles"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)

    # Relationships
    employees = relationship("Employee", back_populates="job_role")

    def __repr__(self) -> str:
        return f"<JobRole(id='{self.id}', name='{self.name}')>"


class Employee(Base):
    """Employee on the roster. Names are usually stored as "Last,First"."""

    __tablename__ = "employees"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    role_id = Column(String(64), ForeignKey("job_roles.id"), nullable=True)

    # Relationships
    job_role = relationship("JobRole", back_populates="employees")
    entries = relationship("ScheduleEntry", back_populates="employee")

    def __repr__(self) -> str:
        return f"<Employee(id='{self.id}', name='{self.name}', role='{self.role_id}')>"


class ShiftType(Base):
    """Shift type as shown on the calendar (e.g. "6t Day", "18t Night", "C VAC")."""

    __tablename__ = "shift_types"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    color = Column(String(20), nullable=True)

    # Relationships
    entries = relationship("ScheduleEntry", back_populates="shift_type")

    def __repr__(self) -> str:
        return f"<ShiftType(id='{self.id}', name='{self.name}')>"


class ScheduleEntry(Base):
    """Assignment of one employee to one shift type on one date."""

    __tablename__ = "schedule_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(String(64), ForeignKey("employees.id"), nullable=False)
    date = Column(Date, nullable=False)
    shift_id = Column(String(64), ForeignKey("shift_types.id"), nullable=True)

    # Relationships
    employee = relationship("Employee", back_populates="entries")
    shift_type = relationship("ShiftType", back_populates="entries")

    def __repr__(self) -> str:
        return f"<ScheduleEntry(emp='{self.employee_id}', date={self.date}, shift='{self.shift_id}')>"


class StoredRule(Base):
    """Persisted staffing rule. The full rule definition lives in ``payload``."""

    __tablename__ = "rules"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)  # keeps authoring order
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<StoredRule(id='{self.id}', name='{self.name}', enabled={self.enabled})>"
