"""Pytest configuration and shared fixtures."""

import datetime as dt

import pytest
from sqlalchemy.orm import sessionmaker

from staffing_rules.domain.db import MEMORY_DB_URL, create_db_engine
from staffing_rules.domain.models import Base, Employee, JobRole, ScheduleEntry, ShiftType
from staffing_rules.domain.roster import Roster

MONDAY = dt.date(2025, 1, 6)


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def make_roster(employees, assignments, roles=None, shift_types=None):
    """
    Build an in-memory roster.

    Args:
        employees: (id, name, role_id) tuples
        assignments: (employee_id, date, shift_id) tuples
        roles: (id, name) tuples; defaults to RN, Charge and AMGR
        shift_types: (id, name) tuples; defaults to the standard shift set
    """
    roles = roles or [("rn", "RN"), ("charge", "Charge"), ("amgr", "AMGR")]
    shift_types = shift_types or [
        ("day", "6t Day"),
        ("night", "18t Night"),
        ("vac", "C VAC"),
        ("req", "R1 Request"),
        ("off", "Off"),
    ]
    return Roster(
        employees=[Employee(id=i, name=n, role_id=r) for i, n, r in employees],
        job_roles=[JobRole(id=i, name=n) for i, n in roles],
        shift_types=[ShiftType(id=i, name=n) for i, n in shift_types],
        assignments=[ScheduleEntry(employee_id=e, date=d, shift_id=s) for e, d, s in assignments],
    )


@pytest.fixture
def week():
    """Monday 2025-01-06 through Sunday 2025-01-12."""
    return [MONDAY + dt.timedelta(days=i) for i in range(7)]


@pytest.fixture
def sample_roster(week):
    """Two RNs on weekday days, one charge nurse Monday-Wednesday, one night RN."""
    employees = [
        ("e1", "Smith,Anna", "rn"),
        ("e2", "Jones,Bob", "rn"),
        ("e3", "Lee,Cara", "charge"),
        ("e4", "Park,Dan", "rn"),
    ]
    assignments = []
    for day in week[:5]:
        assignments.append(("e1", day, "day"))
        assignments.append(("e2", day, "day"))
    for day in week[:3]:
        assignments.append(("e3", day, "day"))
    for day in week[4:]:
        assignments.append(("e4", day, "night"))
    return make_roster(employees, assignments)


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory database."""
    engine = create_db_engine(MEMORY_DB_URL)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    """Create in-memory database session for testing."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def roster_factory():
    """The ``make_roster`` helper, for tests that need a custom roster."""
    return make_roster
