"""
Pytest fixtures for the housing kernel test suite.

Provides:
- Structured log capture
- A deterministic clock (2025-06-01) and sequential IDs
- In-memory repositories seeded with applicants, officers, managers and
  one open project
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace

import pytest

from housing_kernel.db.backing import InMemoryBacking
from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.clock import DeterministicClock
from housing_kernel.domain.entities import Identity, Person, Project, UnitOffer
from housing_kernel.domain.values import DateWindow, MaritalStatus, UnitType
from housing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from housing_kernel.services.system import HousingSystem

TODAY = date(2025, 6, 1)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture housing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, system):
            ...
            assert any(r["message"] == "unit_booked" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("housing_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Builders
# =============================================================================


def make_identity(person_id, name, dob, marital, password="password"):
    return Identity(
        person_id=person_id,
        name=name,
        date_of_birth=dob,
        marital_status=marital,
        password=password,
    )


def make_project(
    project_id="P-ACACIA",
    name="Acacia Breeze",
    neighbourhood="Yishun",
    open_date=date(2025, 5, 1),
    close_date=date(2025, 7, 31),
    manager_id="T7890123G",
    officer_slots=3,
    visible=True,
    officer_ids=(),
    offers=None,
):
    if offers is None:
        offers = (
            UnitOffer(UnitType.TWO_ROOM, 2, 2, Decimal("350000")),
            UnitOffer(UnitType.THREE_ROOM, 3, 3, Decimal("450000")),
        )
    return Project(
        project_id=project_id,
        name=name,
        neighbourhood=neighbourhood,
        window=DateWindow(open_date, close_date),
        manager_id=manager_id,
        officer_slots=officer_slots,
        visible=visible,
        officer_ids=tuple(officer_ids),
        offers=tuple(offers),
    )


class SequentialIds:
    """Deterministic ID factory: ``ID-0001``, ``ID-0002``, ..."""

    def __init__(self, prefix="ID"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count:04d}"


# =============================================================================
# Core fixtures
# =============================================================================


@pytest.fixture
def clock():
    return DeterministicClock(TODAY)


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def backing():
    return InMemoryBacking()


@pytest.fixture
def repos(backing):
    return Repositories.open(backing)


@pytest.fixture
def people(repos):
    """Seed one person per eligibility profile and return them by nickname."""
    crew = SimpleNamespace(
        married=Person.applicant_of(make_identity(
            "S1234567A", "John", date(1990, 3, 15), MaritalStatus.MARRIED)),
        single=Person.applicant_of(make_identity(
            "S2345678B", "Sarah", date(1985, 1, 1), MaritalStatus.SINGLE)),
        young_single=Person.applicant_of(make_identity(
            "T3456789C", "Grace", date(1995, 5, 5), MaritalStatus.SINGLE)),
        young_married=Person.applicant_of(make_identity(
            "T4567890D", "Jessica", date(2005, 1, 1), MaritalStatus.MARRIED)),
        officer=Person.officer_of(make_identity(
            "T5678901E", "Daniel", date(1987, 7, 7), MaritalStatus.MARRIED)),
        officer2=Person.officer_of(make_identity(
            "T6789012F", "Emily", date(1992, 2, 2), MaritalStatus.SINGLE)),
        manager=Person.manager_of(make_identity(
            "T7890123G", "Michael", date(1977, 1, 1), MaritalStatus.MARRIED)),
        manager2=Person.manager_of(make_identity(
            "T8901234H", "Jessie", date(1980, 4, 4), MaritalStatus.SINGLE)),
    )
    for person in vars(crew).values():
        repos.person_store(person.role).put(person)
    return crew


@pytest.fixture
def project(repos, people):
    """Visible project open on TODAY, managed by ``people.manager``."""
    p = make_project()
    repos.projects.put(p)
    return p


@pytest.fixture
def system(repos, clock, ids):
    return HousingSystem(repos, clock=clock, id_factory=ids)


@pytest.fixture
def assigned_officer(repos, people, project):
    """``people.officer`` approved to handle ``project``; returns the stored officer."""
    repos.projects.put(make_project(officer_ids=(people.officer.person_id,)))
    officer = people.officer.with_assignments((project.project_id,))
    repos.officers.put(officer)
    return officer
