"""
Eligibility policy (``housing_kernel.domain.eligibility``).

Responsibility
--------------
Pure decision functions answering "may this person apply for this unit
type / this project?".  Thresholds are carried by ``EligibilityRules`` so
that configuration can tune the ages without touching the rule shape.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.  The caller passes
in today's date; nothing here reads a clock.

Invariants enforced
-------------------
* A SINGLE person is eligible only for the smallest unit type and only
  from ``single_min_age``.
* A MARRIED person is eligible for any offered unit type from
  ``married_min_age``.
* Holding a non-terminal application makes a person ineligible for every
  project.

Failure modes
-------------
* ``IncompleteProfileError`` when date of birth or marital status is
  missing.  This is a data error, distinct from a business refusal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from housing_kernel.domain.entities import Person, Project
from housing_kernel.domain.values import MaritalStatus, UnitType, age_on
from housing_kernel.exceptions import IncompleteProfileError


@dataclass(frozen=True)
class EligibilityRules:
    """Age thresholds per marital status."""

    single_min_age: int = 35
    married_min_age: int = 21

    def __post_init__(self) -> None:
        if self.single_min_age < 0 or self.married_min_age < 0:
            raise ValueError("Eligibility ages must be non-negative")


DEFAULT_RULES = EligibilityRules()


def unit_eligibility(
    age: int,
    marital_status: MaritalStatus,
    unit_type: UnitType,
    offered: tuple[UnitType, ...] | None = None,
    rules: EligibilityRules = DEFAULT_RULES,
) -> bool:
    """
    Decide whether an applicant of ``age`` and ``marital_status`` may apply
    for ``unit_type``.

    Singles may only take the smallest defined unit type, so a project that
    offers only larger types admits no single applicant.  When ``offered``
    is given, a type outside it is never eligible.
    """
    if offered is not None and unit_type not in offered:
        return False
    if marital_status == MaritalStatus.SINGLE:
        return age >= rules.single_min_age and unit_type == UnitType.smallest()
    if marital_status == MaritalStatus.MARRIED:
        return age >= rules.married_min_age
    return False


def applicant_age(person: Person, today: date) -> int:
    """Age of ``person`` on ``today``; raises if the profile is incomplete."""
    if person.identity.date_of_birth is None:
        raise IncompleteProfileError(person.person_id, "date_of_birth")
    return age_on(person.identity.date_of_birth, today)


def person_unit_eligibility(
    person: Person,
    unit_type: UnitType,
    today: date,
    offered: tuple[UnitType, ...] | None = None,
    rules: EligibilityRules = DEFAULT_RULES,
) -> bool:
    """``unit_eligibility`` evaluated for a stored person record."""
    age = applicant_age(person, today)
    if person.identity.marital_status is None:
        raise IncompleteProfileError(person.person_id, "marital_status")
    return unit_eligibility(age, person.identity.marital_status, unit_type, offered, rules)


def eligible_unit_types(
    person: Person,
    project: Project,
    today: date,
    rules: EligibilityRules = DEFAULT_RULES,
) -> tuple[UnitType, ...]:
    """The project's offered types this person may apply for."""
    offered = project.offered_types
    return tuple(
        u for u in offered
        if person_unit_eligibility(person, u, today, offered, rules)
    )


def project_eligibility(
    person: Person,
    project: Project,
    has_active_application: bool,
    today: date,
    rules: EligibilityRules = DEFAULT_RULES,
) -> bool:
    """True iff some offer is unit-eligible and no application is active."""
    if has_active_application:
        return False
    return bool(eligible_unit_types(person, project, today, rules))
