"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the enumerations and small value types shared by every other
    domain module: roles, marital status, unit types, lifecycle statuses,
    the inclusive application window, person ID validation and ages.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Failure modes:
    - InvalidIdentityError when a person ID does not match the format.
    - InvalidDateWindowError when a window closes before it opens.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from housing_kernel.exceptions import InvalidDateWindowError, InvalidIdentityError

_PERSON_ID_PATTERN = re.compile(r"^[A-Za-z]\d{7}[A-Za-z]$")


def normalize_person_id(person_id: str) -> str:
    """Validate a person ID (letter, seven digits, letter) and upper-case it."""
    candidate = (person_id or "").strip()
    if not _PERSON_ID_PATTERN.match(candidate):
        raise InvalidIdentityError(person_id)
    return candidate.upper()


def is_valid_person_id(person_id: str) -> bool:
    return bool(_PERSON_ID_PATTERN.match((person_id or "").strip()))


def age_on(date_of_birth: date, day: date) -> int:
    """Whole years elapsed from ``date_of_birth`` to ``day``."""
    years = day.year - date_of_birth.year
    if (day.month, day.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


class Role(str, Enum):
    """Capability tag carried by every person record."""

    APPLICANT = "APPLICANT"
    OFFICER = "OFFICER"
    MANAGER = "MANAGER"


class MaritalStatus(str, Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"


class UnitType(str, Enum):
    """Dwelling categories, declared from smallest to largest."""

    TWO_ROOM = "TWO_ROOM"
    THREE_ROOM = "THREE_ROOM"

    @property
    def rank(self) -> int:
        """Size order: 0 is the smallest unit type."""
        return _UNIT_TYPE_ORDER.index(self)

    @classmethod
    def smallest(cls, candidates: "tuple[UnitType, ...] | None" = None) -> "UnitType":
        """Smallest of ``candidates`` (or of all unit types when omitted)."""
        pool = candidates if candidates else tuple(cls)
        return min(pool, key=lambda u: u.rank)


_UNIT_TYPE_ORDER: tuple[UnitType, ...] = (UnitType.TWO_ROOM, UnitType.THREE_ROOM)


class ApplicationStatus(str, Enum):
    """Application lifecycle states."""

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    REJECTED = "REJECTED"
    BOOKED = "BOOKED"
    WITHDRAWAL_PENDING = "WITHDRAWAL_PENDING"
    WITHDRAWAL_APPROVED = "WITHDRAWAL_APPROVED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_APPLICATION_STATUSES


TERMINAL_APPLICATION_STATUSES: frozenset[ApplicationStatus] = frozenset({
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWAL_APPROVED,
})

# Statuses from which a withdrawal may be requested, and to which a
# rejected withdrawal may return.
WITHDRAWABLE_STATUSES: frozenset[ApplicationStatus] = frozenset({
    ApplicationStatus.PENDING,
    ApplicationStatus.SUCCESS,
    ApplicationStatus.BOOKED,
})


class OfficerStatus(str, Enum):
    """Duty status of an officer, stored in the officer table."""

    AVAILABLE = "AVAILABLE"
    ASSIGNED = "ASSIGNED"


class RegistrationStatus(str, Enum):
    """Officer registration lifecycle states."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass(frozen=True, slots=True)
class DateWindow:
    """
    Inclusive date range ``[open, close]``.

    Contract:
        ``open <= close``; validated at construction.

    Guarantees:
        - ``contains`` and ``overlaps`` treat both ends as inclusive, so two
          windows sharing exactly one day overlap.
    """

    open: date
    close: date

    def __post_init__(self) -> None:
        if self.close < self.open:
            raise InvalidDateWindowError(self.open.isoformat(), self.close.isoformat())

    def contains(self, day: date) -> bool:
        return self.open <= day <= self.close

    def overlaps(self, other: DateWindow) -> bool:
        return self.open <= other.close and other.open <= self.close
