"""
Domain entities (``housing_kernel.domain.entities``).

Responsibility
--------------
Frozen records for every persisted entity: persons (as a tagged variant
over roles), projects with their unit offers, applications, enquiries,
receipts and officer registrations.  Updates produce new instances via
``dataclasses.replace``; stores hold the only mutable state.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* ``0 <= remaining <= total`` for every ``UnitOffer`` (checked at
  construction, so no code path can hold an out-of-range offer).
* A project holds at most one offer per unit type.
* An officer carries both an applicant payload and an officer payload; a
  manager carries neither.
* Cross-entity links are IDs, never embedded objects.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from housing_kernel.domain.values import (
    ApplicationStatus,
    DateWindow,
    MaritalStatus,
    OfficerStatus,
    RegistrationStatus,
    Role,
    UnitType,
    age_on,
)


# =========================================================================
# Persons
# =========================================================================


@dataclass(frozen=True)
class Identity:
    """Identity record common to every role."""

    person_id: str
    name: str
    date_of_birth: date | None
    marital_status: MaritalStatus | None
    password: str


@dataclass(frozen=True)
class ApplicantProfile:
    """Applicant capabilities: the current application and own enquiries.

    ``application`` is a snapshot of the person's latest application as
    stored in the application table; ``None`` when the person never applied.
    """

    application: Application | None = None
    enquiries: tuple[Enquiry, ...] = ()


@dataclass(frozen=True)
class OfficerProfile:
    """Officer-only state: duty status and approved project assignments."""

    status: OfficerStatus = OfficerStatus.AVAILABLE
    assigned_project_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Person:
    """
    A user of the system, tagged by role.

    Contract:
        APPLICANT carries ``applicant``; OFFICER carries ``applicant`` and
        ``officer``; MANAGER carries neither.  Validated at construction.
    """

    identity: Identity
    role: Role
    applicant: ApplicantProfile | None = None
    officer: OfficerProfile | None = None

    def __post_init__(self) -> None:
        wants_applicant = self.role in (Role.APPLICANT, Role.OFFICER)
        wants_officer = self.role == Role.OFFICER
        if wants_applicant != (self.applicant is not None):
            raise ValueError(
                f"{self.role.value} {self.identity.person_id}: applicant payload "
                f"{'missing' if wants_applicant else 'not allowed'}"
            )
        if wants_officer != (self.officer is not None):
            raise ValueError(
                f"{self.role.value} {self.identity.person_id}: officer payload "
                f"{'missing' if wants_officer else 'not allowed'}"
            )

    @classmethod
    def applicant_of(cls, identity: Identity, profile: ApplicantProfile | None = None) -> Person:
        return cls(identity=identity, role=Role.APPLICANT, applicant=profile or ApplicantProfile())

    @classmethod
    def officer_of(
        cls,
        identity: Identity,
        profile: ApplicantProfile | None = None,
        duty: OfficerProfile | None = None,
    ) -> Person:
        return cls(
            identity=identity,
            role=Role.OFFICER,
            applicant=profile or ApplicantProfile(),
            officer=duty or OfficerProfile(),
        )

    @classmethod
    def manager_of(cls, identity: Identity) -> Person:
        return cls(identity=identity, role=Role.MANAGER)

    @property
    def person_id(self) -> str:
        return self.identity.person_id

    @property
    def can_apply(self) -> bool:
        return self.applicant is not None

    def age_on(self, day: date) -> int | None:
        """Whole years between date of birth and ``day``; None if DOB unknown."""
        dob = self.identity.date_of_birth
        return age_on(dob, day) if dob is not None else None

    def with_application(self, application: Application | None) -> Person:
        """Copy with the applicant snapshot pointing at ``application``."""
        return replace(self, applicant=replace(self.applicant, application=application))

    def with_enquiries(self, enquiries: tuple[Enquiry, ...]) -> Person:
        return replace(self, applicant=replace(self.applicant, enquiries=enquiries))

    def with_assignments(self, project_ids: tuple[str, ...]) -> Person:
        status = OfficerStatus.ASSIGNED if project_ids else OfficerStatus.AVAILABLE
        return replace(
            self,
            officer=OfficerProfile(status=status, assigned_project_ids=project_ids),
        )

    def with_password(self, password: str) -> Person:
        return replace(self, identity=replace(self.identity, password=password))


# =========================================================================
# Projects and inventory
# =========================================================================


@dataclass(frozen=True)
class UnitOffer:
    """Inventory line for one unit type in one project."""

    unit_type: UnitType
    total: int
    remaining: int
    price: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        # INVARIANT: 0 <= remaining <= total
        if self.total < 0:
            raise ValueError(f"{self.unit_type.value}: total must be non-negative, got {self.total}")
        if not 0 <= self.remaining <= self.total:
            raise ValueError(
                f"{self.unit_type.value}: remaining {self.remaining} "
                f"outside [0, {self.total}]"
            )
        if self.price < 0:
            raise ValueError(f"{self.unit_type.value}: price must be non-negative")


@dataclass(frozen=True)
class Project:
    """A housing project with its application window and unit offers."""

    project_id: str
    name: str
    neighbourhood: str
    window: DateWindow
    manager_id: str | None
    officer_slots: int
    visible: bool = False
    officer_ids: tuple[str, ...] = ()
    offers: tuple[UnitOffer, ...] = ()

    def __post_init__(self) -> None:
        seen: set[UnitType] = set()
        for offer in self.offers:
            if offer.unit_type in seen:
                raise ValueError(
                    f"Project {self.project_id}: duplicate offer for {offer.unit_type.value}"
                )
            seen.add(offer.unit_type)

    def offer_for(self, unit_type: UnitType) -> UnitOffer | None:
        for offer in self.offers:
            if offer.unit_type == unit_type:
                return offer
        return None

    @property
    def offered_types(self) -> tuple[UnitType, ...]:
        return tuple(o.unit_type for o in self.offers)

    def is_open_on(self, day: date) -> bool:
        return self.visible and self.window.contains(day)

    def has_officer(self, officer_id: str) -> bool:
        return officer_id in self.officer_ids


# =========================================================================
# Applications, enquiries, receipts, registrations
# =========================================================================


@dataclass(frozen=True)
class Application:
    """
    One applicant's request for a unit type in a project.

    ``prior_status`` records the status held when a withdrawal was
    requested.  It is cleared when the withdrawal is rejected and kept on
    an approved withdrawal.
    """

    application_id: str
    status: ApplicationStatus
    applicant_id: str
    project_id: str
    unit_type: UnitType
    prior_status: ApplicationStatus | None = None

    @property
    def is_active(self) -> bool:
        return not self.status.is_terminal


@dataclass(frozen=True)
class Enquiry:
    enquiry_id: str
    applicant_id: str
    project_id: str
    message: str
    reply: str | None = None

    @property
    def is_replied(self) -> bool:
        return self.reply is not None


@dataclass(frozen=True)
class Receipt:
    """Proof of booking, issued only when an application becomes BOOKED."""

    receipt_id: str
    application_id: str
    project_id: str
    applicant_id: str
    unit_type: UnitType
    price: Decimal
    issued_on: date


@dataclass(frozen=True)
class OfficerRegistration:
    registration_id: str
    officer_id: str
    project_id: str
    status: RegistrationStatus = RegistrationStatus.PENDING
