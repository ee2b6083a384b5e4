"""
housing_kernel.services.officer_service -- Officer registration and assignment.

Responsibility:
    Officers register to handle a project; the project's manager approves or
    rejects.  Approval links officer and project both ways and marks the
    registration approved, all in one unit of work.

Architecture position:
    Kernel > Services.  Uses domain.assignment for the pure checks.

Invariants enforced:
    - An officer never handles a project they have an active application
      for.
    - Approved duty windows never overlap (inclusive).  The check runs at
      registration and again at approval, since other approvals may have
      landed in between.
    - Approved officers per project never exceed ``officer_slots``.
    - One pending or approved registration per officer and project.

Failure modes:
    - OfficerAssignmentConflictError (EligibilityDenied) on self-application
      or window overlap.
    - OfficerSlotsFullError, DuplicateRegistrationError,
      RegistrationAlreadyDecidedError (StateConflict).
    - RegistrationNotFoundError, NotProjectManagerError, RoleNotPermittedError.
    - PersistenceError propagated from the unit of work.
"""

from __future__ import annotations

from dataclasses import replace

from housing_kernel.domain.assignment import can_register, has_free_slot
from housing_kernel.domain.entities import OfficerRegistration, Person, Project
from housing_kernel.domain.lifecycle import decide_registration
from housing_kernel.domain.values import RegistrationStatus, Role
from housing_kernel.exceptions import (
    DuplicateRegistrationError,
    NotProjectManagerError,
    OfficerAssignmentConflictError,
    OfficerSlotsFullError,
    PersonNotFoundError,
    RegistrationNotFoundError,
)
from housing_kernel.logging_config import get_logger
from housing_kernel.services.base import BaseService
from housing_kernel.services.unit_of_work import UnitOfWork

logger = get_logger("services.officer")

_OPEN_REGISTRATION = (RegistrationStatus.PENDING, RegistrationStatus.APPROVED)


class OfficerService(BaseService):
    """Officer registration lifecycle and duty assignment."""

    def _assigned_projects(self, officer: Person) -> list[Project]:
        return self.repos.projects.find(lambda p: p.has_officer(officer.person_id))

    def _check_assignable(self, officer: Person, project: Project) -> None:
        check = can_register(
            officer,
            project,
            self.repos.active_application(officer.person_id),
            self._assigned_projects(officer),
        )
        if not check.allowed:
            raise OfficerAssignmentConflictError(
                officer.person_id, project.project_id, check.reason
            )

    def registrations_of(self, officer_id: str) -> list[OfficerRegistration]:
        return self.repos.registrations.find(lambda r: r.officer_id == officer_id)

    def find_registration(
        self,
        officer_id: str,
        project_id: str,
        statuses: tuple[RegistrationStatus, ...] = tuple(RegistrationStatus),
    ) -> OfficerRegistration | None:
        # Latest first, so a re-registration after rejection is found.
        for registration in reversed(self.registrations_of(officer_id)):
            if registration.project_id == project_id and registration.status in statuses:
                return registration
        return None

    def register(self, officer: Person, project_id: str) -> OfficerRegistration:
        """Record a PENDING registration after the self-application and overlap checks."""
        self.require_role(officer, "register for projects", Role.OFFICER)
        project = self.repos.project(project_id)

        existing = self.find_registration(officer.person_id, project_id, _OPEN_REGISTRATION)
        if existing is not None or project.has_officer(officer.person_id):
            status = existing.status.value if existing else RegistrationStatus.APPROVED.value
            raise DuplicateRegistrationError(officer.person_id, project_id, status)

        self._check_assignable(officer, project)

        registration = OfficerRegistration(
            registration_id=self.new_id(),
            officer_id=officer.person_id,
            project_id=project_id,
        )
        self.repos.registrations.put(registration)
        logger.info(
            "officer_registration_submitted",
            extra={
                "registration_id": registration.registration_id,
                "officer_id": officer.person_id,
                "project_id": project_id,
            },
        )
        return registration

    def decide(
        self,
        manager: Person,
        officer_id: str,
        project_id: str,
        approve: bool,
    ) -> OfficerRegistration:
        """
        Approve or reject the officer's pending registration.

        Approval re-runs the overlap check and the slot check, then stages
        the registration, the project's officer list and the officer's
        assignment list together.
        """
        self.require_role(manager, "decide officer registrations", Role.MANAGER)
        project = self.repos.project(project_id)
        if project.manager_id != manager.person_id:
            raise NotProjectManagerError(manager.person_id, project_id)

        registration = self.find_registration(officer_id, project_id)
        if registration is None:
            raise RegistrationNotFoundError(officer_id, project_id)

        if not approve:
            rejected = decide_registration(registration, approve_it=False)
            self.repos.registrations.put(rejected)
            logger.info(
                "officer_registration_rejected",
                extra={"officer_id": officer_id, "project_id": project_id},
            )
            return rejected

        approved = decide_registration(registration, approve_it=True)
        officer = self.repos.officers.get(officer_id)
        if officer is None:
            raise PersonNotFoundError(officer_id)
        if not has_free_slot(project):
            raise OfficerSlotsFullError(project_id, project.officer_slots)
        self._check_assignable(officer, project)

        linked_project = _with_officer(project, officer_id)
        assignments = officer.officer.assigned_project_ids
        if project_id not in assignments:
            assignments = assignments + (project_id,)

        with UnitOfWork("approve_officer_registration") as uow:
            uow.put(self.repos.registrations, approved)
            uow.put(self.repos.projects, linked_project)
            uow.put(self.repos.officers, officer.with_assignments(assignments))

        logger.info(
            "officer_registration_approved",
            extra={
                "officer_id": officer_id,
                "project_id": project_id,
                "assigned_officers": len(linked_project.officer_ids),
                "officer_slots": project.officer_slots,
            },
        )
        return approved


def _with_officer(project: Project, officer_id: str) -> Project:
    if project.has_officer(officer_id):
        return project
    return replace(project, officer_ids=project.officer_ids + (officer_id,))
