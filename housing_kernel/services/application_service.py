"""
housing_kernel.services.application_service -- Application lifecycle.

Responsibility:
    Drives an application from submission through manager decision,
    officer booking and withdrawal.  Checks eligibility, authorization and
    inventory, then stages every effect of a transition in one unit of work.

Architecture position:
    Kernel > Services.  May import from domain/, db/ and services/.

Invariants enforced:
    - One non-terminal application per applicant (checked at submission).
    - Transitions only along ``domain.lifecycle.APPLICATION_TRANSITIONS``.
    - Booking reserves one unit, books the application and issues a receipt
      atomically.
    - Approving a withdrawal of a booked application releases the unit
      atomically; rejecting a withdrawal restores the prior status and
      leaves inventory untouched.

Failure modes:
    - ValidationError: incomplete profile, unit type not offered.
    - EligibilityDeniedError: ineligible unit type, closed project, active
      application exists, officer handles the project.
    - NotFoundError: unknown person, project or application.
    - AuthorizationDeniedError: wrong role, not the project's manager or
      officer, not the application's owner.
    - StateConflictError: invalid transition, inventory exhausted.
    - PersistenceError: propagated unchanged from the unit of work.
"""

from __future__ import annotations

from dataclasses import dataclass

from housing_kernel.db.repositories import Repositories
from housing_kernel.domain import inventory, lifecycle
from housing_kernel.domain.clock import Clock
from housing_kernel.domain.eligibility import (
    DEFAULT_RULES,
    EligibilityRules,
    applicant_age,
    person_unit_eligibility,
)
from housing_kernel.domain.entities import Application, Person, Project, Receipt
from housing_kernel.domain.values import (
    ApplicationStatus,
    RegistrationStatus,
    Role,
    UnitType,
)
from housing_kernel.exceptions import (
    ActiveApplicationExistsError,
    ApplicationNotFoundError,
    InvalidApplicationTransitionError,
    NotApplicationOwnerError,
    NotProjectManagerError,
    OfficerAssignmentConflictError,
    OfficerNotAssignedError,
    ProjectClosedError,
    UnitTypeIneligibleError,
    UnitTypeNotOfferedError,
)
from housing_kernel.logging_config import LogContext, get_logger
from housing_kernel.services.base import BaseService, IdFactory
from housing_kernel.services.unit_of_work import UnitOfWork

logger = get_logger("services.application")


@dataclass(frozen=True)
class BookingOutcome:
    """A booked application with its receipt and the updated project."""

    application: Application
    receipt: Receipt
    project: Project


@dataclass(frozen=True)
class WithdrawalOutcome:
    """A decided withdrawal.  ``released`` is True when a unit was returned."""

    application: Application
    released: bool


class ApplicationService(BaseService):
    """
    Application lifecycle operations.

    Contract:
        Every operation takes an already-authenticated actor.  On success
        the new state is persisted; on any raised error nothing has
        changed.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        rules: EligibilityRules = DEFAULT_RULES,
    ):
        super().__init__(repos, clock, id_factory)
        self.rules = rules

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _application(self, application_id: str) -> Application:
        application = self.repos.applications.get(application_id)
        if application is None:
            raise ApplicationNotFoundError(application_id)
        return application

    def _require_manager_of(self, manager: Person, project: Project, action: str) -> None:
        self.require_role(manager, action, Role.MANAGER)
        if project.manager_id != manager.person_id:
            raise NotProjectManagerError(manager.person_id, project.project_id)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_application(
        self,
        person: Person,
        project_id: str,
        unit_type: UnitType,
    ) -> Application:
        """
        Create a PENDING application.

        Check order: capability, project open, type offered, active
        application, officer conflict, unit eligibility.
        """
        self.require_applicant_capability(person, "apply")
        applicant = self.repos.person(person.person_id)
        project = self.repos.project(project_id)
        today = self.clock.today()

        with LogContext.bind(actor_id=applicant.person_id, project_id=project_id,
                             operation="submit_application"):
            if not project.visible:
                raise ProjectClosedError(project_id, "project is not visible")
            if not project.window.contains(today):
                raise ProjectClosedError(
                    project_id,
                    f"{today.isoformat()} is outside {project.window.open.isoformat()}"
                    f"..{project.window.close.isoformat()}",
                )
            if project.offer_for(unit_type) is None:
                raise UnitTypeNotOfferedError(project_id, unit_type.value)

            active = self.repos.active_application(applicant.person_id)
            if active is not None:
                raise ActiveApplicationExistsError(applicant.person_id, active.application_id)

            if applicant.role == Role.OFFICER:
                self._check_officer_not_handling(applicant, project)

            if not person_unit_eligibility(
                applicant, unit_type, today, project.offered_types, self.rules
            ):
                raise UnitTypeIneligibleError(
                    applicant.person_id,
                    applicant_age(applicant, today),
                    applicant.identity.marital_status.value,
                    unit_type.value,
                )

            application = lifecycle.new_application(
                self.new_id(), applicant.person_id, project_id, unit_type
            )
            with UnitOfWork("submit_application") as uow:
                self.stage_application(uow, application)

            logger.info(
                "application_submitted",
                extra={
                    "application_id": application.application_id,
                    "unit_type": unit_type.value,
                },
            )
            return application

    def _check_officer_not_handling(self, officer: Person, project: Project) -> None:
        if project.has_officer(officer.person_id):
            raise OfficerAssignmentConflictError(
                officer.person_id, project.project_id, "officer handles this project"
            )
        pending = self.repos.registrations.find(
            lambda r: r.officer_id == officer.person_id
            and r.project_id == project.project_id
            and r.status == RegistrationStatus.PENDING
        )
        if pending:
            raise OfficerAssignmentConflictError(
                officer.person_id,
                project.project_id,
                "officer has a pending registration for this project",
            )

    # ------------------------------------------------------------------
    # Manager decision
    # ------------------------------------------------------------------

    def decide_application(
        self,
        manager: Person,
        application_id: str,
        approve: bool,
    ) -> Application:
        """PENDING -> SUCCESS or REJECTED, by the project's manager."""
        application = self._application(application_id)
        project = self.repos.project(application.project_id)
        self._require_manager_of(manager, project, "decide applications")

        if approve:
            decided = lifecycle.approve(application)
        else:
            decided = lifecycle.reject(application)

        with UnitOfWork("decide_application") as uow:
            self.stage_application(uow, decided)

        logger.info(
            "application_decided",
            extra={
                "application_id": application_id,
                "project_id": project.project_id,
                "manager_id": manager.person_id,
                "status": decided.status.value,
            },
        )
        return decided

    # ------------------------------------------------------------------
    # Booking
    # ------------------------------------------------------------------

    def book_unit(
        self,
        officer: Person,
        application_id: str,
        unit_type: UnitType | None = None,
    ) -> BookingOutcome:
        """
        SUCCESS -> BOOKED by an officer assigned to the project.

        Reserves one unit of the requested type, books the application and
        issues a receipt in one unit of work.  ``unit_type`` must match the
        type applied for when given.
        """
        self.require_role(officer, "book units", Role.OFFICER)
        application = self._application(application_id)
        project = self.repos.project(application.project_id)
        if not project.has_officer(officer.person_id):
            raise OfficerNotAssignedError(officer.person_id, project.project_id)

        if unit_type is not None and unit_type != application.unit_type:
            raise InvalidApplicationTransitionError(
                application_id,
                application.status.value,
                f"{ApplicationStatus.BOOKED.value} as {unit_type.value}",
            )
        if application.status != ApplicationStatus.SUCCESS:
            raise InvalidApplicationTransitionError(
                application_id, application.status.value, ApplicationStatus.BOOKED.value
            )

        reserved = inventory.reserve(project, application.unit_type)
        booked = lifecycle.book(application)
        offer = reserved.offer_for(application.unit_type)
        receipt = Receipt(
            receipt_id=self.new_id(),
            application_id=application_id,
            project_id=project.project_id,
            applicant_id=application.applicant_id,
            unit_type=application.unit_type,
            price=offer.price,
            issued_on=self.clock.today(),
        )

        with UnitOfWork("book_unit") as uow:
            self.stage_application(uow, booked)
            uow.put(self.repos.projects, reserved)
            uow.put(self.repos.receipts, receipt)

        logger.info(
            "unit_booked",
            extra={
                "application_id": application_id,
                "project_id": project.project_id,
                "officer_id": officer.person_id,
                "unit_type": application.unit_type.value,
                "remaining": offer.remaining,
            },
        )
        return BookingOutcome(application=booked, receipt=receipt, project=reserved)

    # ------------------------------------------------------------------
    # Withdrawal
    # ------------------------------------------------------------------

    def request_withdrawal(self, person: Person, application_id: str) -> Application:
        """Only the applicant may ask to withdraw their own application."""
        self.require_applicant_capability(person, "request withdrawal")
        application = self._application(application_id)
        if application.applicant_id != person.person_id:
            raise NotApplicationOwnerError(person.person_id, application_id)

        pending = lifecycle.request_withdrawal(application)
        with UnitOfWork("request_withdrawal") as uow:
            self.stage_application(uow, pending)

        logger.info(
            "withdrawal_requested",
            extra={
                "application_id": application_id,
                "prior_status": application.status.value,
            },
        )
        return pending

    def decide_withdrawal(
        self,
        manager: Person,
        application_id: str,
        approve: bool,
    ) -> WithdrawalOutcome:
        """
        Approve or reject a pending withdrawal.

        Approval of a withdrawal whose prior status was BOOKED releases one
        unit of the booked type in the same unit of work.  Rejection returns
        the application to its prior status.
        """
        application = self._application(application_id)
        project = self.repos.project(application.project_id)
        self._require_manager_of(manager, project, "decide withdrawals")

        if not approve:
            restored = lifecycle.reject_withdrawal(application)
            with UnitOfWork("reject_withdrawal") as uow:
                self.stage_application(uow, restored)
            logger.info(
                "withdrawal_rejected",
                extra={
                    "application_id": application_id,
                    "restored_status": restored.status.value,
                },
            )
            return WithdrawalOutcome(application=restored, released=False)

        approved = lifecycle.approve_withdrawal(application)
        release = lifecycle.holds_booked_unit(application)
        with UnitOfWork("approve_withdrawal") as uow:
            self.stage_application(uow, approved)
            if release:
                uow.put(self.repos.projects, inventory.release(project, application.unit_type))

        logger.info(
            "withdrawal_approved",
            extra={
                "application_id": application_id,
                "project_id": project.project_id,
                "released_unit": release,
            },
        )
        return WithdrawalOutcome(application=approved, released=release)

