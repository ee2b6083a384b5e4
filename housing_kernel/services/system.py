"""
Module: housing_kernel.services.system
Responsibility: The single entry point a controller or CLI talks to.  Wires
    the repositories, clock, rules and ID factory into the services and
    selectors, and turns recoverable kernel errors into typed
    ``OperationResult`` outcomes.
Architecture position: Kernel > Services.  The only module callers outside
    the kernel need to import.

Invariants enforced:
    - Every mutating operation returns an ``OperationResult``; a refused
      operation has changed nothing.
    - Persistence failures are never converted into outcomes.
      ``PersistenceError`` (including ``RollbackFailedError``) propagates to
      the caller unchanged.

Failure modes:
    - ValidationError / EligibilityDeniedError / NotFoundError /
      AuthorizationDeniedError / StateConflictError -> negative outcome.
    - PersistenceError -> raised.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from typing import TypeVar

from housing_kernel.db.backing import Backing
from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.assignment import DEFAULT_ASSIGNMENT_RULES, AssignmentRules
from housing_kernel.domain.clock import Clock, SystemClock
from housing_kernel.domain.eligibility import DEFAULT_RULES, EligibilityRules
from housing_kernel.domain.entities import (
    Application,
    Enquiry,
    OfficerRegistration,
    Person,
    Project,
)
from housing_kernel.domain.results import RECOVERABLE_ERRORS, OperationResult
from housing_kernel.domain.values import UnitType
from housing_kernel.logging_config import LogContext, get_logger
from housing_kernel.selectors.application_selector import ApplicationSelector
from housing_kernel.selectors.project_selector import ProjectSelector
from housing_kernel.services.application_service import (
    ApplicationService,
    BookingOutcome,
    WithdrawalOutcome,
)
from housing_kernel.services.base import IdFactory
from housing_kernel.services.enquiry_service import EnquiryService
from housing_kernel.services.identity_service import IdentityService
from housing_kernel.services.officer_service import OfficerService
from housing_kernel.services.project_service import ProjectService

logger = get_logger("services.system")

T = TypeVar("T")


class HousingSystem:
    """
    Facade over the housing services and selectors.

    Contract:
        Actors are passed in already authenticated (see ``login``).  Each
        operation either succeeds with its value, or returns the typed
        refusal produced by the first failing check.

    Non-goals:
        - Does NOT hold a session.  Which person is "logged in" is the
          caller's state.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Clock | None = None,
        eligibility_rules: EligibilityRules = DEFAULT_RULES,
        assignment_rules: AssignmentRules = DEFAULT_ASSIGNMENT_RULES,
        id_factory: IdFactory | None = None,
    ):
        self.repos = repos
        self.clock = clock or SystemClock()

        self.applications = ApplicationService(repos, self.clock, id_factory, eligibility_rules)
        self.officers = OfficerService(repos, self.clock, id_factory)
        self.projects = ProjectService(repos, self.clock, id_factory, assignment_rules)
        self.enquiries = EnquiryService(repos, self.clock, id_factory)
        self.identity = IdentityService(repos, self.clock, id_factory)

        self.project_views = ProjectSelector(repos, self.clock, eligibility_rules)
        self.application_views = ApplicationSelector(repos, self.clock)

    @classmethod
    def from_backing(
        cls,
        backing: Backing,
        clock: Clock | None = None,
        eligibility_rules: EligibilityRules = DEFAULT_RULES,
        assignment_rules: AssignmentRules = DEFAULT_ASSIGNMENT_RULES,
        id_factory: IdFactory | None = None,
    ) -> HousingSystem:
        """Load every table from ``backing`` and build the facade over it."""
        return cls(
            Repositories.open(backing),
            clock=clock,
            eligibility_rules=eligibility_rules,
            assignment_rules=assignment_rules,
            id_factory=id_factory,
        )

    def _run(
        self,
        operation: str,
        actor: Person | None,
        call: Callable[[], T],
    ) -> OperationResult[T]:
        actor_id = actor.person_id if actor is not None else None
        with LogContext.bind(actor_id=actor_id, operation=operation):
            try:
                value = call()
            except RECOVERABLE_ERRORS as error:
                logger.info(
                    "operation_refused",
                    extra={"operation": operation, "error_code": error.code},
                )
                return OperationResult.from_error(error)
        return OperationResult.success(value)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def login(self, person_id: str, password: str) -> OperationResult[Person]:
        return self._run(
            "login", None, lambda: self.identity.login(person_id, password),
        )

    def change_password(self, person: Person, new_password: str) -> OperationResult[Person]:
        return self._run(
            "change_password", person,
            lambda: self.identity.change_password(person, new_password),
        )

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def submit_application(
        self, person: Person, project_id: str, unit_type: UnitType,
    ) -> OperationResult[Application]:
        return self._run(
            "submit_application", person,
            lambda: self.applications.submit_application(person, project_id, unit_type),
        )

    def decide_application(
        self, manager: Person, application_id: str, approve: bool,
    ) -> OperationResult[Application]:
        return self._run(
            "decide_application", manager,
            lambda: self.applications.decide_application(manager, application_id, approve),
        )

    def book_unit(
        self, officer: Person, application_id: str, unit_type: UnitType | None = None,
    ) -> OperationResult[BookingOutcome]:
        return self._run(
            "book_unit", officer,
            lambda: self.applications.book_unit(officer, application_id, unit_type),
        )

    def request_withdrawal(
        self, person: Person, application_id: str,
    ) -> OperationResult[Application]:
        return self._run(
            "request_withdrawal", person,
            lambda: self.applications.request_withdrawal(person, application_id),
        )

    def decide_withdrawal(
        self, manager: Person, application_id: str, approve: bool,
    ) -> OperationResult[WithdrawalOutcome]:
        return self._run(
            "decide_withdrawal", manager,
            lambda: self.applications.decide_withdrawal(manager, application_id, approve),
        )

    # ------------------------------------------------------------------
    # Officer registration
    # ------------------------------------------------------------------

    def register_officer(
        self, officer: Person, project_id: str,
    ) -> OperationResult[OfficerRegistration]:
        return self._run(
            "register_officer", officer,
            lambda: self.officers.register(officer, project_id),
        )

    def decide_officer_registration(
        self, manager: Person, officer_id: str, project_id: str, approve: bool,
    ) -> OperationResult[OfficerRegistration]:
        return self._run(
            "decide_officer_registration", manager,
            lambda: self.officers.decide(manager, officer_id, project_id, approve),
        )

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def create_project(
        self,
        manager: Person,
        *,
        name: str,
        neighbourhood: str,
        open_date: date,
        close_date: date,
        units: Mapping[UnitType, int],
        prices: Mapping[UnitType, Decimal] | None = None,
        officer_slots: int = 0,
        visible: bool = False,
    ) -> OperationResult[Project]:
        return self._run(
            "create_project", manager,
            lambda: self.projects.create_project(
                manager,
                name=name,
                neighbourhood=neighbourhood,
                open_date=open_date,
                close_date=close_date,
                units=units,
                prices=prices,
                officer_slots=officer_slots,
                visible=visible,
            ),
        )

    def edit_project(self, manager: Person, project_id: str, **changes) -> OperationResult[Project]:
        """``changes`` are the keyword arguments of ``ProjectService.edit_project``."""
        return self._run(
            "edit_project", manager,
            lambda: self.projects.edit_project(manager, project_id, **changes),
        )

    def delete_project(self, manager: Person, project_id: str) -> OperationResult[None]:
        return self._run(
            "delete_project", manager,
            lambda: self.projects.delete_project(manager, project_id),
        )

    def toggle_visibility(
        self, manager: Person, project_id: str, visible: bool | None = None,
    ) -> OperationResult[Project]:
        return self._run(
            "toggle_visibility", manager,
            lambda: self.projects.toggle_visibility(manager, project_id, visible),
        )

    # ------------------------------------------------------------------
    # Enquiries
    # ------------------------------------------------------------------

    def submit_enquiry(
        self, person: Person, project_id: str, message: str,
    ) -> OperationResult[Enquiry]:
        return self._run(
            "submit_enquiry", person,
            lambda: self.enquiries.submit(person, project_id, message),
        )

    def edit_enquiry(
        self, person: Person, enquiry_id: str, message: str,
    ) -> OperationResult[Enquiry]:
        return self._run(
            "edit_enquiry", person,
            lambda: self.enquiries.edit(person, enquiry_id, message),
        )

    def delete_enquiry(self, person: Person, enquiry_id: str) -> OperationResult[None]:
        return self._run(
            "delete_enquiry", person,
            lambda: self.enquiries.delete(person, enquiry_id),
        )

    def reply_enquiry(
        self, responder: Person, enquiry_id: str, reply: str,
    ) -> OperationResult[Enquiry]:
        return self._run(
            "reply_enquiry", responder,
            lambda: self.enquiries.reply(responder, enquiry_id, reply),
        )
