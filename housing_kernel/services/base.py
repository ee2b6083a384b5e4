"""
BaseService -- shared constructor and helpers for kernel services.

Responsibility:
    Gives every write-side service the same collaborators: the repository
    set, an injected clock and an ID factory.  Also provides the helpers
    that keep the packed person snapshots in step with the authoritative
    application and enquiry tables.

Architecture position:
    Kernel > Services -- imperative shell.  May import from domain/ and db/.

Invariants enforced:
    - Services never read the wall clock; they ask the injected Clock.
    - A person snapshot is staged in the same unit of work as the
      application or enquiry change it reflects.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Callable
from uuid import uuid4

from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.clock import Clock, SystemClock
from housing_kernel.domain.entities import Application, Enquiry, Person
from housing_kernel.domain.values import Role
from housing_kernel.exceptions import RoleNotPermittedError
from housing_kernel.logging_config import get_logger
from housing_kernel.services.unit_of_work import UnitOfWork

logger = get_logger("services.base")

IdFactory = Callable[[], str]


def uuid_ids() -> str:
    return str(uuid4())


class BaseService(ABC):
    """
    Abstract base class for the housing services.

    Contract:
        Accepts the repository set, a Clock and an ID factory.  All
        multi-store writes go through a ``UnitOfWork``.

    Non-goals:
        - Does NOT provide query-only views; those belong in
          ``housing_kernel/selectors/``.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
    ):
        self.repos = repos
        self.clock = clock or SystemClock()
        self._new_id = id_factory or uuid_ids

    def new_id(self) -> str:
        return self._new_id()

    @staticmethod
    def require_role(person: Person, action: str, *roles: Role) -> None:
        if person.role not in roles:
            raise RoleNotPermittedError(person.person_id, person.role.value, action)

    @staticmethod
    def require_applicant_capability(person: Person, action: str) -> None:
        if not person.can_apply:
            raise RoleNotPermittedError(person.person_id, person.role.value, action)

    def stage_application(self, uow: UnitOfWork, application: Application) -> None:
        """Stage ``application`` and its owner's packed snapshot."""
        uow.put(self.repos.applications, application)
        owner = self.repos.find_person(application.applicant_id)
        if owner is None or not owner.can_apply:
            logger.warning(
                "application_owner_missing",
                extra={
                    "application_id": application.application_id,
                    "applicant_id": application.applicant_id,
                },
            )
            return
        uow.put(self.repos.person_store(owner.role), owner.with_application(application))

    def stage_enquiries(
        self,
        uow: UnitOfWork,
        applicant_id: str,
        enquiries: tuple[Enquiry, ...],
    ) -> None:
        """Stage the refreshed packed enquiry list for ``applicant_id``."""
        owner = self.repos.find_person(applicant_id)
        if owner is None or not owner.can_apply:
            logger.warning("enquiry_owner_missing", extra={"applicant_id": applicant_id})
            return
        uow.put(self.repos.person_store(owner.role), owner.with_enquiries(enquiries))
