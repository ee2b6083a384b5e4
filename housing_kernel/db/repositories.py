"""
Module: housing_kernel.db.repositories
Responsibility: Opens one ``RecordStore`` per table over a shared backing
    and reconciles the ID references between them after loading.
Architecture position: Kernel > DB.  Composition point for stores; used by
    every service and selector.

Invariants enforced:
    - Cross-store links are IDs.  ``resolve_references`` runs once after all
      stores are loaded; unresolvable officer IDs are logged and dropped from
      the in-memory project, and an unresolvable manager ID is logged.
    - The application and enquiry tables are authoritative.  Packed
      snapshots on person rows are reconciled against them at load.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from housing_kernel.db.backing import Backing
from housing_kernel.db.store import RecordStore
from housing_kernel.domain.entities import (
    Application,
    Enquiry,
    OfficerRegistration,
    Person,
    Project,
    Receipt,
)
from housing_kernel.domain.values import Role
from housing_kernel.exceptions import PersonNotFoundError, ProjectNotFoundError
from housing_kernel.logging_config import get_logger
from housing_kernel.records import (
    ApplicationCodec,
    EnquiryCodec,
    PersonCodec,
    ProjectCodec,
    ReceiptCodec,
    RegistrationCodec,
)

logger = get_logger("db.repositories")


@dataclass
class Repositories:
    """All stores of one housing system instance."""

    applicants: RecordStore[Person]
    officers: RecordStore[Person]
    managers: RecordStore[Person]
    projects: RecordStore[Project]
    applications: RecordStore[Application]
    enquiries: RecordStore[Enquiry]
    receipts: RecordStore[Receipt]
    registrations: RecordStore[OfficerRegistration]

    @classmethod
    def open(cls, backing: Backing, resolve: bool = True) -> Repositories:
        """Load every table from ``backing`` and reconcile references."""
        repos = cls(
            applicants=RecordStore(PersonCodec(Role.APPLICANT), backing),
            officers=RecordStore(PersonCodec(Role.OFFICER), backing),
            managers=RecordStore(PersonCodec(Role.MANAGER), backing),
            projects=RecordStore(ProjectCodec(), backing),
            applications=RecordStore(ApplicationCodec(), backing),
            enquiries=RecordStore(EnquiryCodec(), backing),
            receipts=RecordStore(ReceiptCodec(), backing),
            registrations=RecordStore(RegistrationCodec(), backing),
        )
        if resolve:
            repos.resolve_references()
        return repos

    # ---------------------------------------------------------------------
    # Persons
    # ---------------------------------------------------------------------

    def person_store(self, role: Role) -> RecordStore[Person]:
        return {
            Role.APPLICANT: self.applicants,
            Role.OFFICER: self.officers,
            Role.MANAGER: self.managers,
        }[role]

    def find_person(self, person_id: str) -> Person | None:
        for store in (self.applicants, self.officers, self.managers):
            person = store.get(person_id)
            if person is not None:
                return person
        return None

    def person(self, person_id: str) -> Person:
        person = self.find_person(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person

    def all_persons(self) -> list[Person]:
        return self.applicants.list() + self.officers.list() + self.managers.list()

    # ---------------------------------------------------------------------
    # Projects and applications
    # ---------------------------------------------------------------------

    def project(self, project_id: str) -> Project:
        project = self.projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def applications_of(self, applicant_id: str) -> list[Application]:
        return self.applications.find(lambda a: a.applicant_id == applicant_id)

    def active_application(self, applicant_id: str) -> Application | None:
        for application in self.applications_of(applicant_id):
            if application.is_active:
                return application
        return None

    def current_application(self, applicant_id: str) -> Application | None:
        """The active application, else the most recent one, else None."""
        active = self.active_application(applicant_id)
        if active is not None:
            return active
        history = self.applications_of(applicant_id)
        return history[-1] if history else None

    def enquiries_of(self, applicant_id: str) -> tuple[Enquiry, ...]:
        return tuple(self.enquiries.find(lambda e: e.applicant_id == applicant_id))

    # ---------------------------------------------------------------------
    # Reference resolution
    # ---------------------------------------------------------------------

    def resolve_references(self) -> None:
        """
        Reconcile ID references after every store is loaded.

        Only in-memory values are changed; nothing is written here.
        """
        for project in self.projects.list():
            if project.manager_id is not None and self.managers.get(project.manager_id) is None:
                logger.warning(
                    "dangling_manager_reference",
                    extra={"project_id": project.project_id, "manager_id": project.manager_id},
                )
            known = tuple(oid for oid in project.officer_ids if oid in self.officers)
            dropped = [oid for oid in project.officer_ids if oid not in self.officers]
            for officer_id in dropped:
                logger.warning(
                    "dangling_officer_reference",
                    extra={"project_id": project.project_id, "officer_id": officer_id},
                )
            if dropped:
                self.projects.repair(replace(project, officer_ids=known))

        for store in (self.applicants, self.officers):
            for person in store.list():
                self._reconcile_snapshots(store, person)

    def _reconcile_snapshots(self, store: RecordStore[Person], person: Person) -> None:
        profile = person.applicant
        snapshot = profile.application
        if snapshot is not None and snapshot.application_id not in self.applications:
            # Rows written before the application table existed.
            self.applications.repair(snapshot)
            logger.info(
                "application_recovered_from_snapshot",
                extra={"person_id": person.person_id, "application_id": snapshot.application_id},
            )
        for enquiry in profile.enquiries:
            if enquiry.enquiry_id not in self.enquiries:
                self.enquiries.repair(enquiry)

        current = self.current_application(person.person_id)
        enquiries = self.enquiries_of(person.person_id)
        if current != snapshot or enquiries != profile.enquiries:
            store.repair(person.with_application(current).with_enquiries(enquiries))
