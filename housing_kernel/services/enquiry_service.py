"""
housing_kernel.services.enquiry_service -- Applicant enquiries and replies.

Responsibility:
    Applicants (and officers acting as applicants) ask questions about a
    project; an officer assigned to that project or any manager answers
    once.  The author may edit or delete an enquiry until it is answered.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - The enquiry table is authoritative; the author's packed Enquiries
      column is restaged in the same unit of work on every change.
    - A reply is set at most once; the message is immutable afterwards.

Failure modes:
    - InvalidEnquiryError for empty message or reply text.
    - NotEnquiryAuthorError, OfficerNotAssignedError, RoleNotPermittedError.
    - EnquiryAlreadyRepliedError.
    - EnquiryNotFoundError, ProjectNotFoundError.
"""

from __future__ import annotations

from dataclasses import replace

from housing_kernel.domain.entities import Enquiry, Person
from housing_kernel.domain.values import Role
from housing_kernel.exceptions import (
    EnquiryAlreadyRepliedError,
    EnquiryNotFoundError,
    InvalidEnquiryError,
    NotEnquiryAuthorError,
    OfficerNotAssignedError,
    RoleNotPermittedError,
)
from housing_kernel.logging_config import get_logger
from housing_kernel.services.base import BaseService
from housing_kernel.services.unit_of_work import UnitOfWork

logger = get_logger("services.enquiry")


def _require_text(field_name: str, value: str) -> str:
    if value is None or not value.strip():
        raise InvalidEnquiryError(field_name, "must not be empty")
    return value


class EnquiryService(BaseService):
    """Enquiry lifecycle: submit, edit, delete, reply."""

    def _enquiry(self, enquiry_id: str) -> Enquiry:
        enquiry = self.repos.enquiries.get(enquiry_id)
        if enquiry is None:
            raise EnquiryNotFoundError(enquiry_id)
        return enquiry

    def _own_open_enquiry(self, person: Person, enquiry_id: str) -> Enquiry:
        enquiry = self._enquiry(enquiry_id)
        if enquiry.applicant_id != person.person_id:
            raise NotEnquiryAuthorError(person.person_id, enquiry_id)
        if enquiry.is_replied:
            raise EnquiryAlreadyRepliedError(enquiry_id)
        return enquiry

    def _commit(self, label: str, applicant_id: str, put: Enquiry | None = None,
                delete: str | None = None) -> None:
        """Write one enquiry change together with the author's snapshot."""
        current = {e.enquiry_id: e for e in self.repos.enquiries_of(applicant_id)}
        if put is not None:
            current[put.enquiry_id] = put
        if delete is not None:
            current.pop(delete, None)

        with UnitOfWork(label) as uow:
            if put is not None:
                uow.put(self.repos.enquiries, put)
            if delete is not None:
                uow.delete(self.repos.enquiries, delete)
            self.stage_enquiries(uow, applicant_id, tuple(current.values()))

    def submit(self, person: Person, project_id: str, message: str) -> Enquiry:
        self.require_applicant_capability(person, "submit enquiries")
        self.repos.project(project_id)
        enquiry = Enquiry(
            enquiry_id=self.new_id(),
            applicant_id=person.person_id,
            project_id=project_id,
            message=_require_text("message", message),
        )
        self._commit("submit_enquiry", person.person_id, put=enquiry)
        logger.info(
            "enquiry_submitted",
            extra={"enquiry_id": enquiry.enquiry_id, "project_id": project_id},
        )
        return enquiry

    def edit(self, person: Person, enquiry_id: str, message: str) -> Enquiry:
        enquiry = self._own_open_enquiry(person, enquiry_id)
        edited = replace(enquiry, message=_require_text("message", message))
        self._commit("edit_enquiry", person.person_id, put=edited)
        logger.info("enquiry_edited", extra={"enquiry_id": enquiry_id})
        return edited

    def delete(self, person: Person, enquiry_id: str) -> None:
        self._own_open_enquiry(person, enquiry_id)
        self._commit("delete_enquiry", person.person_id, delete=enquiry_id)
        logger.info("enquiry_deleted", extra={"enquiry_id": enquiry_id})

    def reply(self, responder: Person, enquiry_id: str, reply: str) -> Enquiry:
        """Answer once.  Officers must be assigned to the enquiry's project."""
        enquiry = self._enquiry(enquiry_id)
        if responder.role == Role.OFFICER:
            project = self.repos.project(enquiry.project_id)
            if not project.has_officer(responder.person_id):
                raise OfficerNotAssignedError(responder.person_id, enquiry.project_id)
        elif responder.role != Role.MANAGER:
            raise RoleNotPermittedError(
                responder.person_id, responder.role.value, "reply to enquiries"
            )
        if enquiry.is_replied:
            raise EnquiryAlreadyRepliedError(enquiry_id)

        answered = replace(enquiry, reply=_require_text("reply", reply))
        self._commit("reply_enquiry", enquiry.applicant_id, put=answered)
        logger.info(
            "enquiry_replied",
            extra={"enquiry_id": enquiry_id, "responder_id": responder.person_id},
        )
        return answered
