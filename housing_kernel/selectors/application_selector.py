"""
Module: housing_kernel.selectors.application_selector
Responsibility: Application, receipt and enquiry listings, and the booking
    report data set (BOOKED applications joined with applicant and project).
Architecture position: Kernel > Selectors.

Report formatting is the caller's concern; this module returns rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.clock import Clock, SystemClock
from housing_kernel.domain.entities import Application, Enquiry, Receipt
from housing_kernel.domain.values import ApplicationStatus, MaritalStatus, UnitType
from housing_kernel.logging_config import get_logger
from housing_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.application")


@dataclass(frozen=True)
class BookingReportFilter:
    marital_status: MaritalStatus | None = None
    unit_type: UnitType | None = None
    min_age: int | None = None
    project_name: str | None = None
    neighbourhood: str | None = None


@dataclass(frozen=True)
class BookingReportRow:
    application_id: str
    applicant_id: str
    applicant_name: str
    age: int | None
    marital_status: MaritalStatus | None
    project_id: str
    project_name: str
    neighbourhood: str
    unit_type: UnitType
    price: Decimal | None


class ApplicationSelector(BaseSelector):
    """Read-only application queries."""

    def __init__(self, repos: Repositories, clock: Clock | None = None):
        super().__init__(repos)
        self.clock = clock or SystemClock()

    def applications_for_project(
        self,
        project_id: str,
        status: ApplicationStatus | None = None,
    ) -> list[Application]:
        return self.repos.applications.find(
            lambda a: a.project_id == project_id and (status is None or a.status == status)
        )

    def applications_of(self, applicant_id: str) -> list[Application]:
        return self.repos.applications_of(applicant_id)

    def pending_withdrawals(self, project_id: str) -> list[Application]:
        return self.applications_for_project(project_id, ApplicationStatus.WITHDRAWAL_PENDING)

    def receipts_for(self, applicant_id: str) -> list[Receipt]:
        return self.repos.receipts.find(lambda r: r.applicant_id == applicant_id)

    def enquiries_of(self, applicant_id: str) -> list[Enquiry]:
        return list(self.repos.enquiries_of(applicant_id))

    def enquiries_for_project(self, project_id: str) -> list[Enquiry]:
        return self.repos.enquiries.find(lambda e: e.project_id == project_id)

    def all_enquiries(self) -> list[Enquiry]:
        return self.repos.enquiries.list()

    def booking_report(
        self,
        report_filter: BookingReportFilter | None = None,
        on: date | None = None,
    ) -> list[BookingReportRow]:
        """BOOKED applications matching ``report_filter``; ages as of ``on``."""
        flt = report_filter or BookingReportFilter()
        today = on or self.clock.today()
        rows: list[BookingReportRow] = []
        for application in self.repos.applications.find(
            lambda a: a.status == ApplicationStatus.BOOKED
        ):
            applicant = self.repos.find_person(application.applicant_id)
            project = self.repos.projects.get(application.project_id)
            if applicant is None or project is None:
                logger.warning(
                    "booking_report_row_unresolved",
                    extra={"application_id": application.application_id},
                )
                continue
            age = applicant.age_on(today)
            marital = applicant.identity.marital_status

            if flt.marital_status is not None and marital != flt.marital_status:
                continue
            if flt.unit_type is not None and application.unit_type != flt.unit_type:
                continue
            if flt.min_age is not None and (age is None or age < flt.min_age):
                continue
            if flt.project_name and flt.project_name.lower() not in project.name.lower():
                continue
            if flt.neighbourhood and flt.neighbourhood.lower() != project.neighbourhood.lower():
                continue

            offer = project.offer_for(application.unit_type)
            rows.append(BookingReportRow(
                application_id=application.application_id,
                applicant_id=applicant.person_id,
                applicant_name=applicant.identity.name,
                age=age,
                marital_status=marital,
                project_id=project.project_id,
                project_name=project.name,
                neighbourhood=project.neighbourhood,
                unit_type=application.unit_type,
                price=offer.price if offer is not None else None,
            ))
        return rows
