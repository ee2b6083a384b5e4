"""Housing services and the ``HousingSystem`` facade."""

from housing_kernel.services.application_service import (
    ApplicationService,
    BookingOutcome,
    WithdrawalOutcome,
)
from housing_kernel.services.enquiry_service import EnquiryService
from housing_kernel.services.identity_service import IdentityService
from housing_kernel.services.officer_service import OfficerService
from housing_kernel.services.project_service import ProjectService
from housing_kernel.services.system import HousingSystem
from housing_kernel.services.unit_of_work import UnitOfWork

__all__ = [
    "ApplicationService",
    "BookingOutcome",
    "EnquiryService",
    "HousingSystem",
    "IdentityService",
    "OfficerService",
    "ProjectService",
    "UnitOfWork",
    "WithdrawalOutcome",
]
