"""Read-only query selectors."""

from housing_kernel.selectors.application_selector import (
    ApplicationSelector,
    BookingReportFilter,
    BookingReportRow,
)
from housing_kernel.selectors.base import BaseSelector
from housing_kernel.selectors.project_selector import (
    AvailableProject,
    ProjectFilter,
    ProjectSelector,
)

__all__ = [
    "ApplicationSelector",
    "AvailableProject",
    "BaseSelector",
    "BookingReportFilter",
    "BookingReportRow",
    "ProjectFilter",
    "ProjectSelector",
]
