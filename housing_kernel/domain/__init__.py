"""
Pure domain layer.

This package contains immutable entities, value objects and the decision
functions of the housing kernel, with NO dependencies on:
- ORM (SQLAlchemy)
- Flat-record files
- Time/clock (except the Clock abstraction itself)
- I/O

All domain objects are immutable and deterministic.
"""

from housing_kernel.domain.assignment import AssignmentCheck, AssignmentRules, can_register
from housing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from housing_kernel.domain.eligibility import (
    EligibilityRules,
    project_eligibility,
    unit_eligibility,
)
from housing_kernel.domain.entities import (
    Application,
    ApplicantProfile,
    Enquiry,
    Identity,
    OfficerProfile,
    OfficerRegistration,
    Person,
    Project,
    Receipt,
    UnitOffer,
)
from housing_kernel.domain.inventory import release, reserve
from housing_kernel.domain.lifecycle import APPLICATION_TRANSITIONS, APPLICATION_WORKFLOW
from housing_kernel.domain.results import OperationResult, OutcomeStatus
from housing_kernel.domain.values import (
    ApplicationStatus,
    DateWindow,
    MaritalStatus,
    OfficerStatus,
    RegistrationStatus,
    Role,
    UnitType,
)

__all__ = [
    # Values
    "ApplicationStatus",
    "DateWindow",
    "MaritalStatus",
    "OfficerStatus",
    "RegistrationStatus",
    "Role",
    "UnitType",
    # Entities
    "Application",
    "ApplicantProfile",
    "Enquiry",
    "Identity",
    "OfficerProfile",
    "OfficerRegistration",
    "Person",
    "Project",
    "Receipt",
    "UnitOffer",
    # Policies
    "AssignmentCheck",
    "AssignmentRules",
    "EligibilityRules",
    "can_register",
    "project_eligibility",
    "unit_eligibility",
    "reserve",
    "release",
    "APPLICATION_TRANSITIONS",
    "APPLICATION_WORKFLOW",
    # Results
    "OperationResult",
    "OutcomeStatus",
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
]
