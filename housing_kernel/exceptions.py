"""
Typed Exception Hierarchy for the Housing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the lifecycle engine must be able to tell a business refusal
("this applicant is too young for that unit type") from a broken backing
table ("the project table could not be written").  Matching on message text
is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable)
  3. Exceptions carry structured DATA (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from HousingKernelError:

    HousingKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidIdentityError
    |   +-- IncompleteProfileError
    |   +-- InvalidDateWindowError
    |   +-- InvalidProjectDetailsError
    |   +-- UnitTypeNotOfferedError
    |   +-- InvalidEnquiryError
    |   +-- InvalidPasswordError
    |   +-- MalformedRecordError
    |
    +-- EligibilityDeniedError
    |   +-- UnitTypeIneligibleError
    |   +-- ProjectClosedError
    |   +-- ActiveApplicationExistsError
    |   +-- OfficerAssignmentConflictError
    |
    +-- NotFoundError
    |   +-- PersonNotFoundError
    |   +-- ProjectNotFoundError
    |   +-- ApplicationNotFoundError
    |   +-- EnquiryNotFoundError
    |   +-- RegistrationNotFoundError
    |
    +-- AuthorizationDeniedError
    |   +-- RoleNotPermittedError
    |   +-- NotProjectManagerError
    |   +-- OfficerNotAssignedError
    |   +-- NotApplicationOwnerError
    |   +-- NotEnquiryAuthorError
    |   +-- InvalidCredentialsError
    |
    +-- StateConflictError
    |   +-- InvalidApplicationTransitionError
    |   +-- InventoryExhaustedError
    |   +-- OfficerSlotsFullError
    |   +-- DuplicateRegistrationError
    |   +-- RegistrationAlreadyDecidedError
    |   +-- EnquiryAlreadyRepliedError
    |   +-- ProjectHasActiveApplicationsError
    |   +-- ManagerWindowOverlapError
    |   +-- UnitsCommittedError
    |
    +-- PersistenceError
        +-- TableWriteError
        +-- RollbackFailedError

===============================================================================
HANDLING POLICY
===============================================================================

ValidationError, EligibilityDeniedError, NotFoundError,
AuthorizationDeniedError and StateConflictError are recoverable.  The
``HousingSystem`` boundary turns them into an ``OperationResult`` carrying
the code and message.

PersistenceError is NOT recoverable at that boundary.  It always propagates
to the caller so that an I/O failure is never reported as a generic
"operation failed".
"""


class HousingKernelError(Exception):
    """
    Base exception for all housing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "HOUSING_KERNEL_ERROR"


# Validation exceptions


class ValidationError(HousingKernelError):
    """Malformed or missing required input. Rejected before touching state."""

    code: str = "VALIDATION_ERROR"


class InvalidIdentityError(ValidationError):
    """Person ID does not match the one-letter, seven-digit, one-letter format."""

    code: str = "INVALID_IDENTITY"

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Invalid person ID format: {person_id!r}")


class IncompleteProfileError(ValidationError):
    """
    Person record lacks data the eligibility rules need.

    A missing date of birth or marital status is a data error, not a
    business rejection.
    """

    code: str = "INCOMPLETE_PROFILE"

    def __init__(self, person_id: str, missing_field: str):
        self.person_id = person_id
        self.missing_field = missing_field
        super().__init__(
            f"Person {person_id} is missing {missing_field} for eligibility check"
        )


class InvalidDateWindowError(ValidationError):
    """Close date precedes open date."""

    code: str = "INVALID_DATE_WINDOW"

    def __init__(self, open_date: str, close_date: str):
        self.open_date = open_date
        self.close_date = close_date
        super().__init__(
            f"Application window closes ({close_date}) before it opens ({open_date})"
        )


class InvalidProjectDetailsError(ValidationError):
    """Project field value is out of range or empty."""

    code: str = "INVALID_PROJECT_DETAILS"

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid project {field_name}: {reason}")


class UnitTypeNotOfferedError(ValidationError):
    """Project has no offer for the requested unit type."""

    code: str = "UNIT_TYPE_NOT_OFFERED"

    def __init__(self, project_id: str, unit_type: str):
        self.project_id = project_id
        self.unit_type = unit_type
        super().__init__(f"Project {project_id} does not offer unit type {unit_type}")


class InvalidEnquiryError(ValidationError):
    """Enquiry or reply text is empty."""

    code: str = "INVALID_ENQUIRY"

    def __init__(self, field_name: str, reason: str):
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid enquiry {field_name}: {reason}")


class InvalidPasswordError(ValidationError):
    """New password is empty or unchanged."""

    code: str = "INVALID_PASSWORD"

    def __init__(self, person_id: str, reason: str):
        self.person_id = person_id
        self.reason = reason
        super().__init__(f"Password change for {person_id} refused: {reason}")


class MalformedRecordError(ValidationError):
    """A flat record could not be decoded."""

    code: str = "MALFORMED_RECORD"

    def __init__(self, table: str, reason: str, line_number: int | None = None):
        self.table = table
        self.reason = reason
        self.line_number = line_number
        where = f" line {line_number}" if line_number is not None else ""
        super().__init__(f"Malformed {table} record{where}: {reason}")


# Eligibility exceptions


class EligibilityDeniedError(HousingKernelError):
    """Business-rule refusal. A normal negative result, not a fault."""

    code: str = "ELIGIBILITY_DENIED"


class UnitTypeIneligibleError(EligibilityDeniedError):
    """Age / marital status combination does not allow the unit type."""

    code: str = "UNIT_TYPE_INELIGIBLE"

    def __init__(self, person_id: str, age: int, marital_status: str, unit_type: str):
        self.person_id = person_id
        self.age = age
        self.marital_status = marital_status
        self.unit_type = unit_type
        super().__init__(
            f"Applicant {person_id} (age {age}, {marital_status}) "
            f"is not eligible for {unit_type}"
        )


class ProjectClosedError(EligibilityDeniedError):
    """Project is hidden or outside its application window."""

    code: str = "PROJECT_CLOSED"

    def __init__(self, project_id: str, reason: str):
        self.project_id = project_id
        self.reason = reason
        super().__init__(f"Project {project_id} is not open for applications: {reason}")


class ActiveApplicationExistsError(EligibilityDeniedError):
    """Applicant already holds a non-terminal application."""

    code: str = "ACTIVE_APPLICATION_EXISTS"

    def __init__(self, person_id: str, application_id: str):
        self.person_id = person_id
        self.application_id = application_id
        super().__init__(
            f"Applicant {person_id} already has active application {application_id}"
        )


class OfficerAssignmentConflictError(EligibilityDeniedError):
    """Officer may not take on the project (self-application or duty overlap)."""

    code: str = "OFFICER_ASSIGNMENT_CONFLICT"

    def __init__(self, officer_id: str, project_id: str, reason: str):
        self.officer_id = officer_id
        self.project_id = project_id
        self.reason = reason
        super().__init__(
            f"Officer {officer_id} cannot handle project {project_id}: {reason}"
        )


# Not-found exceptions


class NotFoundError(HousingKernelError):
    """Referenced ID has no record."""

    code: str = "NOT_FOUND"


class PersonNotFoundError(NotFoundError):
    code: str = "PERSON_NOT_FOUND"

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Person not found: {person_id}")


class ProjectNotFoundError(NotFoundError):
    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class ApplicationNotFoundError(NotFoundError):
    code: str = "APPLICATION_NOT_FOUND"

    def __init__(self, application_id: str):
        self.application_id = application_id
        super().__init__(f"Application not found: {application_id}")


class EnquiryNotFoundError(NotFoundError):
    code: str = "ENQUIRY_NOT_FOUND"

    def __init__(self, enquiry_id: str):
        self.enquiry_id = enquiry_id
        super().__init__(f"Enquiry not found: {enquiry_id}")


class RegistrationNotFoundError(NotFoundError):
    code: str = "REGISTRATION_NOT_FOUND"

    def __init__(self, officer_id: str, project_id: str):
        self.officer_id = officer_id
        self.project_id = project_id
        super().__init__(
            f"No registration for officer {officer_id} on project {project_id}"
        )


# Authorization exceptions


class AuthorizationDeniedError(HousingKernelError):
    """Actor lacks the role or ownership relation the operation requires."""

    code: str = "AUTHORIZATION_DENIED"


class RoleNotPermittedError(AuthorizationDeniedError):
    code: str = "ROLE_NOT_PERMITTED"

    def __init__(self, person_id: str, role: str, action: str):
        self.person_id = person_id
        self.role = role
        self.action = action
        super().__init__(f"{role} {person_id} may not {action}")


class NotProjectManagerError(AuthorizationDeniedError):
    code: str = "NOT_PROJECT_MANAGER"

    def __init__(self, manager_id: str, project_id: str):
        self.manager_id = manager_id
        self.project_id = project_id
        super().__init__(f"Manager {manager_id} is not in charge of project {project_id}")


class OfficerNotAssignedError(AuthorizationDeniedError):
    code: str = "OFFICER_NOT_ASSIGNED"

    def __init__(self, officer_id: str, project_id: str):
        self.officer_id = officer_id
        self.project_id = project_id
        super().__init__(f"Officer {officer_id} is not assigned to project {project_id}")


class NotApplicationOwnerError(AuthorizationDeniedError):
    code: str = "NOT_APPLICATION_OWNER"

    def __init__(self, person_id: str, application_id: str):
        self.person_id = person_id
        self.application_id = application_id
        super().__init__(f"Person {person_id} does not own application {application_id}")


class NotEnquiryAuthorError(AuthorizationDeniedError):
    code: str = "NOT_ENQUIRY_AUTHOR"

    def __init__(self, person_id: str, enquiry_id: str):
        self.person_id = person_id
        self.enquiry_id = enquiry_id
        super().__init__(f"Person {person_id} did not author enquiry {enquiry_id}")


class InvalidCredentialsError(AuthorizationDeniedError):
    code: str = "INVALID_CREDENTIALS"

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Login failed for {person_id}")


# State conflict exceptions


class StateConflictError(HousingKernelError):
    """Operation is invalid for the entity's current lifecycle state."""

    code: str = "STATE_CONFLICT"


class InvalidApplicationTransitionError(StateConflictError):
    code: str = "INVALID_APPLICATION_TRANSITION"

    def __init__(self, application_id: str, from_status: str, to_status: str):
        self.application_id = application_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Application {application_id} cannot move from {from_status} to {to_status}"
        )


class InventoryExhaustedError(StateConflictError):
    code: str = "INVENTORY_EXHAUSTED"

    def __init__(self, project_id: str, unit_type: str):
        self.project_id = project_id
        self.unit_type = unit_type
        super().__init__(f"No remaining {unit_type} units in project {project_id}")


class OfficerSlotsFullError(StateConflictError):
    code: str = "OFFICER_SLOTS_FULL"

    def __init__(self, project_id: str, officer_slots: int):
        self.project_id = project_id
        self.officer_slots = officer_slots
        super().__init__(
            f"Project {project_id} already has {officer_slots} assigned officer(s)"
        )


class DuplicateRegistrationError(StateConflictError):
    code: str = "DUPLICATE_REGISTRATION"

    def __init__(self, officer_id: str, project_id: str, status: str):
        self.officer_id = officer_id
        self.project_id = project_id
        self.status = status
        super().__init__(
            f"Officer {officer_id} already has a {status} registration "
            f"for project {project_id}"
        )


class RegistrationAlreadyDecidedError(StateConflictError):
    code: str = "REGISTRATION_ALREADY_DECIDED"

    def __init__(self, registration_id: str, status: str):
        self.registration_id = registration_id
        self.status = status
        super().__init__(f"Registration {registration_id} is already {status}")


class EnquiryAlreadyRepliedError(StateConflictError):
    code: str = "ENQUIRY_ALREADY_REPLIED"

    def __init__(self, enquiry_id: str):
        self.enquiry_id = enquiry_id
        super().__init__(f"Enquiry {enquiry_id} has already been replied to")


class ProjectHasActiveApplicationsError(StateConflictError):
    code: str = "PROJECT_HAS_ACTIVE_APPLICATIONS"

    def __init__(self, project_id: str, active_count: int):
        self.project_id = project_id
        self.active_count = active_count
        super().__init__(
            f"Project {project_id} has {active_count} active application(s)"
        )


class ManagerWindowOverlapError(StateConflictError):
    code: str = "MANAGER_WINDOW_OVERLAP"

    def __init__(self, manager_id: str, conflicting_project_id: str):
        self.manager_id = manager_id
        self.conflicting_project_id = conflicting_project_id
        super().__init__(
            f"Manager {manager_id} already handles project "
            f"{conflicting_project_id} during this window"
        )


class UnitsCommittedError(StateConflictError):
    code: str = "UNITS_COMMITTED"

    def __init__(self, project_id: str, unit_type: str, committed: int, requested_total: int):
        self.project_id = project_id
        self.unit_type = unit_type
        self.committed = committed
        self.requested_total = requested_total
        super().__init__(
            f"Project {project_id} has {committed} successful or booked "
            f"{unit_type} application(s); total cannot be set to {requested_total}"
        )


# Persistence exceptions


class PersistenceError(HousingKernelError):
    """I/O failure writing a backing table. Always propagates."""

    code: str = "PERSISTENCE_ERROR"


class TableWriteError(PersistenceError):
    code: str = "TABLE_WRITE_FAILED"

    def __init__(self, table: str, reason: str):
        self.table = table
        self.reason = reason
        super().__init__(f"Failed to write table {table}: {reason}")


class RollbackFailedError(PersistenceError):
    """
    A staged commit failed and its compensation also failed.

    The tables named in ``unreverted_tables`` still hold the partially
    applied write, in memory and in the backing alike.
    """

    code: str = "ROLLBACK_FAILED"

    def __init__(self, failed_table: str, unreverted_tables: tuple[str, ...]):
        self.failed_table = failed_table
        self.unreverted_tables = unreverted_tables
        super().__init__(
            f"Write to {failed_table} failed and tables "
            f"{', '.join(unreverted_tables)} could not be reverted"
        )
