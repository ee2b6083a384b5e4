"""
Application lifecycle (``housing_kernel.domain.lifecycle``).

Responsibility
--------------
Declares the application and officer-registration state machines and the
pure transition functions that move an ``Application`` between states.
Services call these functions; they never assign ``status`` directly.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects and functions.  ZERO I/O.

Invariants enforced
-------------------
* ``APPLICATION_TRANSITIONS`` is the only source of valid status moves.
  REJECTED and WITHDRAWAL_APPROVED have no outgoing edges.
* Requesting a withdrawal records the current status in
  ``prior_status``; rejecting the withdrawal restores exactly that status.
* A withdrawal can only be requested once while pending.

Failure modes
-------------
* ``InvalidApplicationTransitionError`` for any move not in the table.
"""

from __future__ import annotations

from dataclasses import replace

from housing_kernel.domain.entities import Application, OfficerRegistration
from housing_kernel.domain.values import (
    TERMINAL_APPLICATION_STATUSES,
    WITHDRAWABLE_STATUSES,
    ApplicationStatus,
    RegistrationStatus,
    Role,
    UnitType,
)
from housing_kernel.domain.workflow import Guard, Transition, Workflow
from housing_kernel.exceptions import (
    InvalidApplicationTransitionError,
    RegistrationAlreadyDecidedError,
)

_S = ApplicationStatus


# =========================================================================
# Application state machine
# =========================================================================


APPLICATION_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    _S.PENDING: frozenset({_S.SUCCESS, _S.REJECTED, _S.WITHDRAWAL_PENDING}),
    _S.SUCCESS: frozenset({_S.BOOKED, _S.WITHDRAWAL_PENDING}),
    _S.BOOKED: frozenset({_S.WITHDRAWAL_PENDING}),
    _S.WITHDRAWAL_PENDING: frozenset({
        _S.WITHDRAWAL_APPROVED,
        # Rejected withdrawal: back to the remembered status.
        _S.PENDING,
        _S.SUCCESS,
        _S.BOOKED,
    }),
    _S.REJECTED: frozenset(),
    _S.WITHDRAWAL_APPROVED: frozenset(),
}

GUARD_MANAGER_OWNS_PROJECT = Guard(
    name="manager_owns_project",
    description="The deciding manager is in charge of the application's project",
)
GUARD_OFFICER_ASSIGNED = Guard(
    name="officer_assigned",
    description="The booking officer is approved for the application's project",
)
GUARD_UNITS_REMAINING = Guard(
    name="units_remaining",
    description="At least one unit of the requested type remains",
)
GUARD_APPLICANT_OWNS = Guard(
    name="applicant_owns_application",
    description="Only the applicant may request withdrawal",
)

APPLICATION_WORKFLOW = Workflow(
    name="application",
    description="Housing application from submission to booking or withdrawal",
    initial_state=_S.PENDING.value,
    states=tuple(s.value for s in ApplicationStatus),
    terminal_states=tuple(s.value for s in TERMINAL_APPLICATION_STATUSES),
    transitions=(
        Transition(_S.PENDING.value, _S.SUCCESS.value, "approve",
                   Role.MANAGER.value, GUARD_MANAGER_OWNS_PROJECT),
        Transition(_S.PENDING.value, _S.REJECTED.value, "reject",
                   Role.MANAGER.value, GUARD_MANAGER_OWNS_PROJECT),
        Transition(_S.SUCCESS.value, _S.BOOKED.value, "book",
                   Role.OFFICER.value, GUARD_UNITS_REMAINING, moves_inventory=True),
        Transition(_S.PENDING.value, _S.WITHDRAWAL_PENDING.value, "request_withdrawal",
                   Role.APPLICANT.value, GUARD_APPLICANT_OWNS),
        Transition(_S.SUCCESS.value, _S.WITHDRAWAL_PENDING.value, "request_withdrawal",
                   Role.APPLICANT.value, GUARD_APPLICANT_OWNS),
        Transition(_S.BOOKED.value, _S.WITHDRAWAL_PENDING.value, "request_withdrawal",
                   Role.APPLICANT.value, GUARD_APPLICANT_OWNS),
        Transition(_S.WITHDRAWAL_PENDING.value, _S.WITHDRAWAL_APPROVED.value,
                   "approve_withdrawal", Role.MANAGER.value,
                   GUARD_MANAGER_OWNS_PROJECT, moves_inventory=True),
        Transition(_S.WITHDRAWAL_PENDING.value, _S.PENDING.value, "reject_withdrawal",
                   Role.MANAGER.value, GUARD_MANAGER_OWNS_PROJECT),
        Transition(_S.WITHDRAWAL_PENDING.value, _S.SUCCESS.value, "reject_withdrawal",
                   Role.MANAGER.value, GUARD_MANAGER_OWNS_PROJECT),
        Transition(_S.WITHDRAWAL_PENDING.value, _S.BOOKED.value, "reject_withdrawal",
                   Role.MANAGER.value, GUARD_MANAGER_OWNS_PROJECT),
    ),
)


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in APPLICATION_TRANSITIONS.get(current, frozenset())


def _fires(current: ApplicationStatus, target: ApplicationStatus, action: str) -> bool:
    return any(
        t.to_state == target.value
        for t in APPLICATION_WORKFLOW.transitions_for(action)
        if t.from_state == current.value
    )


def _move(
    application: Application,
    target: ApplicationStatus,
    action: str,
    **changes,
) -> Application:
    # Both the table and the declared action must allow the move, so that
    # e.g. "approve" cannot take WITHDRAWAL_PENDING back to SUCCESS.
    if not (can_transition(application.status, target)
            and _fires(application.status, target, action)):
        raise InvalidApplicationTransitionError(
            application.application_id,
            application.status.value,
            target.value,
        )
    return replace(application, status=target, **changes)


def new_application(
    application_id: str,
    applicant_id: str,
    project_id: str,
    unit_type: UnitType,
) -> Application:
    """A freshly submitted application, always PENDING."""
    return Application(
        application_id=application_id,
        status=ApplicationStatus.PENDING,
        applicant_id=applicant_id,
        project_id=project_id,
        unit_type=unit_type,
    )


def approve(application: Application) -> Application:
    return _move(application, _S.SUCCESS, "approve")


def reject(application: Application) -> Application:
    return _move(application, _S.REJECTED, "reject")


def book(application: Application) -> Application:
    return _move(application, _S.BOOKED, "book")


def request_withdrawal(application: Application) -> Application:
    """Move to WITHDRAWAL_PENDING, remembering the current status."""
    return _move(
        application,
        _S.WITHDRAWAL_PENDING,
        "request_withdrawal",
        prior_status=application.status,
    )


def approve_withdrawal(application: Application) -> Application:
    """
    Finalize a withdrawal.

    ``prior_status`` is kept on the approved record so callers (and the
    stored row) can tell whether a booked unit was returned to the pool.
    """
    return _move(application, _S.WITHDRAWAL_APPROVED, "approve_withdrawal")


def reject_withdrawal(application: Application) -> Application:
    """Return to exactly the status held when the withdrawal was requested."""
    prior = application.prior_status
    if application.status != _S.WITHDRAWAL_PENDING or prior not in WITHDRAWABLE_STATUSES:
        raise InvalidApplicationTransitionError(
            application.application_id,
            application.status.value,
            prior.value if prior is not None else "UNKNOWN_PRIOR_STATUS",
        )
    return _move(application, prior, "reject_withdrawal", prior_status=None)


def holds_booked_unit(application: Application) -> bool:
    """True when approving this withdrawal must release a unit."""
    if application.status == _S.BOOKED:
        return True
    return (
        application.status in (_S.WITHDRAWAL_PENDING, _S.WITHDRAWAL_APPROVED)
        and application.prior_status == _S.BOOKED
    )


# =========================================================================
# Officer registration state machine
# =========================================================================


REGISTRATION_TRANSITIONS: dict[RegistrationStatus, frozenset[RegistrationStatus]] = {
    RegistrationStatus.PENDING: frozenset({
        RegistrationStatus.APPROVED,
        RegistrationStatus.REJECTED,
    }),
    RegistrationStatus.APPROVED: frozenset(),
    RegistrationStatus.REJECTED: frozenset(),
}

REGISTRATION_WORKFLOW = Workflow(
    name="officer_registration",
    description="Officer request to handle a project, decided by its manager",
    initial_state=RegistrationStatus.PENDING.value,
    states=tuple(s.value for s in RegistrationStatus),
    terminal_states=(RegistrationStatus.APPROVED.value, RegistrationStatus.REJECTED.value),
    transitions=(
        Transition(RegistrationStatus.PENDING.value, RegistrationStatus.APPROVED.value,
                   "approve", Role.MANAGER.value, GUARD_MANAGER_OWNS_PROJECT),
        Transition(RegistrationStatus.PENDING.value, RegistrationStatus.REJECTED.value,
                   "reject", Role.MANAGER.value, GUARD_MANAGER_OWNS_PROJECT),
    ),
)


def decide_registration(
    registration: OfficerRegistration,
    approve_it: bool,
) -> OfficerRegistration:
    target = RegistrationStatus.APPROVED if approve_it else RegistrationStatus.REJECTED
    if target not in REGISTRATION_TRANSITIONS[registration.status]:
        raise RegistrationAlreadyDecidedError(
            registration.registration_id, registration.status.value
        )
    return replace(registration, status=target)
