"""
Application and registration state machines.

Covers:
- Every allowed transition and its effect on prior_status
- Terminal states have no way out
- Actions cannot be used to reach states they do not name
- Withdrawal rejection restores exactly the remembered status
"""

from dataclasses import replace

import pytest

from housing_kernel.domain import lifecycle
from housing_kernel.domain.entities import OfficerRegistration
from housing_kernel.domain.lifecycle import (
    APPLICATION_TRANSITIONS,
    APPLICATION_WORKFLOW,
    REGISTRATION_WORKFLOW,
    can_transition,
    decide_registration,
    holds_booked_unit,
)
from housing_kernel.domain.values import ApplicationStatus, RegistrationStatus, UnitType
from housing_kernel.domain.workflow import Transition, Workflow
from housing_kernel.exceptions import (
    InvalidApplicationTransitionError,
    RegistrationAlreadyDecidedError,
)

S = ApplicationStatus


def _pending():
    return lifecycle.new_application("A-1", "S1234567A", "P-ACACIA", UnitType.TWO_ROOM)


def _booked():
    return lifecycle.book(lifecycle.approve(_pending()))


# =============================================================================
# Transition table
# =============================================================================


class TestTransitionTable:

    def test_every_status_has_an_entry(self):
        assert set(APPLICATION_TRANSITIONS) == set(ApplicationStatus)

    @pytest.mark.parametrize("terminal", [S.REJECTED, S.WITHDRAWAL_APPROVED])
    def test_terminal_states_have_no_outgoing_edges(self, terminal):
        assert APPLICATION_TRANSITIONS[terminal] == frozenset()
        assert terminal.is_terminal

    def test_workflow_agrees_with_table(self):
        for t in APPLICATION_WORKFLOW.transitions:
            assert can_transition(S(t.from_state), S(t.to_state)), t.action

    def test_workflow_rejects_undeclared_state(self):
        with pytest.raises(ValueError):
            Workflow(
                name="broken",
                description="",
                initial_state="A",
                states=("A",),
                transitions=(Transition("A", "B", "go", "MANAGER"),),
            )

    def test_registration_workflow_is_terminal_after_decision(self):
        assert set(REGISTRATION_WORKFLOW.terminal_states) == {"APPROVED", "REJECTED"}

    def test_booking_and_approved_withdrawal_move_inventory(self):
        movers = {t.action for t in APPLICATION_WORKFLOW.transitions if t.moves_inventory}
        assert movers == {"book", "approve_withdrawal"}


# =============================================================================
# Transitions
# =============================================================================


class TestApplicationTransitions:

    def test_new_application_is_pending(self):
        application = _pending()
        assert application.status == S.PENDING
        assert application.prior_status is None
        assert application.is_active

    def test_approve_and_book(self):
        assert lifecycle.approve(_pending()).status == S.SUCCESS
        assert _booked().status == S.BOOKED

    def test_reject_is_terminal(self):
        rejected = lifecycle.reject(_pending())
        assert rejected.status == S.REJECTED
        assert not rejected.is_active
        with pytest.raises(InvalidApplicationTransitionError):
            lifecycle.request_withdrawal(rejected)

    def test_cannot_book_pending(self):
        with pytest.raises(InvalidApplicationTransitionError) as exc_info:
            lifecycle.book(_pending())
        assert exc_info.value.from_status == "PENDING"
        assert exc_info.value.to_status == "BOOKED"

    def test_cannot_approve_twice(self):
        with pytest.raises(InvalidApplicationTransitionError):
            lifecycle.approve(lifecycle.approve(_pending()))

    def test_approve_cannot_leave_withdrawal_pending(self):
        pending_withdrawal = lifecycle.request_withdrawal(lifecycle.approve(_pending()))
        with pytest.raises(InvalidApplicationTransitionError):
            lifecycle.approve(pending_withdrawal)

    def test_withdrawal_request_remembers_status(self):
        requested = lifecycle.request_withdrawal(_booked())
        assert requested.status == S.WITHDRAWAL_PENDING
        assert requested.prior_status == S.BOOKED

    def test_withdrawal_cannot_be_requested_twice(self):
        requested = lifecycle.request_withdrawal(_pending())
        with pytest.raises(InvalidApplicationTransitionError):
            lifecycle.request_withdrawal(requested)


class TestWithdrawalDecision:

    @pytest.mark.parametrize("build", [_pending, lambda: lifecycle.approve(_pending()), _booked])
    def test_reject_restores_exact_prior_status(self, build):
        original = build()
        restored = lifecycle.reject_withdrawal(lifecycle.request_withdrawal(original))
        assert restored.status == original.status
        assert restored.prior_status is None

    def test_booked_is_not_reset_to_pending(self):
        restored = lifecycle.reject_withdrawal(lifecycle.request_withdrawal(_booked()))
        assert restored.status == S.BOOKED

    def test_missing_prior_status_is_refused(self):
        orphan = replace(lifecycle.request_withdrawal(_pending()), prior_status=None)
        with pytest.raises(InvalidApplicationTransitionError) as exc_info:
            lifecycle.reject_withdrawal(orphan)
        assert exc_info.value.to_status == "UNKNOWN_PRIOR_STATUS"

    def test_approve_keeps_prior_status(self):
        approved = lifecycle.approve_withdrawal(lifecycle.request_withdrawal(_booked()))
        assert approved.status == S.WITHDRAWAL_APPROVED
        assert approved.prior_status == S.BOOKED
        assert not approved.is_active

    def test_holds_booked_unit(self):
        assert holds_booked_unit(_booked())
        assert holds_booked_unit(lifecycle.request_withdrawal(_booked()))
        assert not holds_booked_unit(lifecycle.request_withdrawal(_pending()))
        assert not holds_booked_unit(lifecycle.approve(_pending()))


# =============================================================================
# Officer registration
# =============================================================================


class TestRegistrationDecision:

    def _registration(self, status=RegistrationStatus.PENDING):
        return OfficerRegistration("R-1", "T5678901E", "P-ACACIA", status)

    def test_pending_can_be_approved_or_rejected(self):
        assert decide_registration(self._registration(), True).status == RegistrationStatus.APPROVED
        assert decide_registration(self._registration(), False).status == RegistrationStatus.REJECTED

    @pytest.mark.parametrize("status", [RegistrationStatus.APPROVED, RegistrationStatus.REJECTED])
    def test_decided_registration_cannot_change(self, status):
        with pytest.raises(RegistrationAlreadyDecidedError):
            decide_registration(self._registration(status), True)
