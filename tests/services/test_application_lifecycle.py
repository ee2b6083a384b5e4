"""
Application lifecycle through the HousingSystem facade.

Covers:
- submit_application(): eligibility table, open window, visibility,
  one active application, officer self-application
- decide_application(): only the owning manager
- book_unit(): assigned officer, inventory reservation, receipt
- request_withdrawal() / decide_withdrawal(): prior status restore and
  unit restitution
"""

from datetime import date
from decimal import Decimal

from conftest import make_identity, make_project
from housing_kernel.domain.entities import OfficerRegistration, Person, UnitOffer
from housing_kernel.domain.results import OutcomeStatus
from housing_kernel.domain.values import (
    ApplicationStatus,
    MaritalStatus,
    RegistrationStatus,
    UnitType,
)

TWO = UnitType.TWO_ROOM
THREE = UnitType.THREE_ROOM
PROJECT = "P-ACACIA"


def _submit(system, person, unit_type=THREE, project_id=PROJECT):
    result = system.submit_application(person, project_id, unit_type)
    assert result.is_success, result.message
    return result.value


def _approved(system, people, person=None, unit_type=THREE):
    application = _submit(system, person or people.married, unit_type)
    result = system.decide_application(people.manager, application.application_id, True)
    assert result.is_success, result.message
    return result.value


def _remaining(repos, unit_type=THREE, project_id=PROJECT):
    return repos.project(project_id).offer_for(unit_type).remaining


# =============================================================================
# Submission
# =============================================================================


class TestSubmitApplication:

    def test_married_applicant_submits(self, system, repos, people, project, captured_logs):
        application = _submit(system, people.married)

        assert application.status == ApplicationStatus.PENDING
        assert repos.applications.get(application.application_id) == application
        stored = repos.applicants.get(people.married.person_id)
        assert stored.applicant.application == application
        assert any(
            r["message"] == "application_submitted"
            and r["application_id"] == application.application_id
            for r in captured_logs()
        )

    def test_single_applicant_gets_smallest_type(self, system, people, project):
        assert _submit(system, people.single, TWO).unit_type == TWO

    def test_single_applicant_refused_larger_type(self, system, repos, people, project):
        result = system.submit_application(people.single, PROJECT, THREE)
        assert result.status == OutcomeStatus.ELIGIBILITY_DENIED
        assert result.error_code == "UNIT_TYPE_INELIGIBLE"
        assert len(repos.applications) == 0

    def test_single_over_35_refused_by_large_only_project(self, system, repos, people):
        repos.projects.put(make_project(
            project_id="P-LARGE",
            offers=(UnitOffer(THREE, 5, 5, Decimal("500000")),),
        ))

        result = system.submit_application(people.single, "P-LARGE", THREE)

        assert result.status == OutcomeStatus.ELIGIBILITY_DENIED
        assert len(repos.applications) == 0
        assert repos.applicants.get(people.single.person_id).applicant.application is None

    def test_young_single_and_young_married_refused(self, system, people, project):
        assert system.submit_application(people.young_single, PROJECT, TWO).status \
            == OutcomeStatus.ELIGIBILITY_DENIED
        assert system.submit_application(people.young_married, PROJECT, TWO).status \
            == OutcomeStatus.ELIGIBILITY_DENIED

    def test_second_active_application_refused(self, system, repos, people, project):
        _submit(system, people.married)
        result = system.submit_application(people.married, PROJECT, TWO)
        assert result.status == OutcomeStatus.ELIGIBILITY_DENIED
        assert result.error_code == "ACTIVE_APPLICATION_EXISTS"
        assert len(repos.applications) == 1

    def test_terminal_application_does_not_block(self, system, repos, people, project):
        first = _submit(system, people.married)
        system.decide_application(people.manager, first.application_id, False)
        second = _submit(system, people.married, TWO)
        assert second.application_id != first.application_id
        assert repos.active_application(people.married.person_id) == second

    def test_hidden_project_refused(self, system, repos, people):
        repos.projects.put(make_project(visible=False))
        result = system.submit_application(people.married, PROJECT, THREE)
        assert result.error_code == "PROJECT_CLOSED"

    def test_closed_window_refused(self, system, clock, people, project):
        clock.set_date(date(2025, 8, 1))
        result = system.submit_application(people.married, PROJECT, THREE)
        assert result.status == OutcomeStatus.ELIGIBILITY_DENIED
        assert result.error_code == "PROJECT_CLOSED"

    def test_window_is_inclusive(self, system, clock, people, project):
        clock.set_date(date(2025, 7, 31))
        assert system.submit_application(people.married, PROJECT, THREE).is_success

    def test_type_not_offered(self, system, repos, people):
        repos.projects.put(make_project(offers=(UnitOffer(TWO, 1, 1),)))
        result = system.submit_application(people.married, PROJECT, THREE)
        assert result.status == OutcomeStatus.VALIDATION_ERROR

    def test_manager_cannot_apply(self, system, people, project):
        result = system.submit_application(people.manager, PROJECT, THREE)
        assert result.status == OutcomeStatus.AUTHORIZATION_DENIED

    def test_unknown_project(self, system, people, project):
        result = system.submit_application(people.married, "P-NOPE", THREE)
        assert result.status == OutcomeStatus.NOT_FOUND

    def test_officer_may_apply_elsewhere(self, system, people, project):
        assert _submit(system, people.officer).applicant_id == people.officer.person_id

    def test_officer_cannot_apply_to_handled_project(self, system, people, assigned_officer):
        result = system.submit_application(assigned_officer, PROJECT, THREE)
        assert result.error_code == "OFFICER_ASSIGNMENT_CONFLICT"

    def test_officer_cannot_apply_while_registration_pending(self, system, repos, people, project):
        repos.registrations.put(
            OfficerRegistration("R-1", people.officer.person_id, PROJECT, RegistrationStatus.PENDING)
        )
        result = system.submit_application(people.officer, PROJECT, THREE)
        assert result.error_code == "OFFICER_ASSIGNMENT_CONFLICT"


# =============================================================================
# Manager decision
# =============================================================================


class TestDecideApplication:

    def test_owning_manager_approves(self, system, repos, people, project):
        approved = _approved(system, people)
        assert approved.status == ApplicationStatus.SUCCESS
        assert repos.applicants.get(people.married.person_id).applicant.application.status \
            == ApplicationStatus.SUCCESS

    def test_other_manager_refused(self, system, repos, people, project):
        application = _submit(system, people.married)
        result = system.decide_application(people.manager2, application.application_id, True)
        assert result.status == OutcomeStatus.AUTHORIZATION_DENIED
        assert repos.applications.get(application.application_id).status == ApplicationStatus.PENDING

    def test_officer_cannot_decide(self, system, people, assigned_officer):
        application = _submit(system, people.married)
        result = system.decide_application(assigned_officer, application.application_id, True)
        assert result.error_code == "ROLE_NOT_PERMITTED"

    def test_rejection_is_final(self, system, people, project):
        application = _submit(system, people.married)
        system.decide_application(people.manager, application.application_id, False)
        result = system.decide_application(people.manager, application.application_id, True)
        assert result.status == OutcomeStatus.STATE_CONFLICT

    def test_unknown_application(self, system, people, project):
        result = system.decide_application(people.manager, "A-NOPE", True)
        assert result.status == OutcomeStatus.NOT_FOUND


# =============================================================================
# Booking
# =============================================================================


class TestBookUnit:

    def test_assigned_officer_books(self, system, repos, clock, people, assigned_officer):
        approved = _approved(system, people)
        before = _remaining(repos)

        result = system.book_unit(assigned_officer, approved.application_id)

        assert result.is_success, result.message
        outcome = result.value
        assert outcome.application.status == ApplicationStatus.BOOKED
        assert _remaining(repos) == before - 1
        assert outcome.receipt.price == Decimal("450000")
        assert outcome.receipt.issued_on == clock.today()
        assert repos.receipts.get(outcome.receipt.receipt_id) == outcome.receipt

    def test_unassigned_officer_refused(self, system, repos, people, project):
        approved = _approved(system, people)
        result = system.book_unit(people.officer2, approved.application_id)
        assert result.error_code == "OFFICER_NOT_ASSIGNED"
        assert _remaining(repos) == 3

    def test_pending_application_cannot_be_booked(self, system, repos, people, assigned_officer):
        application = _submit(system, people.married)
        result = system.book_unit(assigned_officer, application.application_id)
        assert result.status == OutcomeStatus.STATE_CONFLICT
        assert _remaining(repos) == 3

    def test_mismatched_type_refused(self, system, people, assigned_officer):
        approved = _approved(system, people)
        result = system.book_unit(assigned_officer, approved.application_id, TWO)
        assert result.status == OutcomeStatus.STATE_CONFLICT

    def test_exhausted_inventory(self, system, repos, people, assigned_officer):
        approved = _approved(system, people)
        repos.projects.put(make_project(
            officer_ids=(assigned_officer.person_id,),
            offers=(UnitOffer(TWO, 2, 2), UnitOffer(THREE, 1, 0)),
        ))

        result = system.book_unit(assigned_officer, approved.application_id)

        assert result.error_code == "INVENTORY_EXHAUSTED"
        assert repos.applications.get(approved.application_id).status == ApplicationStatus.SUCCESS
        assert len(repos.receipts) == 0

    def test_last_unit_goes_to_first_booking(self, system, repos, people, assigned_officer):
        repos.projects.put(make_project(
            officer_ids=(assigned_officer.person_id,),
            offers=(UnitOffer(TWO, 2, 2), UnitOffer(THREE, 1, 1)),
        ))
        neighbour = Person.applicant_of(make_identity(
            "S9876543K", "Ann", date(1980, 1, 1), MaritalStatus.MARRIED))
        repos.applicants.put(neighbour)
        first = _approved(system, people, people.married)
        second = _approved(system, people, neighbour)

        assert system.book_unit(assigned_officer, first.application_id).is_success
        result = system.book_unit(assigned_officer, second.application_id)

        assert result.error_code == "INVENTORY_EXHAUSTED"
        assert _remaining(repos) == 0


# =============================================================================
# Withdrawal
# =============================================================================


class TestWithdrawal:

    def _booked(self, system, people, officer):
        approved = _approved(system, people)
        return system.book_unit(officer, approved.application_id).value.application

    def test_rejected_withdrawal_restores_booked(self, system, repos, people, assigned_officer):
        booked = self._booked(system, people, assigned_officer)
        remaining = _remaining(repos)

        requested = system.request_withdrawal(people.married, booked.application_id).value
        assert requested.status == ApplicationStatus.WITHDRAWAL_PENDING
        assert requested.prior_status == ApplicationStatus.BOOKED

        outcome = system.decide_withdrawal(people.manager, booked.application_id, False).value
        assert outcome.application.status == ApplicationStatus.BOOKED
        assert not outcome.released
        assert _remaining(repos) == remaining

    def test_approved_withdrawal_releases_booked_unit(self, system, repos, people, assigned_officer):
        before_booking = _remaining(repos)
        booked = self._booked(system, people, assigned_officer)
        assert _remaining(repos) == before_booking - 1

        system.request_withdrawal(people.married, booked.application_id)
        outcome = system.decide_withdrawal(people.manager, booked.application_id, True).value

        assert outcome.released
        assert outcome.application.status == ApplicationStatus.WITHDRAWAL_APPROVED
        assert _remaining(repos) == before_booking

    def test_approved_withdrawal_of_unbooked_keeps_inventory(self, system, repos, people, project):
        application = _submit(system, people.married)
        system.request_withdrawal(people.married, application.application_id)
        outcome = system.decide_withdrawal(people.manager, application.application_id, True).value
        assert not outcome.released
        assert _remaining(repos) == 3

    def test_rejected_withdrawal_restores_pending(self, system, people, project):
        application = _submit(system, people.married)
        system.request_withdrawal(people.married, application.application_id)
        outcome = system.decide_withdrawal(people.manager, application.application_id, False).value
        assert outcome.application.status == ApplicationStatus.PENDING

    def test_only_owner_may_request(self, system, people, project):
        application = _submit(system, people.married)
        result = system.request_withdrawal(people.single, application.application_id)
        assert result.error_code == "NOT_APPLICATION_OWNER"

    def test_withdrawn_applicant_may_reapply(self, system, people, project):
        application = _submit(system, people.married)
        system.request_withdrawal(people.married, application.application_id)
        system.decide_withdrawal(people.manager, application.application_id, True)
        assert system.submit_application(people.married, PROJECT, TWO).is_success

    def test_withdrawal_decision_needs_pending_withdrawal(self, system, people, project):
        application = _submit(system, people.married)
        result = system.decide_withdrawal(people.manager, application.application_id, True)
        assert result.status == OutcomeStatus.STATE_CONFLICT
