"""
Multi-store atomicity and persistence failure propagation.

A backing that fails on chosen tables drives the unit of work into its
revert path.  PersistenceError must reach the HousingSystem caller
unchanged, never as an OperationResult.
"""

import pytest

from housing_kernel.db.backing import InMemoryBacking
from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.values import ApplicationStatus, UnitType
from housing_kernel.exceptions import RollbackFailedError, TableWriteError
from housing_kernel.services.unit_of_work import UnitOfWork


class FailingBacking(InMemoryBacking):
    """In-memory backing whose writes to ``fail_tables`` raise.

    After the first failure, ``then_fail`` tables start failing too.
    """

    def __init__(self):
        super().__init__()
        self.fail_tables: set[str] = set()
        self.then_fail: set[str] = set()

    def write(self, table, header, lines):
        if table in self.fail_tables:
            self.fail_tables |= self.then_fail
            raise TableWriteError(table, "simulated disk failure")
        super().write(table, header, lines)


@pytest.fixture
def backing():
    return FailingBacking()


def _approved(system, people):
    application = system.submit_application(
        people.married, "P-ACACIA", UnitType.THREE_ROOM
    ).value
    return system.decide_application(people.manager, application.application_id, True).value


# =============================================================================
# UnitOfWork
# =============================================================================


class TestUnitOfWork:

    def test_commits_every_store(self, repos, people, project):
        renamed = people.married.with_password("new-secret")
        with UnitOfWork("test") as uow:
            uow.put(repos.applicants, renamed)
            uow.delete(repos.projects, project.project_id)
        assert uow.tables == ("ApplicantList", "ProjectList")
        assert repos.applicants.get(renamed.person_id).identity.password == "new-secret"
        assert project.project_id not in repos.projects

    def test_block_error_discards_staged_changes(self, repos, people):
        with pytest.raises(RuntimeError):
            with UnitOfWork("test") as uow:
                uow.put(repos.applicants, people.married.with_password("x"))
                raise RuntimeError("abort")
        assert repos.applicants.get(people.married.person_id).identity.password == "password"

    def test_commit_twice_refused(self):
        uow = UnitOfWork("test")
        uow.commit()
        with pytest.raises(RuntimeError):
            uow.commit()

    def test_failure_reverts_earlier_stores(self, repos, backing, people, project, captured_logs):
        backing.fail_tables = {"ProjectList"}
        with pytest.raises(TableWriteError):
            with UnitOfWork("test") as uow:
                uow.put(repos.applicants, people.married.with_password("x"))
                uow.delete(repos.projects, project.project_id)

        assert repos.applicants.get(people.married.person_id).identity.password == "password"
        assert project.project_id in repos.projects
        reloaded = Repositories.open(backing)
        assert reloaded.applicants.get(people.married.person_id).identity.password == "password"
        messages = [r["message"] for r in captured_logs()]
        assert "unit_of_work_failed" in messages
        assert "unit_of_work_reverted" in messages


# =============================================================================
# Booking atomicity
# =============================================================================


class TestBookingAtomicity:

    def test_receipt_failure_rolls_back_booking(self, system, repos, backing, people,
                                                assigned_officer):
        approved = _approved(system, people)
        before = repos.project("P-ACACIA").offer_for(UnitType.THREE_ROOM).remaining
        backing.fail_tables = {"ReceiptList"}

        with pytest.raises(TableWriteError):
            system.book_unit(assigned_officer, approved.application_id)

        assert repos.applications.get(approved.application_id).status == ApplicationStatus.SUCCESS
        assert repos.project("P-ACACIA").offer_for(UnitType.THREE_ROOM).remaining == before
        assert len(repos.receipts) == 0

        backing.fail_tables = set()
        reloaded = Repositories.open(backing)
        assert reloaded.applications.get(approved.application_id).status \
            == ApplicationStatus.SUCCESS
        assert reloaded.project("P-ACACIA").offer_for(UnitType.THREE_ROOM).remaining == before

    def test_failed_revert_raises_rollback_failed(self, system, backing, people,
                                                  assigned_officer):
        approved = _approved(system, people)
        backing.fail_tables = {"ReceiptList"}
        backing.then_fail = {"ProjectList"}

        with pytest.raises(RollbackFailedError) as exc_info:
            system.book_unit(assigned_officer, approved.application_id)

        assert exc_info.value.failed_table == "ReceiptList"
        assert exc_info.value.unreverted_tables == ("ProjectList",)

    def test_withdrawal_release_failure_keeps_booking(self, system, repos, backing, people,
                                                      assigned_officer):
        approved = _approved(system, people)
        booked = system.book_unit(assigned_officer, approved.application_id).value
        system.request_withdrawal(people.married, approved.application_id)
        remaining = repos.project("P-ACACIA").offer_for(UnitType.THREE_ROOM).remaining
        backing.fail_tables = {"ProjectList"}

        with pytest.raises(TableWriteError):
            system.decide_withdrawal(people.manager, approved.application_id, True)

        stored = repos.applications.get(booked.application.application_id)
        assert stored.status == ApplicationStatus.WITHDRAWAL_PENDING
        assert repos.project("P-ACACIA").offer_for(UnitType.THREE_ROOM).remaining == remaining
