"""Login and password change through the HousingSystem facade."""

from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.results import OutcomeStatus
from housing_kernel.domain.values import Role


class TestLogin:

    def test_valid_credentials(self, system, people):
        result = system.login("S1234567A", "password")
        assert result.is_success
        assert result.value.person_id == "S1234567A"
        assert result.value.role == Role.APPLICANT

    def test_id_is_case_insensitive(self, system, people):
        result = system.login("t7890123g", "password")
        assert result.value.role == Role.MANAGER

    def test_malformed_id(self, system, people):
        result = system.login("12345", "password")
        assert result.status == OutcomeStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_IDENTITY"

    def test_wrong_password_and_unknown_id_look_the_same(self, system, people, captured_logs):
        wrong = system.login("S1234567A", "nope")
        unknown = system.login("S0000000Z", "password")
        assert wrong.error_code == unknown.error_code == "INVALID_CREDENTIALS"
        assert wrong.status == unknown.status == OutcomeStatus.AUTHORIZATION_DENIED
        failures = [r for r in captured_logs() if r["message"] == "login_failed"]
        assert len(failures) == 2


class TestChangePassword:

    def test_change_persists(self, system, backing, people):
        result = system.change_password(people.officer, "s3cret")
        assert result.is_success
        assert system.login("T5678901E", "s3cret").is_success
        assert not system.login("T5678901E", "password").is_success

        reloaded = Repositories.open(backing)
        assert reloaded.officers.get("T5678901E").identity.password == "s3cret"

    def test_empty_password_refused(self, system, people):
        result = system.change_password(people.married, "  ")
        assert result.status == OutcomeStatus.VALIDATION_ERROR
        assert result.error_code == "INVALID_PASSWORD"

    def test_same_password_refused(self, system, people):
        assert system.change_password(people.married, "password").error_code \
            == "INVALID_PASSWORD"
