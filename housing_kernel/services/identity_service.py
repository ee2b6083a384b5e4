"""
housing_kernel.services.identity_service -- Login and password change.

Passwords are compared and stored as given; hashing and strength policy
belong to the caller.  Unknown IDs and wrong passwords fail the same way
so a login attempt does not reveal which IDs exist.
"""

from __future__ import annotations

from housing_kernel.domain.entities import Person
from housing_kernel.domain.values import normalize_person_id
from housing_kernel.exceptions import InvalidCredentialsError, InvalidPasswordError
from housing_kernel.logging_config import get_logger
from housing_kernel.services.base import BaseService

logger = get_logger("services.identity")


class IdentityService(BaseService):
    """Authenticates persons and changes their passwords."""

    def login(self, person_id: str, password: str) -> Person:
        """
        Return the stored person for valid credentials.

        Raises:
            InvalidIdentityError: ``person_id`` is not letter + 7 digits + letter.
            InvalidCredentialsError: unknown ID or wrong password.
        """
        normalized = normalize_person_id(person_id)
        person = self.repos.find_person(normalized)
        if person is None or person.identity.password != password:
            logger.warning("login_failed", extra={"person_id": normalized})
            raise InvalidCredentialsError(normalized)
        logger.info(
            "login_succeeded",
            extra={"person_id": normalized, "role": person.role.value},
        )
        return person

    def change_password(self, person: Person, new_password: str) -> Person:
        stored = self.repos.person(person.person_id)
        if new_password is None or not new_password.strip():
            raise InvalidPasswordError(stored.person_id, "password must not be empty")
        if new_password == stored.identity.password:
            raise InvalidPasswordError(
                stored.person_id, "new password must differ from the current one"
            )
        updated = stored.with_password(new_password)
        self.repos.person_store(stored.role).put(updated)
        logger.info("password_changed", extra={"person_id": stored.person_id})
        return updated
