"""
Operation outcomes returned across the controller boundary.

Every ``HousingSystem`` operation returns an ``OperationResult``: either a
success carrying the produced value, or a typed negative outcome carrying
the error code and message of the refusal.  Persistence failures are not
outcomes; they propagate as ``PersistenceError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from housing_kernel.exceptions import (
    AuthorizationDeniedError,
    EligibilityDeniedError,
    HousingKernelError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    """Category of an operation outcome."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    ELIGIBILITY_DENIED = "eligibility_denied"
    NOT_FOUND = "not_found"
    AUTHORIZATION_DENIED = "authorization_denied"
    STATE_CONFLICT = "state_conflict"


# Most specific category first.
_ERROR_CATEGORIES: tuple[tuple[type[HousingKernelError], OutcomeStatus], ...] = (
    (ValidationError, OutcomeStatus.VALIDATION_ERROR),
    (EligibilityDeniedError, OutcomeStatus.ELIGIBILITY_DENIED),
    (NotFoundError, OutcomeStatus.NOT_FOUND),
    (AuthorizationDeniedError, OutcomeStatus.AUTHORIZATION_DENIED),
    (StateConflictError, OutcomeStatus.STATE_CONFLICT),
)

RECOVERABLE_ERRORS: tuple[type[HousingKernelError], ...] = tuple(
    cls for cls, _ in _ERROR_CATEGORIES
)


def outcome_for(error: HousingKernelError) -> OutcomeStatus:
    for cls, status in _ERROR_CATEGORIES:
        if isinstance(error, cls):
            return status
    raise TypeError(f"{type(error).__name__} is not a recoverable outcome")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Result of a controller-facing operation."""

    status: OutcomeStatus
    value: T | None = None
    error_code: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @classmethod
    def success(cls, value: T | None = None) -> OperationResult[T]:
        return cls(status=OutcomeStatus.SUCCESS, value=value)

    @classmethod
    def from_error(cls, error: HousingKernelError) -> OperationResult[T]:
        """Typed negative outcome for a recoverable kernel error."""
        details = {
            k: v for k, v in vars(error).items()
            if not k.startswith("_")
        }
        return cls(
            status=outcome_for(error),
            error_code=error.code,
            message=str(error),
            details=details or None,
        )
