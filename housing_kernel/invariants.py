"""
Kernel Invariants Contract.

These invariants are structural law. No configuration file may switch
them off.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across ApplicationService, the domain
inventory functions, OfficerService and UnitOfWork.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Each value names one structural guarantee that the kernel provides
    unconditionally. Configuration may tune the eligibility ages and the
    officer slot cap, but never *whether* these rules apply.
    """

    SINGLE_ACTIVE_APPLICATION = "single_active_application"
    """An applicant holds at most one non-terminal application. Enforced
    by ApplicationService.submit_application."""

    INVENTORY_BOUNDS = "inventory_bounds"
    """0 <= remaining <= total for every unit offer. Enforced by
    UnitOffer construction and domain.inventory.reserve/release."""

    INVENTORY_SINGLE_WRITER = "inventory_single_writer"
    """Only reserve() and release() change remaining counts."""

    TERMINAL_FINALITY = "terminal_finality"
    """REJECTED and WITHDRAWAL_APPROVED have no outgoing transitions.
    Enforced by domain.lifecycle.APPLICATION_TRANSITIONS."""

    WITHDRAWAL_RESTORES_PRIOR = "withdrawal_restores_prior"
    """A rejected withdrawal returns the application to exactly the
    status it held when the withdrawal was requested."""

    DUTY_WINDOW_EXCLUSIVITY = "duty_window_exclusivity"
    """An officer is never approved for two projects whose application
    windows overlap (inclusive). Enforced by domain.assignment."""

    ATOMIC_MULTI_EFFECT = "atomic_multi_effect"
    """Booking and withdrawal restitution either fully apply or fully
    roll back. Enforced by services.unit_of_work.UnitOfWork."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "housing_config",
)
