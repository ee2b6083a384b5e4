"""
Officer assignment policy (``housing_kernel.domain.assignment``).

Responsibility
--------------
Decide whether an officer may register for, and be approved onto, a
project.  An officer's duty periods are the application windows of the
projects they are approved for; no two may overlap.

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  ZERO I/O.  The officer
service loads the officer's assigned projects and current application and
passes them in.

Invariants enforced
-------------------
* An officer never handles a project they hold an active application for.
* Approved duty windows are pairwise disjoint (inclusive comparison, so
  windows sharing a single day conflict).
* A project never has more approved officers than ``officer_slots``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from housing_kernel.domain.entities import Application, Person, Project


@dataclass(frozen=True)
class AssignmentRules:
    """Upper bound on ``Project.officer_slots``."""

    max_officer_slots: int = 10

    def __post_init__(self) -> None:
        if self.max_officer_slots < 0:
            raise ValueError("max_officer_slots must be non-negative")


DEFAULT_ASSIGNMENT_RULES = AssignmentRules()


@dataclass(frozen=True)
class AssignmentCheck:
    """Outcome of an assignment check.  ``reason`` is set when refused."""

    allowed: bool
    reason: str | None = None
    conflicting_project_id: str | None = None

    @classmethod
    def ok(cls) -> AssignmentCheck:
        return cls(allowed=True)

    @classmethod
    def refused(cls, reason: str, conflicting_project_id: str | None = None) -> AssignmentCheck:
        return cls(allowed=False, reason=reason, conflicting_project_id=conflicting_project_id)


def find_window_conflict(project: Project, others: Iterable[Project]) -> Project | None:
    """First project in ``others`` (other than ``project``) whose window overlaps."""
    for other in others:
        if other.project_id == project.project_id:
            continue
        if other.window.overlaps(project.window):
            return other
    return None


def can_register(
    officer: Person,
    project: Project,
    active_application: Application | None,
    assigned_projects: Iterable[Project],
) -> AssignmentCheck:
    """Check the self-application and duty-overlap rules for ``officer``."""
    if active_application is not None and active_application.is_active:
        if active_application.project_id == project.project_id:
            return AssignmentCheck.refused(
                f"officer {officer.person_id} has an active application "
                f"for project {project.project_id}"
            )

    conflict = find_window_conflict(project, assigned_projects)
    if conflict is not None:
        return AssignmentCheck.refused(
            f"application window overlaps assigned project {conflict.project_id}",
            conflicting_project_id=conflict.project_id,
        )
    return AssignmentCheck.ok()


def has_free_slot(project: Project) -> bool:
    return len(project.officer_ids) < project.officer_slots


def validate_officer_slots(slots: int, rules: AssignmentRules) -> bool:
    return 0 <= slots <= rules.max_officer_slots
