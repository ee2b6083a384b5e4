"""
housing_kernel.services.project_service -- Project management by managers.

Responsibility:
    Create, edit, delete and show/hide housing projects.  Unit totals are
    edited through ``domain.inventory.with_total`` so remaining counts are
    clamped, never recomputed.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - A manager never handles two projects with overlapping windows.
    - Only the owning manager may edit, delete or toggle a project.
    - ``officer_slots`` stays within ``0..max_officer_slots`` and never
      drops below the number of already approved officers.
    - A project with non-terminal applications cannot be deleted.
    - Moving a window never makes an assigned officer's duties overlap.
    - A unit total never drops below the successful, booked or
      withdrawal-pending applications of that type, and an offer still
      held by one is never removed.

Failure modes:
    - InvalidProjectDetailsError / InvalidDateWindowError (Validation).
    - ManagerWindowOverlapError, ProjectHasActiveApplicationsError
    - UnitsCommittedError when a total edit would strand committed
      applications (StateConflict).
      (StateConflict).
    - OfficerAssignmentConflictError when a new window clashes with an
      assigned officer's other duty.
    - NotProjectManagerError, RoleNotPermittedError, ProjectNotFoundError.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import date
from decimal import Decimal

from housing_kernel.db.repositories import Repositories
from housing_kernel.domain import inventory
from housing_kernel.domain.assignment import (
    DEFAULT_ASSIGNMENT_RULES,
    AssignmentRules,
    find_window_conflict,
    validate_officer_slots,
)
from housing_kernel.domain.clock import Clock
from housing_kernel.domain.entities import Person, Project
from housing_kernel.domain.lifecycle import decide_registration, holds_booked_unit
from housing_kernel.domain.values import (
    ApplicationStatus,
    DateWindow,
    RegistrationStatus,
    Role,
    UnitType,
)
from housing_kernel.exceptions import (
    InvalidProjectDetailsError,
    ManagerWindowOverlapError,
    NotProjectManagerError,
    OfficerAssignmentConflictError,
    ProjectHasActiveApplicationsError,
    UnitsCommittedError,
)
from housing_kernel.logging_config import get_logger
from housing_kernel.services.base import BaseService, IdFactory
from housing_kernel.services.unit_of_work import UnitOfWork

logger = get_logger("services.project")


class ProjectService(BaseService):
    """Manager-side project catalogue maintenance."""

    def __init__(
        self,
        repos: Repositories,
        clock: Clock | None = None,
        id_factory: IdFactory | None = None,
        assignment_rules: AssignmentRules = DEFAULT_ASSIGNMENT_RULES,
    ):
        super().__init__(repos, clock, id_factory)
        self.assignment_rules = assignment_rules

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _owned_project(self, manager: Person, project_id: str, action: str) -> Project:
        self.require_role(manager, action, Role.MANAGER)
        project = self.repos.project(project_id)
        if project.manager_id != manager.person_id:
            raise NotProjectManagerError(manager.person_id, project_id)
        return project

    @staticmethod
    def _require_text(field_name: str, value: str) -> str:
        if value is None or not value.strip():
            raise InvalidProjectDetailsError(field_name, "must not be empty")
        return value.strip()

    def _check_slots(self, slots: int, assigned: int = 0) -> None:
        if not validate_officer_slots(slots, self.assignment_rules):
            raise InvalidProjectDetailsError(
                "officer_slots",
                f"must be between 0 and {self.assignment_rules.max_officer_slots}",
            )
        if slots < assigned:
            raise InvalidProjectDetailsError(
                "officer_slots", f"{assigned} officer(s) are already assigned"
            )

    def _check_manager_window(self, manager_id: str, window: DateWindow, exclude: str | None) -> None:
        managed = self.repos.projects.find(
            lambda p: p.manager_id == manager_id and p.project_id != exclude
        )
        for other in managed:
            if other.window.overlaps(window):
                raise ManagerWindowOverlapError(manager_id, other.project_id)

    def _check_officer_windows(self, project: Project) -> None:
        for officer_id in project.officer_ids:
            others = self.repos.projects.find(lambda p: p.has_officer(officer_id))
            conflict = find_window_conflict(project, others)
            if conflict is not None:
                raise OfficerAssignmentConflictError(
                    officer_id,
                    project.project_id,
                    f"new window overlaps assigned project {conflict.project_id}",
                )

    def _committed_units(self, project_id: str) -> tuple[dict[UnitType, int], dict[UnitType, int]]:
        """Per unit type: applications past PENDING, and those holding a booked unit."""
        committed: dict[UnitType, int] = {}
        held: dict[UnitType, int] = {}
        for application in self.repos.applications.find(
            lambda a: a.project_id == project_id and a.is_active
        ):
            if application.status == ApplicationStatus.PENDING:
                continue
            unit_type = application.unit_type
            committed[unit_type] = committed.get(unit_type, 0) + 1
            if holds_booked_unit(application):
                held[unit_type] = held.get(unit_type, 0) + 1
        return committed, held

    @staticmethod
    def _apply_units(
        project: Project,
        units: Mapping[UnitType, int],
        prices: Mapping[UnitType, Decimal],
        held: Mapping[UnitType, int] | None = None,
    ) -> Project:
        for unit_type in UnitType:
            if unit_type not in units and unit_type not in prices:
                continue
            total = units.get(unit_type)
            if total is None:
                offer = project.offer_for(unit_type)
                if offer is None:
                    continue
                total = offer.total
            if total < 0:
                raise InvalidProjectDetailsError(f"units[{unit_type.value}]", "must be non-negative")
            price = prices.get(unit_type)
            if price is not None and price < 0:
                raise InvalidProjectDetailsError(f"prices[{unit_type.value}]", "must be non-negative")
            project = inventory.with_total(
                project, unit_type, total, price, held=(held or {}).get(unit_type, 0)
            )
        return project

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_project(
        self,
        manager: Person,
        *,
        name: str,
        neighbourhood: str,
        open_date: date,
        close_date: date,
        units: Mapping[UnitType, int],
        prices: Mapping[UnitType, Decimal] | None = None,
        officer_slots: int = 0,
        visible: bool = False,
    ) -> Project:
        self.require_role(manager, "create projects", Role.MANAGER)
        window = DateWindow(open_date, close_date)
        self._check_slots(officer_slots)
        self._check_manager_window(manager.person_id, window, exclude=None)

        project = Project(
            project_id=self.new_id(),
            name=self._require_text("name", name),
            neighbourhood=self._require_text("neighbourhood", neighbourhood),
            window=window,
            manager_id=manager.person_id,
            officer_slots=officer_slots,
            visible=visible,
        )
        project = self._apply_units(project, units, prices or {})
        self.repos.projects.put(project)
        logger.info(
            "project_created",
            extra={
                "project_id": project.project_id,
                "manager_id": manager.person_id,
                "offers": [o.unit_type.value for o in project.offers],
            },
        )
        return project

    def edit_project(
        self,
        manager: Person,
        project_id: str,
        *,
        name: str | None = None,
        neighbourhood: str | None = None,
        open_date: date | None = None,
        close_date: date | None = None,
        units: Mapping[UnitType, int] | None = None,
        prices: Mapping[UnitType, Decimal] | None = None,
        officer_slots: int | None = None,
    ) -> Project:
        """
        Change any subset of a project's details.

        A unit total below the remaining count clamps remaining; a total of
        zero removes the unit type.  Neither may strand an application that
        is already successful, booked or awaiting a withdrawal decision.
        """
        project = self._owned_project(manager, project_id, "edit projects")
        edited = project
        if name is not None:
            edited = replace(edited, name=self._require_text("name", name))
        if neighbourhood is not None:
            edited = replace(
                edited, neighbourhood=self._require_text("neighbourhood", neighbourhood)
            )
        if open_date is not None or close_date is not None:
            window = DateWindow(
                open_date or project.window.open,
                close_date or project.window.close,
            )
            self._check_manager_window(manager.person_id, window, exclude=project_id)
            edited = replace(edited, window=window)
            self._check_officer_windows(edited)
        if officer_slots is not None:
            self._check_slots(officer_slots, assigned=len(project.officer_ids))
            edited = replace(edited, officer_slots=officer_slots)
        if units or prices:
            committed, held = self._committed_units(project_id)
            for unit_type, total in (units or {}).items():
                if 0 <= total < committed.get(unit_type, 0):
                    raise UnitsCommittedError(
                        project_id, unit_type.value, committed[unit_type], total
                    )
            edited = self._apply_units(edited, units or {}, prices or {}, held)

        if edited == project:
            logger.info("project_edit_noop", extra={"project_id": project_id})
            return project

        self.repos.projects.put(edited)
        logger.info("project_edited", extra={"project_id": project_id})
        return edited

    def delete_project(self, manager: Person, project_id: str) -> None:
        """Delete a project with no active applications, unlinking its officers."""
        project = self._owned_project(manager, project_id, "delete projects")
        active = self.repos.applications.find(
            lambda a: a.project_id == project_id and a.is_active
        )
        if active:
            raise ProjectHasActiveApplicationsError(project_id, len(active))

        pending = self.repos.registrations.find(
            lambda r: r.project_id == project_id and r.status == RegistrationStatus.PENDING
        )
        with UnitOfWork("delete_project") as uow:
            uow.delete(self.repos.projects, project_id)
            for registration in pending:
                uow.put(self.repos.registrations, decide_registration(registration, False))
            for officer_id in project.officer_ids:
                officer = self.repos.officers.get(officer_id)
                if officer is None:
                    continue
                remaining = tuple(
                    pid for pid in officer.officer.assigned_project_ids if pid != project_id
                )
                uow.put(self.repos.officers, officer.with_assignments(remaining))

        logger.info(
            "project_deleted",
            extra={"project_id": project_id, "unlinked_officers": len(project.officer_ids)},
        )

    def toggle_visibility(
        self,
        manager: Person,
        project_id: str,
        visible: bool | None = None,
    ) -> Project:
        """Set visibility, or flip it when ``visible`` is None."""
        project = self._owned_project(manager, project_id, "change project visibility")
        target = (not project.visible) if visible is None else visible
        if target == project.visible:
            return project
        updated = replace(project, visible=target)
        self.repos.projects.put(updated)
        logger.info(
            "project_visibility_changed",
            extra={"project_id": project_id, "visible": target},
        )
        return updated
