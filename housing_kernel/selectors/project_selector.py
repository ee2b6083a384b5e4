"""
Module: housing_kernel.selectors.project_selector
Responsibility: Project views for each role -- what an applicant may apply
    for today, what an officer handles, what a manager owns -- plus the
    catalogue filters (neighbourhood, unit type, name, manager).
Architecture position: Kernel > Selectors.

Invariants enforced:
    - The applicant view lists only visible projects open on the injected
      clock's date for which the applicant is unit-eligible for some offer.
      A person with an active application still sees the list (they may
      enquire) but ``can_apply`` is False on every entry.
    - A person without a date of birth or marital status sees no projects;
      the gap is logged as ``available_projects_profile_incomplete``.
"""

from __future__ import annotations

from dataclasses import dataclass

from housing_kernel.db.repositories import Repositories
from housing_kernel.domain.clock import Clock, SystemClock
from housing_kernel.domain.eligibility import DEFAULT_RULES, EligibilityRules, eligible_unit_types
from housing_kernel.domain.entities import OfficerRegistration, Person, Project
from housing_kernel.domain.values import UnitType
from housing_kernel.logging_config import get_logger
from housing_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.project")


@dataclass(frozen=True)
class ProjectFilter:
    """Catalogue filter.  ``None`` fields do not constrain."""

    neighbourhood: str | None = None
    unit_type: UnitType | None = None
    name_contains: str | None = None
    manager_id: str | None = None

    def matches(self, project: Project) -> bool:
        if self.neighbourhood and project.neighbourhood.lower() != self.neighbourhood.lower():
            return False
        if self.unit_type is not None and project.offer_for(self.unit_type) is None:
            return False
        if self.name_contains and self.name_contains.lower() not in project.name.lower():
            return False
        if self.manager_id and project.manager_id != self.manager_id:
            return False
        return True


@dataclass(frozen=True)
class AvailableProject:
    project: Project
    eligible_unit_types: tuple[UnitType, ...]
    can_apply: bool


class ProjectSelector(BaseSelector):
    """Read-only project queries."""

    def __init__(
        self,
        repos: Repositories,
        clock: Clock | None = None,
        rules: EligibilityRules = DEFAULT_RULES,
    ):
        super().__init__(repos)
        self.clock = clock or SystemClock()
        self.rules = rules

    def all_projects(self, project_filter: ProjectFilter | None = None) -> list[Project]:
        projects = self.repos.projects.list()
        if project_filter is not None:
            projects = [p for p in projects if project_filter.matches(p)]
        return sorted(projects, key=lambda p: p.name.lower())

    def available_to(
        self,
        person: Person,
        project_filter: ProjectFilter | None = None,
    ) -> list[AvailableProject]:
        """Visible, open projects with at least one unit type ``person`` may take."""
        today = self.clock.today()
        identity = person.identity
        if identity.date_of_birth is None or identity.marital_status is None:
            logger.warning(
                "available_projects_profile_incomplete",
                extra={"person_id": person.person_id},
            )
            return []
        has_active = self.repos.active_application(person.person_id) is not None
        result = []
        for project in self.all_projects(project_filter):
            if not project.is_open_on(today):
                continue
            if person.officer is not None and project.has_officer(person.person_id):
                continue
            types = eligible_unit_types(person, project, today, self.rules)
            if not types:
                continue
            result.append(AvailableProject(project, types, can_apply=not has_active))
        return result

    def managed_by(self, manager_id: str) -> list[Project]:
        return self.all_projects(ProjectFilter(manager_id=manager_id))

    def handled_by(self, officer_id: str) -> list[Project]:
        return [p for p in self.all_projects() if p.has_officer(officer_id)]

    def registrations_of(self, officer_id: str) -> list[OfficerRegistration]:
        """An officer's registrations, each with its current status."""
        return self.repos.registrations.find(lambda r: r.officer_id == officer_id)

    def registrations_for(self, project_id: str) -> list[OfficerRegistration]:
        return self.repos.registrations.find(lambda r: r.project_id == project_id)
