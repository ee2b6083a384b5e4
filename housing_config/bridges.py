"""
Config -> Kernel Bridges.

Functions that turn a ``HousingConfig`` into kernel inputs.  They live in
housing_config (the producer) because the kernel must NEVER import
housing_config.

Usage:
    from housing_config import get_active_config
    from housing_config.bridges import build_system

    system = build_system(get_active_config())
"""

from __future__ import annotations

from pathlib import Path

from housing_config.schema import HousingConfig
from housing_kernel.db.backing import Backing, FlatFileBacking, InMemoryBacking
from housing_kernel.db.engine import create_tables, init_engine_from_url
from housing_kernel.db.sql_backing import SqlBacking
from housing_kernel.domain.assignment import AssignmentRules
from housing_kernel.domain.clock import Clock
from housing_kernel.domain.eligibility import EligibilityRules
from housing_kernel.services.base import IdFactory
from housing_kernel.services.system import HousingSystem


def build_backing(config: HousingConfig, base_dir: Path | None = None) -> Backing:
    """
    Build the configured backing.

    A relative flatfile directory is resolved against ``base_dir`` when
    given, otherwise against the working directory.  The default set lives
    inside the package, so its location is never used as a base.  The sql backend initializes the engine and creates the schema.
    """
    storage = config.storage
    if storage.backend == "memory":
        return InMemoryBacking()
    if storage.backend == "sql":
        init_engine_from_url(storage.database_url)
        create_tables()
        return SqlBacking()
    if storage.backend == "flatfile":
        directory = Path(storage.directory)
        if base_dir is not None and not directory.is_absolute():
            directory = base_dir / directory
        directory.mkdir(parents=True, exist_ok=True)
        return FlatFileBacking(directory)
    raise ValueError(f"Unknown storage backend {storage.backend!r}")


def build_eligibility_rules(config: HousingConfig) -> EligibilityRules:
    return EligibilityRules(
        single_min_age=config.eligibility.single_min_age,
        married_min_age=config.eligibility.married_min_age,
    )


def build_assignment_rules(config: HousingConfig) -> AssignmentRules:
    return AssignmentRules(max_officer_slots=config.assignment.max_officer_slots)


def build_system(
    config: HousingConfig,
    *,
    backing: Backing | None = None,
    clock: Clock | None = None,
    id_factory: IdFactory | None = None,
    base_dir: Path | None = None,
) -> HousingSystem:
    """A ``HousingSystem`` over the configured (or given) backing."""
    return HousingSystem.from_backing(
        backing if backing is not None else build_backing(config, base_dir),
        clock=clock,
        eligibility_rules=build_eligibility_rules(config),
        assignment_rules=build_assignment_rules(config),
        id_factory=id_factory,
    )
