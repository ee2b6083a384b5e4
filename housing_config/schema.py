"""
HousingConfig schema.

The human-authored configuration model.  YAML files are parsed into these
types by the loader, checked by the validator, and turned into kernel
inputs by the bridges.
"""

from __future__ import annotations

from dataclasses import dataclass

STORAGE_BACKENDS = frozenset({"flatfile", "sql", "memory"})


@dataclass(frozen=True)
class StorageConfig:
    """Where the tables live."""

    backend: str = "flatfile"
    directory: str | None = "data"  # flatfile only
    database_url: str | None = None  # sql only


@dataclass(frozen=True)
class EligibilityConfig:
    single_min_age: int = 35
    married_min_age: int = 21


@dataclass(frozen=True)
class AssignmentConfig:
    max_officer_slots: int = 10


@dataclass(frozen=True)
class HousingConfig:
    """A complete configuration set."""

    config_id: str
    version: int
    storage: StorageConfig
    eligibility: EligibilityConfig
    assignment: AssignmentConfig
    checksum: str = ""
