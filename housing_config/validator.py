"""
Configuration Validator (``housing_config.validator``).

Checks a parsed ``HousingConfig`` before anything is built from it.  A
configuration with errors MUST NOT be bridged into the kernel.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from housing_config.schema import STORAGE_BACKENDS, HousingConfig

# Officer slots per project may not be configured above this.
SLOT_CAP_LIMIT = 10


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block use but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: HousingConfig) -> ConfigValidationResult:
    result = ConfigValidationResult()
    _validate_storage(config, result)
    _validate_eligibility(config, result)
    _validate_assignment(config, result)
    return result


def _validate_storage(config: HousingConfig, result: ConfigValidationResult) -> None:
    storage = config.storage
    if storage.backend not in STORAGE_BACKENDS:
        result.add_error(
            f"Unknown storage backend {storage.backend!r}; "
            f"expected one of {sorted(STORAGE_BACKENDS)}"
        )
        return
    if storage.backend == "flatfile" and not storage.directory:
        result.add_error("flatfile storage requires a directory")
    if storage.backend == "sql" and not storage.database_url:
        result.add_error("sql storage requires a database_url")
    if storage.backend == "memory":
        result.add_warning("memory storage keeps nothing across runs")


def _validate_eligibility(config: HousingConfig, result: ConfigValidationResult) -> None:
    rules = config.eligibility
    if rules.single_min_age <= 0:
        result.add_error(f"single_min_age must be positive, got {rules.single_min_age}")
    if rules.married_min_age <= 0:
        result.add_error(f"married_min_age must be positive, got {rules.married_min_age}")
    if rules.married_min_age > rules.single_min_age:
        result.add_warning(
            "married_min_age is above single_min_age; married applicants "
            "will qualify later than single ones"
        )


def _validate_assignment(config: HousingConfig, result: ConfigValidationResult) -> None:
    slots = config.assignment.max_officer_slots
    if not 0 <= slots <= SLOT_CAP_LIMIT:
        result.add_error(
            f"max_officer_slots must be within 0..{SLOT_CAP_LIMIT}, got {slots}"
        )
