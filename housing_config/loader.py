"""
Configuration Loader (``housing_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses
of ``housing_config.schema``.  Runtime callers go through
``housing_config.get_active_config()`` instead.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Non-integer thresholds  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from housing_config.schema import (
    AssignmentConfig,
    EligibilityConfig,
    HousingConfig,
    StorageConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields an empty dict."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer, got {value!r}")
    return value


def parse_storage(data: dict[str, Any]) -> StorageConfig:
    return StorageConfig(
        backend=str(data.get("backend", "flatfile")),
        directory=data.get("directory", "data"),
        database_url=data.get("database_url"),
    )


def parse_eligibility(data: dict[str, Any]) -> EligibilityConfig:
    return EligibilityConfig(
        single_min_age=_as_int(data.get("single_min_age", 35), "single_min_age"),
        married_min_age=_as_int(data.get("married_min_age", 21), "married_min_age"),
    )


def parse_assignment(data: dict[str, Any]) -> AssignmentConfig:
    return AssignmentConfig(
        max_officer_slots=_as_int(data.get("max_officer_slots", 10), "max_officer_slots"),
    )


def parse_config(data: dict[str, Any]) -> HousingConfig:
    """
    Parse a ``HousingConfig`` from a dict.

    Preconditions:
        - ``data`` contains ``config_id``.  Every section is optional and
          falls back to the schema defaults.
    Raises:
        KeyError: if ``config_id`` is missing.
        ValueError: if a threshold is not an integer.
    """
    return HousingConfig(
        config_id=data["config_id"],
        version=_as_int(data.get("version", 1), "version"),
        storage=parse_storage(data.get("storage") or {}),
        eligibility=parse_eligibility(data.get("eligibility") or {}),
        assignment=parse_assignment(data.get("assignment") or {}),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> HousingConfig:
    return parse_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
