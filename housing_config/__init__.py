"""
housing_config -- single public entrypoint for housing configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files directly.

Architecture position:
    Configuration -- YAML-driven settings.  This package sits above
    ``housing_kernel``.  The kernel MUST NEVER import from
    ``housing_config``; ``housing_config.bridges`` translates a
    ``HousingConfig`` into kernel inputs.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` -- a required key is missing.
    - ``ValueError`` -- parse or validation failures.

Every successful ``get_active_config()`` call emits a
``HOUSING_CONFIG_TRACE`` log entry with the config id, version and
checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from housing_config.loader import load_config
from housing_config.schema import HousingConfig
from housing_config.validator import validate_configuration

_logger = logging.getLogger("housing_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | None = None) -> HousingConfig:
    """
    The ONLY public configuration entrypoint.

    Args:
        path: Override path to a configuration file.  Defaults to
            housing_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
    """
    config = load_config(path or _DEFAULT_CONFIG_PATH)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("config_warning", extra={"warning": warning})

    _logger.info(
        "HOUSING_CONFIG_TRACE",
        extra={
            "trace_type": "HOUSING_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "storage_backend": config.storage.backend,
        },
    )
    return config


__all__ = ["HousingConfig", "get_active_config"]
