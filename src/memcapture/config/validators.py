"""
Configuration validation utilities.

This module turns the raw ``[monitor]`` table of config.toml into a
validated MonitorConfig.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import MonitorConfig
from ..models.platform import Platform
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_OUTPUT_DIR = "MemCaptureReport"
DEFAULT_DURATION_SECONDS = 30
DEFAULT_INTERVAL_SECONDS = 3.0
DEFAULT_PLATFORM = Platform.AMLOGIC.value


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from raw configuration data.

    Args:
        monitor_data: Raw monitor configuration from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    general_settings = monitor_data.get("general", {})
    collection_settings = monitor_data.get("collection", {})
    storage_settings = monitor_data.get("storage", {})

    output_dir = general_settings.get("output_dir", DEFAULT_OUTPUT_DIR)
    if not isinstance(output_dir, str) or not output_dir.strip():
        raise ValidationError(
            "monitor.general.output_dir must be a non-empty string",
            field_name="monitor.general.output_dir",
            value=output_dir,
        )

    log_level = validate_enum_choice(
        general_settings.get("log_level", "INFO"),
        choices=LOG_LEVELS,
        field_name="monitor.general.log_level",
        case_sensitive=False,
    )

    duration_seconds = validate_positive_integer(
        collection_settings.get("duration_seconds", DEFAULT_DURATION_SECONDS),
        min_value=1,
        max_value=7 * 24 * 3600,
        field_name="monitor.collection.duration_seconds",
    )

    interval_seconds = validate_positive_float(
        collection_settings.get("interval_seconds", DEFAULT_INTERVAL_SECONDS),
        min_value=0.1,
        max_value=3600.0,
        field_name="monitor.collection.interval_seconds",
    )

    platform = validate_enum_choice(
        collection_settings.get("platform", DEFAULT_PLATFORM),
        choices=[p.value for p in Platform],
        field_name="monitor.collection.platform",
        case_sensitive=False,
    )

    stop_timeout = validate_positive_float(
        collection_settings.get("stop_timeout", 30.0),
        min_value=0.1,
        max_value=600.0,
        field_name="monitor.collection.stop_timeout",
    )

    try:
        storage = StorageConfig.from_dict(storage_settings)
    except ValueError as e:
        raise ValidationError(
            f"Invalid [monitor.storage] configuration: {e}",
            field_name="monitor.storage",
            value=storage_settings,
        )

    logger.debug(
        f"Validated monitor config: platform={platform}, duration={duration_seconds}s, "
        f"interval={interval_seconds}s, storage={storage.format}"
    )

    return MonitorConfig(
        output_dir=Path(output_dir),
        log_level=log_level,
        duration_seconds=duration_seconds,
        interval_seconds=interval_seconds,
        platform=platform,
        stop_timeout=stop_timeout,
        storage=storage,
    )
