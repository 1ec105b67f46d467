"""
Configuration data models.

This module contains the configuration structures loaded from
`conf/config.toml` and overridden from the command line.
"""

from dataclasses import dataclass, field
from pathlib import Path

from ..config.storage_config import StorageConfig


@dataclass
class MonitorConfig:
    """
    Configuration for a capture run, loaded from `config.toml`.
    """

    # [monitor.general]
    output_dir: Path
    log_level: str

    # [monitor.collection]
    duration_seconds: int
    interval_seconds: float
    platform: str
    stop_timeout: float

    # [monitor.storage]
    storage: StorageConfig = field(default_factory=StorageConfig)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig
    config_path: Path = None
