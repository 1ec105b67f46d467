"""
MemCapture: memory telemetry collector for embedded Linux set-top boxes.

The package samples kernel memory accounting at a fixed interval over a
capture window and produces a JSON report of per-process and system-wide
statistics (min, max and average of every series).

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Statistics, platform profiles and measurement records
- validation: Input validation and error handling
- parsers: Readers for /proc and /sys memory files
- system: Process identity, procrank sampling and device metadata
- metrics: Periodic collectors for process and system memory
- reporting: Report assembly
- storage: Report persistence (JSON and Parquet)
- orchestration: Capture runner and signal handling
- cli: Command-line interface

Usage:
    From command line:
        memcapture -d 60 -p REALTEK -o /tmp/report

    Programmatically:
        from memcapture import CaptureRunner, get_platform_profile
        runner = CaptureRunner(get_platform_profile("AMLOGIC"), 30, 3, "out")
        report = runner.run()
"""

# Configuration first: the models package depends on config.storage_config
from .config import get_config, clear_config_cache, set_config_path, StorageConfig

from .models import (
    AppConfig,
    MonitorConfig,
    KernelPaths,
    Platform,
    PlatformProfile,
    StatAccumulator,
    get_platform_profile,
)
from .validation import ValidationError
from .reporting import ReportGenerator
from .orchestration import CaptureRunner, SignalHandler
from .cli import main_cli

__version__ = "1.0.0"

__all__ = [
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "StorageConfig",
    "AppConfig",
    "MonitorConfig",
    "KernelPaths",
    "Platform",
    "PlatformProfile",
    "StatAccumulator",
    "get_platform_profile",
    "ValidationError",
    "ReportGenerator",
    "CaptureRunner",
    "SignalHandler",
    "main_cli",
]
