"""
Data models for the memcapture package.

This module provides the dataclasses shared across the package:
configuration, streaming statistics, platform profiles and per-key
measurement records.
"""

from .config import AppConfig, MonitorConfig
from .measurements import (
    CmaMeasurement,
    FragmentationMeasurement,
    GpuMeasurement,
    ProcessMeasurement,
)
from .platform import (
    DEFAULT_KERNEL_PATHS,
    GpuFormat,
    KernelPaths,
    Platform,
    PlatformProfile,
    PLATFORM_PROFILES,
    get_platform_profile,
)
from .statistics import StatAccumulator, round_half_away

__all__ = [
    "AppConfig",
    "MonitorConfig",
    "CmaMeasurement",
    "FragmentationMeasurement",
    "GpuMeasurement",
    "ProcessMeasurement",
    "DEFAULT_KERNEL_PATHS",
    "GpuFormat",
    "KernelPaths",
    "Platform",
    "PlatformProfile",
    "PLATFORM_PROFILES",
    "get_platform_profile",
    "StatAccumulator",
    "round_half_away",
]
