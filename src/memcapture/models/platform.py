"""
Platform profiles and kernel file locations.

All SoC-specific behaviour (CMA region naming, the expected column count of
``/proc/buddyinfo``, which GPU accounting file format to read, which
optional collectors exist) is captured as data in a ``PlatformProfile``.
Collection code branches on profile fields, never on the platform name.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Union


class Platform(Enum):
    """Supported set-top box SoC families."""
    AMLOGIC = "AMLOGIC"
    AMLOGIC_950D4 = "AMLOGIC_950D4"
    REALTEK = "REALTEK"
    REALTEK64 = "REALTEK64"
    BROADCOM = "BROADCOM"


class GpuFormat(Enum):
    """Layout of the GPU memory accounting data exposed by the driver."""
    NONE = "none"
    # /sys/kernel/debug/mali0/gpu_memory: "<kctx hex> <pid> <pages>"
    MALI_AMLOGIC = "mali_amlogic"
    # /sys/kernel/debug/mali0/gpu_memory: "kctx-0x<hex> <pages> <pid>"
    MALI_REALTEK = "mali_realtek"
    # /sys/kernel/debug/dri/0/<tid>-<hex>/client: "<name> <objects> <n>KB"
    DRI_CLIENT = "dri_client"


@dataclass(frozen=True)
class PlatformProfile:
    """
    Immutable description of one platform's kernel interfaces.

    Attributes:
        platform: The platform this profile describes
        cma_names: Maps CMA debugfs directory names to friendly region names
        buddyinfo_columns: Whitespace-separated token count of one buddyinfo row
            (4 header tokens plus one per allocation order)
        gpu_format: Which GPU accounting parser to use
        supports_memory_bandwidth: DDR bandwidth counters may exist
            (still subject to the DDR mode file being present at runtime)
        supports_bmem: Broadcom BMEM regions are reported in /proc/brcm/core
    """

    platform: Platform
    cma_names: Mapping[str, str]
    buddyinfo_columns: int
    gpu_format: GpuFormat = GpuFormat.NONE
    supports_memory_bandwidth: bool = False
    supports_bmem: bool = False

    @property
    def supports_gpu(self) -> bool:
        return self.gpu_format is not GpuFormat.NONE


def _names(mapping: dict) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


PLATFORM_PROFILES: Mapping[Platform, PlatformProfile] = MappingProxyType({
    Platform.AMLOGIC: PlatformProfile(
        platform=Platform.AMLOGIC,
        cma_names=_names({
            "cma-0": "secmon_reserved",
            "cma-1": "logo_reserved",
            "cma-2": "codec_mm_cma",
            "cma-3": "ion_cma_reserved",
            "cma-4": "vdin1_cma_reserved",
            "cma-5": "demod_cma_reserved",
            "cma-6": "kernel_reserved",
        }),
        buddyinfo_columns=15,
        gpu_format=GpuFormat.MALI_AMLOGIC,
        supports_memory_bandwidth=True,
    ),
    Platform.AMLOGIC_950D4: PlatformProfile(
        platform=Platform.AMLOGIC_950D4,
        cma_names=_names({
            "cma-linux,secmo": "secmon_reserved",
            "cma-reserved": "reserved",
            "cma-linux,codec": "codec_mm_cma",
            "cma-linux,ion-d": "ion_cma_reserved",
            "cma-linux,vdin1": "vdin1_cma_reserved",
            "cma-linux,meson": "kernel_reserved",
        }),
        buddyinfo_columns=15,
        gpu_format=GpuFormat.MALI_AMLOGIC,
        supports_memory_bandwidth=True,
    ),
    Platform.REALTEK: PlatformProfile(
        platform=Platform.REALTEK,
        cma_names=_names({f"cma-{i}": f"cma-{i}" for i in range(9)}),
        buddyinfo_columns=17,
        gpu_format=GpuFormat.MALI_REALTEK,
    ),
    Platform.REALTEK64: PlatformProfile(
        platform=Platform.REALTEK64,
        cma_names=_names({
            "cma-linux,defau": "default_dma_pool",
            "cma-linux,cma_1": "video_output_pool_2",
            "cma-linux,cma_3": "audio_pool",
            "cma-linux,cma_4": "svp_video_pool",
            "cma-linux,cma_5": "audio_output_pool",
            "cma-linux,cma_6": "ota_pool",
            "cma-linux,cma_7": "audio_fw_pool",
            "cma-linux,cma_8": "audio_hifi_pool",
            "cma-linux,cma_9": "video_output_pool_1",
        }),
        buddyinfo_columns=15,
        gpu_format=GpuFormat.MALI_REALTEK,
    ),
    Platform.BROADCOM: PlatformProfile(
        platform=Platform.BROADCOM,
        cma_names=_names({
            "cma-WiFi@4C0000": "cma-WiFi@4C0000",
            "cma-reserved": "cma-reserved",
        }),
        buddyinfo_columns=15,
        gpu_format=GpuFormat.DRI_CLIENT,
        supports_bmem=True,
    ),
})


def get_platform_profile(platform: Union[Platform, str]) -> PlatformProfile:
    """
    Look up the profile for a platform given as enum member or name.

    Raises:
        ValueError: If the platform name is unknown
    """
    if isinstance(platform, str):
        try:
            platform = Platform[platform.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown platform '{platform}', expected one of "
                f"{[p.value for p in Platform]}"
            )
    return PLATFORM_PROFILES[platform]


@dataclass(frozen=True)
class KernelPaths:
    """
    Roots of the pseudo filesystems read during collection.

    Every kernel file location is derived from ``proc_root`` and
    ``sys_root`` so that a whole capture can run against a fixture tree.
    """

    proc_root: Path = field(default=Path("/proc"))
    sys_root: Path = field(default=Path("/sys"))

    def proc(self, *parts) -> Path:
        return self.proc_root.joinpath(*[str(p) for p in parts])

    def sys(self, *parts) -> Path:
        return self.sys_root.joinpath(*[str(p) for p in parts])

    @property
    def meminfo(self) -> Path:
        return self.proc("meminfo")

    @property
    def buddyinfo(self) -> Path:
        return self.proc("buddyinfo")

    @property
    def brcm_core(self) -> Path:
        return self.proc("brcm", "core")

    @property
    def cma_debug_dir(self) -> Path:
        return self.sys("kernel", "debug", "cma")

    @property
    def mali_gpu_memory(self) -> Path:
        return self.sys("kernel", "debug", "mali0", "gpu_memory")

    @property
    def dri_debug_dir(self) -> Path:
        return self.sys("kernel", "debug", "dri", "0")

    @property
    def memory_cgroup_dir(self) -> Path:
        return self.sys("fs", "cgroup", "memory")

    @property
    def ddr_mode(self) -> Path:
        return self.sys("class", "aml_ddr", "mode")

    @property
    def ddr_bandwidth(self) -> Path:
        return self.sys("class", "aml_ddr", "bandwidth")

    def zram_mm_stat(self, index: int) -> Path:
        return self.sys("block", f"zram{index}", "mm_stat")


DEFAULT_KERNEL_PATHS = KernelPaths()
