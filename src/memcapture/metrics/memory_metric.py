"""
System-wide memory metric.

Each pass reads the Linux memory summary, CMA regions, GPU allocations,
memory cgroups, DDR bandwidth, buddy allocator fragmentation and (on
Broadcom) BMEM regions. Which of the optional sources are read is decided
by the PlatformProfile.
"""

import logging
from typing import Dict, List, Optional

from ..models.measurements import CmaMeasurement, FragmentationMeasurement, GpuMeasurement
from ..models.platform import DEFAULT_KERNEL_PATHS, GpuFormat, KernelPaths, PlatformProfile
from ..models.statistics import StatAccumulator, round_half_away
from ..parsers import vendor
from ..parsers.buddyinfo import parse_buddyinfo
from ..parsers.meminfo import MemInfo
from ..reporting.report_generator import ReportGenerator
from ..system.processes import Process
from .base import AbstractMetric
from .scheduler import CancellationToken

logger = logging.getLogger(__name__)

LINUX_MEMORY_CATEGORIES = (
    "Total",
    "Used",
    "Buffered",
    "Cached",
    "Free",
    "Available",
    "Slab Total",
    "Slab Reclaimable",
    "Slab Unreclaimable",
    "Swap Used",
)


class MemoryMetric(AbstractMetric):
    """Tracks system memory pools for the configured platform."""

    def __init__(
        self,
        report_generator: ReportGenerator,
        profile: PlatformProfile,
        cancel_token: Optional[CancellationToken] = None,
        paths: Optional[KernelPaths] = None,
        page_size: Optional[int] = None,
    ):
        super().__init__(report_generator, cancel_token)
        self.profile = profile
        self.paths = paths or DEFAULT_KERNEL_PATHS
        # Several sources report pages rather than bytes
        self.page_size = page_size or vendor.get_page_size()

        self._linux_memory: Dict[str, StatAccumulator] = {
            category: StatAccumulator("Value_KB") for category in LINUX_MEMORY_CATEGORIES
        }
        self._cma: Dict[str, CmaMeasurement] = {}
        self._cma_free = StatAccumulator("Value_KB")
        self._cma_borrowed = StatAccumulator("Value_KB")
        self._gpu: Dict[int, GpuMeasurement] = {}
        self._containers: Dict[str, StatAccumulator] = {}
        self._memory_bandwidth = StatAccumulator("Memory_Bandwidth_kbps")
        self._fragmentation: Dict[str, List[FragmentationMeasurement]] = {}
        self._bmem: Dict[str, StatAccumulator] = {}

        self.memory_bandwidth_supported = False
        if profile.supports_memory_bandwidth and self.paths.ddr_mode.exists():
            self.memory_bandwidth_supported = vendor.set_ddr_mode(self.paths.ddr_mode, True)

    def close(self, timeout: Optional[float] = None) -> None:
        super().close(timeout)
        if self.memory_bandwidth_supported:
            vendor.set_ddr_mode(self.paths.ddr_mode, False)

    def collect_data(self) -> None:
        meminfo = MemInfo(self.paths.meminfo)

        self._collect_linux_memory(meminfo)
        self._collect_cma(meminfo)
        if self.profile.supports_gpu:
            self._collect_gpu()
        self._collect_containers()
        if self.memory_bandwidth_supported:
            self._collect_memory_bandwidth()
        self._collect_fragmentation()
        if self.profile.supports_bmem:
            self._collect_bmem()

    # --- collection --------------------------------------------------------

    def _collect_linux_memory(self, meminfo: MemInfo) -> None:
        values = {
            "Total": meminfo.total,
            "Used": meminfo.used,
            "Buffered": meminfo.buffers,
            "Cached": meminfo.cached,
            "Free": meminfo.free,
            "Available": meminfo.available,
            "Slab Total": meminfo.slab,
            "Slab Reclaimable": meminfo.sreclaimable,
            "Slab Unreclaimable": meminfo.sunreclaim,
            "Swap Used": meminfo.swap_used,
        }
        for category, value in values.items():
            self._linux_memory[category].add_data_point(value)

    def _collect_cma(self, meminfo: MemInfo) -> None:
        try:
            regions = vendor.read_cma_regions(self.paths.cma_debug_dir, self.page_size)
        except OSError as e:
            logger.warning(f"Failed to open CMA debug directory with error {e}")
            return

        total_kb = 0.0
        total_used_kb = 0.0
        for region in regions:
            total_kb += region.size_kb
            total_used_kb += region.used_kb

            name = self.profile.cma_names.get(region.directory)
            if name is None:
                logger.warning(f"Could not find CMA name for directory {region.directory}")
                name = region.directory

            measurement = self._cma.get(name)
            if measurement is None:
                measurement = CmaMeasurement(size_kb=region.size_kb)
                self._cma[name] = measurement
            measurement.size_kb = region.size_kb
            measurement.used.add_data_point(region.used_kb)
            measurement.unused.add_data_point(region.unused_kb)

        # Under memory pressure the kernel lends unused CMA to movable allocations
        self._cma_free.add_data_point(meminfo.cma_free)
        self._cma_borrowed.add_data_point((total_kb - total_used_kb) - meminfo.cma_free)

    def _collect_gpu(self) -> None:
        if self.profile.gpu_format is GpuFormat.DRI_CLIENT:
            self._collect_gpu_dri()
            return

        try:
            with open(self.paths.mali_gpu_memory, "r") as f:
                content = f.read()
        except OSError:
            logger.warning("Could not open gpu_memory file")
            return

        if self.profile.gpu_format is GpuFormat.MALI_AMLOGIC:
            usage = vendor.parse_mali_amlogic(content)
        else:
            usage = vendor.parse_mali_realtek(content)

        for pid, pages in usage:
            self._add_gpu_usage(pid, pages * self.page_size / 1024.0)

    def _collect_gpu_dri(self) -> None:
        try:
            clients = vendor.read_dri_clients(self.paths.dri_debug_dir)
        except OSError as e:
            logger.warning(f"Could not read DRI debug directory: {e}")
            return

        for tid, usage_kb in clients:
            # Correlate the allocating thread with its process
            pid = vendor.tid_to_tgid(tid, self.paths.proc_root)
            self._add_gpu_usage(pid, usage_kb)

    def _add_gpu_usage(self, pid: int, usage_kb: float) -> None:
        measurement = self._gpu.get(pid)
        if measurement is None:
            measurement = GpuMeasurement(process=Process(pid, self.paths.proc_root))
            self._gpu[pid] = measurement
        measurement.used.add_data_point(usage_kb)

    def _collect_containers(self) -> None:
        usage = vendor.read_container_memory(self.paths.memory_cgroup_dir)
        if usage is None:
            return

        for name, usage_kb in usage.items():
            accumulator = self._containers.get(name)
            if accumulator is None:
                accumulator = StatAccumulator("Memory_Used_KB")
                self._containers[name] = accumulator
            accumulator.add_data_point(usage_kb)

    def _collect_memory_bandwidth(self) -> None:
        try:
            with open(self.paths.ddr_bandwidth, "r") as f:
                content = f.read()
        except OSError:
            logger.warning("Cannot get DDR usage")
            return

        for kbps in vendor.parse_ddr_bandwidth(content):
            self._memory_bandwidth.add_data_point(kbps)

    def _collect_fragmentation(self) -> None:
        try:
            with open(self.paths.buddyinfo, "r") as f:
                content = f.read()
        except OSError:
            logger.warning("Could not open buddyinfo")
            return

        for zone in parse_buddyinfo(content, self.profile.buddyinfo_columns):
            measurements = self._fragmentation.get(zone.zone)
            if measurements is None:
                measurements = [FragmentationMeasurement() for _ in zone.free_pages]
                self._fragmentation[zone.zone] = measurements

            for measurement, free_pages, fragmentation in zip(
                measurements, zone.free_pages, zone.fragmentation
            ):
                measurement.free_pages.add_data_point(free_pages)
                measurement.fragmentation.add_data_point(fragmentation * 100)

    def _collect_bmem(self) -> None:
        try:
            with open(self.paths.brcm_core, "r") as f:
                content = f.read()
        except OSError:
            logger.warning(f"Could not open {self.paths.brcm_core}")
            return

        for region, usage_kb in vendor.parse_bmem(content):
            accumulator = self._bmem.get(region)
            if accumulator is None:
                accumulator = StatAccumulator("Memory_Usage_KB")
                self._bmem[region] = accumulator
            accumulator.add_data_point(usage_kb)

    # --- reporting ---------------------------------------------------------

    def _save_results(self) -> None:
        report = self.report_generator

        report.add_dataset("Linux Memory", [
            {"Value": category, "Value_KB": accumulator}
            for category, accumulator in self._linux_memory.items()
        ])
        report.set_average_linux_memory_usage(self._linux_memory["Used"].average_rounded)

        if self.profile.supports_gpu:
            report.add_dataset("GPU Memory", [
                {
                    "PID": str(pid),
                    "Process": measurement.process.name,
                    "Container": measurement.process.container or "-",
                    "Cmdline": measurement.process.cmdline,
                    "Memory_Usage_KB": measurement.used,
                }
                for pid, measurement in self._gpu.items()
            ])
            report.add_to_accumulated_memory_usage(
                sum(m.used.average for m in self._gpu.values())
            )

        report.add_dataset("CMA Regions", [
            {
                "Region": name,
                "Size_KB": str(round_half_away(measurement.size_kb)),
                "Used_KB": measurement.used,
                "Unused_KB": measurement.unused,
            }
            for name, measurement in self._cma.items()
        ])
        report.add_to_accumulated_memory_usage(
            sum(m.used.average for m in self._cma.values())
        )

        if self._cma_free.count:
            report.add_dataset("CMA Summary", [
                {"Value": "CMA Free", "Value_KB": self._cma_free},
                {"Value": "CMA Borrowed by Kernel", "Value_KB": self._cma_borrowed},
            ])

        report.add_dataset("Containers", [
            {"Container": name, "Memory_Used_KB": accumulator}
            for name, accumulator in self._containers.items()
        ])

        if self.memory_bandwidth_supported:
            report.add_dataset("Memory Bandwidth", [
                {"Memory_Bandwidth_kbps": self._memory_bandwidth},
            ])

        for zone, measurements in self._fragmentation.items():
            report.add_dataset(f"Memory Fragmentation - Zone {zone}", [
                {
                    "Order": str(order),
                    "Free_Pages": measurement.free_pages,
                    "Fragmentation_%": measurement.fragmentation,
                }
                for order, measurement in enumerate(measurements)
            ])

        if self.profile.supports_bmem:
            report.add_dataset("BMEM", [
                {"Region": region, "Memory_Usage_KB": accumulator}
                for region, accumulator in self._bmem.items()
            ])
            report.add_to_accumulated_memory_usage(
                sum(a.average for a in self._bmem.values())
            )
