"""
Unit tests for vendor and optional kernel interface parsers.
"""

import pytest

from memcapture.parsers.vendor import (
    parse_bmem,
    parse_ddr_bandwidth,
    parse_dri_client,
    parse_mali_amlogic,
    parse_mali_realtek,
    read_cma_regions,
    read_container_memory,
    read_dri_clients,
    set_ddr_mode,
    tid_to_tgid,
)


@pytest.mark.unit
class TestCmaRegions:
    """Test cases for debugfs CMA region reading."""

    def test_reads_regions_in_kb(self, fake_kernel):
        fake_kernel.add_cma_region("cma-0", count_pages=1024, used_pages=256)
        fake_kernel.add_cma_region("cma-1", count_pages=512, used_pages=0)

        regions = read_cma_regions(fake_kernel.paths.cma_debug_dir, page_size=4096)

        assert [region.directory for region in regions] == ["cma-0", "cma-1"]
        assert regions[0].size_kb == 4096.0
        assert regions[0].used_kb == 1024.0
        assert regions[0].unused_kb == 3072.0
        assert regions[1].unused_kb == 2048.0

    def test_malformed_region_is_skipped(self, fake_kernel, caplog):
        fake_kernel.add_cma_region("cma-0", count_pages=8, used_pages=2)
        fake_kernel.write(fake_kernel.paths.cma_debug_dir / "cma-1" / "count", "n/a\n")

        regions = read_cma_regions(fake_kernel.paths.cma_debug_dir, page_size=4096)

        assert [region.directory for region in regions] == ["cma-0"]
        assert "Failed to read CMA region" in caplog.text

    def test_missing_directory_raises(self, fake_kernel):
        with pytest.raises(OSError):
            read_cma_regions(fake_kernel.paths.cma_debug_dir, page_size=4096)


@pytest.mark.unit
class TestGpuParsers:
    """Test cases for the GPU accounting formats."""

    def test_mali_amlogic(self):
        content = (
            "Mali memory usage\n"
            "  kctx             pid              used_pages\n"
            "----------------------------------------------------\n"
            "ffffff80016a9000     1234        300\n"
            "ffffff80016b9000     5678         12\n"
            "Total:  312\n"
        )
        assert parse_mali_amlogic(content) == [(1234, 300), (5678, 12)]

    def test_mali_realtek(self):
        content = (
            "mali0                  1024\n"
            "  kctx-0xffffffc0126a5000       300       1234\n"
            "  kctx-0xffffffc0126b5000        16       5678\n"
        )
        assert parse_mali_realtek(content) == [(1234, 300), (5678, 16)]

    def test_dri_client_units(self, caplog):
        content = (
            "command  objects  size\n"
            "westeros   12   512KB\n"
            "browser     4     3MB\n"
            "video       1     1GB\n"
            "odd         2    16TB\n"
        )
        assert parse_dri_client(content) == [
            ("westeros", 512.0),
            ("browser", 3072.0),
            ("video", 1048576.0),
        ]
        assert "Could not parse this line" in caplog.text

    def test_read_dri_clients(self, fake_kernel):
        dri = fake_kernel.paths.dri_debug_dir
        fake_kernel.write(dri / "812-0xdeadbeef" / "client", "westeros 3 100KB\n")
        fake_kernel.write(dri / "clients", "not a client directory\n")
        (dri / "name").mkdir()

        assert read_dri_clients(dri) == [(812, 100.0)]

    def test_tid_to_tgid(self, fake_kernel):
        fake_kernel.add_process(812, "westeros", tgid=800)

        assert tid_to_tgid(812, fake_kernel.paths.proc_root) == 800
        assert tid_to_tgid(999, fake_kernel.paths.proc_root) == -1


@pytest.mark.unit
class TestDdrBandwidth:
    """Test cases for Amlogic DDR counters."""

    def test_parse_skips_zero_readings(self):
        content = (
            "Total bandwidth:  1200 KB/s, usage:  3.2%\n"
            "Total bandwidth:     0 KB/s, usage:  0.0%\n"
            "Total bandwidth:   800 KB/s, usage:  1.9%\n"
        )
        assert parse_ddr_bandwidth(content) == [1200, 800]

    def test_set_ddr_mode(self, fake_kernel):
        mode = fake_kernel.write(fake_kernel.paths.ddr_mode, "0")

        assert set_ddr_mode(mode, True) is True
        assert mode.read_text() == "1"
        assert set_ddr_mode(mode, False) is True
        assert mode.read_text() == "0"

    def test_set_ddr_mode_failure(self, temp_dir):
        assert set_ddr_mode(temp_dir / "missing" / "mode", True) is False


@pytest.mark.unit
class TestBmem:
    """Test cases for Broadcom /proc/brcm/core."""

    def test_parse_regions(self):
        content = (
            "SUMMARY:\n"
            "  #  name  SIZE(MB)  used%  peak%  region\n"
            "  0   x   1   y   512   z   25%   30%   bmem0\n"
            "  1   x   2   y   256   z   50%   75%   bmem1\n"
            "  2   x   3   y   256   z   50    75%   broken\n"
        )
        assert parse_bmem(content) == [
            ("bmem0", 512 * 0.25 * 1024),
            ("bmem1", 256 * 0.5 * 1024),
        ]


@pytest.mark.unit
class TestContainerMemory:
    """Test cases for memory cgroup reading."""

    def test_systemd_groups_are_ignored(self, fake_kernel):
        cgroups = fake_kernel.paths.memory_cgroup_dir
        fake_kernel.write(cgroups / "netflix" / "memory.usage_in_bytes", "2097152\n")
        fake_kernel.write(cgroups / "system.slice" / "memory.usage_in_bytes", "1024\n")
        fake_kernel.write(cgroups / "init.scope" / "memory.usage_in_bytes", "1024\n")
        fake_kernel.write(cgroups / "tmp.mount" / "memory.usage_in_bytes", "1024\n")
        fake_kernel.write(cgroups / "memory.usage_in_bytes", "999999\n")

        assert read_container_memory(cgroups) == {"netflix": 2048.0}

    def test_not_mounted(self, fake_kernel):
        assert read_container_memory(fake_kernel.paths.memory_cgroup_dir) is None
