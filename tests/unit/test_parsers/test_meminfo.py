"""
Unit tests for the /proc/meminfo parser.
"""

import pytest

from memcapture.parsers.meminfo import MemInfo, parse_meminfo


@pytest.mark.unit
class TestMemInfo:
    """Test cases for MemInfo."""

    def test_used_memory(self, fake_kernel):
        """Used is total minus free, buffers, cached and reclaimable slab."""
        meminfo = MemInfo(fake_kernel.paths.meminfo)

        assert meminfo.total == 1000
        assert meminfo.free == 200
        assert meminfo.available == 500
        assert meminfo.used == 620
        assert meminfo.sunreclaim == 10
        assert meminfo.cma_total == 8192
        assert meminfo.cma_free == 1024

    def test_used_without_slab(self, fake_kernel):
        fake_kernel.write_meminfo(
            "MemTotal: 1000 kB\nMemFree: 200 kB\nBuffers: 50 kB\nCached: 100 kB\nSlab: 0 kB\n"
        )
        assert MemInfo(fake_kernel.paths.meminfo).used == 650

    def test_swap_used(self, fake_kernel):
        fake_kernel.write_meminfo(
            "MemTotal: 1000 kB\nSwapTotal: 4096 kB\nSwapFree: 1024 kB\n"
        )
        meminfo = MemInfo(fake_kernel.paths.meminfo)

        assert meminfo.swap_used == 3072

    def test_inconsistent_totals_leave_used_at_zero(self, fake_kernel, caplog):
        fake_kernel.write_meminfo(
            "MemTotal: 100 kB\nMemFree: 80 kB\nBuffers: 10 kB\nCached: 10 kB\nSlab: 10 kB\n"
        )
        meminfo = MemInfo(fake_kernel.paths.meminfo)

        assert meminfo.total == 100
        assert meminfo.used == 0
        assert "MemTotal too small" in caplog.text

    def test_missing_file(self, temp_dir, caplog):
        meminfo = MemInfo(temp_dir / "does-not-exist")

        assert meminfo.total == 0
        assert meminfo.used == 0
        assert meminfo.swap_used == 0
        assert "Failed to open" in caplog.text


@pytest.mark.unit
class TestParseMeminfo:
    """Test cases for the key/value parser."""

    def test_parses_values_and_skips_garbage(self):
        content = "MemTotal:  2048 kB\nHugepagesize: x kB\nbogus line\nDirectMap4k:\n"
        assert parse_meminfo(content) == {"MemTotal": 2048}

    def test_values_without_unit(self):
        assert parse_meminfo("HugePages_Total:       0\n") == {"HugePages_Total": 0}
