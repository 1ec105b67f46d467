"""
Pytest configuration and shared fixtures for the MemCapture test suite.

This module provides common fixtures, including a fake /proc and /sys
tree that collectors and parsers can be pointed at through KernelPaths.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Dict, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from memcapture.models.platform import KernelPaths  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


SAMPLE_MEMINFO = """\
MemTotal:        1000 kB
MemFree:          200 kB
MemAvailable:     500 kB
Buffers:           50 kB
Cached:           100 kB
SwapCached:         0 kB
SwapTotal:          0 kB
SwapFree:           0 kB
Slab:              40 kB
SReclaimable:      30 kB
SUnreclaim:        10 kB
CmaTotal:        8192 kB
CmaFree:         1024 kB
"""


class FakeKernel:
    """
    Builder for a fake kernel pseudo filesystem under a temporary root.

    ``paths`` points at ``<root>/proc`` and ``<root>/sys``.
    """

    def __init__(self, root: Path):
        self.root = root
        self.paths = KernelPaths(proc_root=root / "proc", sys_root=root / "sys")
        self.paths.proc_root.mkdir(parents=True)
        self.paths.sys_root.mkdir(parents=True)

    def write(self, path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def write_meminfo(self, content: str = SAMPLE_MEMINFO) -> Path:
        return self.write(self.paths.meminfo, content)

    def add_process(
        self,
        pid: int,
        cmdline: str,
        ppid: int = 1,
        smaps_rollup: Optional[Dict[str, int]] = None,
        cgroup: str = "",
        tgid: Optional[int] = None,
    ) -> Path:
        """
        Create /proc/<pid> with cmdline, status, cgroup and smaps_rollup.

        ``cmdline`` is split on spaces into NUL-terminated arguments; an
        empty string gives an empty cmdline file (a kernel thread).
        """
        proc_dir = self.paths.proc(pid)
        proc_dir.mkdir(parents=True, exist_ok=True)

        raw = "".join(f"{arg}\0" for arg in cmdline.split(" ")) if cmdline else ""
        (proc_dir / "cmdline").write_bytes(raw.encode())
        (proc_dir / "status").write_text(
            f"Name:\t{cmdline.split(' ')[0] if cmdline else 'kthread'}\n"
            f"Tgid:\t{tgid if tgid is not None else pid}\n"
            f"PPid:\t{ppid}\n"
        )
        (proc_dir / "cgroup").write_text(cgroup)

        if smaps_rollup is not None:
            lines = ["00400000-7fff0000 ---p 00000000 00:00 0 [rollup]"]
            lines.extend(f"{key}: {value} kB" for key, value in smaps_rollup.items())
            (proc_dir / "smaps_rollup").write_text("\n".join(lines) + "\n")
        return proc_dir

    def remove_process(self, pid: int) -> None:
        shutil.rmtree(self.paths.proc(pid))

    def add_cma_region(self, directory: str, count_pages: int, used_pages: int) -> None:
        region = self.paths.cma_debug_dir / directory
        self.write(region / "count", f"{count_pages}\n")
        self.write(region / "used", f"{used_pages}\n")


@pytest.fixture
def fake_kernel(temp_dir):
    """A fake /proc and /sys tree with a consistent /proc/meminfo."""
    kernel = FakeKernel(temp_dir / "root")
    kernel.write_meminfo()
    return kernel


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_config_data():
    """Sample [monitor] configuration table."""
    return {
        "general": {
            "output_dir": "CaptureOut",
            "log_level": "debug",
        },
        "collection": {
            "duration_seconds": 60,
            "interval_seconds": 0.5,
            "platform": "realtek",
            "stop_timeout": 5.0,
        },
        "storage": {
            "format": "parquet",
            "compression": "zstd",
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump({"monitor": sample_config_data}, f)

    return {
        "config": config_file,
        "dir": temp_dir,
    }


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield

    from memcapture.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(original_config_path)
