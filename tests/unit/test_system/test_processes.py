"""
Unit tests for process enumeration and identity.
"""

import pytest

from memcapture.system.processes import Process, list_pids

SYSTEMD_CGROUP = (
    "12:pids:/system.slice/dropbear.service\n"
    "5:cpuset:/\n"
    "1:name=systemd:/system.slice/dropbear.service\n"
)

CONTAINER_CGROUP = (
    "12:pids:/user.slice/app\n"
    "5:cpuset:/netflix\n"
)


@pytest.mark.unit
class TestListPids:
    """Test cases for list_pids."""

    def test_only_numeric_directories(self, fake_kernel):
        fake_kernel.add_process(1, "/sbin/init")
        fake_kernel.add_process(250, "/usr/bin/app")
        (fake_kernel.paths.proc_root / "self").mkdir()
        fake_kernel.write(fake_kernel.paths.proc_root / "123", "a file, not a process")

        assert list_pids(fake_kernel.paths.proc_root) == {1, 250}

    def test_missing_root(self, temp_dir, caplog):
        assert list_pids(temp_dir / "nope") == set()
        assert "Failed to list processes" in caplog.text


@pytest.mark.unit
class TestProcessIdentity:
    """Test cases for the cached identity of a process."""

    def test_name_and_cmdline(self, fake_kernel):
        fake_kernel.add_process(10, "/usr/bin/westeros --display wayland-0", ppid=1)
        process = Process(10, fake_kernel.paths.proc_root)

        assert process.pid == 10
        assert process.ppid == 1
        assert process.name == "/usr/bin/westeros"
        assert process.cmdline == "/usr/bin/westeros --display wayland-0"

    def test_cmdline_without_trailing_nul(self, fake_kernel):
        proc_dir = fake_kernel.add_process(11, "app")
        (proc_dir / "cmdline").write_bytes(b"app\0-v")

        process = Process(11, fake_kernel.paths.proc_root)
        assert process.name == "app"
        assert process.cmdline == "app -v"

    def test_kernel_thread_has_empty_name(self, fake_kernel):
        fake_kernel.add_process(2, "")
        process = Process(2, fake_kernel.paths.proc_root)

        assert process.name == ""
        assert process.cmdline == ""

    def test_ppid_fallbacks(self, fake_kernel):
        proc_dir = fake_kernel.add_process(12, "app")
        (proc_dir / "status").write_text("Name:\tapp\n")
        assert Process(12, fake_kernel.paths.proc_root).ppid == -1

        (proc_dir / "status").unlink()
        assert Process(12, fake_kernel.paths.proc_root).ppid == 0

    def test_systemd_service(self, fake_kernel):
        fake_kernel.add_process(13, "/usr/sbin/dropbear", cgroup=SYSTEMD_CGROUP)
        process = Process(13, fake_kernel.paths.proc_root)

        assert process.systemd_service == "dropbear.service"
        # cpuset at the root means no container
        assert process.container is None

    def test_container(self, fake_kernel):
        fake_kernel.add_process(14, "/usr/bin/netflix", cgroup=CONTAINER_CGROUP)
        process = Process(14, fake_kernel.paths.proc_root)

        assert process.container == "netflix"
        assert process.systemd_service == "Unknown"

    def test_no_cgroup_information(self, fake_kernel):
        fake_kernel.add_process(15, "app")
        process = Process(15, fake_kernel.paths.proc_root)

        assert process.container is None
        assert process.systemd_service is None

    def test_identity_survives_exit(self, fake_kernel):
        fake_kernel.add_process(16, "sleep 10", ppid=5)
        process = Process(16, fake_kernel.paths.proc_root)
        assert not process.is_dead

        fake_kernel.remove_process(16)
        process.update_alive_status()

        assert process.is_dead
        assert process.cmdline == "sleep 10"
        assert process.ppid == 5

    def test_dead_stays_dead(self, fake_kernel):
        fake_kernel.add_process(17, "sleep 1")
        process = Process(17, fake_kernel.paths.proc_root)
        fake_kernel.remove_process(17)
        process.update_alive_status()

        # pid reused by another program
        fake_kernel.add_process(17, "sleep 1")
        process.update_alive_status()
        assert process.is_dead

    def test_equality_uses_pid_and_cmdline(self, fake_kernel):
        fake_kernel.add_process(18, "app --one")
        first = Process(18, fake_kernel.paths.proc_root)
        same = Process(18, fake_kernel.paths.proc_root)

        fake_kernel.add_process(18, "app --two")
        recycled = Process(18, fake_kernel.paths.proc_root)

        assert first == same
        assert hash(first) == hash(same)
        assert first != recycled
        assert len({first, same, recycled}) == 2
