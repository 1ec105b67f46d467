"""
Process enumeration and identity.

A ``Process`` caches everything that identifies a process (name, command
line, parent, container, systemd service) when it is first seen, so the
identity survives the process exiting. Reads race with process exit;
every failed read degrades to an empty or default value.
"""

import errno
import logging
import os
from pathlib import Path
from typing import Optional, Set

from ..models.platform import DEFAULT_KERNEL_PATHS

logger = logging.getLogger(__name__)


def list_pids(proc_root: Optional[Path] = None) -> Set[int]:
    """
    PIDs of all processes currently listed under /proc.

    Only purely numeric directory names are PIDs.
    """
    root = Path(proc_root) if proc_root is not None else DEFAULT_KERNEL_PATHS.proc_root
    pids = set()
    try:
        with os.scandir(root) as entries:
            for entry in entries:
                if entry.name.isdigit() and entry.is_dir():
                    pids.add(int(entry.name))
    except OSError as e:
        logger.warning(f"Failed to list processes in {root}: {e}")
    return pids


def _read_cgroup_path(cgroup_file: Path, controller: str) -> str:
    """
    Path of the first cgroup line for ``controller`` with a non-root path.

    Lines read ``<hierarchy id>:<controller>:/<path>``. The path is cut at
    the first whitespace. Returns an empty string when nothing matches.
    """
    try:
        with open(cgroup_file, "r") as f:
            lines = f.read().splitlines()
    except OSError:
        logger.debug(f"Could not open process cgroup file '{cgroup_file}'")
        return ""

    for line in lines:
        parts = line.split(":", 2)
        if len(parts) != 3 or parts[1] != controller:
            continue
        hierarchy_id, _, path = parts
        if not hierarchy_id.isdigit() or not path.startswith("/"):
            continue
        tokens = path[1:].split()
        if tokens:
            return tokens[0]
    return ""


class Process:
    """
    Cached identity of one process.

    Two identities are equal when both pid and command line match, so a
    recycled pid running a different program is a different process.
    """

    SYSTEMD_SLICE = "system.slice/"

    def __init__(self, pid: int, proc_root: Optional[Path] = None):
        self._pid = pid
        self._proc_dir = (
            Path(proc_root) if proc_root is not None else DEFAULT_KERNEL_PATHS.proc_root
        ) / str(pid)
        self._dead = False

        raw_cmdline = self._read_raw_cmdline()
        self._name = raw_cmdline.split("\0", 1)[0]
        self._cmdline = self._format_cmdline(raw_cmdline)
        self._ppid = self._read_ppid()
        self._container = _read_cgroup_path(self._proc_dir / "cgroup", "cpuset")
        self._systemd_service = self._resolve_systemd_service()

    def _read_raw_cmdline(self) -> str:
        try:
            with open(self._proc_dir / "cmdline", "rb") as f:
                return f.read().decode("utf-8", errors="replace")
        except OSError:
            return ""

    @staticmethod
    def _format_cmdline(raw: str) -> str:
        if not raw:
            return raw
        # NULs separate arguments; the final one terminates the list
        return raw[:-1].replace("\0", " ") + raw[-1].replace("\0", "")

    def _read_ppid(self) -> int:
        try:
            with open(self._proc_dir / "status", "r") as f:
                lines = f.read().splitlines()
        except OSError:
            return 0

        for line in lines:
            if line.startswith("PPid:"):
                try:
                    return int(line.split()[1])
                except (IndexError, ValueError):
                    break
        return -1

    def _resolve_systemd_service(self) -> str:
        # systemd always places services in the pids controller
        slice_path = _read_cgroup_path(self._proc_dir / "cgroup", "pids")
        if not slice_path:
            return ""

        index = slice_path.find(self.SYSTEMD_SLICE)
        if index == -1:
            return "Unknown"
        return slice_path[index + len(self.SYSTEMD_SLICE):]

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def ppid(self) -> int:
        return self._ppid

    @property
    def name(self) -> str:
        """First command line argument, including any leading path."""
        return self._name

    @property
    def cmdline(self) -> str:
        return self._cmdline

    @property
    def container(self) -> Optional[str]:
        return self._container or None

    @property
    def systemd_service(self) -> Optional[str]:
        return self._systemd_service or None

    @property
    def is_dead(self) -> bool:
        return self._dead

    def update_alive_status(self) -> None:
        """Mark the process dead once /proc/<pid> has gone. Dead stays dead."""
        if self._dead:
            return
        try:
            os.stat(self._proc_dir)
        except OSError as e:
            if e.errno == errno.ENOENT:
                self._dead = True

    def __eq__(self, other) -> bool:
        if not isinstance(other, Process):
            return NotImplemented
        return self._pid == other._pid and self._cmdline == other._cmdline

    def __hash__(self) -> int:
        return hash((self._pid, self._cmdline))

    def __repr__(self) -> str:
        return f"Process(pid={self._pid}, name={self._name!r}, dead={self._dead})"
