"""
Parser for /proc/<pid>/smaps and /proc/<pid>/smaps_rollup.

Full smaps files hold one block per mapping and are by far the largest
input read on every tick, so the line scanner rejects uninteresting keys
on their first character before doing any lookup.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from ..models.platform import DEFAULT_KERNEL_PATHS


class SmapsField(Enum):
    IGNORE = "ignore"
    PSS = "Pss"
    RSS = "Rss"
    SWAP = "Swap"
    SWAP_PSS = "SwapPss"
    LOCKED = "Locked"
    PRIVATE_CLEAN = "Private_Clean"
    PRIVATE_DIRTY = "Private_Dirty"
    SIZE = "Size"


_KEYS = {f"{field.value}:": field for field in SmapsField if field is not SmapsField.IGNORE}
_FIRST_CHARS = frozenset(key[0] for key in _KEYS)

_IGNORED = (SmapsField.IGNORE, 0)


def parse_smaps_line(line: str) -> Tuple[SmapsField, int]:
    """
    Classify one smaps line and extract its kB value.

    The key is the text up to the first whitespace and must end in ``:``.
    Keys are matched exactly, so ``SwapPss:`` is never taken for ``Swap:``.
    Unknown keys and mapping header lines return ``(SmapsField.IGNORE, 0)``.
    """
    if not line or line[0] not in _FIRST_CHARS:
        return _IGNORED

    parts = line.split(None, 2)
    if len(parts) < 2:
        return _IGNORED

    field = _KEYS.get(parts[0])
    if field is None:
        return _IGNORED

    try:
        return field, int(parts[1])
    except ValueError:
        return _IGNORED


class Smaps:
    """
    Memory totals of one process, in kB.

    ``smaps_rollup`` is used when the kernel provides it (values are
    assigned); otherwise every mapping block of ``smaps`` is summed. If the
    file cannot be read (the process exited, or permission was denied) all
    values are 0 and nothing is logged.
    """

    def __init__(self, pid: int, proc_root: Optional[Path] = None):
        self.pid = pid
        root = Path(proc_root) if proc_root is not None else DEFAULT_KERNEL_PATHS.proc_root

        self.rss = 0
        self.pss = 0
        self.swap = 0
        self.swap_pss = 0
        self.locked = 0
        self.private_clean = 0
        self.private_dirty = 0
        self.size = 0

        rollup = root / str(pid) / "smaps_rollup"
        if rollup.exists():
            self._parse(rollup, accumulate=False)
        else:
            self._parse(root / str(pid) / "smaps", accumulate=True)

    def _parse(self, path: Path, accumulate: bool) -> None:
        values = {field: 0 for field in _KEYS.values()}
        try:
            with open(path, "r", errors="replace") as f:
                for line in f:
                    field, value = parse_smaps_line(line)
                    if field is SmapsField.IGNORE:
                        continue
                    if accumulate:
                        values[field] += value
                    else:
                        values[field] = value
        except OSError:
            return

        self.pss = values[SmapsField.PSS]
        self.rss = values[SmapsField.RSS]
        self.swap = values[SmapsField.SWAP]
        self.swap_pss = values[SmapsField.SWAP_PSS]
        self.locked = values[SmapsField.LOCKED]
        self.private_clean = values[SmapsField.PRIVATE_CLEAN]
        self.private_dirty = values[SmapsField.PRIVATE_DIRTY]
        self.size = values[SmapsField.SIZE]

    @property
    def uss(self) -> int:
        return self.private_clean + self.private_dirty

    @property
    def vss(self) -> int:
        return self.size
