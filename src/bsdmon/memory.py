"""Physical memory collectors."""

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable

from bsdmon import config
from bsdmon.errors import CollectError, ParseError
from bsdmon.models import MemoryStat, kib_to_bytes
from bsdmon.sysctl import SysctlReader

logger = logging.getLogger(__name__)


class MemoryCollector(ABC):
    """Reads total and used physical memory from the host kernel."""

    @abstractmethod
    def sample(self) -> MemoryStat:
        """Return a fresh MemoryStat."""


class LinuxMemoryCollector(MemoryCollector):
    """Derives usage from MemTotal and MemAvailable in /proc/meminfo."""

    def __init__(self, meminfo_path: str = config.PROC_MEMINFO_PATH) -> None:
        self._meminfo_path = meminfo_path

    def sample(self) -> MemoryStat:
        try:
            with open(self._meminfo_path, encoding="ascii") as f:
                fields = parse_meminfo(f, ("MemTotal", "MemAvailable"))
        except OSError as exc:
            raise CollectError(f"cannot read {self._meminfo_path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ParseError(f"{self._meminfo_path} is not ASCII: {exc}") from exc

        total_kib = fields.get("MemTotal", 0)
        if total_kib == 0:
            raise ParseError(f"MemTotal missing from {self._meminfo_path}")
        if "MemAvailable" not in fields:
            logger.warning("MemAvailable missing from %s, assuming 0", self._meminfo_path)
        available_kib = fields.get("MemAvailable", 0)

        used_kib = max(0, total_kib - available_kib)
        return MemoryStat.from_bytes(kib_to_bytes(used_kib), kib_to_bytes(total_kib))


def _is_decimal(value: str) -> bool:
    return value.isascii() and value.isdigit()


def parse_meminfo(lines: Iterable[str], keys: Iterable[str]) -> dict[str, int]:
    """
    Extract the given keys from /proc/meminfo style ``Key:  value kB`` lines.

    Keys not present in the input are left out of the result.
    """
    wanted = set(keys)
    found: dict[str, int] = {}
    for line in lines:
        key, sep, rest = line.partition(":")
        if not sep or key not in wanted:
            continue
        parts = rest.split()
        if not parts or not _is_decimal(parts[0]):
            raise ParseError(f"malformed meminfo line: {line.strip()!r}")
        found[key] = int(parts[0])
    return found


class FreeBSDMemoryCollector(MemoryCollector):
    """Uses hw.physmem and the free page count from vm.stats."""

    def __init__(
        self,
        reader: SysctlReader | None = None,
        page_size: int | None = None,
    ) -> None:
        self._reader = reader or SysctlReader()
        self._page_size = page_size

    def _get_page_size(self) -> int:
        if self._page_size is not None:
            return self._page_size
        try:
            return os.sysconf("SC_PAGESIZE")
        except (OSError, ValueError) as exc:
            raise CollectError(f"cannot determine page size: {exc}") from exc

    def sample(self) -> MemoryStat:
        total = self._reader.read_uint(config.SYSCTL_PHYSMEM)
        if total == 0:
            raise CollectError(f"{config.SYSCTL_PHYSMEM} reported zero bytes")
        page_size = self._get_page_size()
        free_pages = self._reader.read_uint(config.SYSCTL_FREE_COUNT)

        # Free memory can briefly exceed physmem on some kernels
        used = max(0, total - free_pages * page_size)
        return MemoryStat.from_bytes(used, total)
