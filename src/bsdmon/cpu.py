"""CPU tick collectors and the two-sample usage estimator."""

import logging
from abc import ABC, abstractmethod

from bsdmon import config
from bsdmon.errors import CollectError, ParseError
from bsdmon.models import CpuTimeSample
from bsdmon.sysctl import SysctlReader

logger = logging.getLogger(__name__)

# Leading fields of the aggregate line we care about: user nice system idle
_REQUIRED_FIELDS = 4
_STAT_PREFIX = "cpu  "


class CpuCollector(ABC):
    """Reads machine-wide cumulative CPU ticks from the host kernel."""

    @abstractmethod
    def sample(self) -> CpuTimeSample:
        """Return a fresh CpuTimeSample."""


class LinuxCpuCollector(CpuCollector):
    """Parses the aggregate ``cpu`` line of /proc/stat."""

    def __init__(self, stat_path: str = config.PROC_STAT_PATH) -> None:
        self._stat_path = stat_path

    def sample(self) -> CpuTimeSample:
        try:
            with open(self._stat_path, encoding="ascii") as f:
                line = f.readline()
        except OSError as exc:
            raise CollectError(f"cannot read {self._stat_path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ParseError(f"{self._stat_path} is not ASCII: {exc}") from exc

        return parse_stat_line(line)


def parse_stat_line(line: str) -> CpuTimeSample:
    """
    Parse the first line of /proc/stat.

    Only the first four counters are used; iowait, irq, softirq, steal and
    guest columns are ignored. Parsing stops at the first non-integer field,
    so a line with fewer than four leading integers is rejected.
    """
    if not line.startswith(_STAT_PREFIX):
        raise ParseError(f"unexpected /proc/stat line: {line.strip()!r}")

    values: list[int] = []
    for field in line[len(_STAT_PREFIX):].split()[:_REQUIRED_FIELDS]:
        if not (field.isascii() and field.isdigit()):
            break
        values.append(int(field))

    if len(values) < _REQUIRED_FIELDS:
        raise ParseError(
            f"/proc/stat cpu line has {len(values)} counters, expected {_REQUIRED_FIELDS}"
        )

    user, nice, system, idle = values
    return CpuTimeSample(user=user, nice=nice, system=system, idle=idle)


class FreeBSDCpuCollector(CpuCollector):
    """Sums the per-core tick buckets of the ``kern.cp_times`` sysctl."""

    def __init__(self, reader: SysctlReader | None = None) -> None:
        self._reader = reader or SysctlReader()

    def sample(self) -> CpuTimeSample:
        ticks = self._reader.read_long_array(config.SYSCTL_CP_TIMES)
        return sum_cp_times(ticks)


def sum_cp_times(ticks: list[int]) -> CpuTimeSample:
    """Aggregate a flat kern.cp_times array (stride CPUSTATES) across cores."""
    stride = config.CPUSTATES
    ncpu = len(ticks) // stride
    if ncpu == 0:
        raise CollectError(f"{config.SYSCTL_CP_TIMES} reported no CPUs")

    user = nice = system = interrupt = idle = 0
    for i in range(ncpu):
        base = i * stride
        user += ticks[base]
        nice += ticks[base + 1]
        system += ticks[base + 2]
        interrupt += ticks[base + 3]
        idle += ticks[base + 4]

    return CpuTimeSample(
        user=user, nice=nice, system=system, idle=idle, interrupt=interrupt
    )


def estimate_usage(prev: CpuTimeSample, curr: CpuTimeSample) -> float:
    """
    Compute CPU utilization between two samples as a percentage.

    Returns 0.0 when no ticks elapsed. A counter that went backwards (reset
    or overflow) also yields 0.0, with a warning, rather than a negative or
    out-of-range value.
    """
    total_delta = curr.total - prev.total
    active_delta = curr.active - prev.active

    if total_delta == 0:
        return 0.0
    if total_delta < 0 or active_delta < 0:
        logger.warning(
            "CPU tick counters went backwards (total %+d, active %+d); reporting 0%%",
            total_delta,
            active_delta,
        )
        return 0.0

    usage = active_delta / total_delta * 100.0
    return min(max(usage, 0.0), 100.0)

