"""Data models for bsdmon."""

from dataclasses import dataclass

BYTES_PER_KIB = 1024
BYTES_PER_GB = 1024**3


def kib_to_bytes(value: int) -> int:
    """Convert kibibytes (as reported by /proc/meminfo) to bytes."""
    return value * BYTES_PER_KIB


def bytes_to_gb(value: int) -> float:
    """Convert bytes to binary gigabytes."""
    return value / BYTES_PER_GB


def percent(part: int, whole: int) -> float:
    """Return part as a percentage of whole, 0.0 when whole is zero."""
    if whole == 0:
        return 0.0
    return part / whole * 100.0


@dataclass(slots=True, frozen=True)
class CpuTimeSample:
    """Immutable bundle of cumulative CPU tick counters since boot.

    ``interrupt`` is only reported by kernels that keep a separate interrupt
    bucket (FreeBSD's CP_INTR); it is None everywhere else.
    """

    user: int
    nice: int
    system: int
    idle: int
    interrupt: int | None = None

    @property
    def has_interrupt(self) -> bool:
        """Whether this sample carries interrupt time."""
        return self.interrupt is not None

    @property
    def active(self) -> int:
        """Ticks spent doing work (everything except idle)."""
        ticks = self.user + self.nice + self.system
        if self.has_interrupt:
            ticks += self.interrupt
        return ticks

    @property
    def total(self) -> int:
        """All ticks, active plus idle."""
        return self.active + self.idle


@dataclass(slots=True, frozen=True)
class MemoryStat:
    """Physical memory usage at one point in time."""

    used_bytes: int
    total_bytes: int
    percent_used: float

    @classmethod
    def from_bytes(cls, used_bytes: int, total_bytes: int) -> "MemoryStat":
        """Build a MemoryStat, deriving the percentage from the byte counts."""
        return cls(used_bytes, total_bytes, percent(used_bytes, total_bytes))

    @property
    def used_gb(self) -> float:
        return bytes_to_gb(self.used_bytes)

    @property
    def total_gb(self) -> float:
        return bytes_to_gb(self.total_bytes)


@dataclass(slots=True, frozen=True)
class DiskStat:
    """Capacity and usage of the filesystem mounted at ``mount_point``."""

    mount_point: str
    used_bytes: int
    total_bytes: int
    percent_used: float

    @property
    def used_gb(self) -> float:
        return bytes_to_gb(self.used_bytes)

    @property
    def total_gb(self) -> float:
        return bytes_to_gb(self.total_bytes)


@dataclass(slots=True, frozen=True)
class NetworkInterfaceRecord:
    """One IPv4 address bound to a non-loopback interface."""

    name: str
    ipv4_address: str
    ipv4_netmask: str
