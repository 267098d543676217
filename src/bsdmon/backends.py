"""Choose the platform-specific collectors once, at start-up."""

import sys
from dataclasses import dataclass

from bsdmon.cpu import CpuCollector, FreeBSDCpuCollector, LinuxCpuCollector
from bsdmon.errors import CollectError
from bsdmon.memory import FreeBSDMemoryCollector, LinuxMemoryCollector, MemoryCollector
from bsdmon.sysctl import SysctlReader

LINUX = "linux"
FREEBSD = "freebsd"


@dataclass(slots=True, frozen=True)
class Collectors:
    """The CPU and memory strategies for one platform."""

    platform: str
    cpu: CpuCollector
    memory: MemoryCollector


def detect_platform(system: str | None = None) -> str:
    """Map a ``sys.platform`` value to a supported platform name."""
    system = sys.platform if system is None else system
    if system.startswith(LINUX):
        return LINUX
    if system.startswith(FREEBSD):
        return FREEBSD
    raise CollectError(f"unsupported platform: {system}")


def get_collectors(system: str | None = None) -> Collectors:
    """Build the collector bundle for the running (or given) platform."""
    platform = detect_platform(system)
    if platform == FREEBSD:
        reader = SysctlReader()
        return Collectors(
            platform=platform,
            cpu=FreeBSDCpuCollector(reader),
            memory=FreeBSDMemoryCollector(reader),
        )
    return Collectors(
        platform=platform,
        cpu=LinuxCpuCollector(),
        memory=LinuxMemoryCollector(),
    )
