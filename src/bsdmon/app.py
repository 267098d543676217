"""bsdmon - one-shot system report."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from rich.console import Console

from bsdmon import config
from bsdmon.backends import Collectors, get_collectors
from bsdmon.cpu import estimate_usage
from bsdmon.disk import sample_disk
from bsdmon.errors import MonitorError
from bsdmon.network import list_interfaces
from bsdmon.report import (
    format_cpu,
    format_disk,
    format_header,
    format_interfaces,
    format_memory,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Plain text only: the report layout must come out byte for byte
CONSOLE_OPTIONS = {"markup": False, "highlight": False, "emoji": False, "soft_wrap": True}


def _collect(section: str, func: Callable[[], T]) -> T | None:
    """Run a non-essential collector, returning None if it fails."""
    try:
        return func()
    except MonitorError as exc:
        logger.warning("%s collection failed: %s", section, exc)
        return None


def run(
    collectors: Collectors | None = None,
    console: Console | None = None,
    err_console: Console | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Print one snapshot and return the process exit status.

    Only CPU sampling is fatal. Memory, disk and network failures are shown
    as inline error lines and the rest of the report is still printed.
    """
    console = console or Console(**CONSOLE_OPTIONS)
    err_console = err_console or Console(stderr=True, **CONSOLE_OPTIONS)

    for line in format_header():
        console.print(line)

    try:
        collectors = collectors or get_collectors()
        prev = collectors.cpu.sample()
    except MonitorError as exc:
        logger.error("initial CPU sample failed: %s", exc)
        err_console.print("Failed to get initial CPU times")
        return 1

    sleep(config.CPU_SAMPLE_INTERVAL)

    try:
        curr = collectors.cpu.sample()
    except MonitorError as exc:
        logger.error("CPU sample failed: %s", exc)
        err_console.print("Failed to get CPU times")
        return 1

    console.print(format_cpu(estimate_usage(prev, curr)))
    console.print(format_memory(_collect("memory", collectors.memory.sample)))
    console.print(format_disk(_collect("disk", sample_disk)))
    for line in format_interfaces(_collect("network", list_interfaces)):
        console.print(line)

    return 0


def main() -> None:
    """Entry point for bsdmon."""
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    raise SystemExit(run())


if __name__ == "__main__":
    main()
