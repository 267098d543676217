"""Filesystem usage collector."""

import psutil

from bsdmon import config
from bsdmon.errors import CollectError
from bsdmon.models import DiskStat, percent


def sample_disk(mount_point: str = config.DISK_MOUNT_POINT) -> DiskStat:
    """
    Return capacity and usage of the filesystem mounted at ``mount_point``.

    psutil derives both figures from statvfs(3): total is
    ``f_blocks * f_frsize`` and used is ``(f_blocks - f_bfree) * f_frsize``,
    so blocks reserved for root count as free.
    """
    try:
        usage = psutil.disk_usage(mount_point)
    except OSError as exc:
        raise CollectError(f"cannot stat filesystem at {mount_point}: {exc}") from exc

    return DiskStat(
        mount_point=mount_point,
        used_bytes=usage.used,
        total_bytes=usage.total,
        percent_used=percent(usage.used, usage.total),
    )
