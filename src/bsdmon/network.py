"""Network interface enumeration."""

import ipaddress
import logging
import socket

import psutil

from bsdmon.errors import CollectError
from bsdmon.models import NetworkInterfaceRecord

logger = logging.getLogger(__name__)

LOOPBACK_FLAG = "loopback"


def _lookup_stats(stats: dict, name: str):
    """Find the stats entry for ``name``, falling back to the base device of an alias."""
    entry = stats.get(name)
    if entry is None:
        # Alias labels such as lo:1 have no stats entry of their own
        entry = stats.get(name.partition(":")[0])
    return entry


def _is_loopback(stats) -> bool:
    if stats is None:
        return False
    flags = getattr(stats, "flags", "") or ""
    return LOOPBACK_FLAG in flags.split(",")


def _dotted_quad(value: str | None) -> str | None:
    if not value:
        return None
    try:
        return str(ipaddress.IPv4Address(value))
    except ValueError:
        return None


def list_interfaces() -> list[NetworkInterfaceRecord]:
    """
    List IPv4 addresses of all non-loopback interfaces.

    Loopback interfaces are recognised by their IFF_LOOPBACK flag, not by
    name. An interface with several IPv4 addresses yields one record per
    address. Entries whose address or netmask cannot be rendered are
    skipped so the rest of the list is still reported.
    """
    try:
        addrs = psutil.net_if_addrs()
        stats = psutil.net_if_stats()
    except OSError as exc:
        raise CollectError(f"cannot list network interfaces: {exc}") from exc

    records: list[NetworkInterfaceRecord] = []
    for name, entries in addrs.items():
        if _is_loopback(_lookup_stats(stats, name)):
            continue
        for entry in entries:
            if not entry.address or entry.family != socket.AF_INET:
                continue
            address = _dotted_quad(entry.address)
            netmask = _dotted_quad(entry.netmask)
            if address is None or netmask is None:
                logger.debug(
                    "skipping %s: cannot render %r/%r", name, entry.address, entry.netmask
                )
                continue
            records.append(NetworkInterfaceRecord(name, address, netmask))

    return records
