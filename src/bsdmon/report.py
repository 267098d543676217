"""Text rendering of a bsdmon snapshot."""

from bsdmon.models import DiskStat, MemoryStat, NetworkInterfaceRecord

TITLE = "bsdmon - System Monitor"
ERROR_TEXT = "Error retrieving information"


def format_header() -> list[str]:
    """Title line and its underline."""
    return [TITLE, "=" * len(TITLE)]


def format_cpu(usage: float) -> str:
    """Format CPU usage with two decimals."""
    return f"CPU Usage: {usage:.2f}%"


def format_memory(stat: MemoryStat | None) -> str:
    """Format memory usage, or the inline error line when ``stat`` is None."""
    if stat is None:
        return f"Memory Usage: {ERROR_TEXT}"
    return (
        f"Memory Usage: {stat.used_gb:.2f} GB / {stat.total_gb:.2f} GB "
        f"({stat.percent_used:.2f}% used)"
    )


def format_disk(stat: DiskStat | None) -> str:
    """Format disk usage, or the inline error line when ``stat`` is None."""
    if stat is None:
        return f"Disk Usage: {ERROR_TEXT}"
    return (
        f'Disk Usage ("{stat.mount_point}"): {stat.used_gb:.2f} GB / '
        f"{stat.total_gb:.2f} GB ({stat.percent_used:.2f}% used)"
    )


def format_interfaces(records: list[NetworkInterfaceRecord] | None) -> list[str]:
    """Heading plus one indented line per interface address."""
    if records is None:
        return [f"Network interfaces: {ERROR_TEXT}"]
    lines = ["Network interfaces:"]
    for record in records:
        lines.append(f"  {record.name}: {record.ipv4_address} (mask: {record.ipv4_netmask})")
    return lines
