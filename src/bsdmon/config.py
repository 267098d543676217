"""Static configuration for bsdmon.

The tool takes no flags or environment variables; everything tunable lives here.
"""

import logging

# Linux /proc sources
PROC_STAT_PATH = "/proc/stat"
PROC_MEMINFO_PATH = "/proc/meminfo"

# FreeBSD sysctl names
SYSCTL_CP_TIMES = "kern.cp_times"
SYSCTL_PHYSMEM = "hw.physmem"
SYSCTL_FREE_COUNT = "vm.stats.vm.v_free_count"

# kern.cp_times stride: CP_USER, CP_NICE, CP_SYS, CP_INTR, CP_IDLE
CPUSTATES = 5

# Report settings
DISK_MOUNT_POINT = "/"
CPU_SAMPLE_INTERVAL = 1.0  # seconds between the two CPU samples

# Diagnostics go to stderr so they never interleave with the report
LOG_LEVEL = logging.WARNING
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
