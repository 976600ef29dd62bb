"""contmetric - container resource metrics from cgroup v1 pseudo-files."""

from __future__ import annotations

from contmetric.core.schemas import (
    CgroupPaths,
    CPUStat,
    DiskStat,
    MemStat,
    MonitorConfig,
    NetworkStat,
    ResourceSnapshot,
)
from contmetric.monitoring.container_monitor import ContainerMonitor
from contmetric.monitoring.cpu import CPUSampler, sample_cpu_usage
from contmetric.monitoring.limits import CPUEnvironment, resolve_cpu_environment

__version__ = "0.1.0"

__all__ = [
    "CgroupPaths",
    "ContainerMonitor",
    "CPUEnvironment",
    "CPUSampler",
    "CPUStat",
    "DiskStat",
    "MemStat",
    "MonitorConfig",
    "NetworkStat",
    "ResourceSnapshot",
    "resolve_cpu_environment",
    "sample_cpu_usage",
    "__version__",
]
