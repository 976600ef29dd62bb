"""Monitoring module - cgroup v1 resource readers.

Provides:
- CPUSampler: two-point CPU usage measurement
- MemoryStatReader, DiskStatReader, NetworkStatReader: single-shot readers
- ContainerMonitor: periodic agent loop over all of the above

Shared utilities:
- readers: pseudo-file parsing primitives
- units: tick/nanosecond and byte conversions
"""

from __future__ import annotations

from contmetric.monitoring.base import BaseStatReader
from contmetric.monitoring.container_monitor import ContainerMonitor
from contmetric.monitoring.cpu import (
    CPUSample,
    CPUSampler,
    compute_usage,
    get_default_sampler,
    sample_cpu_usage,
)
from contmetric.monitoring.disk import DiskStatReader
from contmetric.monitoring.limits import (
    CPUEnvironment,
    parse_cpuset_cores,
    resolve_clock_tick,
    resolve_core_count,
    resolve_cpu_environment,
    resolve_limited_core_count,
)
from contmetric.monitoring.memory import MemoryStatReader
from contmetric.monitoring.network import NetworkStatReader, find_default_interface
from contmetric.monitoring.readers import (
    count_tokens,
    read_keyed_counters,
    read_signed_counter,
    read_system_cpu_ticks,
    read_unsigned_counter,
)

__all__ = [
    "BaseStatReader",
    "ContainerMonitor",
    "compute_usage",
    "count_tokens",
    "CPUEnvironment",
    "CPUSample",
    "CPUSampler",
    "DiskStatReader",
    "find_default_interface",
    "get_default_sampler",
    "MemoryStatReader",
    "NetworkStatReader",
    "parse_cpuset_cores",
    "read_keyed_counters",
    "read_signed_counter",
    "read_system_cpu_ticks",
    "read_unsigned_counter",
    "resolve_clock_tick",
    "resolve_core_count",
    "resolve_cpu_environment",
    "resolve_limited_core_count",
    "sample_cpu_usage",
]
