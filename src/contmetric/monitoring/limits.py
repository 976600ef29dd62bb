"""Resolution of the process-wide CPU facts.

Three values are resolved once at startup and never re-read:

- clock tick rate (CLK_TCK), to convert /proc/stat ticks to nanoseconds
- total core count, the number of per-CPU slots in cpuacct.usage_percpu
- limited core count, how many cores the cgroup may use, from either the
  CFS quota/period pair or, when no quota is set, the cpuset core list

Docs: https://www.kernel.org/doc/Documentation/cgroup-v1/cpusets.txt
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from contmetric.core.constants import UNLIMITED_CFS_QUOTA
from contmetric.core.exceptions import (
    ContmetricError,
    InvalidConfigurationError,
    InvalidFormatError,
)
from contmetric.core.schemas import CgroupPaths
from contmetric.monitoring.readers import (
    count_tokens,
    read_signed_counter,
    read_text,
    read_unsigned_counter,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CPUEnvironment:
    """Startup facts the CPU sampler depends on.

    A zero field means resolution failed; the sampler turns that into the
    matching ConfigurationError instead of dividing by it.
    """

    clock_tick_hz: int = 0
    total_cores: int = 0
    limited_cores: float = 0.0


def parse_cpuset_cores(cpus: str) -> int:
    """Count the cores in a cpuset list such as ``0,2,4-6``.

    Ranges are inclusive on both ends. Order does not matter and overlapping
    entries are summed as written, like the raw kernel file.

    Raises:
        InvalidFormatError: On a token with more than one ``-`` or with
            non-integer range bounds. No partial count is returned.
    """
    line = cpus.strip()
    cores = 0
    for part in line.split(","):
        bounds = part.split("-")
        if len(bounds) == 1:
            cores += 1
            continue
        if len(bounds) > 2:
            raise InvalidFormatError(f"Invalid list format of cpuset.cpus: {line}")
        try:
            low, high = int(bounds[0]), int(bounds[1])
        except ValueError as e:
            raise InvalidFormatError(f"Invalid list format of cpuset.cpus: {line}") from e
        cores += high - low + 1
    return cores


def limited_cores_from_cpuset(paths: CgroupPaths) -> float:
    """Number of cores listed in cpuset.cpus."""
    return float(parse_cpuset_cores(read_text(paths.cpuset_cpus)))


def resolve_limited_core_count(paths: CgroupPaths | None = None) -> float:
    """Resolve how many cores the cgroup is allowed to use.

    With a CFS quota set the result is ``quota / period`` (fractional cores
    by time slicing). A quota of -1 means no quota and the cpuset list is
    counted instead; the period file is not read in that case.

    Raises:
        InvalidConfigurationError: If cfs_period_us is zero
        InvalidFormatError: If the cpuset list is malformed
        NotFoundError, ParseError: On unreadable pseudo-files
    """
    paths = paths or CgroupPaths()

    quota = read_signed_counter(paths.cfs_quota_us)
    if quota == UNLIMITED_CFS_QUOTA:
        logger.debug("No CFS quota set, counting cpuset cores")
        return limited_cores_from_cpuset(paths)

    period = read_unsigned_counter(paths.cfs_period_us)
    if period <= 0:
        raise InvalidConfigurationError(f"{paths.cfs_period_us} is zero")

    return quota / period


def resolve_core_count(paths: CgroupPaths | None = None) -> int:
    """Count the per-CPU accounting slots in cpuacct.usage_percpu.

    Only the number of tokens matters, not their values.
    """
    paths = paths or CgroupPaths()
    return count_tokens(paths.cpuacct_usage_percpu)


def resolve_clock_tick() -> int:
    """Query the kernel clock tick rate (``getconf CLK_TCK``)."""
    return os.sysconf("SC_CLK_TCK")


def resolve_cpu_environment(paths: CgroupPaths | None = None) -> CPUEnvironment:
    """Resolve all three startup facts.

    Failures are logged and leave the affected field at zero so that startup
    always succeeds and sampling later reports exactly which fact is missing.
    """
    paths = paths or CgroupPaths()

    total_cores = 0
    try:
        total_cores = resolve_core_count(paths)
    except (ContmetricError, OSError) as e:
        logger.warning(f"Could not resolve core count: {e}")

    limited_cores = 0.0
    try:
        limited_cores = resolve_limited_core_count(paths)
    except (ContmetricError, OSError) as e:
        logger.warning(f"Could not resolve limited core count: {e}")

    clock_tick_hz = 0
    try:
        clock_tick_hz = max(0, resolve_clock_tick())
    except (ValueError, OSError) as e:
        logger.warning(f"Could not resolve clock tick: {e}")

    env = CPUEnvironment(
        clock_tick_hz=clock_tick_hz,
        total_cores=total_cores,
        limited_cores=limited_cores,
    )
    logger.debug(f"Resolved CPU environment: {env}")
    return env
