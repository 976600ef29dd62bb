"""Pydantic schemas for contmetric.

This module defines the data contracts used throughout the package: the
pseudo-file locations and monitor settings loaded from configuration, and the
immutable stat records produced by the readers.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from contmetric.core.constants import BYTES_PER_MB


class CgroupPaths(BaseModel):
    """Locations of the cgroup v1 and procfs pseudo-files.

    Defaults match a container with the v1 controllers mounted under
    /sys/fs/cgroup. Overriding them is mainly useful for tests and for
    agents running outside the container namespace.
    """

    proc_stat: Path = Field(default=Path("/proc/stat"))
    proc_meminfo: Path = Field(default=Path("/proc/meminfo"))
    cpuacct_usage: Path = Field(default=Path("/sys/fs/cgroup/cpuacct/cpuacct.usage"))
    cpuacct_usage_percpu: Path = Field(
        default=Path("/sys/fs/cgroup/cpuacct/cpuacct.usage_percpu")
    )
    cpu_stat: Path = Field(default=Path("/sys/fs/cgroup/cpu/cpu.stat"))
    cfs_quota_us: Path = Field(default=Path("/sys/fs/cgroup/cpu/cpu.cfs_quota_us"))
    cfs_period_us: Path = Field(default=Path("/sys/fs/cgroup/cpu/cpu.cfs_period_us"))
    cpuset_cpus: Path = Field(default=Path("/sys/fs/cgroup/cpuset/cpuset.cpus"))
    memory_stat: Path = Field(default=Path("/sys/fs/cgroup/memory/memory.stat"))
    blkio_files: list[Path] = Field(
        default_factory=lambda: [
            Path("/sys/fs/cgroup/blkio/blkio.io_service_bytes_recursive"),
            Path("/sys/fs/cgroup/blkio/blkio.throttle.io_service_bytes"),
        ],
        description="Candidate blkio byte-count files, tried in order",
    )
    net_class_dir: Path = Field(default=Path("/sys/class/net"))

    @classmethod
    def rooted_at(cls, root: Path | str) -> CgroupPaths:
        """Return the default layout re-rooted under ``root``.

        Useful when the host's /proc and /sys are bind-mounted elsewhere.
        """
        root = Path(root)
        defaults = cls()
        data: dict[str, Path | list[Path]] = {}
        for key, value in defaults.model_dump().items():
            if isinstance(value, list):
                data[key] = [root / p.relative_to("/") for p in value]
            else:
                data[key] = root / value.relative_to("/")
        return cls.model_validate(data)


class MonitorConfig(BaseModel):
    """Top-level monitor configuration.

    This is the main configuration loaded from YAML/JSON files.
    """

    name: str = Field(default="contmetric", description="Name reported with each snapshot")
    interval_seconds: float = Field(
        default=1.0, ge=0.05, le=3600, description="Sampling interval"
    )
    paths: CgroupPaths = Field(default_factory=CgroupPaths)
    collect_cpu: bool = Field(default=True)
    collect_memory: bool = Field(default=True)
    collect_disk: bool = Field(default=True)
    collect_network: bool = Field(default=True)
    interface: str | None = Field(
        default=None, description="Network interface (default route interface if unset)"
    )
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


class CPUStat(BaseModel):
    """Result of one CPU sampling cycle.

    ``usage`` is a percentage of all visible cores and is not clamped; it can
    exceed ``limited_cores * 100`` under short intervals or read skew.
    ``throttled`` is the cumulative nr_throttled value, not a delta.
    """

    model_config = {"frozen": True}

    limited_cores: float = Field(ge=0)
    usage: float
    throttled: int = Field(default=0, ge=0)

    @property
    def usage_of_limit(self) -> float:
        """Usage as a percentage of the cores the cgroup is allowed to use."""
        if self.limited_cores <= 0:
            return 0.0
        return self.usage / self.limited_cores

    def __str__(self) -> str:
        return (
            f"LimitedCores: {self.limited_cores:.2f}, "
            f"Usage: {self.usage:.2f}%, Throttled: {self.throttled}"
        )


class MemStat(BaseModel):
    """Memory usage of the cgroup, in bytes."""

    model_config = {"frozen": True}

    total: int = Field(ge=0, description="min(hierarchical_memory_limit, host MemTotal)")
    rss: int = Field(ge=0, description="total_rss + total_mapped_file")
    cached: int = Field(ge=0, description="total_cache")
    mapped_file: int = Field(ge=0, description="total_mapped_file")
    swap_total: int = Field(default=0, ge=0)
    swap_used: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return (
            f"Total: {self.total // BYTES_PER_MB} RSS: {self.rss // BYTES_PER_MB} "
            f"Cached: {self.cached // BYTES_PER_MB} "
            f"MappedFile: {self.mapped_file // BYTES_PER_MB}\n"
            f"SwapTotal: {self.swap_total // BYTES_PER_MB} "
            f"SwapUsed: {self.swap_used // BYTES_PER_MB}"
        )


class DiskStat(BaseModel):
    """Cumulative block I/O bytes of the cgroup."""

    model_config = {"frozen": True}

    read: int = Field(default=0, ge=0)
    write: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return f"Read: {self.read}, Write: {self.write}"


class NetworkStat(BaseModel):
    """Cumulative byte counters of the container's default interface."""

    model_config = {"frozen": True}

    interface: str
    rx_bytes: int = Field(default=0, ge=0)
    tx_bytes: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return f"RxBytes: {self.rx_bytes}, TxBytes: {self.tx_bytes}"


class ResourceSnapshot(BaseModel):
    """One tick of the periodic monitor.

    A stat is None when its reader is disabled or failed; failures are
    recorded in ``errors`` keyed by reader name.
    """

    name: str
    timestamp: datetime = Field(default_factory=datetime.now)
    cpu: CPUStat | None = None
    memory: MemStat | None = None
    disk: DiskStat | None = None
    network: NetworkStat | None = None
    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when no enabled reader failed."""
        return not self.errors
