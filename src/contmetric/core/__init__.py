"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from contmetric.core.config import load_config
from contmetric.core.constants import (
    MIN_LIMITED_CORES,
    NANOS_PER_SECOND,
    UNLIMITED_CFS_QUOTA,
)
from contmetric.core.exceptions import (
    ConfigurationError,
    ContmetricError,
    InvalidConfigurationError,
    InvalidFormatError,
    MissingFieldError,
    NoClockTickError,
    NoCoreCountError,
    NoDefaultInterfaceError,
    NoLimitedCoreCountError,
    NotFoundError,
    ParseError,
)
from contmetric.core.schemas import (
    CgroupPaths,
    CPUStat,
    DiskStat,
    MemStat,
    MonitorConfig,
    NetworkStat,
    ResourceSnapshot,
)

__all__ = [
    "MIN_LIMITED_CORES",
    "NANOS_PER_SECOND",
    "UNLIMITED_CFS_QUOTA",
    "CgroupPaths",
    "ConfigurationError",
    "ContmetricError",
    "CPUStat",
    "DiskStat",
    "InvalidConfigurationError",
    "InvalidFormatError",
    "load_config",
    "MemStat",
    "MissingFieldError",
    "MonitorConfig",
    "NetworkStat",
    "NoClockTickError",
    "NoCoreCountError",
    "NoDefaultInterfaceError",
    "NoLimitedCoreCountError",
    "NotFoundError",
    "ParseError",
    "ResourceSnapshot",
]
