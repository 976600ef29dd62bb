"""Shared constants for contmetric.

Centralized constants to avoid duplication and ensure consistency across modules.
"""

from __future__ import annotations

NANOS_PER_SECOND = 1_000_000_000

# cpu.cfs_quota_us value meaning "no CPU-time quota"
UNLIMITED_CFS_QUOTA = -1

# Limited core counts below this are treated as unresolved
MIN_LIMITED_CORES = 0.01

# system_delta (ns) at or below this is a degenerate denominator
MIN_SYSTEM_DELTA_NS = 1.0

BYTES_PER_MB = 1024 * 1024
