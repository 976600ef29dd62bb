"""Unit conversion helpers.

/proc/stat counts CPU time in clock ticks (1 / CLK_TCK seconds) while
cpuacct.usage counts nanoseconds; both must be brought to nanoseconds before
they can be compared.
"""

from __future__ import annotations

from contmetric.core.constants import BYTES_PER_MB, NANOS_PER_SECOND


def nanos_per_tick(clock_tick_hz: int) -> float:
    """Nanoseconds in one clock tick, 0.0 if the tick rate is unknown."""
    if clock_tick_hz <= 0:
        return 0.0
    return NANOS_PER_SECOND / clock_tick_hz


def ticks_to_nanos(ticks: int, clock_tick_hz: int) -> float:
    """Convert a clock tick count to nanoseconds."""
    return ticks * nanos_per_tick(clock_tick_hz)


def bytes_to_mb(byte_count: int | float) -> float:
    """Convert bytes to megabytes.

    Args:
        byte_count: Number of bytes

    Returns:
        Megabytes (float)
    """
    return byte_count / BYTES_PER_MB


def kib_to_bytes(kib: int) -> int:
    """Convert a /proc/meminfo kB value to bytes."""
    return kib * 1024
