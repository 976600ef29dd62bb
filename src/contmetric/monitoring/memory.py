"""Memory stat reader for cgroup v1.

Metrics sourced from memory.stat (hierarchical totals):
- hierarchical_memory_limit / hierarchical_memsw_limit
- total_rss, total_cache, total_mapped_file, total_swap

Docs: https://www.kernel.org/doc/Documentation/cgroup-v1/memory.txt
"""

from __future__ import annotations

import logging
from pathlib import Path

from contmetric.core.exceptions import MissingFieldError, ParseError
from contmetric.core.schemas import CgroupPaths, MemStat
from contmetric.monitoring.base import BaseStatReader
from contmetric.monitoring.readers import read_keyed_counters, read_text
from contmetric.monitoring.units import kib_to_bytes

logger = logging.getLogger(__name__)


def read_host_mem_total(path: Path | str = "/proc/meminfo") -> int:
    """Read MemTotal from /proc/meminfo in bytes.

    Format:
        MemTotal:       16318480 kB
    """
    for line in read_text(path).splitlines():
        parts = line.split()
        if len(parts) < 2 or parts[0] != "MemTotal:":
            continue
        if not parts[1].isdecimal():
            raise ParseError(f"Invalid MemTotal in {path}: {line!r}")
        return kib_to_bytes(int(parts[1]))
    raise ParseError(f"MemTotal not found in {path}")


def swap_state(stats: dict[str, int]) -> tuple[int, int]:
    """Return (swap_total, swap_used) from memory.stat counters.

    Swap is reported only when memsw accounting is on and its limit differs
    from the plain memory limit.
    """
    memsw_limit = stats.get("hierarchical_memsw_limit")
    if memsw_limit is None:
        return 0, 0

    mem_limit = stats.get("hierarchical_memory_limit", 0)
    if memsw_limit == mem_limit:
        return 0, 0

    return max(0, memsw_limit - mem_limit), stats.get("total_swap", 0)


class MemoryStatReader(BaseStatReader[MemStat]):
    """Reads cgroup memory usage, capping the limit at host memory."""

    def __init__(self, paths: CgroupPaths | None = None) -> None:
        self._paths = paths or CgroupPaths()

    @property
    def name(self) -> str:
        return "memory"

    def source_paths(self) -> list[Path]:
        return [self._paths.memory_stat]

    def read(self) -> MemStat:
        stats = read_keyed_counters(self._paths.memory_stat)

        limit = stats.get("hierarchical_memory_limit")
        if limit is None:
            raise MissingFieldError(f"hierarchical_memory_limit missing from {self._paths.memory_stat}")
        # An unlimited cgroup reports a huge sentinel limit
        total = min(limit, read_host_mem_total(self._paths.proc_meminfo))

        swap_total, swap_used = swap_state(stats)
        mapped_file = stats.get("total_mapped_file", 0)

        return MemStat(
            total=total,
            rss=stats.get("total_rss", 0) + mapped_file,
            cached=stats.get("total_cache", 0),
            mapped_file=mapped_file,
            swap_total=swap_total,
            swap_used=swap_used,
        )
