"""Block I/O stat reader for cgroup v1.

Format (blkio.io_service_bytes_recursive):
    8:0 Read 1220608
    8:0 Write 0
    8:0 Sync 1220608
    8:0 Async 0
    8:0 Total 1220608
    Total 1220608

Which blkio file carries data depends on the I/O scheduler, so candidates are
tried in order until one reports non-zero bytes; that file is then used for
every later read.
"""

from __future__ import annotations

import logging
from pathlib import Path

from contmetric.core.schemas import CgroupPaths, DiskStat
from contmetric.monitoring.base import BaseStatReader
from contmetric.monitoring.readers import read_text

logger = logging.getLogger(__name__)


def read_blkio_bytes(path: Path | str) -> tuple[int, int]:
    """Sum the Read and Write rows of a blkio bytes file.

    Rows that are not ``<device> <op> <bytes>`` are ignored.
    """
    read = 0
    write = 0
    for line in read_text(path).splitlines():
        parts = line.split()
        if len(parts) != 3 or not parts[2].isdecimal():
            continue
        if parts[1] == "Read":
            read += int(parts[2])
        elif parts[1] == "Write":
            write += int(parts[2])
    return read, write


class DiskStatReader(BaseStatReader[DiskStat]):
    """Reads cumulative read/write bytes for the cgroup."""

    def __init__(self, paths: CgroupPaths | None = None) -> None:
        self._paths = paths or CgroupPaths()
        self._active_file: Path | None = None

    @property
    def name(self) -> str:
        return "disk"

    @property
    def active_file(self) -> Path | None:
        """The blkio file selected for reads, once one has reported data."""
        return self._active_file

    def source_paths(self) -> list[Path]:
        return list(self._paths.blkio_files)

    def read(self) -> DiskStat:
        if self._active_file is not None:
            read, write = read_blkio_bytes(self._active_file)
            return DiskStat(read=read, write=write)

        for path in self._paths.blkio_files:
            try:
                read, write = read_blkio_bytes(path)
            except OSError as e:
                logger.debug(f"Skipping blkio file {path}: {e}")
                continue
            if read + write > 0:
                logger.debug(f"Using blkio file {path}")
                self._active_file = path
                return DiskStat(read=read, write=write)

        # No I/O recorded yet in any candidate
        return DiskStat()
