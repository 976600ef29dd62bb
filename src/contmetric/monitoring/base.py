"""Base stat reader abstract class.

All single-shot readers (memory, disk, network) implement this interface so
the periodic monitor can drive them uniformly. The CPU sampler is separate
because it needs two readings across an interval.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

StatT = TypeVar("StatT", bound=BaseModel)


class BaseStatReader(ABC, Generic[StatT]):
    """Abstract base class for pseudo-file stat readers.

    Implementations:
    - MemoryStatReader: memory.stat + /proc/meminfo
    - DiskStatReader: blkio byte counters
    - NetworkStatReader: /sys/class/net statistics
    """

    @abstractmethod
    def read(self) -> StatT:
        """Read the current cumulative stat.

        Raises:
            ContmetricError: If a source file is missing or malformed
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used as the snapshot key."""

    @abstractmethod
    def source_paths(self) -> list[Path]:
        """Pseudo-files this reader depends on."""

    def is_available(self) -> bool:
        """Check whether at least one source file is readable."""
        for path in self.source_paths():
            try:
                path.read_bytes()
                return True
            except OSError:
                logger.debug(f"{self.name}: {path} not readable")
        return False
