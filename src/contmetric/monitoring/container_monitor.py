"""Periodic resource monitor for the current container.

This module implements the agent loop: a background thread that, once per
interval, reads every enabled stat reader and a CPU sample spanning the same
interval, then hands a ResourceSnapshot to a callback. Nothing is retained
between ticks.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import TimeoutError as FutureTimeoutError

from contmetric.core.exceptions import ContmetricError
from contmetric.core.schemas import MonitorConfig, ResourceSnapshot
from contmetric.monitoring.base import BaseStatReader
from contmetric.monitoring.cpu import CPUSampler
from contmetric.monitoring.disk import DiskStatReader
from contmetric.monitoring.limits import resolve_cpu_environment
from contmetric.monitoring.memory import MemoryStatReader
from contmetric.monitoring.network import NetworkStatReader

logger = logging.getLogger(__name__)

# Extra time allowed for the second CPU reading beyond the interval
CPU_RESULT_GRACE_SECONDS = 5.0

SnapshotCallback = Callable[[ResourceSnapshot], None]


class ContainerMonitor:
    """Background monitor emitting one ResourceSnapshot per interval.

    Example:
        ```python
        monitor = ContainerMonitor(config, on_snapshot=print)
        monitor.start()
        # ... agent runs ...
        monitor.stop()
        ```
    """

    def __init__(
        self,
        config: MonitorConfig | None = None,
        on_snapshot: SnapshotCallback | None = None,
        cpu_sampler: CPUSampler | None = None,
    ) -> None:
        """Initialize the monitor.

        Startup facts for the CPU sampler are resolved here, once, unless a
        sampler is passed in.

        Args:
            config: Monitor configuration (defaults if None)
            on_snapshot: Called with each snapshot from the monitor thread
            cpu_sampler: Pre-built CPU sampler
        """
        self._config = config or MonitorConfig()
        self._on_snapshot = on_snapshot
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        paths = self._config.paths
        self._cpu_sampler: CPUSampler | None = None
        if self._config.collect_cpu:
            self._cpu_sampler = cpu_sampler or CPUSampler(resolve_cpu_environment(paths), paths)

        self._readers: list[BaseStatReader] = []
        if self._config.collect_memory:
            self._readers.append(MemoryStatReader(paths))
        if self._config.collect_disk:
            self._readers.append(DiskStatReader(paths))
        if self._config.collect_network:
            self._readers.append(NetworkStatReader(paths, self._config.interface))

    @property
    def cpu_sampler(self) -> CPUSampler | None:
        return self._cpu_sampler

    @property
    def readers(self) -> list[BaseStatReader]:
        return list(self._readers)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background monitoring thread."""
        if self.running:
            logger.warning("Monitor already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._monitor_loop, daemon=True)
        self._thread.start()
        logger.debug(f"Started monitor '{self._config.name}'")

    def stop(self, timeout: float | None = None) -> None:
        """Signal the monitor thread to exit and wait for it.

        A CPU sample already in flight still completes; the thread exits
        after delivering that tick.
        """
        self._stop_event.set()
        if self._thread is not None:
            wait = timeout
            if wait is None:
                wait = self._config.interval_seconds + CPU_RESULT_GRACE_SECONDS
            self._thread.join(timeout=wait)
            if self._thread.is_alive():
                logger.warning("Monitor thread did not exit in time")
            self._thread = None

    def collect_once(self) -> ResourceSnapshot:
        """Collect a single snapshot synchronously.

        Blocks for one interval when CPU collection is enabled.
        """
        interval = self._config.interval_seconds
        cpu_future = self._cpu_sampler.sample(interval) if self._cpu_sampler else None

        snapshot = ResourceSnapshot(name=self._config.name)
        for reader in self._readers:
            try:
                setattr(snapshot, reader.name, reader.read())
            except (ContmetricError, OSError) as e:
                logger.debug(f"{reader.name} read failed: {e}")
                snapshot.errors[reader.name] = str(e)

        if cpu_future is not None:
            try:
                snapshot.cpu = cpu_future.result(timeout=interval + CPU_RESULT_GRACE_SECONDS)
            except FutureTimeoutError:
                cpu_future.cancel()
                snapshot.errors["cpu"] = "timed out waiting for CPU sample"
            except (ContmetricError, OSError) as e:
                snapshot.errors["cpu"] = str(e)

        return snapshot

    def _monitor_loop(self) -> None:
        """Background loop producing one snapshot per interval."""
        interval = self._config.interval_seconds
        while not self._stop_event.is_set():
            started = time.monotonic()
            snapshot = self.collect_once()
            if snapshot.errors:
                logger.debug(f"Snapshot errors: {snapshot.errors}")

            if self._on_snapshot is not None:
                try:
                    self._on_snapshot(snapshot)
                except Exception:
                    logger.exception("Snapshot callback raised")

            # A CPU sample that failed early returns before the interval elapses
            elapsed = time.monotonic() - started
            self._stop_event.wait(max(0.0, interval - elapsed))
