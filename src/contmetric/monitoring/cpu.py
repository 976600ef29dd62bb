"""CPU utilization sampler for a cgroup v1 container.

Usage is measured as a delta between two readings taken ``interval`` apart:

    cpu_delta    = cpuacct.usage(t2) - cpuacct.usage(t1)           # ns
    system_delta = (/proc/stat(t2) - /proc/stat(t1)) * 1e9 / CLK_TCK # ticks -> ns
    usage        = cpu_delta / system_delta * total_cores * 100

/proc/stat sums time across all host cores, so multiplying by the core count
expresses usage as "percent of one core", e.g. 200.0 for two busy cores.

The baseline is read on the caller's thread; the second reading runs on a
daemon timer thread and is delivered through a Future and an optional
``on_complete(stat, error)`` callback.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import timedelta

from contmetric.core.constants import MIN_LIMITED_CORES, MIN_SYSTEM_DELTA_NS
from contmetric.core.exceptions import (
    ContmetricError,
    NoClockTickError,
    NoCoreCountError,
    NoLimitedCoreCountError,
)
from contmetric.core.schemas import CgroupPaths, CPUStat
from contmetric.monitoring.limits import CPUEnvironment, resolve_cpu_environment
from contmetric.monitoring.readers import (
    read_keyed_counters,
    read_system_cpu_ticks,
    read_unsigned_counter,
)
from contmetric.monitoring.units import ticks_to_nanos

logger = logging.getLogger(__name__)

CPUStatCallback = Callable[[CPUStat | None, BaseException | None], None]


@dataclass(frozen=True)
class CPUSample:
    """Cgroup and host CPU counters read back-to-back.

    The two reads are not atomic with respect to each other; the small skew
    is accepted as measurement noise.
    """

    cpu_time_ns: int  # cpuacct.usage
    system_ticks: int  # /proc/stat aggregate cpu line


def compute_usage(before: CPUSample, after: CPUSample, environment: CPUEnvironment) -> float:
    """Compute CPU usage percent between two samples.

    Returns 0.0 when the host-wide delta is at or below 1ns (interval too
    short for tick resolution, or a clock anomaly). The result is not clamped.
    """
    cpu_delta = after.cpu_time_ns - before.cpu_time_ns
    system_delta = ticks_to_nanos(after.system_ticks - before.system_ticks, environment.clock_tick_hz)
    if system_delta <= MIN_SYSTEM_DELTA_NS:
        return 0.0
    return (cpu_delta / system_delta) * environment.total_cores * 100.0


def _interval_seconds(interval: float | timedelta) -> float:
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class CPUSampler:
    """Two-point CPU usage sampler bound to a resolved CPUEnvironment.

    Calls are independent: each one captures its own baseline and owns its
    own timer, so overlapping calls need no coordination.
    """

    def __init__(self, environment: CPUEnvironment, paths: CgroupPaths | None = None) -> None:
        self._environment = environment
        self._paths = paths or CgroupPaths()

    @property
    def environment(self) -> CPUEnvironment:
        return self._environment

    def check_ready(self) -> None:
        """Raise the ConfigurationError for the first unresolved startup fact."""
        if self._environment.clock_tick_hz == 0:
            raise NoClockTickError()
        if self._environment.total_cores == 0:
            raise NoCoreCountError()
        if self._environment.limited_cores < MIN_LIMITED_CORES:
            raise NoLimitedCoreCountError()

    def take_sample(self) -> CPUSample:
        """Read host ticks, then cgroup nanoseconds."""
        system_ticks = read_system_cpu_ticks(self._paths.proc_stat)
        cpu_time_ns = read_unsigned_counter(self._paths.cpuacct_usage)
        return CPUSample(cpu_time_ns=cpu_time_ns, system_ticks=system_ticks)

    def read_throttled(self) -> int:
        """Cumulative nr_throttled from cpu.stat (0 if the key is absent)."""
        return read_keyed_counters(self._paths.cpu_stat).get("nr_throttled", 0)

    def sample(
        self,
        interval: float | timedelta,
        on_complete: CPUStatCallback | None = None,
    ) -> Future[CPUStat]:
        """Start a CPU measurement over ``interval``.

        Unresolved startup facts and baseline read failures are reported
        before this method returns: ``on_complete`` is called synchronously
        and the returned future is already failed.

        Otherwise the second reading happens on a background thread after
        ``interval``. Cancelling the returned future before then stops the
        timer and skips ``on_complete``; an uncancelled sample always ends
        with either a CPUStat or an error.

        Args:
            interval: Seconds (or timedelta) between the two readings
            on_complete: Optional ``(stat, error)`` continuation

        Returns:
            Future resolving to the CPUStat
        """
        future: Future[CPUStat] = Future()
        try:
            self.check_ready()
            baseline = self.take_sample()
        except (ContmetricError, OSError) as e:
            logger.debug(f"CPU sample failed before baseline: {e}")
            self._deliver(future, on_complete, None, e)
            return future

        timer = threading.Timer(
            _interval_seconds(interval),
            self._complete,
            args=(baseline, future, on_complete),
        )
        timer.daemon = True
        future.add_done_callback(lambda f: timer.cancel() if f.cancelled() else None)
        timer.start()
        return future

    async def sample_async(self, interval: float | timedelta) -> CPUStat:
        """Awaitable variant of :meth:`sample`.

        Cancelling the awaiting task cancels the pending second reading.
        """
        return await asyncio.wrap_future(self.sample(interval))

    def _complete(
        self,
        baseline: CPUSample,
        future: Future[CPUStat],
        on_complete: CPUStatCallback | None,
    ) -> None:
        if not future.set_running_or_notify_cancel():
            logger.debug("CPU sample cancelled before second reading")
            return

        try:
            current = self.take_sample()
            throttled = self.read_throttled()
        except (ContmetricError, OSError) as e:
            logger.debug(f"CPU sample failed on second reading: {e}")
            self._deliver(future, on_complete, None, e)
            return
        except Exception as e:
            # Timer thread: an escaping error would leave the future pending
            logger.exception("Unexpected error on second CPU reading")
            self._deliver(future, on_complete, None, e)
            return

        stat = CPUStat(
            limited_cores=self._environment.limited_cores,
            usage=compute_usage(baseline, current, self._environment),
            throttled=throttled,
        )
        self._deliver(future, on_complete, stat, None)

    @staticmethod
    def _deliver(
        future: Future[CPUStat],
        on_complete: CPUStatCallback | None,
        stat: CPUStat | None,
        error: BaseException | None,
    ) -> None:
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(stat)  # type: ignore[arg-type]

        if on_complete is None:
            return
        try:
            on_complete(stat, error)
        except Exception:
            logger.exception("CPU stat callback raised")


@functools.cache
def get_default_sampler() -> CPUSampler:
    """Process-wide sampler over the default cgroup layout, resolved once."""
    return CPUSampler(resolve_cpu_environment())


def sample_cpu_usage(
    interval: float | timedelta,
    on_complete: CPUStatCallback | None = None,
) -> Future[CPUStat]:
    """Sample CPU usage with the process-wide default sampler."""
    return get_default_sampler().sample(interval, on_complete)
