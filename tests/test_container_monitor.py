"""Tests for ContainerMonitor."""

import threading
import time

from contmetric.core.schemas import CgroupPaths, MonitorConfig, ResourceSnapshot
from contmetric.monitoring.container_monitor import ContainerMonitor
from contmetric.monitoring.cpu import CPUSampler
from contmetric.monitoring.limits import CPUEnvironment

ENV = CPUEnvironment(clock_tick_hz=100, total_cores=4, limited_cores=1.5)


def make_config(paths: CgroupPaths, **overrides) -> MonitorConfig:
    data = {
        "name": "test",
        "interval_seconds": 0.05,
        "paths": paths,
        "interface": "eth0",
    }
    data.update(overrides)
    return MonitorConfig(**data)


class TestCollectOnce:
    """Tests for single synchronous snapshots."""

    def test_full_snapshot(self, cgroup_paths: CgroupPaths) -> None:
        config = make_config(cgroup_paths)
        monitor = ContainerMonitor(config, cpu_sampler=CPUSampler(ENV, cgroup_paths))

        snapshot = monitor.collect_once()

        assert snapshot.ok, snapshot.errors
        assert snapshot.name == "test"
        assert snapshot.cpu is not None and snapshot.cpu.throttled == 3
        assert snapshot.memory is not None and snapshot.memory.cached == 4194304
        assert snapshot.disk is not None and snapshot.disk.write == 8192
        assert snapshot.network is not None and snapshot.network.rx_bytes == 123456

    def test_reader_failure_is_isolated(self, cgroup_paths: CgroupPaths) -> None:
        cgroup_paths.memory_stat.unlink()
        config = make_config(cgroup_paths)
        monitor = ContainerMonitor(config, cpu_sampler=CPUSampler(ENV, cgroup_paths))

        snapshot = monitor.collect_once()

        assert snapshot.memory is None
        assert "memory" in snapshot.errors
        assert snapshot.cpu is not None
        assert snapshot.disk is not None

    def test_unresolved_cpu_reported(self, cgroup_paths: CgroupPaths) -> None:
        config = make_config(cgroup_paths)
        monitor = ContainerMonitor(config, cpu_sampler=CPUSampler(CPUEnvironment(), cgroup_paths))

        snapshot = monitor.collect_once()

        assert snapshot.cpu is None
        assert snapshot.errors["cpu"] == "no cpu tick"

    def test_disabled_readers(self, cgroup_paths: CgroupPaths) -> None:
        config = make_config(
            cgroup_paths,
            collect_cpu=False,
            collect_disk=False,
            collect_network=False,
        )
        monitor = ContainerMonitor(config)

        assert monitor.cpu_sampler is None
        assert [r.name for r in monitor.readers] == ["memory"]

        snapshot = monitor.collect_once()
        assert snapshot.cpu is None and snapshot.disk is None and snapshot.network is None
        assert snapshot.memory is not None


class TestBackgroundLoop:
    """Tests for start/stop of the monitor thread."""

    def test_emits_snapshots(self, cgroup_paths: CgroupPaths) -> None:
        received: list[ResourceSnapshot] = []
        got_two = threading.Event()

        def on_snapshot(snapshot: ResourceSnapshot) -> None:
            received.append(snapshot)
            if len(received) >= 2:
                got_two.set()

        config = make_config(cgroup_paths)
        monitor = ContainerMonitor(
            config, on_snapshot=on_snapshot, cpu_sampler=CPUSampler(ENV, cgroup_paths)
        )
        monitor.start()
        try:
            assert got_two.wait(timeout=5)
            assert monitor.running
        finally:
            monitor.stop()

        assert not monitor.running
        assert all(s.cpu is not None for s in received)

    def test_loop_without_cpu(self, cgroup_paths: CgroupPaths) -> None:
        got_one = threading.Event()
        config = make_config(cgroup_paths, collect_cpu=False)
        monitor = ContainerMonitor(config, on_snapshot=lambda s: got_one.set())

        monitor.start()
        try:
            assert got_one.wait(timeout=5)
        finally:
            monitor.stop()

    def test_callback_errors_do_not_stop_loop(self, cgroup_paths: CgroupPaths) -> None:
        calls: list[int] = []
        got_two = threading.Event()

        def on_snapshot(snapshot: ResourceSnapshot) -> None:
            calls.append(1)
            if len(calls) >= 2:
                got_two.set()
            raise RuntimeError("consumer bug")

        config = make_config(cgroup_paths, collect_cpu=False)
        monitor = ContainerMonitor(config, on_snapshot=on_snapshot)
        monitor.start()
        try:
            assert got_two.wait(timeout=5)
        finally:
            monitor.stop()

    def test_failing_cpu_sample_keeps_interval(self, cgroup_paths: CgroupPaths) -> None:
        """An immediate CPU failure must not make the loop spin."""
        received: list[ResourceSnapshot] = []
        config = make_config(cgroup_paths, interval_seconds=0.5)
        monitor = ContainerMonitor(
            config,
            on_snapshot=received.append,
            cpu_sampler=CPUSampler(CPUEnvironment(), cgroup_paths),
        )

        monitor.start()
        try:
            time.sleep(1.0)
        finally:
            monitor.stop()

        assert 1 <= len(received) <= 3
        assert all(s.errors.get("cpu") == "no cpu tick" for s in received)

    def test_missing_cpuacct_keeps_interval(self, cgroup_paths: CgroupPaths) -> None:
        cgroup_paths.cpuacct_usage.unlink()
        received: list[ResourceSnapshot] = []
        config = make_config(cgroup_paths, interval_seconds=0.5)
        monitor = ContainerMonitor(
            config, on_snapshot=received.append, cpu_sampler=CPUSampler(ENV, cgroup_paths)
        )

        monitor.start()
        try:
            time.sleep(1.0)
        finally:
            monitor.stop()

        assert 1 <= len(received) <= 3
        assert all("cpu" in s.errors for s in received)
