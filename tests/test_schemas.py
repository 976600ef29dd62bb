"""Tests for contmetric schemas and config loading."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from contmetric.core.config import load_config
from contmetric.core.schemas import CgroupPaths, CPUStat, MonitorConfig, ResourceSnapshot


class TestCgroupPaths:
    """Tests for CgroupPaths."""

    def test_defaults(self) -> None:
        paths = CgroupPaths()
        assert paths.cpuacct_usage == Path("/sys/fs/cgroup/cpuacct/cpuacct.usage")
        assert paths.proc_stat == Path("/proc/stat")
        assert len(paths.blkio_files) == 2

    def test_rooted_at(self, tmp_path: Path) -> None:
        paths = CgroupPaths.rooted_at(tmp_path)
        assert paths.cfs_quota_us == tmp_path / "sys/fs/cgroup/cpu/cpu.cfs_quota_us"
        assert paths.blkio_files[0] == (
            tmp_path / "sys/fs/cgroup/blkio/blkio.io_service_bytes_recursive"
        )


class TestMonitorConfig:
    """Tests for MonitorConfig."""

    def test_defaults(self) -> None:
        config = MonitorConfig()
        assert config.interval_seconds == 1.0
        assert config.collect_cpu is True
        assert config.interface is None

    def test_log_level_normalized(self) -> None:
        assert MonitorConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            MonitorConfig(log_level="loud")

    def test_interval_bounds(self) -> None:
        with pytest.raises(ValidationError):
            MonitorConfig(interval_seconds=0)


class TestCPUStat:
    """Tests for CPUStat."""

    def test_frozen(self) -> None:
        stat = CPUStat(limited_cores=2.0, usage=50.0, throttled=1)
        with pytest.raises(ValidationError):
            stat.usage = 10.0  # type: ignore[misc]

    def test_negative_throttled_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CPUStat(limited_cores=1.0, usage=0.0, throttled=-1)


def test_snapshot_ok_flag() -> None:
    snapshot = ResourceSnapshot(name="x")
    assert snapshot.ok
    snapshot.errors["disk"] = "boom"
    assert not snapshot.ok


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "name: web\ninterval_seconds: 2.5\ncollect_network: false\n"
            "paths:\n  cpuset_cpus: /tmp/cpuset.cpus\n"
        )
        config = load_config(path)
        assert config.name == "web"
        assert config.interval_seconds == 2.5
        assert config.collect_network is False
        assert config.paths.cpuset_cpus == Path("/tmp/cpuset.cpus")
        assert config.paths.proc_stat == Path("/proc/stat")

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"interface": "eth1"}))
        assert load_config(path).interface == "eth1"

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_config(path) == MonitorConfig()

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("name = 'x'")
        with pytest.raises(ValueError, match="Unsupported config format"):
            load_config(path)
