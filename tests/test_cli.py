"""Tests for the contmetric CLI."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from contmetric.cli import app
from contmetric.core.config import load_config
from contmetric.core.schemas import CgroupPaths

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path, cgroup_paths: CgroupPaths) -> Path:
    path = tmp_path / "contmetric.yaml"
    data = {
        "name": "cli-test",
        "interval_seconds": 0.05,
        "interface": "eth0",
        "paths": json.loads(cgroup_paths.model_dump_json()),
    }
    path.write_text(yaml.safe_dump(data))
    return path


@pytest.fixture(autouse=True)
def fixed_clock_tick():
    with patch("contmetric.monitoring.limits.os.sysconf", return_value=100):
        yield


def test_limits(config_file: Path) -> None:
    result = runner.invoke(app, ["limits", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert "100" in result.output
    assert "1.50" in result.output


def test_cpu(config_file: Path) -> None:
    result = runner.invoke(app, ["cpu", "--config", str(config_file), "--interval", "0.01"])
    assert result.exit_code == 0, result.output
    assert "LimitedCores: 1.50, Usage: 0.00%, Throttled: 3" in result.output


def test_cpu_unresolved(tmp_path: Path) -> None:
    config = tmp_path / "empty.yaml"
    config.write_text(yaml.safe_dump({"paths": {"cpuacct_usage_percpu": str(tmp_path / "x")}}))
    result = runner.invoke(app, ["cpu", "--config", str(config), "--interval", "0.01"])
    assert result.exit_code == 1
    assert "can't get core count" in result.output


def test_snapshot_json(config_file: Path) -> None:
    result = runner.invoke(app, ["snapshot", "--json", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["name"] == "cli-test"
    assert data["cpu"]["throttled"] == 3
    assert data["network"]["interface"] == "eth0"
    assert data["errors"] == {}


def test_watch_count(config_file: Path) -> None:
    result = runner.invoke(app, ["watch", "--count", "2", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert result.output.count("cli-test @") == 2


def test_bad_config(tmp_path: Path) -> None:
    result = runner.invoke(app, ["limits", "--config", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1
    assert "Error loading config" in result.output


def test_init_config(tmp_path: Path) -> None:
    output = tmp_path / "generated.yaml"
    result = runner.invoke(app, ["init-config", "--output", str(output)])
    assert result.exit_code == 0, result.output
    config = load_config(output)
    assert config.interval_seconds == 1.0

    again = runner.invoke(app, ["init-config", "--output", str(output)])
    assert again.exit_code == 1
