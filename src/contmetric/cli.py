"""CLI for contmetric.

Provides a command-line interface using Typer for:
- Showing the resolved CPU limits
- Taking a single CPU sample
- Taking a full resource snapshot
- Watching snapshots periodically
"""

from __future__ import annotations

import json
import threading
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from contmetric.core.config import load_config
from contmetric.core.exceptions import ContmetricError
from contmetric.core.schemas import MonitorConfig, ResourceSnapshot
from contmetric.monitoring.container_monitor import ContainerMonitor
from contmetric.monitoring.cpu import CPUSampler
from contmetric.monitoring.limits import resolve_cpu_environment
from contmetric.monitoring.units import bytes_to_mb
from contmetric.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="contmetric",
    help="Container resource metrics from cgroup v1",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

ConfigOption = typer.Option(
    None, "--config", "-c", help="Path to monitor configuration file (YAML/JSON)"
)
LogLevelOption = typer.Option(None, "--log-level", "-l", help="Logging level (overrides config)")
JsonLogsOption = typer.Option(False, "--json-logs", help="Output logs in JSON format")


def _prepare(config: Path | None, log_level: str | None, json_logs: bool) -> MonitorConfig:
    """Load configuration and set up logging for a command."""
    monitor_config = MonitorConfig()
    if config is not None:
        try:
            monitor_config = load_config(config)
        except Exception as e:
            console.print(f"[bold red]Error loading config: {escape(str(e))}[/]")
            raise typer.Exit(1) from e

    setup_logging(
        level=log_level or monitor_config.log_level,
        json_format=json_logs,
        rich_console=not json_logs,
    )
    return monitor_config


@app.command()
def limits(
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    json_logs: bool = JsonLogsOption,
) -> None:
    """Show the resolved clock tick, core count and CPU limit."""
    monitor_config = _prepare(config, log_level, json_logs)
    env = resolve_cpu_environment(monitor_config.paths)

    table = Table(title="CPU environment")
    table.add_column("Fact", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Clock tick (Hz)", str(env.clock_tick_hz) if env.clock_tick_hz else "unresolved")
    table.add_row("Total cores", str(env.total_cores) if env.total_cores else "unresolved")
    table.add_row(
        "Limited cores", f"{env.limited_cores:.2f}" if env.limited_cores else "unresolved"
    )
    console.print(table)


@app.command()
def cpu(
    interval: float = typer.Option(1.0, "--interval", "-i", help="Seconds between readings"),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    json_logs: bool = JsonLogsOption,
) -> None:
    """Take a single CPU usage sample."""
    monitor_config = _prepare(config, log_level, json_logs)
    sampler = CPUSampler(resolve_cpu_environment(monitor_config.paths), monitor_config.paths)

    try:
        stat = sampler.sample(interval).result()
    except (ContmetricError, OSError) as e:
        console.print(f"[bold red]CPU sample failed: {escape(str(e))}[/]")
        raise typer.Exit(1) from e

    console.print(str(stat))


@app.command()
def snapshot(
    output_json: bool = typer.Option(False, "--json", help="Print the snapshot as JSON"),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    json_logs: bool = JsonLogsOption,
) -> None:
    """Collect one full resource snapshot."""
    monitor_config = _prepare(config, log_level, json_logs)
    result = ContainerMonitor(monitor_config).collect_once()
    _print_snapshot(result, output_json)
    if not result.ok:
        raise typer.Exit(1)


@app.command()
def watch(
    count: int = typer.Option(0, "--count", "-n", help="Stop after N snapshots (0 = forever)"),
    output_json: bool = typer.Option(False, "--json", help="Print snapshots as JSON lines"),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    json_logs: bool = JsonLogsOption,
) -> None:
    """Print a resource snapshot every interval."""
    monitor_config = _prepare(config, log_level, json_logs)
    done = threading.Event()
    seen = 0

    def on_snapshot(result: ResourceSnapshot) -> None:
        nonlocal seen
        if count and seen >= count:
            # A tick already in flight when stop was requested
            return
        seen += 1
        _print_snapshot(result, output_json)
        if count and seen >= count:
            done.set()

    monitor = ContainerMonitor(monitor_config, on_snapshot=on_snapshot)
    monitor.start()
    try:
        done.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping monitor")
    finally:
        monitor.stop()


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("contmetric.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# contmetric configuration
name: "my-container"

# Seconds between the two CPU readings, and between snapshots
interval_seconds: 1.0

collect_cpu: true
collect_memory: true
collect_disk: true
collect_network: true

# Network interface; the default-route interface is used when unset
# interface: eth0

log_level: INFO

# Pseudo-file locations (defaults shown)
paths:
  proc_stat: /proc/stat
  proc_meminfo: /proc/meminfo
  cpuacct_usage: /sys/fs/cgroup/cpuacct/cpuacct.usage
  cpuacct_usage_percpu: /sys/fs/cgroup/cpuacct/cpuacct.usage_percpu
  cpu_stat: /sys/fs/cgroup/cpu/cpu.stat
  cfs_quota_us: /sys/fs/cgroup/cpu/cpu.cfs_quota_us
  cfs_period_us: /sys/fs/cgroup/cpu/cpu.cfs_period_us
  cpuset_cpus: /sys/fs/cgroup/cpuset/cpuset.cpus
  memory_stat: /sys/fs/cgroup/memory/memory.stat
  net_class_dir: /sys/class/net
"""
    if output.exists():
        console.print(f"[bold red]{output} already exists[/]")
        raise typer.Exit(1)

    output.write_text(sample_config)
    console.print(f"[bold green]Created sample configuration: {output}[/]")


def _print_snapshot(result: ResourceSnapshot, output_json: bool) -> None:
    """Display a snapshot as a table or a JSON line."""
    if output_json:
        console.print_json(json.dumps(result.model_dump(mode="json")))
        return

    table = Table(title=f"{result.name} @ {result.timestamp:%H:%M:%S}")
    table.add_column("Resource", style="cyan")
    table.add_column("Value")

    if result.cpu is not None:
        table.add_row("CPU", str(result.cpu))
    if result.memory is not None:
        mem = result.memory
        table.add_row(
            "Memory",
            f"RSS {bytes_to_mb(mem.rss):.1f} MB / {bytes_to_mb(mem.total):.1f} MB, "
            f"cached {bytes_to_mb(mem.cached):.1f} MB, "
            f"swap {bytes_to_mb(mem.swap_used):.1f}/{bytes_to_mb(mem.swap_total):.1f} MB",
        )
    if result.disk is not None:
        table.add_row("Disk", str(result.disk))
    if result.network is not None:
        table.add_row(f"Network ({result.network.interface})", str(result.network))
    for name, error in result.errors.items():
        table.add_row(name, f"[red]{escape(error)}[/]")

    console.print(table)


if __name__ == "__main__":
    app()
