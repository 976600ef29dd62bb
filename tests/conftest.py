"""Shared fixtures: a fake cgroup v1 / procfs tree under tmp_path."""

from pathlib import Path

import pytest

from contmetric.core.schemas import CgroupPaths

MEMORY_STAT = """\
cache 1048576
rss 2097152
mapped_file 524288
hierarchical_memory_limit 9223372036854771712
hierarchical_memsw_limit 9223372036854771712
total_cache 4194304
total_rss 8388608
total_mapped_file 1048576
total_swap 0
"""

MEMINFO = """\
MemTotal:       16318480 kB
MemFree:         1024000 kB
MemAvailable:    8192000 kB
"""

BLKIO = """\
8:0 Read 4096
8:0 Write 8192
8:0 Sync 12288
8:0 Async 0
8:0 Total 12288
8:16 Read 1024
8:16 Write 0
Total 13312
"""


def write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def write_proc_stat(paths: CgroupPaths, ticks: int) -> None:
    """Write /proc/stat whose aggregate cpu line sums to ``ticks``."""
    write_file(
        paths.proc_stat,
        f"cpu  {ticks} 0 0 0 0 0 0 0 0 0\ncpu0 {ticks} 0 0 0 0 0 0 0 0 0\nintr 12 0 3\n",
    )


@pytest.fixture
def cgroup_paths(tmp_path: Path) -> CgroupPaths:
    """A complete fake tree: 4 cores, 1.5 core quota, 3 throttles."""
    paths = CgroupPaths.rooted_at(tmp_path)
    write_proc_stat(paths, 1000)
    write_file(paths.proc_meminfo, MEMINFO)
    write_file(paths.cpuacct_usage, "0\n")
    write_file(paths.cpuacct_usage_percpu, "0 0 0 0 \n")
    write_file(paths.cpu_stat, "nr_periods 10\nnr_throttled 3\nthrottled_time 1200\n")
    write_file(paths.cfs_quota_us, "150000\n")
    write_file(paths.cfs_period_us, "100000\n")
    write_file(paths.cpuset_cpus, "0-3\n")
    write_file(paths.memory_stat, MEMORY_STAT)
    write_file(paths.blkio_files[0], BLKIO)
    write_file(paths.net_class_dir / "eth0" / "statistics" / "rx_bytes", "123456\n")
    write_file(paths.net_class_dir / "eth0" / "statistics" / "tx_bytes", "654321\n")
    return paths
