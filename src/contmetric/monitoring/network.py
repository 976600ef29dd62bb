"""Network stat reader.

Reads byte counters of the container's default-route interface from
/sys/class/net/<iface>/statistics. The interface is discovered once with:

    $ ip -o -4 route show to default
    default via 172.17.0.1 dev eth0
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from contmetric.core.exceptions import NoDefaultInterfaceError
from contmetric.core.schemas import CgroupPaths, NetworkStat
from contmetric.monitoring.base import BaseStatReader
from contmetric.monitoring.readers import read_unsigned_counter

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_COMMAND = ["ip", "-o", "-4", "route", "show", "to", "default"]


def find_default_interface(timeout: float = 5.0) -> str | None:
    """Return the interface of the IPv4 default route, or None.

    The interface is the token after ``dev`` on the first route line, so
    trailing attributes such as ``proto dhcp metric 100`` are ignored. Output
    without a ``dev`` token is treated as "not found".
    """
    try:
        result = subprocess.run(
            DEFAULT_ROUTE_COMMAND,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"ip route lookup failed: {e}")
        return None

    lines = result.stdout.strip().splitlines()
    parts = lines[0].split() if lines else []
    if "dev" not in parts[:-1]:
        logger.warning(f"Unexpected output from '{' '.join(DEFAULT_ROUTE_COMMAND)}': {result.stdout!r}")
        return None
    return parts[parts.index("dev") + 1]


class NetworkStatReader(BaseStatReader[NetworkStat]):
    """Reads rx/tx bytes for one network interface."""

    def __init__(self, paths: CgroupPaths | None = None, interface: str | None = None) -> None:
        self._paths = paths or CgroupPaths()
        self._interface = interface
        self._resolved = interface is not None

    @property
    def name(self) -> str:
        return "network"

    @property
    def interface(self) -> str | None:
        """Interface name, discovering the default route on first access."""
        if not self._resolved:
            self._interface = find_default_interface()
            self._resolved = True
            logger.debug(f"Default network interface: {self._interface}")
        return self._interface

    def source_paths(self) -> list[Path]:
        if self.interface is None:
            return []
        stats_dir = self._paths.net_class_dir / self.interface / "statistics"
        return [stats_dir / "rx_bytes", stats_dir / "tx_bytes"]

    def read(self) -> NetworkStat:
        interface = self.interface
        if interface is None:
            raise NoDefaultInterfaceError()

        rx_path, tx_path = self.source_paths()
        return NetworkStat(
            interface=interface,
            rx_bytes=read_unsigned_counter(rx_path),
            tx_bytes=read_unsigned_counter(tx_path),
        )
