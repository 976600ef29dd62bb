"""Pseudo-file readers for cgroup and procfs counters.

Every reader opens the file once, parses it in a single pass and surfaces
failures immediately: a missing file becomes NotFoundError, unparseable or
undecodable content becomes ParseError, and any other OSError propagates
unchanged. Nothing here retries.
"""

from __future__ import annotations

import logging
from pathlib import Path

from contmetric.core.exceptions import NotFoundError, ParseError

logger = logging.getLogger(__name__)


def _read_text(path: Path | str) -> str:
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise NotFoundError(f"{path} not found (controller not mounted?)") from e
    except UnicodeDecodeError as e:
        raise ParseError(f"{path} is not valid text: {e}") from e


def _parse_unsigned(token: str, path: Path | str) -> int:
    if not token.isdecimal():
        raise ParseError(f"Expected unsigned integer in {path}, got {token!r}")
    return int(token)


def read_unsigned_counter(path: Path | str) -> int:
    """Read a file holding a single unsigned decimal integer.

    Args:
        path: Pseudo-file path (e.g. cpuacct.usage)

    Returns:
        The parsed value

    Raises:
        NotFoundError: If the file does not exist
        ParseError: If the trimmed content is not an unsigned integer
    """
    value = _parse_unsigned(_read_text(path).strip(), path)
    logger.debug(f"Read {value} from {path}")
    return value


def read_signed_counter(path: Path | str) -> int:
    """Read a file holding a single signed decimal integer.

    cpu.cfs_quota_us uses -1 for "unlimited", so it needs the signed variant.
    """
    text = _read_text(path).strip()
    digits = text[1:] if text[:1] in ("-", "+") else text
    if not digits.isdecimal():
        raise ParseError(f"Expected integer in {path}, got {text!r}")
    value = int(text)
    logger.debug(f"Read {value} from {path}")
    return value


def read_keyed_counters(path: Path | str) -> dict[str, int]:
    """Read a "key value" per line file into a dict.

    Format (cpu.stat):
        nr_periods 120
        nr_throttled 3
        throttled_time 91234

    Lines without a second token, or whose second token is not an unsigned
    integer, are skipped. Kernel stat files add and reshape rows between
    versions, so a stray line must not make the whole file unreadable.
    """
    result: dict[str, int] = {}
    for line in _read_text(path).splitlines():
        parts = line.split()
        if len(parts) < 2 or not parts[1].isdecimal():
            continue
        result[parts[0]] = int(parts[1])
    return result


def read_system_cpu_ticks(path: Path | str = "/proc/stat") -> int:
    """Sum every field of the aggregate ``cpu`` line in /proc/stat.

    Format:
        cpu  42812 0 17335 3256641 333 9 1748 0 0 0
        cpu0 ...

    The fields (user, nice, system, idle, ...) are summed unweighted, giving
    host-wide elapsed CPU time in clock ticks.
    """
    for line in _read_text(path).splitlines():
        if not line.startswith("cpu "):
            continue
        total = 0
        for field in line.split()[1:]:
            total += _parse_unsigned(field, path)
        return total
    raise ParseError(f"cpu line not found in {path}")


def count_tokens(path: Path | str) -> int:
    """Count whitespace-separated tokens in a file."""
    return len(_read_text(path).split())


def read_text(path: Path | str) -> str:
    """Read a whole pseudo-file, stripped of surrounding whitespace."""
    return _read_text(path).strip()
