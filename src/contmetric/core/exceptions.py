"""Exception hierarchy for contmetric.

ConfigurationError subclasses mean a startup fact could not be resolved and
every later sample will fail the same way. NotFoundError and ParseError come
from a single pseudo-file read and only affect the call that hit them.
"""

from __future__ import annotations


class ContmetricError(Exception):
    """Base class for all contmetric errors."""


class ConfigurationError(ContmetricError):
    """A process-wide prerequisite was not resolved at startup."""


class NoClockTickError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("no cpu tick")


class NoCoreCountError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("can't get core count")


class NoLimitedCoreCountError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("can't get limited core count")


class NoDefaultInterfaceError(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("default network interface not found")


class NotFoundError(ContmetricError, FileNotFoundError):
    """A pseudo-file does not exist (controller unmounted or absent)."""


class ParseError(ContmetricError, ValueError):
    """A pseudo-file had content that could not be parsed."""


class InvalidFormatError(ParseError):
    """A compact list (e.g. cpuset.cpus) did not follow the kernel grammar."""


class InvalidConfigurationError(ParseError):
    """The kernel reported an impossible configuration value."""


class MissingFieldError(ContmetricError, KeyError):
    """A required key was absent from a keyed pseudo-file."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
