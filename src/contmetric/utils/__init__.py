"""Utility modules for contmetric."""

from __future__ import annotations

from contmetric.utils.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
