"""Observability module for logging and metrics."""

from pyboiler.observability.logging import (
    configure_logging,
    get_logger,
    parse_level,
    set_global_name,
)
from pyboiler.observability.metrics import BootMetrics


__all__ = [
    "BootMetrics",
    "configure_logging",
    "get_logger",
    "parse_level",
    "set_global_name",
]
