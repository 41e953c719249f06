"""Utilities package."""

from .config import ensure_scans_dir, settings
from .log import LoggerMixin, configure_logging, get_logger

__all__ = [
    "settings",
    "ensure_scans_dir",
    "get_logger",
    "LoggerMixin",
    "configure_logging",
]
