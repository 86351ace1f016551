"""Core module initialization."""

from .config import Settings, get_settings, settings
from .logging import DeviceLoggerAdapter, get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "DeviceLoggerAdapter",
]
