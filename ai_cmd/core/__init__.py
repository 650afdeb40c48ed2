"""Shared infrastructure: settings and logging configuration."""

from .config import AIProviderConfig, Settings, get_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "AIProviderConfig",
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
