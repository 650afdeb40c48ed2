"""
Logging Configuration Module.

This module provides centralized logging configuration for ai-cmd.

Features:
- Configurable log levels per module
- Console and optional file logging
- Simple, detailed and JSON-like line formats

User-facing output (answers, step descriptions, error lines) goes through
``ai_cmd.console``; the logging tree carries diagnostics only.
"""

import logging
import os
from pathlib import Path
from typing import Optional

# Define log formats
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

LOG_FILE_NAME = "ai_cmd.log"

# Module-specific log levels
MODULE_LOG_LEVELS = {
    "ai_cmd.agent_core": "DEBUG",
    "ai_cmd.agent_core.planning": "DEBUG",
    "ai_cmd.agent_core.runtime": "DEBUG",
    "ai_cmd.agent_core.plugins": "DEBUG",
    "ai_cmd.agent_core.capabilities": "DEBUG",
    # Third-party libraries (reduce noise)
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "openai": "WARNING",
    "asyncio": "WARNING",
}


def _format_for(name: str) -> str:
    if name == "json":
        return JSON_FORMAT
    if name == "simple":
        return SIMPLE_FORMAT
    return DETAILED_FORMAT


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file_dir: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to ``AI_CMD_LOG_LEVEL`` or WARNING.
        log_format: Line format (simple, detailed, json). Defaults to ``AI_CMD_LOG_FORMAT`` or simple.
        log_file_dir: Directory for ``ai_cmd.log``. File logging is disabled when not set.
    """
    level = (log_level or os.getenv("AI_CMD_LOG_LEVEL", "WARNING")).upper()
    fmt = log_format or os.getenv("AI_CMD_LOG_FORMAT", "simple")
    file_dir = log_file_dir or os.getenv("AI_CMD_LOG_FILE_DIR")

    formatter = logging.Formatter(_format_for(fmt), datefmt="%Y-%m-%d %H:%M:%S")

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, filter at handler level

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file_dir:
        Path(file_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(file_dir) / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.debug(f"Logging configured: level={level}, format={fmt}, file_dir={file_dir}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
