"""
Logging Configuration Module.

This module provides centralized logging configuration for the openserv-agent package.
Levels follow the platform naming (``fatal``, ``error``, ``warn``, ``info``, ``debug``,
``trace``) and are mapped onto the standard library levels.

Features:
- Configurable log levels per module
- Console and optional file logging
- Simple, detailed or JSON-like line formats
"""

import logging
import os
from pathlib import Path
from typing import Optional

# Platform level names -> stdlib levels
LEVEL_ALIASES = {
    "FATAL": "CRITICAL",
    "WARN": "WARNING",
    "TRACE": "DEBUG",
}


def _get_logging_config():
    """Get logging configuration from the settings model.

    Settings are imported lazily to avoid circular imports during module
    initialization.
    """
    try:
        from openserv_agent.server.core.config import load_settings

        settings = load_settings()
        log_level = settings.log_level
    except Exception:
        # Fallback to the raw environment if settings cannot be built (e.g. invalid values)
        log_level = os.getenv("LOG_LEVEL", "info")
    return {
        "log_level": normalize_level(log_level),
        "log_format": os.getenv("LOG_FORMAT", "detailed"),
        "log_file_dir": os.getenv("LOG_FILE_DIR", "logs"),
        "enable_file_logging": os.getenv("ENABLE_FILE_LOGGING", "false").lower() in ("true", "1", "yes"),
    }


def normalize_level(level: str) -> str:
    """Translate a platform log level name into a ``logging`` level name."""
    name = level.upper()
    return LEVEL_ALIASES.get(name, name)


# Define log formats
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)


# Module-specific log levels
MODULE_LOG_LEVELS = {
    "openserv_agent.agent_core": "DEBUG",
    "openserv_agent.agent_core.runtime": "DEBUG",
    "openserv_agent.platform_api": "DEBUG",
    "openserv_agent.server": "INFO",
    # Third-party libraries (reduce noise)
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "openai": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "WARNING",
}


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = False,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Override the configured level (platform or stdlib level names)
        log_format: Override default format (simple, detailed, json)
        enable_file: Whether to also log to ``<LOG_FILE_DIR>/openserv_agent.log``
    """
    config = _get_logging_config()
    level = normalize_level(log_level) if log_level else config["log_level"]
    fmt = log_format or config["log_format"]

    if fmt == "json":
        format_str = JSON_FORMAT
    elif fmt == "simple":
        format_str = SIMPLE_FORMAT
    else:
        format_str = DETAILED_FORMAT

    formatter = logging.Formatter(format_str, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, filter at handler level

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_logging = enable_file or config["enable_file_logging"]
    if file_logging:
        log_dir = Path(config["log_file_dir"])
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "openserv_agent.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_logging={file_logging}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
